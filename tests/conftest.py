"""Shared fixtures for job portal tests."""
import random
from datetime import datetime

import pytest

from jobportal.config import Config
from jobportal.database import Database
from jobportal.domain.candidate import CandidateProfile, CandidateSkill, TotalExperience, Education
from jobportal.domain.job import JobListing, Location, ExperienceRange, SalaryRange, JobSkill
from jobportal.web.app import create_app


@pytest.fixture
def make_job():
    """Factory for job listings with sensible defaults."""
    def _make(**overrides):
        fields = dict(
            title="Frontend Developer",
            description="Build web interfaces with React",
            employment_type="full_time",
            work_mode="onsite",
            location=Location(city="Bangalore", state="Karnataka"),
            experience=ExperienceRange(min=2, max=5),
            salary=SalaryRange(min=600000, max=1200000),
            skills=[JobSkill("React"), JobSkill("Node.js")],
            industry="Software",
            department="Engineering",
            company="Acme",
            posted_at=datetime(2024, 1, 10),
        )
        fields.update(overrides)
        return JobListing(**fields)
    return _make


@pytest.fixture
def make_candidate():
    """Factory for candidate profiles with sensible defaults."""
    def _make(**overrides):
        fields = dict(
            name="Asha",
            skills=[CandidateSkill("react", level="advanced"), CandidateSkill("python")],
            total_experience=TotalExperience(years=3, months=0),
            city="Bangalore",
        )
        fields.update(overrides)
        return CandidateProfile(**fields)
    return _make


@pytest.fixture
def education_record():
    return Education(institution="IIT Madras", degree="B.Tech", field_of_study="CSE")


@pytest.fixture
def db():
    """Create a test database instance."""
    return Database("sqlite:///:memory:")


@pytest.fixture
def app(db, monkeypatch):
    """Flask app wired to the in-memory database."""
    monkeypatch.delenv('DEFAULT_PAGE_SIZE', raising=False)
    monkeypatch.delenv('MAX_PAGE_SIZE', raising=False)
    flask_app = create_app(Config(), db, rng=random.Random(7))
    flask_app.config['TESTING'] = True
    return flask_app


@pytest.fixture
def client(app):
    with app.test_client() as test_client:
        yield test_client
