"""Tests for job / candidate match scoring."""
import pytest

from jobportal.domain.candidate import CandidateSkill, TotalExperience
from jobportal.domain.job import ExperienceRange, JobSkill, Location, EducationRequirement
from jobportal.domain.matching import (
    MatchScorer, calculate_match_score, create_match_scorer, round_half_up,
)


@pytest.fixture
def scorer():
    return create_match_scorer()


def test_reference_scenario(scorer, make_job, make_candidate):
    """Half the skills, experience in range, same city, no education requirement."""
    job = make_job()
    candidate = make_candidate()

    result = scorer.breakdown(job, candidate)

    assert result.breakdown['skills'].score == 20
    assert result.breakdown['experience'].score == 30
    assert result.breakdown['location'].score == 15
    assert not result.breakdown['education'].applicable
    assert result.max_score == 85
    # 65 / 85 * 100 = 76.47
    assert result.overall == 76
    assert calculate_match_score(job, candidate) == 76


def test_remote_job_overrides_city_mismatch(scorer, make_job, make_candidate):
    job = make_job(work_mode='remote')
    candidate = make_candidate(city='Mumbai')

    assert scorer.score_location(job, candidate).score == 15


def test_onsite_city_mismatch_scores_zero(scorer, make_job, make_candidate):
    location = scorer.score_location(make_job(), make_candidate(city='Mumbai'))
    assert location.applicable
    assert location.score == 0


def test_city_comparison_ignores_case(scorer, make_job, make_candidate):
    assert scorer.score_location(make_job(), make_candidate(city=' bangalore ')).score == 15


def test_location_skipped_without_cities(scorer, make_job, make_candidate):
    assert not scorer.score_location(make_job(location=Location()), make_candidate()).applicable
    assert not scorer.score_location(make_job(), make_candidate(city=None)).applicable


def test_experience_far_below_minimum(scorer, make_job, make_candidate):
    """0.5 years against a 2 year minimum earns nothing but still counts."""
    candidate = make_candidate(total_experience=TotalExperience(years=0, months=6))

    experience = scorer.score_experience(make_job(), candidate)

    assert experience.applicable
    assert experience.score == 0
    assert scorer.breakdown(make_job(), candidate).max_score == 85


def test_experience_near_miss(scorer, make_job, make_candidate):
    candidate = make_candidate(total_experience=TotalExperience(years=1, months=0))
    assert scorer.score_experience(make_job(), candidate).score == 15


def test_experience_above_maximum(scorer, make_job, make_candidate):
    """Overqualified candidates fall into the near-miss branch."""
    candidate = make_candidate(total_experience=TotalExperience(years=9))
    assert scorer.score_experience(make_job(), candidate).score == 15


def test_experience_open_ended_range(scorer, make_job, make_candidate):
    job = make_job(experience=ExperienceRange(min=2))
    candidate = make_candidate(total_experience=TotalExperience(years=20))
    assert scorer.score_experience(job, candidate).score == 30


def test_experience_skipped_when_missing(scorer, make_job, make_candidate):
    assert not scorer.score_experience(make_job(experience=None), make_candidate()).applicable
    assert not scorer.score_experience(make_job(), make_candidate(total_experience=None)).applicable


def test_no_job_skills_excluded_from_denominator(scorer, make_job, make_candidate):
    """Only experience and location apply, so the total is out of 45."""
    job = make_job(skills=[])
    candidate = make_candidate()

    result = scorer.breakdown(job, candidate)

    assert not result.breakdown['skills'].applicable
    assert result.max_score == 45
    assert result.overall == 100


def test_experience_and_location_only_out_of_sixty(scorer, make_job, make_candidate,
                                                   education_record):
    job = make_job(skills=[], education=EducationRequirement())
    candidate = make_candidate(education=[education_record])

    result = scorer.breakdown(job, candidate)

    assert result.max_score == 60
    # (30 + 15 + 10) / 60 * 100 = 91.67
    assert result.overall == 92


def test_disjoint_skills(scorer, make_job, make_candidate):
    candidate = make_candidate(skills=[CandidateSkill('Java'), CandidateSkill('Go')])
    skills = scorer.score_skills(make_job(), candidate)
    assert skills.applicable
    assert skills.score == 0


def test_candidate_without_skills_still_counts(scorer, make_job, make_candidate):
    skills = scorer.score_skills(make_job(), make_candidate(skills=[]))
    assert skills.applicable
    assert skills.score == 0


def test_skill_match_is_case_insensitive(scorer, make_job, make_candidate):
    candidate = make_candidate(skills=[CandidateSkill('REACT'), CandidateSkill('node.JS')])
    assert scorer.score_skills(make_job(), candidate).score == 40


def test_only_required_skills_are_scored(scorer, make_job, make_candidate):
    job = make_job(skills=[JobSkill('React'), JobSkill('GraphQL', is_required=False)])
    assert scorer.score_skills(job, make_candidate()).score == 40


def test_education_flat_credit(scorer, make_job, make_candidate, education_record):
    job = make_job(education=EducationRequirement(min_qualification='graduate'))
    education = scorer.score_education(job, make_candidate(education=[education_record]))
    assert education.applicable
    assert education.score == 10


def test_education_skipped_without_records(scorer, make_job, make_candidate):
    job = make_job(education=EducationRequirement())
    assert not scorer.score_education(job, make_candidate()).applicable


def test_nothing_applicable_scores_zero(scorer, make_job, make_candidate):
    job = make_job(skills=[], experience=None, location=Location())
    assert scorer.score(job, make_candidate()) == 0


def test_no_candidate_scores_zero(make_job):
    assert calculate_match_score(make_job(), None) == 0


def test_score_is_bounded(scorer, make_job, make_candidate):
    candidate = make_candidate(skills=[CandidateSkill('React'), CandidateSkill('Node.js')])
    assert scorer.score(make_job(), candidate) == 100


def test_to_dict(scorer, make_job, make_candidate):
    data = scorer.breakdown(make_job(), make_candidate()).to_dict()
    assert data['overall'] == 76
    assert data['breakdown']['skills'] == {'score': 20, 'max_score': 40, 'applicable': True}
    assert data['breakdown']['education']['max_score'] == 0


def test_rank_orders_best_first(scorer, make_job, make_candidate):
    weak = make_job(title="Java Developer", skills=[JobSkill('Java')])
    strong = make_job(title="React Developer", skills=[JobSkill('React')])
    tied = make_job(title="Java Architect", skills=[JobSkill('Java')])

    ranked = scorer.rank([weak, strong, tied], make_candidate())

    assert [job.title for job, _ in ranked] == ["React Developer", "Java Developer", "Java Architect"]
    assert ranked[0][1] == 100


@pytest.mark.parametrize("value,expected", [
    (76.47, 76),
    (91.5, 92),
    (0.5, 1),
    (2.4999, 2),
    (0, 0),
])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_weights_total_one_hundred():
    assert (MatchScorer.SKILLS_WEIGHT + MatchScorer.EXPERIENCE_WEIGHT
            + MatchScorer.LOCATION_WEIGHT + MatchScorer.EDUCATION_WEIGHT) == 100
