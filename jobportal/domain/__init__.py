"""Domain module for business logic and models."""

from .job import (
    JobListing, JobStatus, EmploymentType, WorkMode, SalaryPeriod, Qualification,
    Location, ExperienceRange, SalaryRange, JobSkill, EducationRequirement,
)
from .candidate import CandidateProfile, CandidateSkill, TotalExperience, Education, SkillLevel
from .application import Application, ApplicationStatus
from .matching import MatchScorer, MatchScore, DimensionScore, calculate_match_score, create_match_scorer

__all__ = [
    'JobListing', 'JobStatus', 'EmploymentType', 'WorkMode', 'SalaryPeriod', 'Qualification',
    'Location', 'ExperienceRange', 'SalaryRange', 'JobSkill', 'EducationRequirement',
    'CandidateProfile', 'CandidateSkill', 'TotalExperience', 'Education', 'SkillLevel',
    'Application', 'ApplicationStatus',
    'MatchScorer', 'MatchScore', 'DimensionScore', 'calculate_match_score', 'create_match_scorer',
]
