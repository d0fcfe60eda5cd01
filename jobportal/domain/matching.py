"""Job / candidate match scoring."""
from typing import List, Dict, Optional, Tuple
from dataclasses import dataclass, field
import logging
import math
from .job import JobListing, WorkMode
from .candidate import CandidateProfile

logger = logging.getLogger(__name__)


@dataclass
class DimensionScore:
    """Contribution of one dimension to a match score.

    Attributes:
        name: Dimension name (skills, experience, location, education)
        score: Points earned
        max_score: Points available
        applicable: False when the dimension was skipped entirely
    """
    name: str
    score: float
    max_score: int
    applicable: bool = True

    def to_dict(self) -> Dict[str, object]:
        return {
            'score': round(self.score, 2),
            'max_score': self.max_score if self.applicable else 0,
            'applicable': self.applicable,
        }


@dataclass
class MatchScore:
    """Overall 0-100 compatibility plus its per-dimension breakdown."""
    overall: int
    breakdown: Dict[str, DimensionScore] = field(default_factory=dict)

    @property
    def max_score(self) -> int:
        return sum(d.max_score for d in self.breakdown.values() if d.applicable)

    def to_dict(self) -> Dict[str, object]:
        return {
            'overall': self.overall,
            'breakdown': {name: dim.to_dict() for name, dim in self.breakdown.items()},
        }


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class MatchScorer:
    """Fixed-weight linear scorer between a job listing and a candidate.

    Each dimension is only counted when both sides carry the data it
    needs; the total is renormalized over the weights that applied.
    """

    SKILLS_WEIGHT = 40
    EXPERIENCE_WEIGHT = 30
    LOCATION_WEIGHT = 15
    EDUCATION_WEIGHT = 15

    # Partial credit
    EXPERIENCE_NEAR_MISS_POINTS = 15
    EXPERIENCE_GRACE_YEARS = 1
    EDUCATION_FLAT_POINTS = 10

    def score_skills(self, job: JobListing, candidate: CandidateProfile) -> DimensionScore:
        """Share of the job's required skills the candidate has."""
        job_skills = {name.lower() for name in job.required_skill_names}
        if not job_skills:
            return DimensionScore('skills', 0, self.SKILLS_WEIGHT, applicable=False)

        candidate_skills = {name.lower() for name in candidate.skill_names}
        matched = job_skills & candidate_skills
        score = len(matched) / len(job_skills) * self.SKILLS_WEIGHT
        return DimensionScore('skills', score, self.SKILLS_WEIGHT)

    def score_experience(self, job: JobListing, candidate: CandidateProfile) -> DimensionScore:
        """Full credit inside the range, half credit within the grace window."""
        if job.experience is None or candidate.total_experience is None:
            return DimensionScore('experience', 0, self.EXPERIENCE_WEIGHT, applicable=False)

        years = candidate.total_experience.in_years
        exp = job.experience
        if exp.min <= years and (exp.max is None or years <= exp.max):
            score = self.EXPERIENCE_WEIGHT
        elif years >= exp.min - self.EXPERIENCE_GRACE_YEARS:
            score = self.EXPERIENCE_NEAR_MISS_POINTS
        else:
            score = 0
        return DimensionScore('experience', score, self.EXPERIENCE_WEIGHT)

    def score_location(self, job: JobListing, candidate: CandidateProfile) -> DimensionScore:
        """Same city, or any remote job, earns the full location weight."""
        if not job.location.city or not candidate.city:
            return DimensionScore('location', 0, self.LOCATION_WEIGHT, applicable=False)

        same_city = job.location.city.strip().lower() == candidate.city.strip().lower()
        if same_city or job.work_mode == WorkMode.REMOTE:
            return DimensionScore('location', self.LOCATION_WEIGHT, self.LOCATION_WEIGHT)
        return DimensionScore('location', 0, self.LOCATION_WEIGHT)

    def score_education(self, job: JobListing, candidate: CandidateProfile) -> DimensionScore:
        # No degree matching yet: any education record earns the flat credit
        if job.education is None or not candidate.education:
            return DimensionScore('education', 0, self.EDUCATION_WEIGHT, applicable=False)
        return DimensionScore('education', self.EDUCATION_FLAT_POINTS, self.EDUCATION_WEIGHT)

    def breakdown(self, job: JobListing, candidate: CandidateProfile) -> MatchScore:
        """Score every dimension and combine them.

        Args:
            job: Job listing to evaluate
            candidate: Candidate to evaluate against

        Returns:
            MatchScore with the overall score and per-dimension results
        """
        dimensions = [
            self.score_skills(job, candidate),
            self.score_experience(job, candidate),
            self.score_location(job, candidate),
            self.score_education(job, candidate),
        ]

        score = sum(d.score for d in dimensions if d.applicable)
        max_score = sum(d.max_score for d in dimensions if d.applicable)
        overall = round_half_up(score / max_score * 100) if max_score > 0 else 0

        logger.debug(f"Match score for job {job.id} / candidate {candidate.id}: "
                     f"{score:.1f}/{max_score} -> {overall}")
        return MatchScore(overall=overall, breakdown={d.name: d for d in dimensions})

    def score(self, job: JobListing, candidate: CandidateProfile) -> int:
        return self.breakdown(job, candidate).overall

    def rank(self, jobs: List[JobListing], candidate: CandidateProfile) -> List[Tuple[JobListing, int]]:
        """Pair each job with its score, best match first.

        Ties keep the incoming order.
        """
        scored = [(job, self.score(job, candidate)) for job in jobs]
        return sorted(scored, key=lambda pair: pair[1], reverse=True)


_default_scorer = MatchScorer()


def calculate_match_score(job: JobListing, candidate: Optional[CandidateProfile]) -> int:
    """Compute the 0-100 match score between a job and a candidate.

    Returns 0 when there is no candidate.
    """
    if candidate is None:
        return 0
    return _default_scorer.score(job, candidate)


def create_match_scorer() -> MatchScorer:
    """Factory function to create a match scorer."""
    return MatchScorer()
