from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any


class ApplicationStatus(Enum):
    APPLIED = "applied"
    VIEWED = "viewed"
    SHORTLISTED = "shortlisted"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    INTERVIEWED = "interviewed"
    OFFERED = "offered"
    HIRED = "hired"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


# Applications in these states can no longer be withdrawn
FINAL_STATUSES = {ApplicationStatus.HIRED, ApplicationStatus.REJECTED, ApplicationStatus.WITHDRAWN}


@dataclass
class Application:
    """A candidate's application to a job listing."""
    job_id: int
    candidate_id: int
    status: ApplicationStatus = ApplicationStatus.APPLIED
    match_score: int = 0
    cover_letter: Optional[str] = None
    applied_at: datetime = field(default_factory=datetime.utcnow)
    id: Optional[int] = None
    job_title: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.status, ApplicationStatus):
            self.status = ApplicationStatus(self.status)

    @property
    def can_withdraw(self) -> bool:
        return self.status not in FINAL_STATUSES

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'job_id': self.job_id,
            'job_title': self.job_title,
            'candidate_id': self.candidate_id,
            'status': self.status.value,
            'match_score': self.match_score,
            'cover_letter': self.cover_letter,
            'applied_at': self.applied_at.isoformat() if self.applied_at else None,
        }
