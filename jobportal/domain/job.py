from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any

from ..errors import ValidationError
from ..utils import format_salary


class EmploymentType(Enum):
    """Enumeration of employment types."""
    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"
    FREELANCE = "freelance"


class WorkMode(Enum):
    ONSITE = "onsite"
    REMOTE = "remote"
    HYBRID = "hybrid"


class JobStatus(Enum):
    """Lifecycle states of a job listing."""
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"
    EXPIRED = "expired"
    FILLED = "filled"


class SalaryPeriod(Enum):
    HOURLY = "hourly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Qualification(Enum):
    TENTH = "10th"
    TWELFTH = "12th"
    DIPLOMA = "diploma"
    GRADUATE = "graduate"
    POST_GRADUATE = "post_graduate"
    PHD = "phd"
    ANY = "any"


# Ended listings never go back to being drafts
TERMINAL_STATUSES = {JobStatus.CLOSED, JobStatus.EXPIRED, JobStatus.FILLED}


def _enum_value(enum_cls, value, field_name: str):
    """Coerce a raw value into an enum member or raise ValidationError."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(errors=[{
            'field': field_name,
            'message': f"'{value}' is not one of: {allowed}",
        }])


def _optional_number(data: Dict[str, Any], key: str, field_name: str) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(errors=[{'field': field_name, 'message': 'must be a number'}])
    return value


def _parse_datetime(value: Any, field_name: str) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(errors=[{'field': field_name, 'message': 'must be an ISO 8601 timestamp'}])


@dataclass
class Location:
    """Where the job is based."""
    city: Optional[str] = None
    state: Optional[str] = None
    country: str = "India"
    is_remote: bool = False


@dataclass
class ExperienceRange:
    """Required experience in years. A missing max means no upper bound."""
    min: float = 0
    max: Optional[float] = None

    def __post_init__(self):
        if self.min is None:
            self.min = 0
        if self.min < 0:
            raise ValidationError(errors=[{'field': 'experience.min', 'message': 'must not be negative'}])
        if self.max is not None and self.min > self.max:
            raise ValidationError(errors=[{'field': 'experience', 'message': 'min must not exceed max'}])


@dataclass
class SalaryRange:
    """Offered salary band.

    Attributes:
        min: Salary floor
        max: Salary ceiling
        currency: ISO currency code
        period: Pay period the amounts refer to
        is_negotiable: Whether the employer accepts negotiation
        show_salary: Whether the band may be shown to candidates
    """
    min: Optional[float] = None
    max: Optional[float] = None
    currency: str = "INR"
    period: SalaryPeriod = SalaryPeriod.YEARLY
    is_negotiable: bool = False
    show_salary: bool = True

    def __post_init__(self):
        self.period = _enum_value(SalaryPeriod, self.period, 'salary.period')
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValidationError(errors=[{'field': 'salary', 'message': 'min must not exceed max'}])


@dataclass
class JobSkill:
    name: str
    is_required: bool = True
    experience: Optional[float] = None

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError(errors=[{'field': 'skills.name', 'message': 'is required'}])
        self.name = self.name.strip()


@dataclass
class EducationRequirement:
    min_qualification: Qualification = Qualification.ANY
    preferred_degrees: List[str] = field(default_factory=list)
    preferred_fields: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.min_qualification = _enum_value(Qualification, self.min_qualification,
                                             'education.min_qualification')


@dataclass
class JobListing:
    """Job posting with its search, scoring and lifecycle data."""
    title: str
    description: str
    employment_type: EmploymentType
    work_mode: WorkMode
    location: Location = field(default_factory=Location)
    experience: Optional[ExperienceRange] = None
    salary: Optional[SalaryRange] = None
    skills: List[JobSkill] = field(default_factory=list)
    education: Optional[EducationRequirement] = None
    industry: Optional[str] = None
    department: Optional[str] = None
    company: Optional[str] = None
    status: JobStatus = JobStatus.ACTIVE
    posted_at: datetime = field(default_factory=datetime.utcnow)
    deadline: Optional[datetime] = None
    id: Optional[int] = None
    slug: Optional[str] = None
    views: int = 0
    applications_count: int = 0

    def __post_init__(self):
        """Validate the listing after initialization."""
        errors = []
        if not self.title or not isinstance(self.title, str) or not self.title.strip():
            errors.append({'field': 'title', 'message': 'is required'})
        elif len(self.title) > 200:
            errors.append({'field': 'title', 'message': 'must be at most 200 characters'})
        if not self.description or not isinstance(self.description, str) or not self.description.strip():
            errors.append({'field': 'description', 'message': 'is required'})
        if errors:
            raise ValidationError(errors=errors)

        self.employment_type = _enum_value(EmploymentType, self.employment_type, 'employment_type')
        self.work_mode = _enum_value(WorkMode, self.work_mode, 'work_mode')
        self.status = _enum_value(JobStatus, self.status, 'status')

    @property
    def skill_names(self) -> List[str]:
        return [skill.name for skill in self.skills]

    @property
    def required_skill_names(self) -> List[str]:
        """Names of skills flagged as required.

        Listings that flag none as required treat every declared skill
        as required.
        """
        required = [skill.name for skill in self.skills if skill.is_required]
        return required or self.skill_names

    @property
    def salary_display(self) -> str:
        """Salary band as shown on a job card."""
        if not self.salary or not self.salary.show_salary:
            return format_salary(None)
        low = format_salary(self.salary.min, self.salary.currency)
        high = format_salary(self.salary.max, self.salary.currency)
        if self.salary.min and self.salary.max:
            return f"{low} - {high}"
        return low if self.salary.min else high

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check whether the application deadline has passed."""
        now = now or datetime.utcnow()
        return self.deadline is not None and now > self.deadline

    def transition_to(self, status) -> None:
        """Move the listing to a new lifecycle status.

        Raises:
            ValidationError: If the status is unknown or an ended listing
                would become a draft again
        """
        new_status = _enum_value(JobStatus, status, 'status')
        if self.status in TERMINAL_STATUSES and new_status == JobStatus.DRAFT:
            raise ValidationError(errors=[{
                'field': 'status',
                'message': f"cannot move a {self.status.value} job back to draft",
            }])
        self.status = new_status

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'JobListing':
        """Build a listing from a JSON request body.

        Raises:
            ValidationError: If the body is malformed
        """
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")

        try:
            location_data = data.get('location') or {}
            location = Location(
                city=location_data.get('city'),
                state=location_data.get('state'),
                country=location_data.get('country') or 'India',
                is_remote=bool(location_data.get('is_remote', False)),
            )

            experience = None
            if data.get('experience') is not None:
                exp_data = data['experience']
                experience = ExperienceRange(
                    min=_optional_number(exp_data, 'min', 'experience.min') or 0,
                    max=_optional_number(exp_data, 'max', 'experience.max'),
                )

            salary = None
            if data.get('salary') is not None:
                salary_data = data['salary']
                salary = SalaryRange(
                    min=_optional_number(salary_data, 'min', 'salary.min'),
                    max=_optional_number(salary_data, 'max', 'salary.max'),
                    currency=salary_data.get('currency') or 'INR',
                    period=salary_data.get('period') or SalaryPeriod.YEARLY,
                    is_negotiable=bool(salary_data.get('is_negotiable', False)),
                    show_salary=bool(salary_data.get('show_salary', True)),
                )

            skills = []
            for item in data.get('skills') or []:
                if isinstance(item, str):
                    skills.append(JobSkill(name=item))
                else:
                    skills.append(JobSkill(
                        name=item.get('name'),
                        is_required=bool(item.get('is_required', True)),
                        experience=item.get('experience'),
                    ))

            education = None
            if data.get('education') is not None:
                edu_data = data['education']
                education = EducationRequirement(
                    min_qualification=edu_data.get('min_qualification') or Qualification.ANY,
                    preferred_degrees=list(edu_data.get('preferred_degrees') or []),
                    preferred_fields=list(edu_data.get('preferred_fields') or []),
                )

            kwargs = {
                'title': data.get('title'),
                'description': data.get('description'),
                'employment_type': data.get('employment_type'),
                'work_mode': data.get('work_mode'),
                'location': location,
                'experience': experience,
                'salary': salary,
                'skills': skills,
                'education': education,
                'industry': data.get('industry'),
                'department': data.get('department'),
                'company': data.get('company'),
                'status': data.get('status') or JobStatus.ACTIVE,
                'deadline': _parse_datetime(data.get('deadline'), 'deadline'),
            }
            posted_at = _parse_datetime(data.get('posted_at'), 'posted_at')
            if posted_at is not None:
                kwargs['posted_at'] = posted_at
            return cls(**kwargs)
        except (AttributeError, TypeError):
            raise ValidationError("Malformed job listing")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the listing for a JSON response."""
        return {
            'id': self.id,
            'slug': self.slug,
            'title': self.title,
            'description': self.description,
            'employment_type': self.employment_type.value,
            'work_mode': self.work_mode.value,
            'location': {
                'city': self.location.city,
                'state': self.location.state,
                'country': self.location.country,
                'is_remote': self.location.is_remote,
            },
            'experience': {
                'min': self.experience.min,
                'max': self.experience.max,
            } if self.experience else None,
            'salary': {
                'min': self.salary.min,
                'max': self.salary.max,
                'currency': self.salary.currency,
                'period': self.salary.period.value,
                'is_negotiable': self.salary.is_negotiable,
                'show_salary': self.salary.show_salary,
            } if self.salary and self.salary.show_salary else None,
            'salary_display': self.salary_display,
            'skills': [
                {'name': s.name, 'is_required': s.is_required, 'experience': s.experience}
                for s in self.skills
            ],
            'education': {
                'min_qualification': self.education.min_qualification.value,
                'preferred_degrees': self.education.preferred_degrees,
                'preferred_fields': self.education.preferred_fields,
            } if self.education else None,
            'industry': self.industry,
            'department': self.department,
            'company': self.company,
            'status': self.status.value,
            'posted_at': self.posted_at.isoformat() if self.posted_at else None,
            'deadline': self.deadline.isoformat() if self.deadline else None,
            'stats': {
                'views': self.views,
                'applications': self.applications_count,
            },
        }
