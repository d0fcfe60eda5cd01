"""Job search filtering and sorting."""
from typing import List, Dict, Any, Optional, Iterable, Tuple
from dataclasses import dataclass, field
from datetime import datetime, timedelta
import logging
import math
from .domain.job import JobListing, JobStatus
from .domain.candidate import CandidateProfile
from .utils import parse_amount, MAX_SQL_INT

logger = logging.getLogger(__name__)

# Condition operators
EQ = 'eq'
IN = 'in'
ICONTAINS = 'icontains'
GTE = 'gte'
LTE = 'lte'
ANY_IEQUALS = 'any_iequals'
TEXT = 'text'

# Query parameter names, camelCase first then snake_case
PARAM_ALIASES = {
    'search': ('search',),
    'employment_types': ('employmentType', 'employment_type'),
    'work_modes': ('workMode', 'work_mode'),
    'location': ('location',),
    'industry': ('industry',),
    'department': ('department',),
    'company': ('company',),
    'experience_min': ('experienceMin', 'experience_min'),
    'experience_max': ('experienceMax', 'experience_max'),
    'salary_min': ('salaryMin', 'salary_min'),
    'salary_max': ('salaryMax', 'salary_max'),
    'skills': ('skills',),
    'posted_within': ('postedWithin', 'posted_within'),
}


def _raw_values(args: Any, keys: Iterable[str]) -> List[Any]:
    """Collect every raw value supplied under any of the keys."""
    values = []
    for key in keys:
        if hasattr(args, 'getlist'):
            values.extend(args.getlist(key))
            continue
        value = args.get(key)
        if value is None:
            continue
        if isinstance(value, (list, tuple, set)):
            values.extend(value)
        else:
            values.append(value)
    return values


def _first_text(args: Any, keys: Iterable[str]) -> Optional[str]:
    for value in _raw_values(args, keys):
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def _text_list(args: Any, keys: Iterable[str]) -> List[str]:
    """Flatten repeated and comma separated values into a clean list."""
    items: List[str] = []
    for value in _raw_values(args, keys):
        if value is None:
            continue
        for part in str(value).split(','):
            part = part.strip()
            if part and part not in items:
                items.append(part)
    return items


def _to_int(value: Any) -> Optional[int]:
    """Parse an integer filter value, None when it is not a number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if abs(number) > MAX_SQL_INT or not math.isfinite(number):
        return None
    return int(number)


@dataclass
class FilterCriteria:
    """Optional constraints a job search may apply.

    Every field is optional; an empty value means no constraint on that
    dimension.
    """
    search: Optional[str] = None
    employment_types: List[str] = field(default_factory=list)
    work_modes: List[str] = field(default_factory=list)
    location: Optional[str] = None
    industry: Optional[str] = None
    department: Optional[str] = None
    company: Optional[str] = None
    experience_min: Optional[int] = None
    experience_max: Optional[int] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    skills: List[str] = field(default_factory=list)
    posted_within: Optional[int] = None

    @classmethod
    def from_args(cls, args: Any) -> 'FilterCriteria':
        """Create criteria from request query parameters.

        Accepts a werkzeug MultiDict or a plain dict. Malformed numbers
        are dropped rather than rejected.

        Args:
            args: Mapping of parameter names to raw values

        Returns:
            FilterCriteria: Parsed criteria
        """
        if args is None:
            return cls()

        def number(name: str, parser=_to_int) -> Optional[int]:
            for raw in _raw_values(args, PARAM_ALIASES[name]):
                parsed = parser(raw)
                if parsed is not None:
                    return parsed
                logger.debug(f"Ignoring malformed {name} filter: {raw!r}")
            return None

        posted_within = number('posted_within')
        if posted_within is not None and posted_within < 0:
            posted_within = None

        return cls(
            search=_first_text(args, PARAM_ALIASES['search']),
            employment_types=_text_list(args, PARAM_ALIASES['employment_types']),
            work_modes=_text_list(args, PARAM_ALIASES['work_modes']),
            location=_first_text(args, PARAM_ALIASES['location']),
            industry=_first_text(args, PARAM_ALIASES['industry']),
            department=_first_text(args, PARAM_ALIASES['department']),
            company=_first_text(args, PARAM_ALIASES['company']),
            experience_min=number('experience_min'),
            experience_max=number('experience_max'),
            salary_min=number('salary_min', parse_amount),
            salary_max=number('salary_max', parse_amount),
            skills=_text_list(args, PARAM_ALIASES['skills']),
            posted_within=posted_within,
        )


@dataclass(frozen=True)
class Condition:
    """A single constraint on one job field."""
    field: str
    op: str
    value: Any


def _job_field(job: JobListing, name: str) -> Any:
    if name == 'status':
        return job.status.value
    if name == 'employment_type':
        return job.employment_type.value
    if name == 'work_mode':
        return job.work_mode.value
    if name == 'city':
        return job.location.city
    if name == 'experience_min':
        return job.experience.min if job.experience else None
    if name == 'salary_min':
        return job.salary.min if job.salary else None
    if name == 'salary_max':
        return job.salary.max if job.salary else None
    if name == 'skills':
        return job.skill_names
    if name == 'text':
        return " ".join([job.title, job.description] + job.skill_names).lower()
    return getattr(job, name)


def _condition_holds(condition: Condition, actual: Any) -> bool:
    op, value = condition.op, condition.value
    if op == EQ:
        return actual == value
    if op == IN:
        return actual in value
    if op == ICONTAINS:
        return bool(actual) and value.lower() in actual.lower()
    if op == GTE:
        return actual is not None and actual >= value
    if op == LTE:
        return actual is not None and actual <= value
    if op == ANY_IEQUALS:
        return any(name.lower() in value for name in actual or [])
    if op == TEXT:
        return any(term in actual for term in value)
    raise ValueError(f"Unknown condition operator: {op}")


@dataclass(frozen=True)
class JobQuery:
    """Conjunction of conditions over job listings."""
    conditions: Tuple[Condition, ...] = ()

    @property
    def text_terms(self) -> Tuple[str, ...]:
        """Search terms of the full-text condition, if any."""
        for condition in self.conditions:
            if condition.op == TEXT:
                return condition.value
        return ()

    def get(self, field_name: str) -> Optional[Condition]:
        for condition in self.conditions:
            if condition.field == field_name:
                return condition
        return None

    def matches(self, job: JobListing) -> bool:
        """Evaluate the query against an in-memory listing."""
        return all(_condition_holds(c, _job_field(job, c.field)) for c in self.conditions)


def _membership(field_name: str, values: List[str]) -> Condition:
    if len(values) == 1:
        return Condition(field_name, EQ, values[0])
    return Condition(field_name, IN, tuple(values))


def build_job_query(criteria: Any = None, now: Optional[datetime] = None) -> JobQuery:
    """Translate filter criteria into a storage query.

    All present constraints are combined with AND on top of the
    always-present ``status == active`` condition.

    Args:
        criteria: FilterCriteria, or a raw parameter mapping
        now: Reference time for the posted-within bound

    Returns:
        JobQuery: Query predicate for the storage layer
    """
    if not isinstance(criteria, FilterCriteria):
        criteria = FilterCriteria.from_args(criteria)

    conditions = [Condition('status', EQ, JobStatus.ACTIVE.value)]

    if criteria.search:
        terms = []
        for term in criteria.search.lower().split():
            if term not in terms:
                terms.append(term)
        if terms:
            conditions.append(Condition('text', TEXT, tuple(terms)))

    if criteria.employment_types:
        conditions.append(_membership('employment_type', criteria.employment_types))

    if criteria.work_modes:
        conditions.append(_membership('work_mode', criteria.work_modes))

    if criteria.location:
        conditions.append(Condition('city', ICONTAINS, criteria.location))

    for name in ('industry', 'department', 'company'):
        value = getattr(criteria, name)
        if value:
            conditions.append(Condition(name, EQ, value))

    # Experience bounds apply to the job's minimum requirement
    if criteria.experience_min is not None:
        conditions.append(Condition('experience_min', GTE, criteria.experience_min))
    if criteria.experience_max is not None:
        conditions.append(Condition('experience_min', LTE, criteria.experience_max))

    if criteria.salary_min is not None:
        conditions.append(Condition('salary_min', GTE, criteria.salary_min))
    if criteria.salary_max is not None:
        conditions.append(Condition('salary_max', LTE, criteria.salary_max))

    if criteria.skills:
        conditions.append(Condition('skills', ANY_IEQUALS,
                                    tuple(skill.lower() for skill in criteria.skills)))

    if criteria.posted_within is not None:
        now = now or datetime.utcnow()
        try:
            cutoff = now - timedelta(days=criteria.posted_within)
        except OverflowError:
            # Window reaches past datetime.min, so every posting qualifies
            cutoff = None
        if cutoff is not None:
            conditions.append(Condition('posted_at', GTE, cutoff))

    query = JobQuery(tuple(conditions))
    logger.debug(f"Built job query with {len(query.conditions)} conditions")
    return query


RECOMMENDATION_EXPERIENCE_REACH = 2


def build_recommendation_query(candidate: CandidateProfile) -> JobQuery:
    """Query for active jobs worth recommending to a candidate.

    Jobs must share at least one skill with the candidate and ask for no
    more than two years beyond the candidate's experience.
    """
    conditions = [Condition('status', EQ, JobStatus.ACTIVE.value)]
    if candidate.skills:
        conditions.append(Condition('skills', ANY_IEQUALS,
                                    tuple(name.lower() for name in candidate.skill_names)))
    if candidate.total_experience is not None:
        reach = candidate.total_experience.years + RECOMMENDATION_EXPERIENCE_REACH
        conditions.append(Condition('experience_min', LTE, reach))
    return JobQuery(tuple(conditions))


@dataclass(frozen=True)
class SortKey:
    """Ordering over job listings."""
    field: str
    descending: bool


DEFAULT_SORT = 'newest'

SORT_OPTIONS: Dict[str, SortKey] = {
    'newest': SortKey('posted_at', True),
    'oldest': SortKey('posted_at', False),
    'salary_high': SortKey('salary_max', True),
    'salary_low': SortKey('salary_min', False),
    'relevance': SortKey('relevance', True),
}


def resolve_sort(sort_by: Any = None) -> SortKey:
    """Map a sort token onto an ordering; unknown tokens mean newest first."""
    if isinstance(sort_by, str):
        key = SORT_OPTIONS.get(sort_by.strip().lower())
        if key is not None:
            return key
    return SORT_OPTIONS[DEFAULT_SORT]
