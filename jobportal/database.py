"""Database models and connection management."""
from datetime import datetime
from typing import Optional, List, Dict, Any
from sqlalchemy import (
    create_engine, Column, Integer, String, DateTime, Boolean, Text, JSON, Float,
    ForeignKey, UniqueConstraint, func, or_, case,
)
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
import logging

from .domain.job import (
    JobListing, JobStatus, Location, ExperienceRange, SalaryRange, JobSkill, EducationRequirement,
)
from .domain.candidate import CandidateProfile, CandidateSkill, TotalExperience, Education
from .domain.application import Application, ApplicationStatus
from .errors import ConflictError, NotFoundError, StorageError
from .filters import (
    JobQuery, Condition, SortKey, SORT_OPTIONS, DEFAULT_SORT,
    EQ, IN, ICONTAINS, GTE, LTE, ANY_IEQUALS, TEXT,
)
from .utils import generate_slug

logger = logging.getLogger(__name__)

Base = declarative_base()


class JobModel(Base):
    """SQLAlchemy model for job listings."""
    __tablename__ = 'jobs'

    id = Column(Integer, primary_key=True, autoincrement=True)
    slug = Column(String(255), unique=True, nullable=True)
    title = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False)
    company = Column(String(255), nullable=True, index=True)
    employment_type = Column(String(20), nullable=False, index=True)
    work_mode = Column(String(20), nullable=False, index=True)
    city = Column(String(255), nullable=True, index=True)
    state = Column(String(255), nullable=True)
    country = Column(String(255), nullable=True)
    is_remote = Column(Boolean, default=False)
    experience_min = Column(Float, nullable=True, index=True)
    experience_max = Column(Float, nullable=True)
    salary_min = Column(Float, nullable=True, index=True)
    salary_max = Column(Float, nullable=True, index=True)
    salary_currency = Column(String(3), nullable=True)
    salary_period = Column(String(10), nullable=True)
    salary_negotiable = Column(Boolean, default=False)
    show_salary = Column(Boolean, default=True)
    skills = Column(JSON, nullable=True)
    # Lower-cased skill names wrapped in pipes, e.g. "|react|node.js|"
    skill_index = Column(Text, nullable=False, default='')
    education = Column(JSON, nullable=True)
    industry = Column(String(255), nullable=True, index=True)
    department = Column(String(255), nullable=True, index=True)
    status = Column(String(20), nullable=False, default=JobStatus.ACTIVE.value, index=True)
    posted_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    deadline = Column(DateTime, nullable=True, index=True)
    views = Column(Integer, default=0)
    applications_count = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class CandidateModel(Base):
    """SQLAlchemy model for candidate profiles."""
    __tablename__ = 'candidates'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True, unique=True)
    city = Column(String(255), nullable=True, index=True)
    skills = Column(JSON, nullable=True)
    experience_years = Column(Integer, nullable=True)
    experience_months = Column(Integer, nullable=True)
    education = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ApplicationModel(Base):
    """SQLAlchemy model for job applications."""
    __tablename__ = 'applications'
    __table_args__ = (UniqueConstraint('job_id', 'candidate_id', name='uq_application_job_candidate'),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(Integer, ForeignKey('jobs.id'), nullable=False, index=True)
    candidate_id = Column(Integer, ForeignKey('candidates.id'), nullable=False, index=True)
    status = Column(String(30), nullable=False, default=ApplicationStatus.APPLIED.value, index=True)
    match_score = Column(Integer, default=0)
    cover_letter = Column(Text, nullable=True)
    applied_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


QUERY_COLUMNS = {
    'status': JobModel.status,
    'employment_type': JobModel.employment_type,
    'work_mode': JobModel.work_mode,
    'city': JobModel.city,
    'industry': JobModel.industry,
    'department': JobModel.department,
    'company': JobModel.company,
    'experience_min': JobModel.experience_min,
    'salary_min': JobModel.salary_min,
    'salary_max': JobModel.salary_max,
    'posted_at': JobModel.posted_at,
}

DISTINCT_FIELDS = {'employment_type', 'work_mode', 'city', 'industry', 'department', 'company'}


def _skill_index(skill_names: List[str]) -> str:
    names = [name.lower() for name in skill_names]
    return f"|{'|'.join(names)}|" if names else ''


def _label(value: str) -> str:
    return value.replace('_', ' ').title()


class Database:
    """Database connection and operation manager."""

    def __init__(self, db_url: str = "sqlite:///jobportal.db", echo: bool = False):
        """Initialize database connection.

        Args:
            db_url: Database connection URL
            echo: Log emitted SQL
        """
        self.engine = create_engine(db_url, echo=echo)
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)
        self._create_tables()

    def _create_tables(self) -> None:
        """Create database tables if they don't exist."""
        Base.metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def _apply_job(self, model: JobModel, job: JobListing) -> None:
        model.title = job.title
        model.description = job.description
        model.company = job.company
        model.employment_type = job.employment_type.value
        model.work_mode = job.work_mode.value
        model.city = job.location.city
        model.state = job.location.state
        model.country = job.location.country
        model.is_remote = job.location.is_remote
        model.experience_min = job.experience.min if job.experience else None
        model.experience_max = job.experience.max if job.experience else None
        if job.salary:
            model.salary_min = job.salary.min
            model.salary_max = job.salary.max
            model.salary_currency = job.salary.currency
            model.salary_period = job.salary.period.value
            model.salary_negotiable = job.salary.is_negotiable
            model.show_salary = job.salary.show_salary
        else:
            model.salary_min = model.salary_max = None
            model.salary_currency = model.salary_period = None
            model.salary_negotiable = False
            model.show_salary = True
        model.skills = [
            {'name': s.name, 'is_required': s.is_required, 'experience': s.experience}
            for s in job.skills
        ]
        model.skill_index = _skill_index(job.skill_names)
        model.education = {
            'min_qualification': job.education.min_qualification.value,
            'preferred_degrees': job.education.preferred_degrees,
            'preferred_fields': job.education.preferred_fields,
        } if job.education else None
        model.industry = job.industry
        model.department = job.department
        model.status = job.status.value
        model.posted_at = job.posted_at
        model.deadline = job.deadline
        model.views = job.views
        model.applications_count = job.applications_count

    def _to_job(self, model: JobModel) -> JobListing:
        experience = None
        if model.experience_min is not None:
            experience = ExperienceRange(min=model.experience_min, max=model.experience_max)

        salary = None
        if model.salary_currency is not None:
            salary = SalaryRange(
                min=model.salary_min,
                max=model.salary_max,
                currency=model.salary_currency,
                period=model.salary_period,
                is_negotiable=bool(model.salary_negotiable),
                show_salary=bool(model.show_salary),
            )

        education = None
        if model.education:
            education = EducationRequirement(**model.education)

        return JobListing(
            id=model.id,
            slug=model.slug,
            title=model.title,
            description=model.description,
            company=model.company,
            employment_type=model.employment_type,
            work_mode=model.work_mode,
            location=Location(
                city=model.city,
                state=model.state,
                country=model.country or 'India',
                is_remote=bool(model.is_remote),
            ),
            experience=experience,
            salary=salary,
            skills=[JobSkill(**skill) for skill in model.skills or []],
            education=education,
            industry=model.industry,
            department=model.department,
            status=model.status,
            posted_at=model.posted_at,
            deadline=model.deadline,
            views=model.views or 0,
            applications_count=model.applications_count or 0,
        )

    def _to_candidate(self, model: CandidateModel) -> CandidateProfile:
        total_experience = None
        if model.experience_years is not None or model.experience_months is not None:
            total_experience = TotalExperience(
                years=model.experience_years or 0,
                months=model.experience_months or 0,
            )
        return CandidateProfile(
            id=model.id,
            name=model.name,
            email=model.email,
            city=model.city,
            skills=[CandidateSkill(**skill) for skill in model.skills or []],
            total_experience=total_experience,
            education=[Education(**record) for record in model.education or []],
        )

    def _to_application(self, model: ApplicationModel, job_title: Optional[str] = None) -> Application:
        return Application(
            id=model.id,
            job_id=model.job_id,
            candidate_id=model.candidate_id,
            status=model.status,
            match_score=model.match_score or 0,
            cover_letter=model.cover_letter,
            applied_at=model.applied_at,
            job_title=job_title,
        )

    # ------------------------------------------------------------------
    # Query translation
    # ------------------------------------------------------------------

    def _term_clause(self, term: str):
        return or_(
            JobModel.title.icontains(term, autoescape=True),
            JobModel.description.icontains(term, autoescape=True),
            JobModel.skill_index.contains(term, autoescape=True),
        )

    def _condition_clause(self, condition: Condition):
        """Translate one query condition into a SQL expression."""
        op, value = condition.op, condition.value
        if op == TEXT:
            return or_(*[self._term_clause(term) for term in value])
        if op == ANY_IEQUALS:
            return or_(*[JobModel.skill_index.contains(f"|{name}|", autoescape=True) for name in value])

        column = QUERY_COLUMNS[condition.field]
        if op == EQ:
            return column == value
        if op == IN:
            return column.in_(list(value))
        if op == ICONTAINS:
            return column.icontains(value, autoescape=True)
        if op == GTE:
            return column >= value
        if op == LTE:
            return column <= value
        raise ValueError(f"Unknown condition operator: {op}")

    def _apply_query(self, query, job_query: Optional[JobQuery]):
        if job_query is None:
            return query
        for condition in job_query.conditions:
            query = query.filter(self._condition_clause(condition))
        return query

    def _order_by(self, job_query: Optional[JobQuery], sort: Optional[SortKey]) -> list:
        sort = sort or SORT_OPTIONS[DEFAULT_SORT]
        terms = job_query.text_terms if job_query is not None else ()

        if sort.field == 'relevance':
            if not terms:
                # Relevance needs a text search to rank by
                sort = SORT_OPTIONS[DEFAULT_SORT]
            else:
                relevance = sum(case((self._term_clause(term), 1), else_=0) for term in terms)
                return [relevance.desc(), JobModel.posted_at.desc(), JobModel.id.desc()]

        column = QUERY_COLUMNS[sort.field]
        primary = column.desc() if sort.descending else column.asc()
        return [primary, JobModel.posted_at.desc(), JobModel.id.desc()]

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    def add_job(self, job: JobListing) -> JobListing:
        """Add a job listing to the database.

        Args:
            job: Listing to store; its id and slug are assigned here

        Returns:
            JobListing: The stored listing
        """
        try:
            with self.Session() as session:
                model = JobModel()
                self._apply_job(model, job)
                session.add(model)
                session.flush()
                model.slug = f"{generate_slug(job.title)}-{model.id}"
                session.commit()
                logger.info(f"Added job {model.id}: {job.title}")
                return self._to_job(model)
        except SQLAlchemyError as e:
            logger.error(f"Error adding job to database: {str(e)}")
            raise StorageError("Failed to save job") from e

    def add_jobs(self, jobs: List[JobListing]) -> int:
        """Add several listings, returning how many were stored."""
        added = 0
        for job in jobs:
            self.add_job(job)
            added += 1
        return added

    def save_job(self, job: JobListing) -> JobListing:
        """Persist changes to an existing listing.

        Raises:
            NotFoundError: If the listing does not exist
        """
        try:
            with self.Session() as session:
                model = session.get(JobModel, job.id)
                if model is None:
                    raise NotFoundError('Job not found')
                self._apply_job(model, job)
                session.commit()
                return self._to_job(model)
        except SQLAlchemyError as e:
            logger.error(f"Error saving job {job.id}: {str(e)}")
            raise StorageError("Failed to save job") from e

    def get_job(self, job_id: int) -> Optional[JobListing]:
        """Get a job by ID.

        Returns:
            Optional[JobListing]: Job if found, None otherwise
        """
        try:
            with self.Session() as session:
                model = session.get(JobModel, job_id)
                return self._to_job(model) if model else None
        except SQLAlchemyError as e:
            logger.error(f"Error getting job from database: {str(e)}")
            raise StorageError("Failed to load job") from e

    def increment_views(self, job_id: int) -> Optional[JobListing]:
        """Count one more view of a listing and return the updated listing."""
        try:
            with self.Session() as session:
                model = session.get(JobModel, job_id)
                if model is None:
                    return None
                model.views = (model.views or 0) + 1
                session.commit()
                return self._to_job(model)
        except SQLAlchemyError as e:
            logger.error(f"Error incrementing views for job {job_id}: {str(e)}")
            raise StorageError("Failed to update job") from e

    def set_job_status(self, job_id: int, status: Any) -> JobListing:
        """Move a listing to another lifecycle status.

        Listings are never deleted; closing one is a status change.

        Raises:
            NotFoundError: If the listing does not exist
            ValidationError: If the transition is not allowed
        """
        job = self.get_job(job_id)
        if job is None:
            raise NotFoundError('Job not found')
        previous = job.status
        job.transition_to(status)
        saved = self.save_job(job)
        logger.info(f"Job {job_id} status {previous.value} -> {saved.status.value}")
        return saved

    def search_jobs(self, query: Optional[JobQuery] = None, sort: Optional[SortKey] = None,
                    limit: int = 20, offset: int = 0) -> List[JobListing]:
        """Search for jobs matching a query with pagination.

        Args:
            query: Filter predicate, None for every listing
            sort: Ordering, newest first by default
            limit: Maximum number of results to return
            offset: Number of results to skip (for pagination)

        Returns:
            List[JobListing]: Matching listings
        """
        try:
            with self.Session() as session:
                db_query = self._apply_query(session.query(JobModel), query)
                db_query = db_query.order_by(*self._order_by(query, sort))
                return [self._to_job(m) for m in db_query.offset(offset).limit(limit).all()]
        except SQLAlchemyError as e:
            logger.error(f"Error searching jobs in database: {str(e)}")
            raise StorageError("Failed to search jobs") from e

    def count_jobs(self, query: Optional[JobQuery] = None) -> int:
        """Count jobs matching a query."""
        try:
            with self.Session() as session:
                db_query = self._apply_query(session.query(func.count(JobModel.id)), query)
                return db_query.scalar() or 0
        except SQLAlchemyError as e:
            logger.error(f"Error counting jobs in database: {str(e)}")
            raise StorageError("Failed to count jobs") from e

    def find_similar_jobs(self, job: JobListing, limit: int = 6) -> List[JobListing]:
        """Find active listings sharing a skill, the industry or the city with a job."""
        alternatives = [
            JobModel.skill_index.contains(f"|{name.lower()}|", autoescape=True)
            for name in job.skill_names
        ]
        if job.industry:
            alternatives.append(JobModel.industry == job.industry)
        if job.location.city:
            alternatives.append(JobModel.city == job.location.city)
        if not alternatives:
            return []

        try:
            with self.Session() as session:
                models = (
                    session.query(JobModel)
                    .filter(JobModel.id != job.id)
                    .filter(JobModel.status == JobStatus.ACTIVE.value)
                    .filter(or_(*alternatives))
                    .order_by(JobModel.posted_at.desc())
                    .limit(limit)
                    .all()
                )
                return [self._to_job(m) for m in models]
        except SQLAlchemyError as e:
            logger.error(f"Error finding jobs similar to {job.id}: {str(e)}")
            raise StorageError("Failed to find similar jobs") from e

    def get_unique_values(self, field: str) -> List[str]:
        """Get distinct values of a field across active listings.

        Args:
            field: Name of the field to get unique values for

        Returns:
            List[str]: Sorted unique values, empty for unknown fields
        """
        if field not in DISTINCT_FIELDS:
            return []
        try:
            with self.Session() as session:
                column = QUERY_COLUMNS[field]
                results = (
                    session.query(column)
                    .filter(JobModel.status == JobStatus.ACTIVE.value)
                    .distinct()
                    .all()
                )
                return sorted(r[0] for r in results if r[0])
        except SQLAlchemyError as e:
            logger.error(f"Error getting unique values for {field}: {str(e)}")
            raise StorageError("Failed to load filter options") from e

    def get_filter_options(self) -> Dict[str, Any]:
        """Collect the values a job search can be filtered by."""
        try:
            with self.Session() as session:
                active = JobModel.status == JobStatus.ACTIVE.value
                min_exp, max_exp = (
                    session.query(func.min(JobModel.experience_min), func.max(JobModel.experience_max))
                    .filter(active)
                    .one()
                )
                min_salary, max_salary = (
                    session.query(func.min(JobModel.salary_min), func.max(JobModel.salary_max))
                    .filter(active, JobModel.show_salary.is_(True))
                    .one()
                )
        except SQLAlchemyError as e:
            logger.error(f"Error getting filter options: {str(e)}")
            raise StorageError("Failed to load filter options") from e

        return {
            'employment_types': [
                {'value': v, 'label': _label(v)} for v in self.get_unique_values('employment_type')
            ],
            'work_modes': [
                {'value': v, 'label': _label(v)} for v in self.get_unique_values('work_mode')
            ],
            'locations': self.get_unique_values('city'),
            'industries': self.get_unique_values('industry'),
            'departments': self.get_unique_values('department'),
            'experience_range': {
                'min': min_exp if min_exp is not None else 0,
                'max': max_exp if max_exp is not None else 30,
            },
            'salary_range': {
                'min': min_salary if min_salary is not None else 0,
                'max': max_salary if max_salary is not None else 10000000,
            },
        }

    def expire_jobs(self, now: Optional[datetime] = None) -> int:
        """Mark active listings whose deadline has passed as expired.

        Returns:
            int: Number of listings expired
        """
        now = now or datetime.utcnow()
        try:
            with self.Session() as session:
                result = (
                    session.query(JobModel)
                    .filter(JobModel.status == JobStatus.ACTIVE.value)
                    .filter(JobModel.deadline.isnot(None), JobModel.deadline < now)
                    .update({JobModel.status: JobStatus.EXPIRED.value}, synchronize_session=False)
                )
                session.commit()
                if result:
                    logger.info(f"Expired {result} jobs past their deadline")
                return result
        except SQLAlchemyError as e:
            logger.error(f"Error expiring jobs: {str(e)}")
            raise StorageError("Failed to expire jobs") from e

    # ------------------------------------------------------------------
    # Candidates
    # ------------------------------------------------------------------

    def add_candidate(self, candidate: CandidateProfile) -> CandidateProfile:
        """Store a candidate profile and return it with its id."""
        try:
            with self.Session() as session:
                model = CandidateModel(
                    name=candidate.name,
                    email=candidate.email,
                    city=candidate.city,
                    skills=[
                        {
                            'name': s.name,
                            'level': s.level.value if s.level else None,
                            'years_of_experience': s.years_of_experience,
                        }
                        for s in candidate.skills
                    ],
                    experience_years=candidate.total_experience.years if candidate.total_experience else None,
                    experience_months=candidate.total_experience.months if candidate.total_experience else None,
                    education=[
                        {
                            'institution': e.institution,
                            'degree': e.degree,
                            'field_of_study': e.field_of_study,
                            'is_current': e.is_current,
                        }
                        for e in candidate.education
                    ],
                )
                session.add(model)
                session.commit()
                return self._to_candidate(model)
        except IntegrityError as e:
            logger.warning(f"Duplicate candidate email {candidate.email}: {str(e)}")
            raise ConflictError(f"email {candidate.email} already exists", code="DUPLICATE_ERROR") from e
        except SQLAlchemyError as e:
            logger.error(f"Error adding candidate to database: {str(e)}")
            raise StorageError("Failed to save candidate") from e

    def get_candidate(self, candidate_id: int) -> Optional[CandidateProfile]:
        try:
            with self.Session() as session:
                model = session.get(CandidateModel, candidate_id)
                return self._to_candidate(model) if model else None
        except SQLAlchemyError as e:
            logger.error(f"Error getting candidate from database: {str(e)}")
            raise StorageError("Failed to load candidate") from e

    # ------------------------------------------------------------------
    # Applications
    # ------------------------------------------------------------------

    def apply_for_job(self, job_id: int, candidate_id: int, match_score: int = 0,
                      cover_letter: Optional[str] = None) -> Application:
        """Record a candidate's application to a listing.

        Raises:
            NotFoundError: If the job or candidate does not exist
            ConflictError: If the job is not active or the candidate already applied
        """
        try:
            with self.Session() as session:
                job = session.get(JobModel, job_id)
                if job is None:
                    raise NotFoundError('Job not found')
                if job.status != JobStatus.ACTIVE.value:
                    raise ConflictError('This job is no longer accepting applications', code='JOB_CLOSED')
                if session.get(CandidateModel, candidate_id) is None:
                    raise NotFoundError('Candidate not found')

                existing = (
                    session.query(ApplicationModel)
                    .filter_by(job_id=job_id, candidate_id=candidate_id)
                    .first()
                )
                if existing:
                    raise ConflictError('You have already applied for this job', code='ALREADY_APPLIED')

                model = ApplicationModel(
                    job_id=job_id,
                    candidate_id=candidate_id,
                    match_score=match_score,
                    cover_letter=cover_letter,
                )
                session.add(model)
                job.applications_count = (job.applications_count or 0) + 1
                session.commit()
                logger.info(f"Candidate {candidate_id} applied for job {job_id} (match {match_score})")
                return self._to_application(model, job.title)
        except SQLAlchemyError as e:
            logger.error(f"Error saving application for job {job_id}: {str(e)}")
            raise StorageError("Failed to save application") from e

    def has_applied(self, job_id: int, candidate_id: int) -> bool:
        try:
            with self.Session() as session:
                count = (
                    session.query(func.count(ApplicationModel.id))
                    .filter_by(job_id=job_id, candidate_id=candidate_id)
                    .scalar()
                )
                return bool(count)
        except SQLAlchemyError as e:
            logger.error(f"Error checking application for job {job_id}: {str(e)}")
            raise StorageError("Failed to load applications") from e

    def _applications_query(self, session, candidate_id: int, status: Optional[str]):
        query = session.query(ApplicationModel).filter(ApplicationModel.candidate_id == candidate_id)
        if status:
            query = query.filter(ApplicationModel.status == status)
        return query

    def get_candidate_applications(self, candidate_id: int, status: Optional[str] = None,
                                   limit: int = 10, offset: int = 0) -> List[Application]:
        """List a candidate's applications, most recent first."""
        try:
            with self.Session() as session:
                rows = (
                    self._applications_query(session, candidate_id, status)
                    .join(JobModel, JobModel.id == ApplicationModel.job_id)
                    .add_columns(JobModel.title)
                    .order_by(ApplicationModel.applied_at.desc(), ApplicationModel.id.desc())
                    .offset(offset)
                    .limit(limit)
                    .all()
                )
                return [self._to_application(model, title) for model, title in rows]
        except SQLAlchemyError as e:
            logger.error(f"Error listing applications for candidate {candidate_id}: {str(e)}")
            raise StorageError("Failed to load applications") from e

    def count_candidate_applications(self, candidate_id: int, status: Optional[str] = None) -> int:
        try:
            with self.Session() as session:
                return self._applications_query(session, candidate_id, status).count()
        except SQLAlchemyError as e:
            logger.error(f"Error counting applications for candidate {candidate_id}: {str(e)}")
            raise StorageError("Failed to load applications") from e

    def withdraw_application(self, application_id: int, candidate_id: int) -> Application:
        """Withdraw one of the candidate's own applications.

        Raises:
            NotFoundError: If the application does not exist or belongs to someone else
            ConflictError: If the application already reached a final state
        """
        try:
            with self.Session() as session:
                model = (
                    session.query(ApplicationModel)
                    .filter_by(id=application_id, candidate_id=candidate_id)
                    .first()
                )
                if model is None:
                    raise NotFoundError('Application not found')

                application = self._to_application(model)
                if not application.can_withdraw:
                    raise ConflictError('Cannot withdraw this application', code='CANNOT_WITHDRAW')

                model.status = ApplicationStatus.WITHDRAWN.value
                session.commit()
                logger.info(f"Application {application_id} withdrawn")
                return self._to_application(model)
        except SQLAlchemyError as e:
            logger.error(f"Error withdrawing application {application_id}: {str(e)}")
            raise StorageError("Failed to withdraw application") from e
