"""REST API for the job portal."""
import logging
import random
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException
from werkzeug.routing import IntegerConverter

from ..config import Config
from ..database import Database
from ..domain.candidate import CandidateProfile
from ..domain.job import JobListing
from ..domain.matching import MatchScorer, create_match_scorer
from ..errors import AppError, NotFoundError, UnauthorizedError, ValidationError
from ..filters import FilterCriteria, build_job_query, build_recommendation_query, resolve_sort
from ..interview import evaluate_answer_heuristically, summarize_interview
from ..pagination import paginate, parse_page_params, page_offset
from ..utils import MAX_SQL_INT

logger = logging.getLogger(__name__)

CANDIDATE_HEADER = 'X-Candidate-Id'
MIN_SEARCH_LENGTH = 2
SIMILAR_JOBS_LIMIT = 6


class RowIdConverter(IntegerConverter):
    """Integer URL segment limited to ids the database can hold."""

    def __init__(self, map, *args, **kwargs):
        kwargs.setdefault('max', MAX_SQL_INT)
        super().__init__(map, *args, **kwargs)


class JobPortalWebHandler:
    """Registers the job portal routes on a Flask app.

    Collaborators are passed in explicitly; nothing is looked up from
    module globals.
    """

    def __init__(
        self,
        app: Flask,
        db: Database,
        scorer: MatchScorer,
        default_limit: int = 20,
        max_limit: int = 100,
        rng: Optional[random.Random] = None,
    ):
        """Initialize the web handler.

        Args:
            app: Flask application instance
            db: Storage for jobs, candidates and applications
            scorer: Match scorer for candidate-aware responses
            default_limit: Page size when the request gives none
            max_limit: Largest page size a request may ask for
            rng: Random source for display-only interview spreads
        """
        self.app = app
        self.db = db
        self.scorer = scorer
        self.default_limit = default_limit
        self.max_limit = max_limit
        self.rng = rng or random.Random()
        self.app.url_map.converters['int'] = RowIdConverter
        self._setup_error_handlers()
        self._setup_routes()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _current_candidate(self, required: bool = False) -> Optional[CandidateProfile]:
        """Resolve the candidate making the request.

        Authentication happens upstream; the candidate id arrives in a
        header or the ``candidateId`` query parameter.
        """
        raw = request.headers.get(CANDIDATE_HEADER) or request.args.get('candidateId')
        if not raw:
            if required:
                raise UnauthorizedError('Authentication required')
            return None

        try:
            candidate_id = int(raw)
        except ValueError:
            raise UnauthorizedError('Invalid candidate id', code='INVALID_TOKEN')
        if abs(candidate_id) > MAX_SQL_INT:
            raise UnauthorizedError('Invalid candidate id', code='INVALID_TOKEN')

        candidate = self.db.get_candidate(candidate_id)
        if candidate is None:
            raise UnauthorizedError('Unknown candidate', code='INVALID_TOKEN')
        return candidate

    def _job_payload(self, job: JobListing, candidate: Optional[CandidateProfile]) -> Dict[str, Any]:
        payload = job.to_dict()
        if candidate is not None:
            payload['match_score'] = self.scorer.score(job, candidate)
        return payload

    def _get_job_or_404(self, job_id: int) -> JobListing:
        job = self.db.get_job(job_id)
        if job is None:
            raise NotFoundError('Job not found')
        return job

    def _json_body(self) -> Dict[str, Any]:
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            raise ValidationError('Request body must be a JSON object')
        return body

    # ------------------------------------------------------------------
    # Error handling
    # ------------------------------------------------------------------

    def _setup_error_handlers(self):
        @self.app.errorhandler(AppError)
        def handle_app_error(error: AppError):
            if error.status_code >= 500:
                logger.error(f"{request.method} {request.path} failed: {error.message}")
            else:
                logger.debug(f"{request.method} {request.path} -> {error.status_code} {error.code}")
            return jsonify(error.to_dict()), error.status_code

        @self.app.errorhandler(HTTPException)
        def handle_http_error(error: HTTPException):
            code = 'NOT_FOUND' if error.code == 404 else error.name.upper().replace(' ', '_')
            message = f"Not found - {request.path}" if error.code == 404 else error.description
            return jsonify({'success': False, 'code': code, 'message': message}), error.code

        @self.app.errorhandler(Exception)
        def handle_unexpected_error(error: Exception):
            logger.error(f"Error in {request.method} {request.path}: {error}", exc_info=True)
            return jsonify({
                'success': False,
                'code': 'INTERNAL_ERROR',
                'message': 'Internal Server Error',
            }), 500

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    def _setup_routes(self):
        """Set up Flask routes."""
        app = self.app

        @app.get('/api/health')
        def health():
            return jsonify({'success': True, 'status': 'ok'})

        @app.get('/api/jobs')
        def list_jobs():
            """Get active jobs with filtering, sorting and pagination."""
            criteria = FilterCriteria.from_args(request.args)
            query = build_job_query(criteria)
            sort = resolve_sort(request.args.get('sortBy') or request.args.get('sort_by'))
            page, limit = parse_page_params(request.args, self.default_limit, self.max_limit)

            jobs = self.db.search_jobs(query, sort, limit=limit, offset=page_offset(page, limit))
            total = self.db.count_jobs(query)
            candidate = self._current_candidate()

            items = [self._job_payload(job, candidate) for job in jobs]
            return jsonify({'success': True, **paginate(items, total, page, limit)})

        @app.get('/api/jobs/filters')
        def filter_options():
            return jsonify({'success': True, 'data': self.db.get_filter_options()})

        @app.get('/api/jobs/search')
        def search_jobs():
            """Full-text search ordered by relevance."""
            term = (request.args.get('q') or '').strip()
            if len(term) < MIN_SEARCH_LENGTH:
                raise AppError('Search query must be at least 2 characters', 400, 'INVALID_QUERY')

            query = build_job_query(FilterCriteria(search=term))
            page, limit = parse_page_params(request.args, self.default_limit, self.max_limit)
            jobs = self.db.search_jobs(query, resolve_sort('relevance'), limit=limit,
                                       offset=page_offset(page, limit))
            total = self.db.count_jobs(query)
            candidate = self._current_candidate()

            items = [self._job_payload(job, candidate) for job in jobs]
            return jsonify({'success': True, **paginate(items, total, page, limit)})

        @app.get('/api/jobs/recommended')
        def recommended_jobs():
            """Jobs close to the candidate's profile, best match first."""
            candidate = self._current_candidate(required=True)
            _, limit = parse_page_params(request.args, 10, self.max_limit)

            jobs = self.db.search_jobs(build_recommendation_query(candidate), limit=limit)
            ranked = self.scorer.rank(jobs, candidate)
            data = [dict(job.to_dict(), match_score=score) for job, score in ranked]
            return jsonify({'success': True, 'data': data})

        @app.post('/api/jobs')
        def create_job():
            job = JobListing.from_dict(self._json_body())
            saved = self.db.add_job(job)
            return jsonify({
                'success': True,
                'message': 'Job created successfully',
                'data': saved.to_dict(),
            }), 201

        @app.get('/api/jobs/<int:job_id>')
        def get_job(job_id: int):
            """Get a single job, counting the view."""
            candidate = self._current_candidate()
            job = self.db.increment_views(job_id)
            if job is None:
                raise NotFoundError('Job not found')

            data = job.to_dict()
            data['has_applied'] = False
            data['match_score'] = None
            if candidate is not None:
                data['has_applied'] = self.db.has_applied(job_id, candidate.id)
                data['match_score'] = self.scorer.score(job, candidate)
            return jsonify({'success': True, 'data': data})

        @app.patch('/api/jobs/<int:job_id>/status')
        def update_job_status(job_id: int):
            body = self._json_body()
            if not body.get('status'):
                raise ValidationError(errors=[{'field': 'status', 'message': 'is required'}])
            job = self.db.set_job_status(job_id, body['status'])
            return jsonify({
                'success': True,
                'message': 'Job status updated',
                'data': job.to_dict(),
            })

        @app.get('/api/jobs/<int:job_id>/similar')
        def similar_jobs(job_id: int):
            job = self._get_job_or_404(job_id)
            similar = self.db.find_similar_jobs(job, limit=SIMILAR_JOBS_LIMIT)
            return jsonify({'success': True, 'data': [j.to_dict() for j in similar]})

        @app.get('/api/jobs/<int:job_id>/match')
        def match_breakdown(job_id: int):
            """Per-dimension match breakdown for the current candidate."""
            candidate = self._current_candidate(required=True)
            job = self._get_job_or_404(job_id)
            return jsonify({'success': True, 'data': self.scorer.breakdown(job, candidate).to_dict()})

        @app.post('/api/jobs/<int:job_id>/apply')
        def apply_for_job(job_id: int):
            candidate = self._current_candidate(required=True)
            job = self._get_job_or_404(job_id)
            body = request.get_json(silent=True) or {}

            application = self.db.apply_for_job(
                job_id,
                candidate.id,
                match_score=self.scorer.score(job, candidate),
                cover_letter=body.get('cover_letter') if isinstance(body, dict) else None,
            )
            return jsonify({
                'success': True,
                'message': 'Application submitted successfully',
                'data': application.to_dict(),
            }), 201

        @app.post('/api/candidates')
        def create_candidate():
            candidate = CandidateProfile.from_dict(self._json_body())
            saved = self.db.add_candidate(candidate)
            return jsonify({'success': True, 'data': saved.to_dict()}), 201

        @app.get('/api/candidates/<int:candidate_id>')
        def get_candidate(candidate_id: int):
            candidate = self.db.get_candidate(candidate_id)
            if candidate is None:
                raise NotFoundError('Candidate not found')
            return jsonify({'success': True, 'data': candidate.to_dict()})

        @app.get('/api/applications')
        def my_applications():
            candidate = self._current_candidate(required=True)
            status = request.args.get('status') or None
            page, limit = parse_page_params(request.args, 10, self.max_limit)

            applications = self.db.get_candidate_applications(
                candidate.id, status=status, limit=limit, offset=page_offset(page, limit))
            total = self.db.count_candidate_applications(candidate.id, status=status)

            items = [a.to_dict() for a in applications]
            return jsonify({'success': True, **paginate(items, total, page, limit)})

        @app.post('/api/applications/<int:application_id>/withdraw')
        def withdraw_application(application_id: int):
            candidate = self._current_candidate(required=True)
            self.db.withdraw_application(application_id, candidate.id)
            return jsonify({'success': True, 'message': 'Application withdrawn successfully'})

        @app.post('/api/interviews/results')
        def interview_results():
            """Summarize a practice interview from feedback or raw answers."""
            body = self._json_body()
            feedbacks = body.get('feedbacks')
            answers = body.get('answers')

            if feedbacks is None and answers is not None:
                if not isinstance(answers, list) or not all(isinstance(a, str) for a in answers):
                    raise ValidationError(errors=[{'field': 'answers', 'message': 'must be a list of strings'}])
                feedbacks = [evaluate_answer_heuristically(answer) for answer in answers]

            feedbacks = feedbacks or []
            if not isinstance(feedbacks, list) or not all(isinstance(f, dict) for f in feedbacks):
                raise ValidationError(errors=[{'field': 'feedbacks', 'message': 'must be a list of objects'}])
            for feedback in feedbacks:
                score = feedback.get('score')
                if score is not None and (isinstance(score, bool) or not isinstance(score, (int, float))
                                          or not 0 <= score <= 10):
                    raise ValidationError(errors=[{'field': 'feedbacks.score', 'message': 'must be 0-10'}])
                for key in ('strengths', 'improvements'):
                    notes = feedback.get(key)
                    if notes is not None and (not isinstance(notes, list)
                                              or not all(isinstance(note, str) for note in notes)):
                        raise ValidationError(errors=[{'field': f'feedbacks.{key}',
                                                       'message': 'must be a list of strings'}])

            return jsonify({'success': True, 'data': summarize_interview(feedbacks, self.rng)})


def create_app(config: Optional[Config] = None, database: Optional[Database] = None,
               rng: Optional[random.Random] = None) -> Flask:
    """Create and configure the Flask app.

    Args:
        config: Configuration, read from the environment when omitted
        database: Storage to serve from, built from the config when omitted
        rng: Random source for display-only values

    Returns:
        Flask: Configured application
    """
    config = config or Config()
    if database is None:
        db_config = config.get_database_config()
        database = Database(db_config['url'], echo=db_config['echo'])

    app = Flask(__name__)
    app.json.sort_keys = False

    pagination = config.get_pagination_config()
    handler = JobPortalWebHandler(
        app,
        database,
        create_match_scorer(),
        default_limit=pagination['default_limit'],
        max_limit=pagination['max_limit'],
        rng=rng,
    )
    app.extensions['jobportal'] = handler
    logger.debug("Job portal API routes registered")
    return app


def run_server(app: Flask, host: str = '127.0.0.1', port: int = 5000, debug: bool = False):
    """Run the Flask development server."""
    logger.info(f"Starting job portal API on {host}:{port}")
    app.run(host=host, port=port, debug=debug)
