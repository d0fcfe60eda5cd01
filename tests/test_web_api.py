"""Tests for the job portal REST API."""
from datetime import datetime

import pytest

from jobportal.domain import JobSkill, Location, SalaryRange


@pytest.fixture
def jobs(db, make_job):
    """Three active listings and one closed one."""
    return [
        db.add_job(make_job(title="Frontend Developer", posted_at=datetime(2024, 1, 10))),
        db.add_job(make_job(title="Python Backend Engineer", description="APIs",
                            skills=[JobSkill("Python")], work_mode="remote",
                            location=Location(city="Pune"),
                            salary=SalaryRange(min=1500000, max=2500000),
                            posted_at=datetime(2024, 1, 12))),
        db.add_job(make_job(title="React Native Developer", employment_type="contract",
                            posted_at=datetime(2024, 1, 8))),
        db.add_job(make_job(title="Closed Role", status="closed", posted_at=datetime(2024, 1, 20))),
    ]


@pytest.fixture
def candidate(db, make_candidate):
    return db.add_candidate(make_candidate(email="asha@example.com"))


def auth(candidate):
    return {'X-Candidate-Id': str(candidate.id)}


def test_health(client):
    response = client.get('/api/health')
    assert response.status_code == 200
    assert response.get_json() == {'success': True, 'status': 'ok'}


class TestListJobs:
    """GET /api/jobs"""

    def test_lists_active_jobs_newest_first(self, client, jobs):
        response = client.get('/api/jobs')
        body = response.get_json()

        assert response.status_code == 200
        assert body['success'] is True
        assert [job['title'] for job in body['data']] == [
            "Python Backend Engineer", "Frontend Developer", "React Native Developer",
        ]
        assert body['pagination'] == {
            'total': 3,
            'page': 1,
            'limit': 20,
            'totalPages': 1,
            'hasNextPage': False,
            'hasPrevPage': False,
        }
        assert 'match_score' not in body['data'][0]

    def test_filters_and_sort(self, client, jobs):
        body = client.get('/api/jobs?employmentType=full_time&sortBy=oldest').get_json()
        assert [job['title'] for job in body['data']] == ["Frontend Developer", "Python Backend Engineer"]

    def test_repeated_work_mode(self, client, jobs):
        body = client.get('/api/jobs?workMode=remote&workMode=hybrid').get_json()
        assert [job['title'] for job in body['data']] == ["Python Backend Engineer"]

    def test_malformed_numbers_are_ignored(self, client, jobs):
        body = client.get('/api/jobs?experienceMin=abc&salaryMax=lots').get_json()
        assert body['pagination']['total'] == 3

    @pytest.mark.parametrize("query", [
        "experienceMin=1e30",
        "salaryMax=99999999999999999999",
        "postedWithin=99999999999",
    ])
    def test_oversized_numbers_are_ignored(self, client, jobs, query):
        response = client.get(f'/api/jobs?{query}')
        assert response.status_code == 200
        assert response.get_json()['pagination']['total'] == 3

    def test_oversized_page_falls_back_to_first(self, client, jobs):
        response = client.get('/api/jobs?page=99999999999999999999')
        assert response.status_code == 200
        body = response.get_json()
        assert body['pagination']['page'] == 1
        assert len(body['data']) == 3

    def test_unknown_sort_is_newest(self, client, jobs):
        body = client.get('/api/jobs?sortBy=bogus_token').get_json()
        assert body['data'][0]['title'] == "Python Backend Engineer"

    def test_pagination(self, client, jobs):
        body = client.get('/api/jobs?page=2&limit=2').get_json()
        assert [job['title'] for job in body['data']] == ["React Native Developer"]
        assert body['pagination']['totalPages'] == 2
        assert body['pagination']['hasPrevPage'] is True
        assert body['pagination']['hasNextPage'] is False

    def test_limit_is_capped(self, client, jobs):
        body = client.get('/api/jobs?limit=1000').get_json()
        assert body['pagination']['limit'] == 100

    def test_empty_result(self, client):
        body = client.get('/api/jobs').get_json()
        assert body['data'] == []
        assert body['pagination']['totalPages'] == 0

    def test_match_scores_for_candidate(self, client, jobs, candidate):
        body = client.get('/api/jobs', headers=auth(candidate)).get_json()
        scores = {job['title']: job['match_score'] for job in body['data']}
        assert scores["Frontend Developer"] == 76

    def test_candidate_id_query_parameter(self, client, jobs, candidate):
        body = client.get(f'/api/jobs?candidateId={candidate.id}').get_json()
        assert 'match_score' in body['data'][0]

    def test_unknown_candidate_rejected(self, client, jobs):
        response = client.get('/api/jobs', headers={'X-Candidate-Id': '999'})
        assert response.status_code == 401
        assert response.get_json()['code'] == 'INVALID_TOKEN'

    def test_oversized_candidate_id_rejected(self, client, jobs):
        response = client.get('/api/jobs', headers={'X-Candidate-Id': '99999999999999999999'})
        assert response.status_code == 401


class TestSearch:
    """GET /api/jobs/search"""

    def test_requires_two_characters(self, client):
        response = client.get('/api/jobs/search?q=a')
        assert response.status_code == 400
        assert response.get_json() == {
            'success': False,
            'code': 'INVALID_QUERY',
            'message': 'Search query must be at least 2 characters',
        }

    def test_orders_by_relevance(self, client, jobs):
        body = client.get('/api/jobs/search', query_string={'q': 'react developer'}).get_json()
        titles = [job['title'] for job in body['data']]
        # Both terms match both developer roles; the backend role matches neither
        assert titles == ["Frontend Developer", "React Native Developer"]
        assert body['pagination']['total'] == 2


def test_filter_options(client, jobs):
    body = client.get('/api/jobs/filters').get_json()
    assert body['success'] is True
    assert body['data']['locations'] == ["Bangalore", "Pune"]
    assert {'value': 'contract', 'label': 'Contract'} in body['data']['employment_types']


class TestJobDetail:
    """GET /api/jobs/<id>"""

    def test_counts_views(self, client, jobs):
        job_id = jobs[0].id
        client.get(f'/api/jobs/{job_id}')
        body = client.get(f'/api/jobs/{job_id}').get_json()
        assert body['data']['stats']['views'] == 2
        assert body['data']['has_applied'] is False
        assert body['data']['match_score'] is None

    def test_with_candidate(self, client, jobs, candidate):
        body = client.get(f'/api/jobs/{jobs[0].id}', headers=auth(candidate)).get_json()
        assert body['data']['match_score'] == 76
        assert body['data']['salary_display'] == '₹6.0 LPA - ₹12.0 LPA'

    def test_missing_job(self, client):
        response = client.get('/api/jobs/999')
        assert response.status_code == 404
        assert response.get_json()['code'] == 'NOT_FOUND'

    def test_oversized_job_id(self, client):
        assert client.get('/api/jobs/99999999999999999999').status_code == 404


def test_unknown_route(client):
    response = client.get('/api/nowhere')
    assert response.status_code == 404
    assert response.get_json()['message'] == 'Not found - /api/nowhere'


class TestCreateJob:
    """POST /api/jobs"""

    def test_creates_job(self, client):
        response = client.post('/api/jobs', json={
            'title': 'Data Engineer',
            'description': 'Build pipelines',
            'employment_type': 'full_time',
            'work_mode': 'hybrid',
            'location': {'city': 'Hyderabad'},
            'skills': ['Python', 'Spark'],
        })
        body = response.get_json()
        assert response.status_code == 201
        assert body['data']['slug'] == f"data-engineer-{body['data']['id']}"
        assert client.get('/api/jobs?location=hyderabad').get_json()['pagination']['total'] == 1

    def test_validation_errors(self, client):
        response = client.post('/api/jobs', json={'title': '', 'employment_type': 'full_time'})
        body = response.get_json()
        assert response.status_code == 400
        assert body['code'] == 'VALIDATION_ERROR'
        assert {'field': 'title', 'message': 'is required'} in body['errors']

    def test_non_json_body(self, client):
        response = client.post('/api/jobs', data='title=x')
        assert response.status_code == 400


def test_update_job_status(client, jobs):
    job_id = jobs[0].id
    response = client.patch(f'/api/jobs/{job_id}/status', json={'status': 'paused'})
    assert response.status_code == 200
    assert response.get_json()['data']['status'] == 'paused'
    assert client.get('/api/jobs').get_json()['pagination']['total'] == 2

    response = client.patch(f'/api/jobs/{job_id}/status', json={'status': 'bogus'})
    assert response.status_code == 400


def test_similar_jobs(client, jobs):
    body = client.get(f'/api/jobs/{jobs[0].id}/similar').get_json()
    titles = [job['title'] for job in body['data']]
    assert "React Native Developer" in titles
    assert "Frontend Developer" not in titles
    assert "Closed Role" not in titles


def test_match_breakdown(client, jobs, candidate):
    response = client.get(f'/api/jobs/{jobs[0].id}/match', headers=auth(candidate))
    data = response.get_json()['data']
    assert data['overall'] == 76
    assert data['breakdown']['experience']['score'] == 30
    assert data['breakdown']['education']['applicable'] is False


def test_match_requires_candidate(client, jobs):
    response = client.get(f'/api/jobs/{jobs[0].id}/match')
    assert response.status_code == 401
    assert response.get_json()['code'] == 'UNAUTHORIZED'


def test_recommended_jobs(client, jobs, candidate):
    body = client.get('/api/jobs/recommended', headers=auth(candidate)).get_json()
    titles = [job['title'] for job in body['data']]
    # Candidate knows react and python
    assert set(titles) == {"Frontend Developer", "Python Backend Engineer", "React Native Developer"}
    scores = [job['match_score'] for job in body['data']]
    assert scores == sorted(scores, reverse=True)


class TestApplications:
    """Applying and withdrawing"""

    def test_apply_and_list(self, client, jobs, candidate):
        response = client.post(f'/api/jobs/{jobs[0].id}/apply', headers=auth(candidate),
                               json={'cover_letter': 'Keen to join'})
        assert response.status_code == 201
        application = response.get_json()['data']
        assert application['match_score'] == 76
        assert application['status'] == 'applied'

        body = client.get('/api/applications', headers=auth(candidate)).get_json()
        assert body['pagination']['total'] == 1
        assert body['data'][0]['job_title'] == "Frontend Developer"

        detail = client.get(f'/api/jobs/{jobs[0].id}', headers=auth(candidate)).get_json()
        assert detail['data']['has_applied'] is True

    def test_duplicate_application(self, client, jobs, candidate):
        client.post(f'/api/jobs/{jobs[0].id}/apply', headers=auth(candidate))
        response = client.post(f'/api/jobs/{jobs[0].id}/apply', headers=auth(candidate))
        assert response.status_code == 400
        assert response.get_json()['code'] == 'ALREADY_APPLIED'

    def test_apply_to_closed_job(self, client, jobs, candidate):
        response = client.post(f'/api/jobs/{jobs[3].id}/apply', headers=auth(candidate))
        assert response.status_code == 400
        assert response.get_json()['code'] == 'JOB_CLOSED'

    def test_apply_requires_candidate(self, client, jobs):
        assert client.post(f'/api/jobs/{jobs[0].id}/apply').status_code == 401

    def test_withdraw(self, client, jobs, candidate):
        application = client.post(f'/api/jobs/{jobs[0].id}/apply',
                                  headers=auth(candidate)).get_json()['data']

        response = client.post(f"/api/applications/{application['id']}/withdraw", headers=auth(candidate))
        assert response.status_code == 200

        response = client.post(f"/api/applications/{application['id']}/withdraw", headers=auth(candidate))
        assert response.get_json()['code'] == 'CANNOT_WITHDRAW'

        body = client.get('/api/applications?status=withdrawn', headers=auth(candidate)).get_json()
        assert body['pagination']['total'] == 1


class TestCandidates:
    """POST /api/candidates"""

    def test_create_and_fetch(self, client):
        response = client.post('/api/candidates', json={
            'name': 'Ravi',
            'email': 'ravi@example.com',
            'city': 'Pune',
            'skills': ['Python'],
            'total_experience': {'years': 4},
        })
        assert response.status_code == 201
        candidate_id = response.get_json()['data']['id']

        body = client.get(f'/api/candidates/{candidate_id}').get_json()
        assert body['data']['skills'][0]['name'] == 'Python'

    def test_duplicate_email(self, client, candidate):
        response = client.post('/api/candidates', json={'name': 'Other', 'email': 'asha@example.com'})
        assert response.status_code == 400
        assert response.get_json()['code'] == 'DUPLICATE_ERROR'

    def test_missing_candidate(self, client):
        assert client.get('/api/candidates/999').status_code == 404


class TestInterviewResults:
    """POST /api/interviews/results"""

    def test_summary_from_feedback(self, client):
        response = client.post('/api/interviews/results', json={
            'feedbacks': [
                {'score': 8, 'strengths': ['Clear'], 'improvements': ['Depth']},
                {'score': 7, 'strengths': ['Clear']},
            ],
        })
        data = response.get_json()['data']
        assert data['overall_score'] == 75
        assert data['strengths'] == ['Clear']
        assert all(70 <= value <= 79 for value in data['category_scores'].values())

    def test_summary_from_answers(self, client):
        response = client.post('/api/interviews/results', json={'answers': ['Short answer']})
        assert response.get_json()['data']['overall_score'] == 50

    def test_empty_interview(self, client):
        response = client.post('/api/interviews/results', json={})
        assert response.get_json()['data']['overall_score'] == 70

    def test_rejects_out_of_range_scores(self, client):
        response = client.post('/api/interviews/results', json={'feedbacks': [{'score': 11}]})
        assert response.status_code == 400

    def test_rejects_string_notes(self, client):
        response = client.post('/api/interviews/results', json={
            'feedbacks': [{'score': 8, 'strengths': 'Clear', 'improvements': 'More depth'}],
        })
        assert response.status_code == 400
        assert response.get_json()['code'] == 'VALIDATION_ERROR'
