"""Tests for the job portal CLI."""
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from jobportal.cli import cli

SEED_FILE = Path(__file__).parent.parent / "data" / "seed.yaml"


@pytest.fixture
def runner(tmp_path, monkeypatch):
    """CLI runner backed by a throwaway SQLite file."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv('DATABASE_URL', f"sqlite:///{tmp_path / 'portal.db'}")
    monkeypatch.setenv('LOG_LEVEL', 'WARNING')
    return CliRunner()


@pytest.fixture
def seeded(runner):
    result = runner.invoke(cli, ['seed', str(SEED_FILE)])
    assert result.exit_code == 0, result.output
    return runner


class TestCLICommands:
    """Test CLI command registration."""

    def test_commands_registered(self):
        assert {'init-db', 'seed', 'jobs', 'score', 'expire', 'serve'} <= set(cli.commands)

    def test_help(self):
        result = CliRunner().invoke(cli, ['--help'])
        assert result.exit_code == 0
        assert 'Job portal' in result.output


def test_init_db(runner, tmp_path):
    result = runner.invoke(cli, ['init-db'])
    assert result.exit_code == 0
    assert 'Database ready' in result.output
    assert (tmp_path / 'portal.db').exists()


def test_seed(seeded):
    result = seeded.invoke(cli, ['jobs'])
    assert result.exit_code == 0
    assert '3 total' in result.output


def test_seed_reports_invalid_jobs(runner, tmp_path):
    bad_seed = tmp_path / "bad.yaml"
    bad_seed.write_text("jobs:\n  - title: ''\n    description: Something\n")

    result = runner.invoke(cli, ['seed', str(bad_seed)])

    assert result.exit_code == 1
    assert 'Invalid seed file' in result.output
    assert 'title: is required' in result.output


def test_jobs_filters(seeded):
    result = seeded.invoke(cli, ['jobs', '--work-mode', 'remote'])
    assert result.exit_code == 0
    assert '1 total' in result.output

    result = seeded.invoke(cli, ['jobs', '--skill', 'selenium', '--skill', 'react'])
    assert '2 total' in result.output


def test_jobs_rejects_unknown_sort(seeded):
    result = seeded.invoke(cli, ['jobs', '--sort', 'bogus'])
    assert result.exit_code != 0


def test_score(seeded):
    result = seeded.invoke(cli, ['score', '1', '1'])
    assert result.exit_code == 0
    assert 'Overall match: 76%' in result.output
    assert 'skipped' in result.output


def test_score_missing_records(seeded):
    result = seeded.invoke(cli, ['score', '99', '1'])
    assert result.exit_code == 1
    assert 'No job 99 found' in result.output


def test_expire(seeded):
    result = seeded.invoke(cli, ['expire'])
    assert result.exit_code == 0
    assert 'Expired 0 jobs' in result.output


def test_serve_uses_web_config(runner, monkeypatch):
    monkeypatch.setenv('WEB_PORT', '8123')
    with patch('jobportal.cli.run_server') as run_server:
        result = runner.invoke(cli, ['serve', '--host', '0.0.0.0'])

    assert result.exit_code == 0, result.output
    _, kwargs = run_server.call_args
    assert kwargs == {'host': '0.0.0.0', 'port': 8123, 'debug': False}
