"""Command-line interface for the job portal."""
import logging
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from .config import Config, load_seed_data
from .database import Database
from .domain.candidate import CandidateProfile
from .domain.job import JobListing
from .domain.matching import create_match_scorer
from .errors import AppError
from .filters import FilterCriteria, build_job_query, resolve_sort, SORT_OPTIONS
from .pagination import paginate, page_offset
from .web.app import create_app, run_server

console = Console()


def _open_database(ctx: click.Context) -> Database:
    settings: Config = ctx.obj['config']
    db_config = settings.get_database_config()
    return Database(db_config['url'], echo=db_config['echo'])


@click.group()
@click.option('--env-file', type=click.Path(dir_okay=False), default=None, help='Path to a .env file')
@click.pass_context
def cli(ctx: click.Context, env_file: Optional[str]):
    """Job portal - job search, matching and applications."""
    settings = Config(env_file)
    logging.basicConfig(level=settings.get_logging_config()['level'])
    ctx.ensure_object(dict)
    ctx.obj['config'] = settings


@cli.command('init-db')
@click.pass_context
def init_db(ctx: click.Context):
    """Create the database tables."""
    _open_database(ctx)
    console.print("[green]Database ready[/green]")


@cli.command()
@click.argument('seed_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def seed(ctx: click.Context, seed_file: Path):
    """Load jobs and candidates from a YAML seed file."""
    db = _open_database(ctx)
    try:
        data = load_seed_data(seed_file)
        jobs = [JobListing.from_dict(item) for item in data['jobs']]
        candidates = [CandidateProfile.from_dict(item) for item in data['candidates']]
    except (ValueError, AppError) as e:
        errors = getattr(e, 'errors', None)
        console.print(f"[red]Invalid seed file: {e}[/red]")
        for error in errors or []:
            console.print(f"[red]  {error['field']}: {error['message']}[/red]")
        raise click.exceptions.Exit(1)

    added_jobs = db.add_jobs(jobs)
    for candidate in candidates:
        db.add_candidate(candidate)
    console.print(f"[green]Added {added_jobs} jobs and {len(candidates)} candidates[/green]")


@cli.command()
@click.option('--search', help='Free-text search term')
@click.option('--employment-type', 'employment_types', multiple=True, help='Employment type (repeatable)')
@click.option('--work-mode', 'work_modes', multiple=True, help='Work mode (repeatable)')
@click.option('--location', help='City substring')
@click.option('--skill', 'skills', multiple=True, help='Skill name (repeatable)')
@click.option('--experience-min', type=int, help='Lowest minimum experience')
@click.option('--experience-max', type=int, help='Highest minimum experience')
@click.option('--salary-min', help='Salary floor, e.g. 600000 or 600k')
@click.option('--salary-max', help='Salary ceiling')
@click.option('--posted-within', type=int, help='Only jobs posted in the last N days')
@click.option('--sort', 'sort_by', type=click.Choice(list(SORT_OPTIONS)), default='newest')
@click.option('--page', type=click.IntRange(min=1), default=1)
@click.option('--limit', type=click.IntRange(min=1), default=20)
@click.pass_context
def jobs(ctx: click.Context, search: Optional[str], employment_types: Tuple[str, ...],
         work_modes: Tuple[str, ...], location: Optional[str], skills: Tuple[str, ...],
         experience_min: Optional[int], experience_max: Optional[int], salary_min: Optional[str],
         salary_max: Optional[str], posted_within: Optional[int], sort_by: str, page: int, limit: int):
    """List active jobs matching the given filters."""
    db = _open_database(ctx)
    criteria = FilterCriteria.from_args({
        'search': search,
        'employmentType': list(employment_types),
        'workMode': list(work_modes),
        'location': location,
        'skills': list(skills),
        'experienceMin': experience_min,
        'experienceMax': experience_max,
        'salaryMin': salary_min,
        'salaryMax': salary_max,
        'postedWithin': posted_within,
    })
    query = build_job_query(criteria)
    results = db.search_jobs(query, resolve_sort(sort_by), limit=limit, offset=page_offset(page, limit))
    envelope = paginate(results, db.count_jobs(query), page, limit)

    info = envelope['pagination']
    table = Table(title=f"Jobs (page {info['page']}/{info['totalPages']}, {info['total']} total)")
    table.add_column("ID", style="cyan")
    table.add_column("Title", style="green")
    table.add_column("Type")
    table.add_column("Mode")
    table.add_column("City")
    table.add_column("Salary", style="magenta")
    table.add_column("Skills", style="blue")
    for job in envelope['data']:
        table.add_row(
            str(job.id),
            job.title,
            job.employment_type.value,
            job.work_mode.value,
            job.location.city or "-",
            job.salary_display,
            ", ".join(job.skill_names),
        )
    console.print(table)


@cli.command()
@click.argument('job_id', type=int)
@click.argument('candidate_id', type=int)
@click.pass_context
def score(ctx: click.Context, job_id: int, candidate_id: int):
    """Show the match score between a job and a candidate."""
    db = _open_database(ctx)
    job = db.get_job(job_id)
    candidate = db.get_candidate(candidate_id)
    if job is None or candidate is None:
        missing = f"job {job_id}" if job is None else f"candidate {candidate_id}"
        console.print(f"[red]No {missing} found[/red]")
        raise click.exceptions.Exit(1)

    result = create_match_scorer().breakdown(job, candidate)
    table = Table(title=f"{candidate.name} vs {job.title}")
    table.add_column("Dimension", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Max", justify="right")
    for dimension in result.breakdown.values():
        if dimension.applicable:
            table.add_row(dimension.name, f"{dimension.score:.1f}", str(dimension.max_score))
        else:
            table.add_row(dimension.name, "skipped", "-")
    console.print(table)
    console.print(f"[bold green]Overall match: {result.overall}%[/bold green]")


@cli.command()
@click.pass_context
def expire(ctx: click.Context):
    """Mark active jobs past their deadline as expired."""
    db = _open_database(ctx)
    count = db.expire_jobs()
    console.print(f"[yellow]Expired {count} jobs[/yellow]")


@cli.command()
@click.option('--host', default=None, help='Bind address (defaults to WEB_HOST)')
@click.option('--port', type=int, default=None, help='Port (defaults to WEB_PORT)')
@click.option('--debug/--no-debug', default=None)
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int], debug: Optional[bool]):
    """Run the REST API."""
    settings: Config = ctx.obj['config']
    web = settings.get_web_config()
    app = create_app(settings, _open_database(ctx))
    run_server(
        app,
        host=host or web['host'],
        port=port or web['port'],
        debug=web['debug'] if debug is None else debug,
    )


if __name__ == '__main__':
    cli()
