"""HTTP API for the job portal."""

from .app import create_app, run_server

__all__ = ['create_app', 'run_server']
