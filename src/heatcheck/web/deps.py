"""Dependency helpers for web routes."""

from __future__ import annotations

from contextlib import contextmanager

from fastapi import HTTPException

from heatcheck.config import ClientConfig, load_client
from heatcheck.metrics.outcomes import OutcomeClassifier
from heatcheck.process import build_dashboard, load_calls
from heatcheck.search.filters import CallFilters
from heatcheck.storage.database import Database, DataUnavailableError
from heatcheck.storage.repository import Repository


def get_client(slug: str | None = None) -> ClientConfig:
    """Load client config by slug (or default), 404 if it is not registered."""
    try:
        return load_client(slug)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@contextmanager
def get_db(client: ClientConfig):
    """Open a client's existing database, 404 if there is none yet."""
    try:
        db = Database.open_existing(client.db_path)
    except DataUnavailableError as e:
        raise HTTPException(status_code=404, detail=str(e))
    with db:
        yield db


def dashboard_for(client: ClientConfig, filters: CallFilters, project: bool = False) -> dict:
    """Load, extract and aggregate a client's calls for the given filters.

    A filter that cannot be turned into a date window (e.g. a custom
    timeframe without bounds) is a 400.
    """
    with get_db(client) as db:
        try:
            rows = load_calls(db, filters)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        members = Repository(db).get_team_members()

    try:
        return build_dashboard(
            rows,
            OutcomeClassifier(client.conversion_keywords),
            filters,
            members,
            project=project,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
