"""Metrics routes: cohort summary and per-member performance."""

from __future__ import annotations

from fastapi import APIRouter, Query

from heatcheck.config import DEFAULT_TIMEFRAME
from heatcheck.search.filters import CallFilters
from heatcheck.web.deps import dashboard_for, get_client

router = APIRouter()


@router.get("/api/{slug}/metrics")
async def metrics_summary(
    slug: str,
    timeframe: str = Query(DEFAULT_TIMEFRAME),
    date_from: str | None = Query(None, alias="from"),
    date_to: str | None = Query(None, alias="to"),
):
    """Client-wide metrics and the ranked needs/objections."""
    client = get_client(slug)
    filters = CallFilters(timeframe=timeframe, date_from=date_from, date_to=date_to)
    dashboard = dashboard_for(client, filters)
    return {
        "client": client.slug,
        "timeframe": filters.active_timeframe,
        "cohort": dashboard["cohort"],
        "extraction": dashboard["extraction"],
    }


@router.get("/api/{slug}/team-performance")
async def team_performance(
    slug: str,
    timeframe: str = Query(DEFAULT_TIMEFRAME),
    date_from: str | None = Query(None, alias="from"),
    date_to: str | None = Query(None, alias="to"),
    project: bool = Query(False),
):
    """Per-member metrics. ``project=true`` adds a separate, labelled estimate."""
    client = get_client(slug)
    filters = CallFilters(timeframe=timeframe, date_from=date_from, date_to=date_to)
    dashboard = dashboard_for(client, filters, project=project)

    data = {
        "members": dashboard["members"],
        "unassigned_calls": dashboard["cohort"]["unassigned_calls"],
    }
    if project:
        data["projected"] = dashboard["projected"]
    return data
