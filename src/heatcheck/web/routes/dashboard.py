"""Dashboard routes."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request
from fastapi.responses import RedirectResponse, Response

from heatcheck.config import DEFAULT_TIMEFRAME, TIMEFRAMES, list_clients
from heatcheck.search.filters import CallFilters
from heatcheck.web.app import templates
from heatcheck.web.deps import dashboard_for, get_client

router = APIRouter()


@router.get("/favicon.ico")
async def favicon():
    """Return empty response for favicon requests."""
    return Response(status_code=204)


@router.get("/")
async def index(request: Request):
    """Redirect to default client dashboard."""
    clients = list_clients()
    if not clients:
        return RedirectResponse("/api/clients", status_code=302)

    default = next((c for c in clients if c["is_default"]), clients[0])
    return RedirectResponse(f"/{default['slug']}", status_code=302)


@router.get("/{slug}")
async def dashboard(
    request: Request,
    slug: str,
    timeframe: str = Query(DEFAULT_TIMEFRAME),
    date_from: str | None = Query(None, alias="from"),
    date_to: str | None = Query(None, alias="to"),
    search: str = Query(""),
    heat: str = Query("all"),
    outcome: str = Query("all"),
    page: int = Query(1, ge=1),
    project: bool = Query(False),
):
    """Client dashboard: summary cards, team table and the call table."""
    client = get_client(slug)
    filters = CallFilters(
        timeframe=timeframe,
        date_from=date_from,
        date_to=date_to,
        search=search,
        heat=heat,
        outcome=outcome,
        page=page,
    )
    data = dashboard_for(client, filters, project=project)

    return templates.TemplateResponse(request, "pages/dashboard.html", {
        "current_client": client,
        "filters": filters,
        "timeframes": TIMEFRAMES,
        "dashboard": data,
        "project": project,
    })
