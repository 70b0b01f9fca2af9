"""Call table routes: paginated JSON and CSV download."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import Response

from heatcheck.config import DEFAULT_TIMEFRAME, PAGE_SIZE
from heatcheck.process import extract_rows, load_calls
from heatcheck.search.filters import CallFilters
from heatcheck.storage.export import calls_to_csv
from heatcheck.web.deps import dashboard_for, get_client, get_db

router = APIRouter()


@router.get("/api/{slug}/calls")
async def calls_list(
    slug: str,
    timeframe: str = Query(DEFAULT_TIMEFRAME),
    date_from: str | None = Query(None, alias="from"),
    date_to: str | None = Query(None, alias="to"),
    search: str = Query(""),
    heat: str = Query("all"),
    outcome: str = Query("all"),
    page: int = Query(1, ge=1),
    page_size: int = Query(PAGE_SIZE, ge=0),
):
    """One page of calls with their extracted fields."""
    client = get_client(slug)
    filters = CallFilters(
        timeframe=timeframe,
        date_from=date_from,
        date_to=date_to,
        search=search,
        heat=heat,
        outcome=outcome,
        page=page,
        page_size=page_size,
    )
    dashboard = dashboard_for(client, filters)
    return {
        "calls": dashboard["calls"],
        "total": dashboard["total_matching"],
        "page": dashboard["page"],
        "pages": dashboard["pages"],
    }


@router.get("/api/{slug}/export.csv")
async def calls_export(
    slug: str,
    timeframe: str = Query(DEFAULT_TIMEFRAME),
    date_from: str | None = Query(None, alias="from"),
    date_to: str | None = Query(None, alias="to"),
    search: str = Query(""),
    heat: str = Query("all"),
    outcome: str = Query("all"),
):
    """Download every matching call as CSV."""
    client = get_client(slug)
    filters = CallFilters(
        timeframe=timeframe,
        date_from=date_from,
        date_to=date_to,
        search=search,
        heat=heat,
        outcome=outcome,
        page_size=0,
    )

    with get_db(client) as db:
        try:
            rows = load_calls(db, filters)
            pairs = filters.apply(extract_rows(rows))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    filename = f"sales_call_analysis_{datetime.now(timezone.utc):%Y-%m-%d}.csv"
    return Response(
        content=calls_to_csv(pairs),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
