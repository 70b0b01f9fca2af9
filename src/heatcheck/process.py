"""Dashboard assembly: load calls, extract, filter, aggregate.

The CLI and the web routes both go through ``build_dashboard`` so every
surface shows the same numbers from the same extraction.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

from heatcheck.config import TOP_N
from heatcheck.extraction.extractor import ExtractionStats, extract_call, extract_calls
from heatcheck.metrics.aggregator import AggregateResult, aggregate
from heatcheck.metrics.outcomes import OutcomeClassifier
from heatcheck.metrics.projection import project_unassigned
from heatcheck.search.filters import CallFilters
from heatcheck.storage.database import Database
from heatcheck.storage.export import call_record, cohort_record, metrics_record, projection_record
from heatcheck.storage.models import ExtractedCall, MemberMetrics, RawCall, TeamMember
from heatcheck.storage.repository import Repository

log = logging.getLogger(__name__)


def load_calls(db: Database, filters: CallFilters | None = None, now: datetime | None = None) -> list[RawCall]:
    """Calls inside the filter's date window."""
    filters = filters or CallFilters(timeframe="all")
    date_from, date_to = filters.window(now=now)
    return Repository(db).get_calls(date_from=date_from, date_to=date_to)


def extract_rows(
    rows: list[RawCall],
    workers: int | None = None,
    stats: ExtractionStats | None = None,
) -> list[tuple[RawCall, ExtractedCall]]:
    """Extract every row, optionally across a thread pool. Order is preserved."""
    if not workers or workers <= 1:
        return extract_calls(rows, stats=stats)

    stats = stats if stats is not None else ExtractionStats()
    with ThreadPoolExecutor(max_workers=workers) as pool:
        extracted = list(pool.map(extract_call, [r.analysis_text for r in rows]))
    pairs = list(zip(rows, extracted))
    for raw, call in pairs:
        stats.record(raw, call)
    return pairs


def aggregate_pairs(
    pairs: list[tuple[RawCall, ExtractedCall]],
    classifier: OutcomeClassifier | None = None,
) -> AggregateResult:
    return aggregate(
        ((extracted, raw.team_member_id) for raw, extracted in pairs),
        is_converted=classifier,
    )


def build_dashboard(
    rows: list[RawCall],
    classifier: OutcomeClassifier | None = None,
    filters: CallFilters | None = None,
    members: list[TeamMember] | None = None,
    project: bool = False,
    workers: int | None = None,
    top_n: int = TOP_N,
) -> dict:
    """Everything a dashboard view needs, as plain dicts.

    ``rows`` should already be limited to the reporting window. Metrics are
    computed over every call that passes the search/heat/outcome filters;
    only the ``calls`` list is paginated. The ``projected`` key is present
    only when ``project`` is set, and is kept apart from ``members``.
    """
    filters = filters or CallFilters(timeframe="all")
    member_names = {m.id: m.name for m in members or []}

    stats = ExtractionStats()
    pairs = filters.apply(extract_rows(rows, workers=workers, stats=stats))
    result = aggregate_pairs(pairs, classifier)

    page = filters.paginate(pairs)
    dashboard = {
        "calls": [call_record(raw, extracted, member_names) for raw, extracted in page],
        "total_matching": len(pairs),
        "page": max(1, filters.page),
        "pages": filters.page_count(len(pairs)),
        "cohort": cohort_record(result.cohort, top_n=top_n),
        "members": [metrics_record(m, member_names) for m in _member_rows(result, members)],
        "extraction": stats.to_dict(),
    }
    if project:
        dashboard["projected"] = [
            projection_record(p, member_names) for p in project_unassigned(result)
        ]

    log.debug(
        "Dashboard built: %d calls loaded, %d matching filters",
        len(rows),
        len(pairs),
    )
    return dashboard


def _member_rows(result: AggregateResult, members: list[TeamMember] | None) -> list[MemberMetrics]:
    """Members with calls first, then active roster members who had none."""
    rows = result.member_list()
    for member in members or []:
        if member.is_active and member.id not in result.members:
            rows.append(MemberMetrics(member_id=member.id))
    return rows
