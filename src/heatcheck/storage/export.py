"""CSV and JSON export for HeatCheck data."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Iterable, Optional

from heatcheck.metrics.aggregator import AggregateResult
from heatcheck.metrics.outcomes import heat_tier
from heatcheck.storage.models import (
    CohortMetrics,
    ExtractedCall,
    MemberMetrics,
    ProjectedMemberMetrics,
    RankedItem,
    RawCall,
)

CSV_HEADERS = [
    "Date",
    "Prospect Name",
    "HeatCheck Score",
    "Top Need/Pain Point",
    "Main Objection",
    "Call Outcome",
    "Call ID",
]


def call_record(
    raw: RawCall,
    extracted: ExtractedCall,
    member_names: Optional[dict[str, str]] = None,
) -> dict:
    """Plain dict for one call. Missing fields stay None for the consumer to label."""
    member_names = member_names or {}
    return {
        "id": raw.id,
        "created_at": raw.created_at,
        "prospect_name": raw.contact_name,
        "direction": raw.direction,
        "call_source": raw.call_source,
        "team_member_id": raw.team_member_id,
        "team_member_name": member_names.get(raw.team_member_id) if raw.team_member_id else None,
        "heat_score": extracted.heat_score,
        "heat_tier": heat_tier(extracted.heat_score),
        "top_need": extracted.top_need,
        "main_objection": extracted.main_objection,
        "outcome": extracted.outcome,
    }


def metrics_record(metrics: MemberMetrics, member_names: Optional[dict[str, str]] = None) -> dict:
    member_names = member_names or {}
    record = {
        "total_calls": metrics.total_calls,
        "converted_calls": metrics.converted_calls,
        "scored_calls": metrics.scored_calls,
        "average_heat_score": metrics.average_heat_score,
        "conversion_rate": metrics.conversion_rate,
        "appointment_calls": metrics.appointment_calls,
        "price_presentations": metrics.price_presentations,
        "demo_calls": metrics.demo_calls,
        "closed_calls": metrics.closed_calls,
    }
    if not isinstance(metrics, CohortMetrics):
        record = {
            "member_id": metrics.member_id,
            "member_name": member_names.get(metrics.member_id, metrics.member_id),
            **record,
        }
    return record


def _ranked(items: list[RankedItem]) -> list[dict]:
    return [{"value": item.value, "count": item.count} for item in items]


def cohort_record(cohort: CohortMetrics, top_n: Optional[int] = None) -> dict:
    needs, objections = cohort.top_needs, cohort.top_objections
    if top_n is not None:
        needs, objections = cohort.top(top_n)
    return {
        **metrics_record(cohort),
        "unassigned_calls": cohort.unassigned_calls,
        "top_needs": _ranked(needs),
        "top_objections": _ranked(objections),
    }


def projection_record(projection: ProjectedMemberMetrics, member_names: Optional[dict[str, str]] = None) -> dict:
    member_names = member_names or {}
    return {
        "member_id": projection.member_id,
        "member_name": member_names.get(projection.member_id, projection.member_id),
        "is_estimate": projection.is_estimate,
        "actual_total_calls": projection.base.total_calls,
        "additional_calls": projection.additional_calls,
        "projected_total_calls": projection.projected_total_calls,
        "projected_converted_calls": projection.projected_converted_calls,
        "projected_conversion_rate": projection.projected_conversion_rate,
    }


def _csv_date(created_at: str) -> str:
    return created_at.replace("T", " ").split("+")[0]


def calls_to_csv(pairs: Iterable[tuple[RawCall, ExtractedCall]]) -> str:
    """CSV text with a UTF-8 BOM so spreadsheet apps pick the right encoding."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADERS)
    for raw, extracted in pairs:
        writer.writerow([
            _csv_date(raw.created_at),
            raw.contact_name or "Unknown",
            extracted.score_label,
            extracted.need_label,
            extracted.objection_label,
            extracted.outcome_label,
            raw.id,
        ])
    return "\ufeff" + buffer.getvalue()


def export_calls_csv(pairs: Iterable[tuple[RawCall, ExtractedCall]], path: Path) -> int:
    """Write the call table to a CSV file. Returns the number of rows."""
    pairs = list(pairs)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(calls_to_csv(pairs), encoding="utf-8")
    return len(pairs)


def export_metrics_json(
    result: AggregateResult,
    path: Path,
    member_names: Optional[dict[str, str]] = None,
    projections: Optional[list[ProjectedMemberMetrics]] = None,
):
    """Write cohort and member metrics (and any labelled projection) as JSON."""
    data = {
        "cohort": cohort_record(result.cohort),
        "members": [metrics_record(m, member_names) for m in result.member_list()],
    }
    if projections is not None:
        data["projected"] = [projection_record(p, member_names) for p in projections]

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
