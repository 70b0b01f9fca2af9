"""Estimate mode: spread unassigned calls across known team members.

This is an illustration for demo dashboards, not a metric. Calls nobody was
assigned to are shared out in proportion to each member's real call volume,
and only part of them (``share``) is handed out. The authoritative
``AggregateResult`` is never touched; results come back as separate
``ProjectedMemberMetrics`` flagged ``is_estimate``.
"""

from __future__ import annotations

import math
from dataclasses import replace

from heatcheck.config import PROJECTION_CONVERSION_FACTOR, PROJECTION_SHARE
from heatcheck.metrics.aggregator import AggregateResult
from heatcheck.storage.models import ProjectedMemberMetrics


def project_unassigned(
    result: AggregateResult,
    share: float = PROJECTION_SHARE,
    conversion_factor: float = PROJECTION_CONVERSION_FACTOR,
) -> list[ProjectedMemberMetrics]:
    """Projected totals per member, busiest member first."""
    unassigned = result.cohort.unassigned_calls
    assigned_total = sum(m.total_calls for m in result.members.values())

    projections = []
    for metrics in result.member_list():
        additional = 0
        if unassigned and assigned_total:
            member_share = metrics.total_calls / assigned_total
            additional = math.floor(unassigned * member_share * share)
        projections.append(
            ProjectedMemberMetrics(
                member_id=metrics.member_id,
                base=replace(metrics),
                additional_calls=additional,
                additional_conversions=math.floor(additional * conversion_factor),
            )
        )
    return projections
