"""Fold extracted calls into per-member and client-wide metrics.

Everything here is built from running sums, so partial results over
disjoint batches of calls can be merged with ``MetricsAccumulator.merge``
and give the same answer as a single pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Optional

from heatcheck.metrics.outcomes import OutcomeClassifier, funnel_stages
from heatcheck.storage.models import (
    NO_SIGNIFICANT_OBJECTIONS,
    CohortMetrics,
    ExtractedCall,
    MemberMetrics,
    RankedItem,
)

ConversionPredicate = Callable[[Optional[str]], bool]


class FrequencyTable:
    """Counts values case-insensitively, remembering first-seen order and spelling."""

    def __init__(self, exclude: Iterable[str] = ()):
        self.exclude = {value.casefold() for value in exclude}
        self._entries: dict[str, list] = {}  # key -> [display value, count]

    def add(self, value: Optional[str], count: int = 1):
        if value is None:
            return
        key = value.casefold()
        if key in self.exclude:
            return
        entry = self._entries.get(key)
        if entry is None:
            self._entries[key] = [value, count]
        else:
            entry[1] += count

    def merge(self, other: FrequencyTable) -> FrequencyTable:
        merged = FrequencyTable()
        merged.exclude = self.exclude | other.exclude
        for table in (self, other):
            for value, count in table._entries.values():
                merged.add(value, count)
        return merged

    def ranked(self) -> list[RankedItem]:
        """Most frequent first; ties keep first-seen order (sorted() is stable)."""
        entries = sorted(self._entries.values(), key=lambda entry: -entry[1])
        return [RankedItem(value=value, count=count) for value, count in entries]

    def __len__(self):
        return len(self._entries)


@dataclass
class AggregateResult:
    members: dict[str, MemberMetrics] = field(default_factory=dict)
    cohort: CohortMetrics = field(default_factory=CohortMetrics)

    def member_list(self) -> list[MemberMetrics]:
        """Members ordered by call volume, busiest first."""
        return sorted(self.members.values(), key=lambda m: -m.total_calls)


def _record(metrics: MemberMetrics, call: ExtractedCall, converted: bool):
    metrics.total_calls += 1
    if converted:
        metrics.converted_calls += 1
    if call.heat_score is not None:
        metrics.scored_calls += 1
        metrics.heat_score_sum += call.heat_score
    for stage in funnel_stages(call):
        setattr(metrics, stage, getattr(metrics, stage) + 1)


class MetricsAccumulator:
    """Mergeable fold state behind ``aggregate``."""

    def __init__(self, is_converted: ConversionPredicate | None = None):
        self.is_converted = is_converted or OutcomeClassifier()
        self.members: dict[str, MemberMetrics] = {}
        self.cohort = MemberMetrics()
        self.unassigned_calls = 0
        self.needs = FrequencyTable()
        self.objections = FrequencyTable(exclude=[NO_SIGNIFICANT_OBJECTIONS])

    def add(self, call: ExtractedCall, member_id: Optional[str] = None):
        converted = bool(self.is_converted(call.outcome))
        _record(self.cohort, call, converted)
        if member_id is None:
            self.unassigned_calls += 1
        else:
            metrics = self.members.get(member_id)
            if metrics is None:
                metrics = self.members[member_id] = MemberMetrics(member_id=member_id)
            _record(metrics, call, converted)
        self.needs.add(call.top_need)
        self.objections.add(call.main_objection)

    def merge(self, other: MetricsAccumulator) -> MetricsAccumulator:
        """Combine two partials. Neither input is modified."""
        merged = MetricsAccumulator(self.is_converted)
        merged.cohort = self.cohort.merge(other.cohort)
        merged.unassigned_calls = self.unassigned_calls + other.unassigned_calls
        merged.members = {key: replace(value) for key, value in self.members.items()}
        for member_id, metrics in other.members.items():
            existing = merged.members.get(member_id)
            merged.members[member_id] = existing.merge(metrics) if existing else replace(metrics)
        merged.needs = self.needs.merge(other.needs)
        merged.objections = self.objections.merge(other.objections)
        return merged

    def result(self) -> AggregateResult:
        cohort = CohortMetrics(
            total_calls=self.cohort.total_calls,
            converted_calls=self.cohort.converted_calls,
            scored_calls=self.cohort.scored_calls,
            heat_score_sum=self.cohort.heat_score_sum,
            appointment_calls=self.cohort.appointment_calls,
            price_presentations=self.cohort.price_presentations,
            demo_calls=self.cohort.demo_calls,
            closed_calls=self.cohort.closed_calls,
            unassigned_calls=self.unassigned_calls,
            top_needs=self.needs.ranked(),
            top_objections=self.objections.ranked(),
        )
        members = {key: replace(value) for key, value in self.members.items()}
        return AggregateResult(members=members, cohort=cohort)


def aggregate(
    calls: Iterable[tuple[ExtractedCall, Optional[str]]],
    is_converted: ConversionPredicate | None = None,
) -> AggregateResult:
    """Compute member and cohort metrics in one pass.

    Calls without a member count toward the cohort only. Empty input gives
    zeroed metrics with no average.
    """
    accumulator = MetricsAccumulator(is_converted)
    for call, member_id in calls:
        accumulator.add(call, member_id)
    return accumulator.result()
