"""Data models for HeatCheck."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

# Explicit "the text says there were none" value for objections
NO_SIGNIFICANT_OBJECTIONS = "No significant objections"

# Display placeholders, applied only at presentation time
NOT_SPECIFIED = "Not specified"
NONE_IDENTIFIED = "None identified"
NO_SCORE = "N/A"


def ratio_one_decimal(numerator: int, denominator: int) -> float:
    """numerator / denominator to one decimal, halves rounded up (6.25 -> 6.3)."""
    value = Decimal(numerator) / Decimal(denominator)
    return float(value.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def conversion_rate(converted: int, total: int) -> float:
    """Percentage of converted calls, one decimal. 0.0 for no calls."""
    if total <= 0:
        return 0.0
    return ratio_one_decimal(converted * 100, total)


@dataclass
class RawCall:
    id: str
    analysis_text: Optional[str]
    created_at: str
    team_member_id: Optional[str] = None
    contact_name: Optional[str] = None
    direction: Optional[str] = None  # "inbound" | "outbound"
    call_source: Optional[str] = None  # "ghl" | "zoom"


@dataclass
class TeamMember:
    id: str
    name: str
    role: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class ExtractedCall:
    """Structured fields pulled out of one analysis text.

    ``None`` means the field was not found. A heat score of ``0`` is a real
    score, distinct from ``None``.
    """

    heat_score: Optional[int] = None
    top_need: Optional[str] = None
    main_objection: Optional[str] = None
    outcome: Optional[str] = None

    @property
    def score_label(self) -> str:
        return NO_SCORE if self.heat_score is None else str(self.heat_score)

    @property
    def need_label(self) -> str:
        return self.top_need or NOT_SPECIFIED

    @property
    def objection_label(self) -> str:
        return self.main_objection or NONE_IDENTIFIED

    @property
    def outcome_label(self) -> str:
        return self.outcome or NOT_SPECIFIED


@dataclass
class RankedItem:
    value: str
    count: int


@dataclass
class MemberMetrics:
    """Running sums for one team member (or a whole cohort).

    Only sums are stored so two partials for the same member can be merged
    by addition.
    """

    member_id: Optional[str] = None
    total_calls: int = 0
    converted_calls: int = 0
    scored_calls: int = 0
    heat_score_sum: int = 0
    appointment_calls: int = 0
    price_presentations: int = 0
    demo_calls: int = 0
    closed_calls: int = 0

    @property
    def average_heat_score(self) -> Optional[float]:
        if self.scored_calls == 0:
            return None
        return ratio_one_decimal(self.heat_score_sum, self.scored_calls)

    @property
    def conversion_rate(self) -> float:
        return conversion_rate(self.converted_calls, self.total_calls)

    def merge(self, other: MemberMetrics) -> MemberMetrics:
        return MemberMetrics(
            member_id=self.member_id if self.member_id is not None else other.member_id,
            total_calls=self.total_calls + other.total_calls,
            converted_calls=self.converted_calls + other.converted_calls,
            scored_calls=self.scored_calls + other.scored_calls,
            heat_score_sum=self.heat_score_sum + other.heat_score_sum,
            appointment_calls=self.appointment_calls + other.appointment_calls,
            price_presentations=self.price_presentations + other.price_presentations,
            demo_calls=self.demo_calls + other.demo_calls,
            closed_calls=self.closed_calls + other.closed_calls,
        )


@dataclass
class CohortMetrics(MemberMetrics):
    """Client-wide metrics, including calls no member was assigned to."""

    unassigned_calls: int = 0
    top_needs: list[RankedItem] = field(default_factory=list)
    top_objections: list[RankedItem] = field(default_factory=list)

    def top(self, n: int) -> tuple[list[RankedItem], list[RankedItem]]:
        return self.top_needs[:n], self.top_objections[:n]


@dataclass
class ProjectedMemberMetrics:
    """Estimated member totals after spreading unassigned calls.

    Never used for real reporting; ``base`` holds the authoritative numbers.
    """

    member_id: str
    base: MemberMetrics
    additional_calls: int = 0
    additional_conversions: int = 0
    is_estimate: bool = True

    @property
    def projected_total_calls(self) -> int:
        return self.base.total_calls + self.additional_calls

    @property
    def projected_converted_calls(self) -> int:
        return self.base.converted_calls + self.additional_conversions

    @property
    def projected_conversion_rate(self) -> float:
        return conversion_rate(self.projected_converted_calls, self.projected_total_calls)
