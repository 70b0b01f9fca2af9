"""Outcome classification and heat-score tiers."""

from __future__ import annotations

from typing import Optional

from heatcheck.config import CONVERSION_KEYWORDS, FUNNEL_STAGES, OUTCOME_CATEGORIES
from heatcheck.storage.models import ExtractedCall


class OutcomeClassifier:
    """Keyword matcher deciding whether an outcome counts as a conversion."""

    def __init__(self, keywords: tuple[str, ...] = CONVERSION_KEYWORDS):
        self.keywords = tuple(k.lower() for k in keywords)

    def is_converted(self, outcome: Optional[str]) -> bool:
        if not outcome:
            return False
        lower = outcome.lower()
        return any(keyword in lower for keyword in self.keywords)

    __call__ = is_converted


def outcome_category_matches(outcome: Optional[str], category: str) -> bool:
    """True if the outcome falls in the named filter category ("all" matches everything)."""
    if category == "all":
        return True
    keywords = OUTCOME_CATEGORIES.get(category)
    if keywords is None:
        raise ValueError(f"Unknown outcome category: {category}")
    lower = (outcome or "").lower()
    return any(keyword in lower for keyword in keywords)


def funnel_stages(call: ExtractedCall) -> list[str]:
    """Names of the FUNNEL_STAGES counters this call reaches."""
    text = " ".join(value for value in (call.outcome, call.main_objection) if value).lower()
    if not text:
        return []
    return [stage for stage, keywords in FUNNEL_STAGES.items() if any(k in text for k in keywords)]


def heat_tier(score: Optional[int]) -> str:
    """Badge tier for a heat score."""
    if score is None:
        return "unknown"
    if score >= 8:
        return "elite"
    if score >= 6:
        return "high"
    if score >= 4:
        return "medium"
    return "low"


def heat_band_matches(score: Optional[int], band: str) -> bool:
    """Call-table heat filter. Unknown scores only pass the "all" band."""
    if band == "all":
        return True
    if score is None:
        return False
    if band == "high":
        return score >= 8
    if band == "medium":
        return 6 <= score < 8
    if band == "low":
        return score < 6
    raise ValueError(f"Unknown heat band: {band}")
