"""Structured field extraction from freeform call analyses."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Optional

from heatcheck.extraction.patterns import (
    HEAT_SCORE_PATTERNS,
    NEED_PATTERNS,
    OBJECTION_PATTERNS,
    OUTCOME_PATTERNS,
    match_first,
)
from heatcheck.storage.models import ExtractedCall, RawCall

logger = logging.getLogger(__name__)

FIELDS = ("heat_score", "top_need", "main_objection", "outcome")


def extract_call(text: Optional[str]) -> ExtractedCall:
    """Pull heat score, top need, main objection and outcome from one analysis.

    Never raises. Fields that no pattern can find stay None.
    """
    if not isinstance(text, str) or not text.strip():
        return ExtractedCall()

    heat_score, _ = match_first(text, HEAT_SCORE_PATTERNS)
    top_need, _ = match_first(text, NEED_PATTERNS)
    main_objection, _ = match_first(text, OBJECTION_PATTERNS)
    outcome, _ = match_first(text, OUTCOME_PATTERNS)

    return ExtractedCall(
        heat_score=heat_score,
        top_need=top_need,
        main_objection=main_objection,
        outcome=outcome,
    )


@dataclass
class ExtractionStats:
    """How many calls each field could not be found in."""

    total: int = 0
    unanalyzed: int = 0
    misses: Counter = field(default_factory=Counter)

    def record(self, raw: RawCall, extracted: ExtractedCall):
        self.total += 1
        if not raw.analysis_text or not raw.analysis_text.strip():
            self.unanalyzed += 1
        for name in FIELDS:
            if getattr(extracted, name) is None:
                self.misses[name] += 1

    def found(self, name: str) -> int:
        return self.total - self.misses[name]

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "unanalyzed": self.unanalyzed,
            "misses": {name: self.misses[name] for name in FIELDS},
        }


def extract_calls(
    rows: Iterable[RawCall],
    stats: ExtractionStats | None = None,
) -> list[tuple[RawCall, ExtractedCall]]:
    """Extract every row, keeping input order."""
    if stats is None:
        stats = ExtractionStats()

    pairs = []
    for raw in rows:
        extracted = extract_call(raw.analysis_text)
        stats.record(raw, extracted)
        pairs.append((raw, extracted))

    if stats.total:
        logger.debug(
            "Extracted %d calls (%d without analysis); misses: %s",
            stats.total,
            stats.unanalyzed,
            dict(stats.misses),
        )
    return pairs
