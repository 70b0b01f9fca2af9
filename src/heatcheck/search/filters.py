"""Call filters: reporting windows, search, heat bands and outcome categories."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from heatcheck.config import DEFAULT_TIMEFRAME, PAGE_SIZE, TIMEFRAMES
from heatcheck.ingest.reader import normalize_timestamp
from heatcheck.metrics.outcomes import heat_band_matches, outcome_category_matches
from heatcheck.storage.models import ExtractedCall, RawCall

CallPair = tuple[RawCall, ExtractedCall]


def _bound(value: str, end_of_day: bool) -> str:
    """Normalize a user-supplied bound; bare dates cover the whole day."""
    text = value.strip()
    if len(text) == 10 and end_of_day:
        text += "T23:59:59"
    normalized = normalize_timestamp(text)
    if normalized is None:
        raise ValueError(f"Invalid date: {value}")
    return normalized


def date_window(
    timeframe: str,
    now: datetime | None = None,
    start: str | None = None,
    end: str | None = None,
) -> tuple[Optional[str], Optional[str]]:
    """Return (start, end) ISO bounds for a timeframe.

    "all" has no bounds. Unrecognized timeframes are treated as weekly.
    """
    if timeframe == "all":
        return None, None
    if timeframe == "custom":
        if not start or not end:
            raise ValueError("Custom timeframe requires start and end dates")
        return _bound(start, end_of_day=False), _bound(end, end_of_day=True)

    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    if timeframe == "daily":
        begin = now.replace(hour=0, minute=0, second=0, microsecond=0)
    elif timeframe == "monthly":
        begin = now - timedelta(days=30)
    else:
        begin = now - timedelta(days=7)
    return begin.isoformat(timespec="seconds"), now.isoformat(timespec="seconds")


@dataclass
class CallFilters:
    timeframe: str = DEFAULT_TIMEFRAME
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    search: str = ""
    heat: str = "all"  # all | high | medium | low
    outcome: str = "all"  # all | converted | interested | objection
    page: int = 1
    page_size: int = PAGE_SIZE

    @property
    def active_timeframe(self) -> str:
        """Timeframe actually applied: explicit bounds always mean "custom"."""
        if self.date_from or self.date_to:
            return "custom"
        return self.timeframe if self.timeframe in TIMEFRAMES else DEFAULT_TIMEFRAME

    def window(self, now: datetime | None = None) -> tuple[Optional[str], Optional[str]]:
        return date_window(self.active_timeframe, now=now, start=self.date_from, end=self.date_to)

    def matches(self, raw: RawCall, extracted: ExtractedCall) -> bool:
        """Search, heat band and outcome checks (the date window is applied at load time)."""
        if self.search:
            needle = self.search.lower()
            haystack = " ".join(
                value
                for value in (
                    raw.contact_name,
                    extracted.top_need,
                    extracted.main_objection,
                    extracted.outcome,
                )
                if value
            ).lower()
            if needle not in haystack:
                return False

        if not heat_band_matches(extracted.heat_score, self.heat):
            return False

        return outcome_category_matches(extracted.outcome, self.outcome)

    def apply(self, pairs: Iterable[CallPair]) -> list[CallPair]:
        return [(raw, extracted) for raw, extracted in pairs if self.matches(raw, extracted)]

    def page_count(self, total: int) -> int:
        return max(1, math.ceil(total / self.page_size)) if self.page_size > 0 else 1

    def paginate(self, pairs: list[CallPair]) -> list[CallPair]:
        if self.page_size <= 0:
            return list(pairs)
        page = max(1, self.page)
        start = (page - 1) * self.page_size
        return pairs[start:start + self.page_size]
