"""Tests for reporting windows and call filters."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from heatcheck.search.filters import CallFilters, date_window
from heatcheck.storage.models import ExtractedCall, RawCall

NOW = datetime(2026, 3, 10, 15, 30, tzinfo=timezone.utc)


def pair(call_id="c", contact=None, score=None, need=None, objection=None, outcome=None):
    raw = RawCall(id=call_id, analysis_text="", created_at="2026-03-01T00:00:00+00:00", contact_name=contact)
    return raw, ExtractedCall(heat_score=score, top_need=need, main_objection=objection, outcome=outcome)


class TestDateWindow:
    def test_all(self):
        assert date_window("all", now=NOW) == (None, None)

    def test_daily(self):
        assert date_window("daily", now=NOW) == (
            "2026-03-10T00:00:00+00:00",
            "2026-03-10T15:30:00+00:00",
        )

    def test_weekly(self):
        start, end = date_window("weekly", now=NOW)
        assert start == "2026-03-03T15:30:00+00:00"
        assert end == "2026-03-10T15:30:00+00:00"

    def test_monthly(self):
        start, _ = date_window("monthly", now=NOW)
        assert start == "2026-02-08T15:30:00+00:00"

    def test_custom(self):
        assert date_window("custom", start="2026-03-01", end="2026-03-05") == (
            "2026-03-01T00:00:00+00:00",
            "2026-03-05T23:59:59+00:00",
        )

    def test_custom_requires_bounds(self):
        with pytest.raises(ValueError, match="requires start and end"):
            date_window("custom", start="2026-03-01")

    def test_custom_invalid_date(self):
        with pytest.raises(ValueError, match="Invalid date"):
            date_window("custom", start="yesterday", end="2026-03-05")

    def test_unknown_timeframe_is_weekly(self):
        assert CallFilters(timeframe="fortnightly").window(now=NOW) == date_window("weekly", now=NOW)

    def test_bounds_imply_custom(self):
        filters = CallFilters(date_from="2026-03-01", date_to="2026-03-05")
        assert filters.active_timeframe == "custom"
        assert filters.window(now=NOW) == date_window("custom", start="2026-03-01", end="2026-03-05")

    def test_bounds_override_named_timeframe(self):
        filters = CallFilters(timeframe="all", date_from="2026-03-01", date_to="2026-03-05")
        assert filters.window(now=NOW) == ("2026-03-01T00:00:00+00:00", "2026-03-05T23:59:59+00:00")

    def test_single_bound_is_an_error(self):
        with pytest.raises(ValueError, match="requires start and end"):
            CallFilters(date_from="2026-03-01").window(now=NOW)

    def test_active_timeframe_without_bounds(self):
        assert CallFilters(timeframe="daily").active_timeframe == "daily"
        assert CallFilters(timeframe="fortnightly").active_timeframe == "weekly"


class TestCallFilters:
    def test_search_is_case_insensitive(self):
        filters = CallFilters(search="ALICE")
        assert filters.matches(*pair(contact="Alice Smith"))
        assert not filters.matches(*pair(contact="Bob"))

    def test_search_covers_extracted_fields(self):
        filters = CallFilters(search="insurance")
        assert filters.matches(*pair(need="Insurance verification"))
        assert filters.matches(*pair(objection="Insurance won't cover it"))
        assert not filters.matches(*pair(outcome="Closed"))

    def test_heat_band(self):
        filters = CallFilters(heat="high")
        assert filters.matches(*pair(score=9))
        assert not filters.matches(*pair(score=7))
        assert not filters.matches(*pair(score=None))

    def test_outcome_category(self):
        filters = CallFilters(outcome="converted")
        assert filters.matches(*pair(outcome="Contract signed"))
        assert not filters.matches(*pair(outcome="Follow-up"))

    def test_apply(self):
        pairs = [pair("a", score=9), pair("b", score=3), pair("c", score=8)]
        kept = CallFilters(heat="high").apply(pairs)
        assert [raw.id for raw, _ in kept] == ["a", "c"]


class TestPagination:
    PAIRS = [pair(str(i)) for i in range(30)]

    def test_first_page(self):
        page = CallFilters(page=1, page_size=25).paginate(self.PAIRS)
        assert len(page) == 25
        assert page[0][0].id == "0"

    def test_last_page(self):
        page = CallFilters(page=2, page_size=25).paginate(self.PAIRS)
        assert [raw.id for raw, _ in page] == [str(i) for i in range(25, 30)]

    def test_page_count(self):
        filters = CallFilters(page_size=25)
        assert filters.page_count(30) == 2
        assert filters.page_count(25) == 1
        assert filters.page_count(0) == 1

    def test_page_size_zero_returns_everything(self):
        filters = CallFilters(page_size=0)
        assert len(filters.paginate(self.PAIRS)) == 30
        assert filters.page_count(30) == 1
