"""Tests for member and cohort aggregation."""

from __future__ import annotations

from dataclasses import replace

from heatcheck.metrics.aggregator import FrequencyTable, MetricsAccumulator, aggregate
from heatcheck.metrics.outcomes import OutcomeClassifier
from heatcheck.storage.models import (
    NO_SIGNIFICANT_OBJECTIONS,
    ExtractedCall,
    MemberMetrics,
    RankedItem,
    conversion_rate,
)


def call(score=None, need=None, objection=None, outcome=None):
    return ExtractedCall(heat_score=score, top_need=need, main_objection=objection, outcome=outcome)


class TestAggregate:
    def test_empty(self):
        result = aggregate([])
        assert result.members == {}
        assert result.cohort.total_calls == 0
        assert result.cohort.average_heat_score is None
        assert result.cohort.conversion_rate == 0.0
        assert result.cohort.top_needs == []
        assert result.cohort.top_objections == []

    def test_unknown_scores_excluded_from_average(self):
        result = aggregate([(call(8), "m1"), (call(None), "m1"), (call(4), "m1")])
        assert result.cohort.average_heat_score == 6.0
        assert result.members["m1"].average_heat_score == 6.0
        assert result.members["m1"].total_calls == 3
        assert result.members["m1"].scored_calls == 2

    def test_out_of_range_scores_averaged(self):
        result = aggregate([(call(12), None), (call(-1), None)])
        assert result.cohort.average_heat_score == 5.5

    def test_conversion_rate(self):
        calls = [
            (call(outcome="Contract signed"), "m1"),
            (call(outcome="Demo booked"), "m1"),
            (call(outcome="Thinking about it"), "m2"),
            (call(), "m2"),
        ]
        result = aggregate(calls)
        assert result.cohort.converted_calls == 2
        assert result.cohort.conversion_rate == 50.0
        assert result.members["m1"].conversion_rate == 100.0
        assert result.members["m2"].conversion_rate == 0.0

    def test_averages_round_half_up(self):
        result = aggregate([(call(score), "m1") for score in (6, 6, 6, 7)])
        assert result.members["m1"].average_heat_score == 6.3
        assert result.cohort.average_heat_score == 6.3
        assert MemberMetrics(scored_calls=4, heat_score_sum=29).average_heat_score == 7.3

    def test_conversion_rate_rounds_half_up(self):
        assert conversion_rate(1, 16) == 6.3
        assert conversion_rate(1, 8) == 12.5
        assert conversion_rate(0, 0) == 0.0

    def test_funnel_counters(self):
        calls = [
            (call(objection="Price is too high", outcome="Contract signed"), "m1"),
            (call(outcome="Demo booked"), "m1"),
            (call(outcome="Quote sent"), "m2"),
            (call(outcome="Appointment scheduled"), None),
        ]
        result = aggregate(calls)
        m1 = result.members["m1"]
        assert (m1.appointment_calls, m1.price_presentations, m1.demo_calls, m1.closed_calls) == (1, 1, 1, 1)
        assert result.members["m2"].price_presentations == 1
        assert result.cohort.appointment_calls == 2
        assert result.cohort.price_presentations == 2
        assert result.cohort.closed_calls == 1

    def test_conversion_rate_bounds(self):
        outcomes = ["closed", "signed", "nothing", None, "converted", "contract"]
        for n in range(len(outcomes) + 1):
            result = aggregate((call(outcome=o), None) for o in outcomes[:n])
            assert 0.0 <= result.cohort.conversion_rate <= 100.0

    def test_custom_classifier(self):
        classifier = OutcomeClassifier(("booked",))
        result = aggregate([(call(outcome="Booked consult"), "m1"), (call(outcome="Contract signed"), "m1")],
                           is_converted=classifier)
        assert result.cohort.converted_calls == 1

    def test_unassigned_count_toward_cohort_only(self):
        result = aggregate([(call(9), "m1"), (call(3), None), (call(None), None)])
        assert result.cohort.total_calls == 3
        assert result.cohort.unassigned_calls == 2
        assert list(result.members) == ["m1"]
        assert result.members["m1"].total_calls == 1
        assert result.cohort.average_heat_score == 6.0

    def test_needs_ranked_by_count(self):
        needs = ["Price", "Speed", "price", "Speed", "Trust", "Speed"]
        result = aggregate((call(need=n), None) for n in needs)
        assert result.cohort.top_needs == [
            RankedItem("Speed", 3),
            RankedItem("Price", 2),
            RankedItem("Trust", 1),
        ]

    def test_ties_keep_first_seen_order(self):
        result = aggregate((call(need=n), None) for n in ["B", "A", "C"])
        assert [item.value for item in result.cohort.top_needs] == ["B", "A", "C"]

    def test_no_significant_objections_not_ranked(self):
        objections = [NO_SIGNIFICANT_OBJECTIONS, NO_SIGNIFICANT_OBJECTIONS, "Cost"]
        result = aggregate((call(objection=o), None) for o in objections)
        assert result.cohort.top_objections == [RankedItem("Cost", 1)]

    def test_top_n(self):
        result = aggregate((call(need=n), None) for n in ["a", "b", "c", "d"])
        needs, objections = result.cohort.top(3)
        assert len(needs) == 3
        assert objections == []

    def test_member_list_busiest_first(self):
        result = aggregate([(call(), "m1"), (call(), "m2"), (call(), "m2")])
        assert [m.member_id for m in result.member_list()] == ["m2", "m1"]


class TestMetricsAccumulator:
    CALLS = [
        (call(8, "Speed", "Cost", "Contract signed"), "m1"),
        (call(None, "Price", None, "Follow-up"), None),
        (call(4, "speed", "Timing", "Demo set"), "m2"),
        (call(6, "Trust", "Cost", None), "m1"),
        (call(10, "Price", NO_SIGNIFICANT_OBJECTIONS, "Closed"), "m2"),
    ]

    def _accumulate(self, calls):
        acc = MetricsAccumulator()
        for extracted, member_id in calls:
            acc.add(extracted, member_id)
        return acc

    def test_merge_matches_single_pass(self):
        left = self._accumulate(self.CALLS[:2])
        right = self._accumulate(self.CALLS[2:])
        merged = left.merge(right).result()
        single = aggregate(self.CALLS)
        assert merged.cohort == single.cohort
        assert merged.members == single.members

    def test_merge_leaves_inputs_untouched(self):
        left = self._accumulate(self.CALLS[:3])
        right = self._accumulate(self.CALLS[3:])
        left_before = left.result()
        right_before = right.result()

        left.merge(right)

        assert left.result() == left_before
        assert right.result() == right_before

    def test_result_is_a_copy(self):
        acc = self._accumulate(self.CALLS)
        first = acc.result()
        first.members["m1"].total_calls = 99
        assert acc.result().members["m1"].total_calls == 2

    def test_member_merge(self):
        acc = self._accumulate(self.CALLS)
        m1 = acc.result().members["m1"]
        doubled = m1.merge(replace(m1))
        assert doubled.total_calls == 4
        assert doubled.average_heat_score == m1.average_heat_score
        assert doubled.price_presentations == 2 * m1.price_presentations
        assert doubled.closed_calls == 2 * m1.closed_calls


class TestFrequencyTable:
    def test_case_insensitive(self):
        table = FrequencyTable()
        table.add("Price")
        table.add("PRICE")
        table.add(None)
        assert len(table) == 1
        assert table.ranked() == [RankedItem("Price", 2)]

    def test_exclude(self):
        table = FrequencyTable(exclude=["skip me"])
        table.add("Skip Me")
        assert len(table) == 0
