"""Tests for outcome classification and heat tiers."""

from __future__ import annotations

import pytest

from heatcheck.metrics.outcomes import (
    OutcomeClassifier,
    funnel_stages,
    heat_band_matches,
    heat_tier,
    outcome_category_matches,
)
from heatcheck.storage.models import ExtractedCall


class TestOutcomeClassifier:
    def test_default_keywords(self):
        classifier = OutcomeClassifier()
        assert classifier("Contract signed today")
        assert classifier("DEMO booked")
        assert classifier("Deal closed")
        assert not classifier("Will think about it")
        assert not classifier(None)
        assert not classifier("")

    def test_custom_keywords(self):
        classifier = OutcomeClassifier(("Enrolled",))
        assert classifier.is_converted("Patient enrolled")
        assert not classifier.is_converted("Contract signed")


class TestOutcomeCategories:
    def test_all(self):
        assert outcome_category_matches(None, "all")

    def test_categories(self):
        assert outcome_category_matches("Contract signed", "converted")
        assert outcome_category_matches("Follow-up scheduled", "interested")
        assert outcome_category_matches("Hesitant about pricing", "objection")
        assert not outcome_category_matches(None, "converted")

    def test_unknown_category(self):
        with pytest.raises(ValueError):
            outcome_category_matches("x", "bogus")


class TestHeat:
    def test_tiers(self):
        assert heat_tier(None) == "unknown"
        assert heat_tier(10) == "elite"
        assert heat_tier(8) == "elite"
        assert heat_tier(7) == "high"
        assert heat_tier(4) == "medium"
        assert heat_tier(0) == "low"

    def test_bands(self):
        assert heat_band_matches(9, "high")
        assert heat_band_matches(6, "medium")
        assert not heat_band_matches(8, "medium")
        assert heat_band_matches(0, "low")
        assert heat_band_matches(None, "all")
        assert not heat_band_matches(None, "low")

    def test_unknown_band(self):
        with pytest.raises(ValueError):
            heat_band_matches(5, "lukewarm")


class TestFunnelStages:
    def test_outcome_keywords(self):
        assert funnel_stages(ExtractedCall(outcome="Appointment booked for Monday")) == ["appointment_calls"]
        assert funnel_stages(ExtractedCall(outcome="Demo scheduled")) == ["appointment_calls", "demo_calls"]
        assert funnel_stages(ExtractedCall(outcome="Contract signed")) == ["closed_calls"]

    def test_price_objection_counts_as_presentation(self):
        call = ExtractedCall(main_objection="Price is too high", outcome="Thinking about it")
        assert funnel_stages(call) == ["price_presentations"]

    def test_nothing_known(self):
        assert funnel_stages(ExtractedCall()) == []
        assert funnel_stages(ExtractedCall(outcome="Left voicemail")) == []
