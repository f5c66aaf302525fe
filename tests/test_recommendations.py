"""
Recommendation Tests
====================

Rule ordering and thresholds for recommendation prose.

Run: python -m pytest tests/test_recommendations.py -v
"""

from dataclasses import replace

import pytest

from sleep_engine.recommendations import (
    RecommendationGenerator, RecommendationInputs,
    MSG_HIGH_DEBT, MSG_MODERATE_DEBT, MSG_LOW_EFFICIENCY, MSG_SHORT_DURATION,
    MSG_LOW_DEEP, MSG_LOW_REM, MSG_IRREGULAR, MSG_LOW_SPO2, MSG_ON_TRACK,
)


GOOD_WINDOW = RecommendationInputs(
    cumulative_debt_h=0.0,
    avg_efficiency_pct=90.0,
    avg_duration_h=8.0,
    avg_deep_pct=22.0,
    avg_rem_pct=20.0,
    consistency_std_dev_min=10.0,
    low_spo2_nights=0,
)


# ============================================================================
# Recommendations
# ============================================================================

class TestRecommendations:

    def setup_method(self):
        self.generator = RecommendationGenerator()

    def test_on_track(self):
        assert self.generator.generate(GOOD_WINDOW) == [MSG_ON_TRACK]

    def test_every_rule_in_order(self):
        inputs = RecommendationInputs(
            cumulative_debt_h=4.0,
            avg_efficiency_pct=80.0,
            avg_duration_h=6.0,
            avg_deep_pct=15.0,
            avg_rem_pct=15.0,
            consistency_std_dev_min=50.0,
            low_spo2_nights=2,
        )
        assert self.generator.generate(inputs) == [
            MSG_HIGH_DEBT,
            MSG_LOW_EFFICIENCY,
            MSG_SHORT_DURATION,
            MSG_LOW_DEEP,
            MSG_LOW_REM,
            MSG_IRREGULAR,
            MSG_LOW_SPO2,
        ]

    def test_high_debt_excludes_moderate(self):
        recs = self.generator.generate(replace(GOOD_WINDOW, cumulative_debt_h=3.5))
        assert recs == [MSG_HIGH_DEBT]

    def test_moderate_debt(self):
        recs = self.generator.generate(replace(GOOD_WINDOW, cumulative_debt_h=2.0))
        assert recs == [MSG_MODERATE_DEBT]

    @pytest.mark.parametrize('field, value', [
        ('cumulative_debt_h', 1.5),
        ('avg_efficiency_pct', 85.0),
        ('avg_duration_h', 7.0),
        ('avg_deep_pct', 20.0),
        ('avg_rem_pct', 18.0),
        ('consistency_std_dev_min', 45.0),
        ('low_spo2_nights', 1),
    ])
    def test_boundaries_do_not_trigger(self, field, value):
        recs = self.generator.generate(replace(GOOD_WINDOW, **{field: value}))
        assert recs == [MSG_ON_TRACK]

    def test_on_track_never_mixed(self):
        recs = self.generator.generate(replace(GOOD_WINDOW, low_spo2_nights=3))
        assert MSG_ON_TRACK not in recs

