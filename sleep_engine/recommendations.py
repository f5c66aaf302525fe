"""
Sleep Recommendation Generator
==============================

Rule-based recommendation prose from window aggregates. Rules run in a
fixed order and every matching rule contributes its message; when none
match, a single "on track" message is returned.
"""

from dataclasses import dataclass
from typing import List, Optional

from sleep_engine.parameters import RecommendationThresholds

MSG_HIGH_DEBT = (
    'High cumulative sleep debt: advance bedtime by 45–60 min and schedule '
    '20–30 min naps 2–3× this week.'
)
MSG_MODERATE_DEBT = 'Moderate sleep debt: aim for +30–60 min earlier bedtime the next few nights.'
MSG_LOW_EFFICIENCY = 'Sleep efficiency below target: reduce time-in-bed and avoid screens 60 min before sleep.'
MSG_SHORT_DURATION = 'Average sleep duration is short: target at least 7–8 hours by shifting bedtime earlier.'
MSG_LOW_DEEP = (
    'Deep sleep below 20%: consider earlier resistance training, reduce late caffeine, '
    'and evaluate magnesium (glycinate).'
)
MSG_LOW_REM = (
    'REM sleep below 18%: add evening relaxation routine; support with omega‑3 and '
    'vitamin B6 as appropriate.'
)
MSG_IRREGULAR = 'Irregular bed/wake times: standardize within ±30 minutes to improve circadian alignment.'
MSG_LOW_SPO2 = (
    'Multiple low SpO₂ nights: evaluate airway/sleep environment and nasal breathing; '
    'consider air quality.'
)
MSG_ON_TRACK = 'Sleep metrics are on track: maintain consistent routine and recovery strategies.'


@dataclass(frozen=True)
class RecommendationInputs:
    """Window aggregates the rules are evaluated against"""
    cumulative_debt_h: float
    avg_efficiency_pct: float
    avg_duration_h: float
    avg_deep_pct: float
    avg_rem_pct: float
    consistency_std_dev_min: float
    low_spo2_nights: int


class RecommendationGenerator:
    """Evaluates the recommendation rules in order"""

    def __init__(self, thresholds: Optional[RecommendationThresholds] = None):
        self.thresholds = thresholds or RecommendationThresholds()

    def generate(self, inputs: RecommendationInputs) -> List[str]:
        t = self.thresholds
        recs = []

        if inputs.cumulative_debt_h > t.high_debt_hours:
            recs.append(MSG_HIGH_DEBT)
        elif inputs.cumulative_debt_h > t.moderate_debt_hours:
            recs.append(MSG_MODERATE_DEBT)

        if inputs.avg_efficiency_pct < t.min_efficiency_pct:
            recs.append(MSG_LOW_EFFICIENCY)

        if inputs.avg_duration_h < t.min_duration_hours:
            recs.append(MSG_SHORT_DURATION)

        if inputs.avg_deep_pct < t.min_deep_pct:
            recs.append(MSG_LOW_DEEP)

        if inputs.avg_rem_pct < t.min_rem_pct:
            recs.append(MSG_LOW_REM)

        if inputs.consistency_std_dev_min > t.max_consistency_minutes:
            recs.append(MSG_IRREGULAR)

        if inputs.low_spo2_nights >= t.low_spo2_nights:
            recs.append(MSG_LOW_SPO2)

        if not recs:
            recs.append(MSG_ON_TRACK)
        return recs
