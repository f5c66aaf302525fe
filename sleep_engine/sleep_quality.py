"""
Sleep Quality Scoring Engine
============================

Composite 0-100 nightly sleep quality score from four clamped factors:
1. Duration relative to the recommended baseline
2. Efficiency relative to a 90 % "excellent" reference
3. Normalized deep sleep relative to 20 %
4. Normalized REM sleep relative to 18 %

Default weights: duration 35 %, efficiency 30 %, deep 20 %, REM 15 %.

References:
    Ohayon et al. (2017) Sleep Health 3:6-19: efficiency >= 85 % good quality
    Carskadon & Dement (2011) Principles & Practice of Sleep Medicine:
        adult N3 ~13-23 %, REM ~20-25 %
"""

from typing import List, Optional, Tuple
import logging

from sleep_models.data_models import NightRecord, QualityScore
from sleep_engine.parameters import EngineConfig
from sleep_engine.normalizer import normalize_stage_percentages, round_half_up

logger = logging.getLogger(__name__)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


class SleepQualityScorer:
    """Computes the composite sleep quality score per night and per window"""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig.default_config()
        self.params = self.config.quality
        self.recommended_hours = self.config.sleep_need.recommended_sleep_hours

    def score_night(self, record: NightRecord, efficiency_pct: float) -> QualityScore:
        """Score one night given its (real or estimated) efficiency"""
        stages = normalize_stage_percentages(record.deep_pct, record.rem_pct, record.light_pct)

        duration_factor = clamp(record.sleep_duration_h / self.recommended_hours) if self.recommended_hours > 0 else 0.0
        efficiency_factor = clamp(efficiency_pct / self.params.efficiency_reference_pct)
        deep_factor = clamp(stages.deep_pct / self.params.deep_reference_pct)
        rem_factor = clamp(stages.rem_pct / self.params.rem_reference_pct)

        weighted = (
            duration_factor * self.params.weight_duration
            + efficiency_factor * self.params.weight_efficiency
            + deep_factor * self.params.weight_deep
            + rem_factor * self.params.weight_rem
        )

        return QualityScore(
            score=round_half_up(weighted * 100),
            duration=duration_factor,
            efficiency=efficiency_factor,
            deep=deep_factor,
            rem=rem_factor,
            date=record.date,
        )

    def score_window(
        self,
        records: List[NightRecord],
        efficiencies: List[float]
    ) -> Tuple[List[QualityScore], float]:
        """
        Score every night and average the nightly scores.

        Returns (scores, average). The average is the plain arithmetic mean
        of the nightly scores, 0.0 for an empty window.
        """
        if len(records) != len(efficiencies):
            raise ValueError(
                f"Expected one efficiency per night: {len(records)} nights, {len(efficiencies)} efficiencies"
            )

        scores = [self.score_night(r, eff) for r, eff in zip(records, efficiencies)]
        if not scores:
            return [], 0.0

        average = sum(s.score for s in scores) / len(scores)
        logger.debug(f"Scored {len(scores)} nights, average quality {average:.1f}")
        return scores, average
