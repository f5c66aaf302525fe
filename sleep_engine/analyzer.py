"""
Sleep Analytics Engine
======================

Main entry point combining every component over one window of nights:
- Normalization of raw records
- Sleep debt / credit accounting
- Efficiency (real or estimated time in bed)
- Bed/wake consistency
- Chronotype and stress indicators per night
- Composite quality score per night and window average
- 48-hour stage timeline
- Rule-based recommendations

Each call recomputes everything from the given window; no state is kept
between calls.
"""

from typing import Any, List, Optional
import logging

import numpy as np

from sleep_models.data_models import NightRecord, SleepDayMetrics, WindowAnalysis
from sleep_engine.parameters import EngineConfig
from sleep_engine.normalizer import normalize_window, normalize_stage_percentages
from sleep_engine.sleep_debt import SleepDebtCalculator
from sleep_engine.efficiency import SleepEfficiencyEstimator
from sleep_engine.consistency import ConsistencyAnalyzer
from sleep_engine.chronotype import classify_chronotype
from sleep_engine.stress_indicators import detect_stress_indicators
from sleep_engine.sleep_quality import SleepQualityScorer
from sleep_engine.sleep_timing import build_timing_points
from sleep_engine.timeline import TimelineReconstructor
from sleep_engine.recommendations import RecommendationGenerator, RecommendationInputs

logger = logging.getLogger(__name__)


def _mean(values: List[float]) -> float:
    return float(np.mean(values)) if values else 0.0


class SleepAnalyticsEngine:
    """
    Pure sleep analytics pipeline

    Combines:
    - Debt/balance, efficiency, chronotype and stress flags per night
    - Consistency, quality average and recommendations per window
    - Multi-night timeline reconstruction
    """

    def __init__(self, config: EngineConfig = None):
        self.config = config or EngineConfig.default_config()

        # Initialize subsystems
        self.debt_calculator = SleepDebtCalculator(self.config)
        self.efficiency_estimator = SleepEfficiencyEstimator(self.config.sleep_need)
        self.consistency_analyzer = ConsistencyAnalyzer(self.config.consistency)
        self.quality_scorer = SleepQualityScorer(self.config)
        self.timeline_reconstructor = TimelineReconstructor(self.config.timeline)
        self.recommendation_generator = RecommendationGenerator(self.config.recommendations)

    def analyze(self, raw_window: Any, period_days: Optional[int] = None) -> WindowAnalysis:
        """
        Analyze a raw window (list of canonical dicts or a DataFrame).

        Args:
            period_days: Keep only the most recent N records (e.g. 7 or 30).
                None or a non-positive value keeps the whole window.
        """
        records = normalize_window(raw_window)
        if period_days is not None and period_days > 0:
            records = records[-period_days:]
        return self.analyze_records(records)

    def analyze_records(self, records: List[NightRecord]) -> WindowAnalysis:
        if not records:
            logger.warning("Empty sleep window; returning zeroed analysis")
            return WindowAnalysis()

        daily_metrics = []
        efficiencies = []
        for record in records:
            estimate = self.efficiency_estimator.estimate(record)
            efficiencies.append(estimate.efficiency_pct)
            daily_metrics.append(SleepDayMetrics(
                date=record.date,
                sleep_duration_h=record.sleep_duration_h,
                sleep_debt=self.debt_calculator.night_debt(record.sleep_duration_h),
                sleep_balance=self.debt_calculator.night_balance(record.sleep_duration_h),
                time_in_bed_h=estimate.time_in_bed_h,
                sleep_efficiency_pct=estimate.efficiency_pct,
                time_in_bed_estimated=estimate.estimated,
                chronotype=classify_chronotype(record.onset_time, self.config.chronotype),
                stress_indicators=detect_stress_indicators(record, self.config.stress),
            ))

        debt_summary = self.debt_calculator.summarize(records)
        consistency = self.consistency_analyzer.analyze(records)
        quality_scores, average_score = self.quality_scorer.score_window(records, efficiencies)

        latest = records[-1]
        avg_duration = _mean([r.sleep_duration_h for r in records])
        avg_efficiency = _mean(efficiencies)
        avg_deep = _mean([r.deep_pct for r in records])
        avg_rem = _mean([r.rem_pct for r in records])
        avg_light = _mean([r.light_pct for r in records])
        low_spo2 = sum(
            1 for r in records
            if 0 < r.spo2_night < self.config.recommendations.low_spo2_pct
        )

        recommendations = self.recommendation_generator.generate(RecommendationInputs(
            cumulative_debt_h=debt_summary.cumulative_debt_h,
            avg_efficiency_pct=avg_efficiency,
            avg_duration_h=avg_duration,
            avg_deep_pct=avg_deep,
            avg_rem_pct=avg_rem,
            consistency_std_dev_min=consistency.std_dev_minutes,
            low_spo2_nights=low_spo2,
        ))

        logger.debug(
            f"Analyzed {len(records)} nights: debt {debt_summary.cumulative_debt_h:.1f}h, "
            f"consistency {consistency.level.value}, avg quality {average_score:.1f}"
        )

        return WindowAnalysis(
            records=list(records),
            daily_metrics=daily_metrics,
            debt_summary=debt_summary,
            consistency=consistency,
            quality_scores=quality_scores,
            average_quality_score=average_score,
            latest_quality=quality_scores[-1],
            latest_stage_distribution=normalize_stage_percentages(
                latest.deep_pct, latest.rem_pct, latest.light_pct
            ),
            timing=build_timing_points(records),
            timeline=self.timeline_reconstructor.reconstruct(records),
            recommendations=recommendations,
            avg_duration_h=avg_duration,
            avg_efficiency_pct=avg_efficiency,
            avg_deep_pct=avg_deep,
            avg_rem_pct=avg_rem,
            avg_light_pct=avg_light,
            low_spo2_nights=low_spo2,
        )
