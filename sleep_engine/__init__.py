"""
Sleep Analytics Engine Components
=================================

Main exports for the nightly sleep analytics pipeline.
"""

from sleep_engine.parameters import (
    SleepNeedParameters,
    QualityScoreParameters,
    ConsistencyThresholds,
    ChronotypeParameters,
    StressThresholds,
    TimelineParameters,
    RecommendationThresholds,
    EngineConfig
)

from sleep_engine.normalizer import (
    normalize_record,
    normalize_window,
    parse_clock_time,
    normalize_stage_percentages
)
from sleep_engine.sleep_debt import SleepDebtCalculator
from sleep_engine.efficiency import SleepEfficiencyEstimator, EfficiencyEstimate
from sleep_engine.consistency import ConsistencyAnalyzer
from sleep_engine.chronotype import classify_chronotype
from sleep_engine.stress_indicators import detect_stress_indicators, count_indicators
from sleep_engine.sleep_quality import SleepQualityScorer
from sleep_engine.sleep_timing import build_timing_points
from sleep_engine.timeline import (
    TimelineReconstructor,
    narrative_stage_plan,
    resolve_sleep_interval
)
from sleep_engine.recommendations import RecommendationGenerator, RecommendationInputs
from sleep_engine.analyzer import SleepAnalyticsEngine

__all__ = [
    # Parameters
    'SleepNeedParameters',
    'QualityScoreParameters',
    'ConsistencyThresholds',
    'ChronotypeParameters',
    'StressThresholds',
    'TimelineParameters',
    'RecommendationThresholds',
    'EngineConfig',
    # Normalization
    'normalize_record',
    'normalize_window',
    'parse_clock_time',
    'normalize_stage_percentages',
    # Per-night components
    'SleepDebtCalculator',
    'SleepEfficiencyEstimator',
    'EfficiencyEstimate',
    'classify_chronotype',
    'detect_stress_indicators',
    'count_indicators',
    'SleepQualityScorer',
    'build_timing_points',
    # Window components
    'ConsistencyAnalyzer',
    'TimelineReconstructor',
    'narrative_stage_plan',
    'resolve_sleep_interval',
    'RecommendationGenerator',
    'RecommendationInputs',
    # Main engine
    'SleepAnalyticsEngine',
]
