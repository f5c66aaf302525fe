"""
Configuration & Parameters for the Sleep Analytics Engine
=========================================================

All configuration dataclasses for the nightly sleep pipeline:
- SleepNeedParameters: Recommended sleep baseline and onset latency
- QualityScoreParameters: Composite score weights and reference values
- ConsistencyThresholds: Bed/wake regularity bands
- ChronotypeParameters: Onset-hour bands for chronotype labels
- StressThresholds: Per-night biomarker flag thresholds
- TimelineParameters: 48-hour timeline reconstruction policy
- RecommendationThresholds: Rule thresholds for recommendation prose
- EngineConfig: Master configuration container

Scientific Foundation:
    Hirshkowitz et al. (2015) Sleep Health 1:40-43 (duration recommendations),
    Ohayon et al. (2017) Sleep Health 3:6-19 (efficiency >= 85 %),
    Phillips et al. (2017) Sci Rep 7:3216 (sleep regularity)
"""

from dataclasses import dataclass, field, replace
from typing import Optional

from sleep_models.data_models import ConsistencyLevel


@dataclass
class SleepNeedParameters:
    """Sleep need baseline (configurable constant, not derived from data)"""

    # Adult athlete baseline; debt and the duration factor use this value
    recommended_sleep_hours: float = 8.0

    # Fixed sleep-onset latency used when time in bed must be estimated
    onset_latency_hours: float = 0.5


@dataclass
class QualityScoreParameters:
    """
    Composite quality score weighting

    Weights must sum to 1.0. Reference values mark "excellent" and are
    not caps on the measured values.
    """

    weight_duration: float = 0.35
    weight_efficiency: float = 0.30
    weight_deep: float = 0.20
    weight_rem: float = 0.15

    efficiency_reference_pct: float = 90.0
    deep_reference_pct: float = 20.0
    rem_reference_pct: float = 18.0

    def __post_init__(self):
        total = self.weight_duration + self.weight_efficiency + self.weight_deep + self.weight_rem
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"Quality score weights must sum to 1.0, got {total:.4f}")


@dataclass
class ConsistencyThresholds:
    """Std-dev bands (minutes) for bed/wake regularity"""

    high_max_minutes: float = 15.0
    moderate_max_minutes: float = 45.0
    min_valid_nights: int = 2

    def classify(self, std_dev_minutes: float) -> ConsistencyLevel:
        if std_dev_minutes <= self.high_max_minutes:
            return ConsistencyLevel.HIGH
        if std_dev_minutes <= self.moderate_max_minutes:
            return ConsistencyLevel.MODERATE
        return ConsistencyLevel.LOW


@dataclass
class ChronotypeParameters:
    """
    Onset-hour bands

    Evening covers [evening_start_hour, 24) and [0, evening_end_hour];
    intermediate covers [intermediate_start_hour, evening_start_hour).
    """

    evening_start_hour: int = 23
    evening_end_hour: int = 5
    intermediate_start_hour: int = 21


@dataclass
class StressThresholds:
    """Per-night flag thresholds; a value of exactly 0 means absent"""

    fragmented_sleep_hours: float = 6.0     # 0 < duration < 6
    hrv_suppression_ms: float = 40.0        # 0 < hrv < 40
    elevated_resting_hr_bpm: float = 70.0   # rhr > 70
    low_deep_pct: float = 15.0              # 0 < deep < 15 (raw)
    low_rem_pct: float = 15.0               # 0 < rem < 15 (raw)


@dataclass
class TimelineParameters:
    """
    Multi-night timeline reconstruction policy

    The stage layout and the 22:00 onset fallback are a narrative
    approximation of a sleep cycle, not a physiological model.
    """

    window_hours: int = 48
    step_minutes: int = 10

    # Fallback timing when the record lacks onset and wake
    estimated_onset_hour: int = 22

    # Onset-only records: onset at or after this hour started the previous day
    crossing_threshold_hour: int = 12

    # Share of light sleep placed before the deep block
    early_light_share: float = 0.6

    # IANA zone (pytz) used to place calendar days on the absolute timeline
    timezone: str = 'UTC'

    @property
    def window_minutes(self) -> int:
        return self.window_hours * 60


@dataclass
class RecommendationThresholds:
    """Rule thresholds for recommendation prose"""

    high_debt_hours: float = 3.0
    moderate_debt_hours: float = 1.5
    min_efficiency_pct: float = 85.0
    min_duration_hours: float = 7.0
    min_deep_pct: float = 20.0
    min_rem_pct: float = 18.0
    max_consistency_minutes: float = 45.0
    low_spo2_pct: float = 95.0
    low_spo2_nights: int = 2


@dataclass
class EngineConfig:
    """Master configuration container"""
    sleep_need: SleepNeedParameters = field(default_factory=SleepNeedParameters)
    quality: QualityScoreParameters = field(default_factory=QualityScoreParameters)
    consistency: ConsistencyThresholds = field(default_factory=ConsistencyThresholds)
    chronotype: ChronotypeParameters = field(default_factory=ChronotypeParameters)
    stress: StressThresholds = field(default_factory=StressThresholds)
    timeline: TimelineParameters = field(default_factory=TimelineParameters)
    recommendations: RecommendationThresholds = field(default_factory=RecommendationThresholds)

    @property
    def recommended_sleep_hours(self) -> float:
        return self.sleep_need.recommended_sleep_hours

    @classmethod
    def default_config(cls, timezone: Optional[str] = None):
        """Adult athlete defaults (8 h need, UTC day anchoring unless given)"""
        config = cls()
        if timezone:
            config.timeline = replace(config.timeline, timezone=timezone)
        return config

    @classmethod
    def adolescent_athlete_config(cls):
        """
        Higher sleep need for 14-17 year old athletes.
        Hirshkowitz et al. (2015): 8-10 h recommended; 9 h used as the
        baseline so debt and the duration factor track the midpoint.
        """
        return cls(
            sleep_need=SleepNeedParameters(recommended_sleep_hours=9.0),
        )

    def with_recommended_hours(self, hours: float) -> 'EngineConfig':
        """Copy of this config with a different sleep-need baseline"""
        return replace(self, sleep_need=replace(self.sleep_need, recommended_sleep_hours=hours))
