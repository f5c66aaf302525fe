"""
data_models.py - Core Data Structures
======================================

Data models for nightly sleep records, derived per-night metrics,
window aggregates, and the reconstructed multi-night sleep timeline.
"""

from dataclasses import dataclass, field
import datetime as dt
from typing import List, Optional, Dict, Any, FrozenSet
from enum import Enum


# ============================================================================
# ENUMS
# ============================================================================

class SleepStage(Enum):
    """Sleep stages drawn on the timeline (awake is the gap between segments)"""
    LIGHT = "light"
    DEEP = "deep"
    REM = "rem"

    @property
    def label(self) -> str:
        return {
            SleepStage.LIGHT: 'Light Sleep',
            SleepStage.DEEP: 'Deep Sleep',
            SleepStage.REM: 'REM Sleep',
        }[self]


class ConsistencyLevel(Enum):
    """Bed/wake time regularity classes"""
    HIGH = "High"
    MODERATE = "Moderate"
    LOW = "Low"
    INSUFFICIENT_DATA = "Insufficient Data"


class Chronotype(Enum):
    """Sleep-timing preference inferred from a single night's onset hour"""
    MORNING = "Morning Type"
    INTERMEDIATE = "Intermediate"
    EVENING = "Evening Type"
    UNKNOWN = "Unknown (Missing timing data)"

    @property
    def is_known(self) -> bool:
        return self is not Chronotype.UNKNOWN


class StressIndicator(Enum):
    """Per-night biomarker flags (non-exclusive)"""
    FRAGMENTED_SLEEP = "Fragmented Sleep"
    HRV_SUPPRESSION = "HRV Suppression"
    ELEVATED_RESTING_HR = "Elevated Resting HR"
    LOW_DEEP_SLEEP = "Low Deep Sleep"
    LOW_REM_SLEEP = "Low REM Sleep"


class DebtStatus(Enum):
    """Cumulative sleep debt band for the window"""
    MINIMAL = "Minimal"
    MODERATE = "Moderate"
    HIGH = "High"


# ============================================================================
# INPUT STRUCTURES
# ============================================================================

@dataclass(frozen=True)
class ClockTime:
    """Wall-clock time of day; a missing time is None, never 00:00"""
    hour: int    # 0-23
    minute: int  # 0-59

    @property
    def minutes_of_day(self) -> int:
        return self.hour * 60 + self.minute

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class NightRecord:
    """
    Canonical per-day biometric record

    Numeric fields use 0 for "absent". Stage percentages are raw values
    and are not guaranteed to sum to 100.
    """
    date: Optional[dt.date]
    sleep_duration_h: float = 0.0
    deep_pct: float = 0.0
    rem_pct: float = 0.0
    light_pct: float = 0.0
    onset_time: Optional[ClockTime] = None
    wake_time: Optional[ClockTime] = None
    hrv_night: float = 0.0      # ms
    resting_hr: float = 0.0     # bpm
    spo2_night: float = 0.0     # %

    @property
    def has_onset(self) -> bool:
        return self.onset_time is not None

    @property
    def has_wake(self) -> bool:
        return self.wake_time is not None

    @property
    def has_full_timing(self) -> bool:
        """Both onset and wake are real (not estimated) times"""
        return self.has_onset and self.has_wake


@dataclass(frozen=True)
class StageDistribution:
    """Stage percentages rescaled to sum to 100 (all zero when no stage data)"""
    deep_pct: float = 0.0
    rem_pct: float = 0.0
    light_pct: float = 0.0

    @property
    def total(self) -> float:
        return self.deep_pct + self.rem_pct + self.light_pct

    def as_dict(self) -> Dict[str, float]:
        return {
            'Deep Sleep': self.deep_pct,
            'REM Sleep': self.rem_pct,
            'Light Sleep': self.light_pct,
        }


# ============================================================================
# PER-NIGHT DERIVED METRICS
# ============================================================================

@dataclass(frozen=True)
class SleepDayMetrics:
    """Derived metrics for one NightRecord"""
    date: Optional[dt.date]
    sleep_duration_h: float
    sleep_debt: float              # max(0, recommended - duration)
    sleep_balance: float           # duration - recommended (signed)
    time_in_bed_h: float
    sleep_efficiency_pct: float    # unclamped, may exceed 100
    time_in_bed_estimated: bool
    chronotype: Chronotype
    stress_indicators: FrozenSet[StressIndicator] = frozenset()

    @property
    def has_stress_indicators(self) -> bool:
        return bool(self.stress_indicators)


@dataclass(frozen=True)
class QualityScore:
    """
    Composite 0-100 sleep quality score with its four sub-factors

    Each factor is in [0, 1]; the score is the rounded weighted sum × 100.
    """
    score: int
    duration: float
    efficiency: float
    deep: float
    rem: float
    date: Optional[dt.date] = None

    @property
    def factors(self) -> Dict[str, float]:
        return {
            'duration': self.duration,
            'efficiency': self.efficiency,
            'deep': self.deep,
            'rem': self.rem,
        }


@dataclass(frozen=True)
class SleepTimingPoint:
    """Bed/wake clock times for one night, estimated where data is missing"""
    date: Optional[dt.date]
    onset_minutes: int    # minutes after midnight; may reach 1440 for an estimated midnight onset
    wake_minutes: int     # in [0, 1440); estimated wakes wrap past midnight
    has_real_timing: bool


# ============================================================================
# WINDOW AGGREGATES
# ============================================================================

@dataclass(frozen=True)
class SleepDebtSummary:
    """
    Window-level debt/credit accounting

    Debt and credit are tracked separately: a surplus night never pays
    down another night's debt. Totals are unclamped.
    """
    cumulative_debt_h: float = 0.0
    cumulative_credit_h: float = 0.0
    deficit_days: int = 0
    surplus_days: int = 0
    status: DebtStatus = DebtStatus.MINIMAL


@dataclass(frozen=True)
class ConsistencyResult:
    """Bed/wake regularity over the nights with real timing"""
    std_dev_minutes: float = 0.0
    level: ConsistencyLevel = ConsistencyLevel.INSUFFICIENT_DATA
    valid_nights: int = 0


# ============================================================================
# TIMELINE STRUCTURES
# ============================================================================

@dataclass(frozen=True)
class TimelineSegment:
    """
    One stage block on the 48-hour timeline

    Offsets are minutes from the window start, already clipped to the
    window.
    """
    stage: SleepStage
    start_abs_min: int
    end_abs_min: int
    label: str
    segment: str             # "7", or "12 (Partial)" for a sub-step remainder
    night_date: Optional[dt.date] = None

    @property
    def duration_min(self) -> int:
        return self.end_abs_min - self.start_abs_min


@dataclass
class SleepTimeline:
    """All sleep overlapping a fixed 48-hour window, broken into stage segments"""
    window_start: dt.datetime
    window_minutes: int
    segments: List[TimelineSegment] = field(default_factory=list)

    def minutes_for(self, stage: SleepStage) -> int:
        return sum(s.duration_min for s in self.segments if s.stage == stage)

    @property
    def light_min(self) -> int:
        return self.minutes_for(SleepStage.LIGHT)

    @property
    def deep_min(self) -> int:
        return self.minutes_for(SleepStage.DEEP)

    @property
    def rem_min(self) -> int:
        return self.minutes_for(SleepStage.REM)

    @property
    def total_min(self) -> int:
        return sum(s.duration_min for s in self.segments)

    @property
    def total_hours(self) -> float:
        return self.total_min / 60

    def stage_percentages(self) -> Dict[str, float]:
        """Share of in-window sleep per stage (0 when the window holds no sleep)"""
        total = self.total_min
        if total == 0:
            return {stage.value: 0.0 for stage in SleepStage}
        return {stage.value: self.minutes_for(stage) / total * 100 for stage in SleepStage}


# ============================================================================
# ANALYSIS RESULT
# ============================================================================

@dataclass
class WindowAnalysis:
    """
    Everything derived from one window of NightRecords

    An empty or structurally invalid window yields empty collections,
    zeroed aggregates, Insufficient Data consistency, and no timeline.
    """
    records: List[NightRecord] = field(default_factory=list)
    daily_metrics: List[SleepDayMetrics] = field(default_factory=list)
    debt_summary: SleepDebtSummary = field(default_factory=SleepDebtSummary)
    consistency: ConsistencyResult = field(default_factory=ConsistencyResult)
    quality_scores: List[QualityScore] = field(default_factory=list)
    average_quality_score: float = 0.0
    latest_quality: Optional[QualityScore] = None
    latest_stage_distribution: StageDistribution = field(default_factory=StageDistribution)
    timing: List[SleepTimingPoint] = field(default_factory=list)
    timeline: Optional[SleepTimeline] = None
    recommendations: List[str] = field(default_factory=list)

    # Window averages
    avg_duration_h: float = 0.0
    avg_efficiency_pct: float = 0.0
    avg_deep_pct: float = 0.0
    avg_rem_pct: float = 0.0
    avg_light_pct: float = 0.0
    low_spo2_nights: int = 0

    @property
    def night_count(self) -> int:
        return len(self.records)

    @property
    def latest_chronotype(self) -> Chronotype:
        if not self.daily_metrics:
            return Chronotype.UNKNOWN
        return self.daily_metrics[-1].chronotype

    @property
    def has_estimated_efficiency(self) -> bool:
        """True if any night's time in bed was estimated"""
        return any(m.time_in_bed_estimated for m in self.daily_metrics)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible rendering for a presentation layer"""

        def _day(d: Optional[dt.date]) -> Optional[str]:
            return d.isoformat() if d else None

        timeline = None
        if self.timeline is not None:
            timeline = {
                'window_start': self.timeline.window_start.isoformat(),
                'window_minutes': self.timeline.window_minutes,
                'segments': [
                    {
                        'type': s.stage.value,
                        'start_abs_min': s.start_abs_min,
                        'end_abs_min': s.end_abs_min,
                        'duration_min': s.duration_min,
                        'label': s.label,
                        'segment': s.segment,
                        'night_date': _day(s.night_date),
                    }
                    for s in self.timeline.segments
                ],
                'totals': {
                    'light_min': self.timeline.light_min,
                    'deep_min': self.timeline.deep_min,
                    'rem_min': self.timeline.rem_min,
                    'total_min': self.timeline.total_min,
                },
                'stage_percentages': self.timeline.stage_percentages(),
            }

        return {
            'daily_metrics': [
                {
                    'date': _day(m.date),
                    'sleep_duration_h': m.sleep_duration_h,
                    'sleep_debt': m.sleep_debt,
                    'sleep_balance': m.sleep_balance,
                    'time_in_bed_h': m.time_in_bed_h,
                    'sleep_efficiency_pct': m.sleep_efficiency_pct,
                    'time_in_bed_estimated': m.time_in_bed_estimated,
                    'chronotype': m.chronotype.value,
                    'stress_indicators': sorted(i.value for i in m.stress_indicators),
                }
                for m in self.daily_metrics
            ],
            'debt_summary': {
                'cumulative_debt_h': self.debt_summary.cumulative_debt_h,
                'cumulative_credit_h': self.debt_summary.cumulative_credit_h,
                'deficit_days': self.debt_summary.deficit_days,
                'surplus_days': self.debt_summary.surplus_days,
                'status': self.debt_summary.status.value,
            },
            'consistency': {
                'std_dev_minutes': self.consistency.std_dev_minutes,
                'level': self.consistency.level.value,
                'valid_nights': self.consistency.valid_nights,
            },
            'quality_scores': [
                {'date': _day(q.date), 'score': q.score, **q.factors}
                for q in self.quality_scores
            ],
            'average_quality_score': self.average_quality_score,
            'latest_stage_distribution': self.latest_stage_distribution.as_dict(),
            'timing': [
                {
                    'date': _day(t.date),
                    'onset_minutes': t.onset_minutes,
                    'wake_minutes': t.wake_minutes,
                    'has_real_timing': t.has_real_timing,
                }
                for t in self.timing
            ],
            'timeline': timeline,
            'recommendations': list(self.recommendations),
            'averages': {
                'duration_h': self.avg_duration_h,
                'efficiency_pct': self.avg_efficiency_pct,
                'deep_pct': self.avg_deep_pct,
                'rem_pct': self.avg_rem_pct,
                'light_pct': self.avg_light_pct,
            },
            'low_spo2_nights': self.low_spo2_nights,
        }
