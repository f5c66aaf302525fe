"""
Sleep Stress Indicator Detection
================================

Independent per-night flags from fixed biomarker thresholds.

A value of exactly 0 is "absent data", not a measurement, so it never
triggers a flag. Stage checks use raw (pre-normalization) percentages.
"""

from collections import Counter
from typing import Dict, FrozenSet, List, Optional

from sleep_models.data_models import NightRecord, StressIndicator
from sleep_engine.parameters import StressThresholds


def detect_stress_indicators(
    record: NightRecord,
    thresholds: Optional[StressThresholds] = None
) -> FrozenSet[StressIndicator]:
    t = thresholds or StressThresholds()
    flags = set()

    # Fragmentation (proxy via short duration)
    if 0 < record.sleep_duration_h < t.fragmented_sleep_hours:
        flags.add(StressIndicator.FRAGMENTED_SLEEP)

    if 0 < record.hrv_night < t.hrv_suppression_ms:
        flags.add(StressIndicator.HRV_SUPPRESSION)

    if record.resting_hr > t.elevated_resting_hr_bpm:
        flags.add(StressIndicator.ELEVATED_RESTING_HR)

    if 0 < record.deep_pct < t.low_deep_pct:
        flags.add(StressIndicator.LOW_DEEP_SLEEP)

    if 0 < record.rem_pct < t.low_rem_pct:
        flags.add(StressIndicator.LOW_REM_SLEEP)

    return frozenset(flags)


def count_indicators(
    records: List[NightRecord],
    thresholds: Optional[StressThresholds] = None
) -> Dict[StressIndicator, int]:
    """Number of nights carrying each flag across a window"""
    counts = Counter()
    for record in records:
        counts.update(detect_stress_indicators(record, thresholds))
    return {indicator: counts.get(indicator, 0) for indicator in StressIndicator}
