"""
Sleep Timing Series
===================

Bed and wake clock times per night for trend display. Nights without a
real onset get an onset estimated from their duration (longer sleepers
are assumed to go to bed earlier); a missing wake time is onset plus
duration, wrapped onto the 24-hour clock. Estimated points are flagged
so they can be rendered apart.
"""

from typing import List

from sleep_models.data_models import NightRecord, SleepTimingPoint
from sleep_engine.normalizer import round_half_up

MINUTES_PER_DAY = 24 * 60

# (minimum duration in hours, estimated onset in minutes after midnight)
ESTIMATED_ONSET_BY_DURATION = [
    (8.0, 22 * 60),
    (7.0, 23 * 60),
    (0.0, 24 * 60),
]


def estimate_onset_minutes(duration_h: float) -> int:
    for min_hours, onset in ESTIMATED_ONSET_BY_DURATION:
        if duration_h >= min_hours:
            return onset
    return ESTIMATED_ONSET_BY_DURATION[-1][1]


def build_timing_points(records: List[NightRecord]) -> List[SleepTimingPoint]:
    points = []
    for record in records:
        if record.has_onset:
            onset = record.onset_time.minutes_of_day
        else:
            onset = estimate_onset_minutes(record.sleep_duration_h)

        if record.has_wake:
            wake = record.wake_time.minutes_of_day
        else:
            wake = (onset + round_half_up(record.sleep_duration_h * 60)) % MINUTES_PER_DAY

        points.append(SleepTimingPoint(
            date=record.date,
            onset_minutes=onset,
            wake_minutes=wake,
            has_real_timing=record.has_full_timing,
        ))
    return points
