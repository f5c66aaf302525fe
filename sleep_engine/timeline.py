"""
Multi-Night Sleep Timeline Reconstruction
=========================================

Synthesizes one continuous 48-hour window of stage-level sleep from the
nightly summary records.

The window starts at midnight of the day before the latest record's date
and runs for 48 hours. Every night overlapping it is placed on the
absolute timeline, split into stages from its (normalized) percentages,
and walked in 10-minute steps. Segments are clipped to the window.

Interval resolution, in priority order:
    (a) onset and wake known -> anchored to the record's day; a wake
        earlier than onset means the sleep started the previous day
    (b) onset only -> onset at/after 12:00 started the previous day;
        end = start + duration
    (c) wake only -> end at wake on the record's day; start = end - duration
    (d) neither -> estimated 22:00 onset on the previous day

The stage layout (60 % light, deep, remaining light, REM) is a narrative
approximation of a sleep cycle, not a model of real cycle alternation.
"""

from datetime import datetime, timedelta, time, date
from typing import Callable, List, Optional, Tuple
import math
import logging

import pytz

from sleep_models.data_models import (
    NightRecord, SleepStage, TimelineSegment, SleepTimeline
)
from sleep_engine.parameters import TimelineParameters
from sleep_engine.normalizer import normalize_stage_percentages, round_half_up

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

StagePlan = List[Tuple[SleepStage, int]]
StagePlanPolicy = Callable[[int, int, int, float], StagePlan]


def narrative_stage_plan(
    light_min: int,
    deep_min: int,
    rem_min: int,
    early_light_share: float = 0.6
) -> StagePlan:
    """
    Default stage layout: early light, all deep, remaining light, all REM.

    The second light block takes the exact remainder so the plan always
    accounts for every allocated minute. Empty stages are dropped.
    """
    early_light = int(math.floor(light_min * early_light_share))
    plan = [
        (SleepStage.LIGHT, early_light),
        (SleepStage.DEEP, deep_min),
        (SleepStage.LIGHT, light_min - early_light),
        (SleepStage.REM, rem_min),
    ]
    return [(stage, minutes) for stage, minutes in plan if minutes > 0]


def allocate_stage_minutes(record: NightRecord, duration_min: int) -> Tuple[int, int, int]:
    """
    Split a night's minutes into (light, deep, rem).

    Deep and REM are rounded from the normalized percentages; light
    absorbs the rounding slack so the three always total duration_min.
    """
    stages = normalize_stage_percentages(record.deep_pct, record.rem_pct, record.light_pct)
    deep_min = min(duration_min, round_half_up(duration_min * stages.deep_pct / 100))
    rem_min = min(duration_min - deep_min, round_half_up(duration_min * stages.rem_pct / 100))
    light_min = duration_min - deep_min - rem_min
    return light_min, deep_min, rem_min


def resolve_sleep_interval(
    record: NightRecord,
    day_start: datetime,
    duration_min: int,
    params: Optional[TimelineParameters] = None
) -> Tuple[datetime, datetime, bool]:
    """
    Place a night on the absolute timeline.

    Args:
        day_start: Timezone-aware midnight of the record's calendar day.

    Returns:
        (start, end, estimated) where estimated is True when the onset
        was inferred rather than recorded.
    """
    params = params or TimelineParameters()
    previous_day = day_start - timedelta(days=1)
    onset = record.onset_time
    wake = record.wake_time

    if onset is not None and wake is not None:
        if wake.minutes_of_day - onset.minutes_of_day < 0:
            start = previous_day + timedelta(minutes=onset.minutes_of_day)
        else:
            start = day_start + timedelta(minutes=onset.minutes_of_day)
        end = day_start + timedelta(minutes=wake.minutes_of_day)
        return start, end, False

    if onset is not None:
        crosses = onset.minutes_of_day >= params.crossing_threshold_hour * 60
        anchor = previous_day if crosses else day_start
        start = anchor + timedelta(minutes=onset.minutes_of_day)
        return start, start + timedelta(minutes=duration_min), False

    if wake is not None:
        end = day_start + timedelta(minutes=wake.minutes_of_day)
        return end - timedelta(minutes=duration_min), end, True

    logger.debug(
        f"[{record.date}] No timing data; assuming {params.estimated_onset_hour:02d}:00 "
        f"onset on the previous day"
    )
    start = previous_day + timedelta(hours=params.estimated_onset_hour)
    return start, start + timedelta(minutes=duration_min), True


def _minutes_between(later: datetime, earlier: datetime) -> int:
    return round_half_up((later - earlier).total_seconds() / 60)


class TimelineReconstructor:
    """
    Builds the 48-hour stage timeline for a window of nights

    Output is fully determined by the records: ordering follows the input
    sequence, and the window anchor comes from the records' own dates.
    """

    def __init__(
        self,
        params: Optional[TimelineParameters] = None,
        stage_plan: StagePlanPolicy = narrative_stage_plan
    ):
        self.params = params or TimelineParameters()
        self.stage_plan = stage_plan
        self.tz = pytz.timezone(self.params.timezone)

    def day_start(self, day: date) -> datetime:
        """Timezone-aware local midnight of a calendar day"""
        return self.tz.localize(datetime.combine(day, time(0, 0)))

    def window_start_for(self, records: List[NightRecord]) -> Optional[datetime]:
        """
        Midnight of the day before the latest dated record.

        Raises OverflowError when that midnight is outside the datetime range.
        """
        dates = [r.date for r in records if r.date is not None]
        if not dates:
            return None
        return self.tz.normalize(self.day_start(max(dates)) - timedelta(days=1))

    def night_segments(
        self,
        record: NightRecord,
        window_start: datetime,
        clip: bool = True
    ) -> List[TimelineSegment]:
        """
        Stage segments for one night, offset from window_start.

        With clip=False the segments are returned as planned, before
        clipping to the window; their durations total round(hours * 60).
        With clip=True steps wholly before the window are skipped without
        being built, and the walk stops at the window end.
        """
        if record.date is None:
            logger.debug("Skipping undated record on timeline")
            return []

        duration_min = max(0, round_half_up(record.sleep_duration_h * 60))
        if duration_min <= 0:
            return []

        start, _, _ = resolve_sleep_interval(
            record, self.day_start(record.date), duration_min, self.params
        )
        light_min, deep_min, rem_min = allocate_stage_minutes(record, duration_min)
        plan = self.stage_plan(light_min, deep_min, rem_min, self.params.early_light_share)

        window_minutes = self.params.window_minutes
        step = self.params.step_minutes
        cursor = _minutes_between(start, window_start)
        segment_number = 1
        segments = []

        def add(stage, seg_start, seg_end, label):
            if clip:
                seg_start = max(0, seg_start)
                seg_end = min(window_minutes, seg_end)
                if seg_end <= seg_start:
                    return
            segments.append(TimelineSegment(
                stage=stage,
                start_abs_min=seg_start,
                end_abs_min=seg_end,
                label=stage.label,
                segment=label,
                night_date=record.date,
            ))

        for stage, minutes in plan:
            if clip and cursor >= window_minutes:
                break
            full_steps, remainder = divmod(minutes, step)

            # Steps k with cursor + (k + 1) * step <= 0 end before the window
            first = min(full_steps, -cursor // step) if clip and cursor < 0 else 0
            for k in range(first, full_steps):
                seg_start = cursor + k * step
                if clip and seg_start >= window_minutes:
                    break
                add(stage, seg_start, seg_start + step, f"{segment_number + k}")
            segment_number += full_steps

            if remainder > 0:
                partial_start = cursor + full_steps * step
                add(stage, partial_start, partial_start + remainder, f"{segment_number} (Partial)")
                segment_number += 1

            cursor += minutes

        return segments

    def _in_coarse_range(self, record: NightRecord, window_start: datetime) -> bool:
        """Cheap pre-filter: only nights from days around the window can overlap it"""
        offset_min = (record.date - window_start.date()).days * MINUTES_PER_DAY
        if offset_min > self.params.window_minutes + MINUTES_PER_DAY:
            return False
        if offset_min + MINUTES_PER_DAY < -MINUTES_PER_DAY:
            return False
        return True

    def reconstruct(self, records: List[NightRecord]) -> Optional[SleepTimeline]:
        """
        Union of all nights' clipped segments, or None without a dated
        record. Nights whose interval falls outside the datetime range are
        skipped; an anchor outside it yields None.
        """
        try:
            window_start = self.window_start_for(records)
        except OverflowError:
            logger.warning("Timeline window start is outside the supported date range; timeline not built")
            return None
        if window_start is None:
            logger.debug("No dated records; timeline not built")
            return None

        segments = []
        for record in records:
            if record.date is None or not self._in_coarse_range(record, window_start):
                continue
            try:
                segments.extend(self.night_segments(record, window_start))
            except OverflowError:
                logger.warning(
                    f"[{record.date}] Sleep interval outside the supported date range "
                    f"({record.sleep_duration_h}h); night skipped on timeline"
                )

        return SleepTimeline(
            window_start=window_start,
            window_minutes=self.params.window_minutes,
            segments=segments,
        )
