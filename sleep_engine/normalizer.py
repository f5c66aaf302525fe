"""
Record Normalizer
=================

Coerces raw per-day biometric objects into canonical NightRecords.

Numbers that are absent, non-numeric, non-finite or negative become 0
("absent"). Time strings that are empty, "00:00" or unparsable become
None ("unknown"), never midnight. Nothing here raises on bad input.
"""

from datetime import date, datetime, time
from typing import Any, List, Mapping, Optional
import math
import re
import logging

import pandas as pd

from sleep_models.data_models import ClockTime, NightRecord, StageDistribution

logger = logging.getLogger(__name__)

# Canonical input field names (alias resolution happens upstream)
FIELD_DATE = 'date'
FIELD_DURATION = 'sleep_duration_h'
FIELD_DEEP = 'deep_sleep_pct'
FIELD_REM = 'rem_sleep_pct'
FIELD_LIGHT = 'light_sleep_pct'
FIELD_ONSET = 'sleep_onset_time'
FIELD_WAKE = 'wake_time'
FIELD_HRV = 'hrv_night'
FIELD_RHR = 'resting_hr'
FIELD_SPO2 = 'spo2_night'

_TIME_PATTERN = re.compile(r'^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$')


def round_half_up(value: float) -> int:
    """Round .5 upward, as dashboard displays do (Python's round() is banker's)"""
    return int(math.floor(value + 0.5))


def coerce_number(value: Any) -> float:
    """Return a finite, non-negative float, or 0.0 for anything else"""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def coerce_hours(value: Any) -> float:
    """coerce_number for durations; hours too large to count in minutes are absent"""
    hours = coerce_number(value)
    return hours if math.isfinite(hours * 60) else 0.0


def parse_clock_time(value: Any) -> Optional[ClockTime]:
    """
    Parse "HH:MM" (or "HH:MM:SS", or a datetime.time) into a ClockTime.

    "", "00:00" and anything unparsable mean "unknown" and return None.
    The 00:00 sentinel is never read as a real midnight.
    """
    if isinstance(value, time):
        hour, minute = value.hour, value.minute
    elif isinstance(value, str):
        match = _TIME_PATTERN.match(value)
        if not match:
            return None
        hour, minute = int(match.group(1)), int(match.group(2))
        if match.group(3) is not None and int(match.group(3)) >= 60:
            return None
    else:
        return None

    if not (0 <= hour < 24 and 0 <= minute < 60):
        return None
    if hour == 0 and minute == 0:
        return None
    return ClockTime(hour=hour, minute=minute)


def parse_record_date(value: Any) -> Optional[date]:
    """ISO day string, date, datetime or pandas Timestamp -> date; else None"""
    if value is None or _is_missing(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) < 10:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def normalize_stage_percentages(deep: float, rem: float, light: float) -> StageDistribution:
    """Rescale raw stage percentages to sum to 100 (all zero when no stage data)"""
    total = deep + rem + light
    if total <= 0:
        return StageDistribution()
    return StageDistribution(
        deep_pct=deep / total * 100,
        rem_pct=rem / total * 100,
        light_pct=light / total * 100,
    )


def normalize_record(raw: Mapping[str, Any]) -> NightRecord:
    """Build a NightRecord from one canonical raw mapping"""
    return NightRecord(
        date=parse_record_date(raw.get(FIELD_DATE)),
        sleep_duration_h=coerce_hours(raw.get(FIELD_DURATION)),
        deep_pct=coerce_number(raw.get(FIELD_DEEP)),
        rem_pct=coerce_number(raw.get(FIELD_REM)),
        light_pct=coerce_number(raw.get(FIELD_LIGHT)),
        onset_time=parse_clock_time(raw.get(FIELD_ONSET)),
        wake_time=parse_clock_time(raw.get(FIELD_WAKE)),
        hrv_night=coerce_number(raw.get(FIELD_HRV)),
        resting_hr=coerce_number(raw.get(FIELD_RHR)),
        spo2_night=coerce_number(raw.get(FIELD_SPO2)),
    )


def _rows_from_dataframe(df: pd.DataFrame) -> List[Mapping[str, Any]]:
    rows = []
    for _, row in df.iterrows():
        # NaN cells mean "no value" for every field
        rows.append({key: (None if _is_missing(val) else val) for key, val in row.items()})
    return rows


def _is_missing(value: Any) -> bool:
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def normalize_window(raw_window: Any) -> List[NightRecord]:
    """
    Normalize a whole window of raw records.

    Accepts a list/tuple of mappings or a pandas DataFrame with canonical
    column names. A structurally invalid window (not a sequence) yields
    an empty list.
    """
    if isinstance(raw_window, pd.DataFrame):
        raw_rows = _rows_from_dataframe(raw_window)
    elif isinstance(raw_window, (list, tuple)):
        raw_rows = list(raw_window)
    else:
        logger.warning(f"Invalid sleep window of type {type(raw_window).__name__}; treating as empty")
        return []

    records = []
    for index, raw in enumerate(raw_rows):
        if not isinstance(raw, Mapping):
            logger.warning(f"Skipping window element {index}: expected a mapping, got {type(raw).__name__}")
            continue
        records.append(normalize_record(raw))
    return records
