"""
Chronotype Classifier
=====================

Labels a night's timing pattern from the integer onset hour. A night
without a real onset time stays Unknown; no fallback estimate is used.
"""

from typing import Optional

from sleep_models.data_models import ClockTime, Chronotype
from sleep_engine.parameters import ChronotypeParameters


def classify_chronotype(
    onset: Optional[ClockTime],
    params: Optional[ChronotypeParameters] = None
) -> Chronotype:
    if onset is None:
        return Chronotype.UNKNOWN

    params = params or ChronotypeParameters()
    hour = onset.hour

    if hour >= params.evening_start_hour or hour <= params.evening_end_hour:
        return Chronotype.EVENING
    if hour >= params.intermediate_start_hour:
        return Chronotype.INTERMEDIATE
    return Chronotype.MORNING
