"""
Sleep Consistency Analyzer
==========================

Variability of bed and wake clock times across a window.

Only nights with both a real onset and a real wake time are used. The
result is the mean of the population standard deviations of onset and
wake minutes-of-day.
"""

from typing import List, Optional
import logging

import numpy as np

from sleep_models.data_models import NightRecord, ConsistencyResult, ConsistencyLevel
from sleep_engine.parameters import ConsistencyThresholds

logger = logging.getLogger(__name__)


class ConsistencyAnalyzer:
    """Classifies bed/wake regularity from timing variability"""

    def __init__(self, thresholds: Optional[ConsistencyThresholds] = None):
        self.thresholds = thresholds or ConsistencyThresholds()

    def analyze(self, records: List[NightRecord]) -> ConsistencyResult:
        timed = [r for r in records if r.has_full_timing]

        if len(timed) < self.thresholds.min_valid_nights:
            logger.debug(f"Consistency needs {self.thresholds.min_valid_nights} timed nights, got {len(timed)}")
            return ConsistencyResult(
                std_dev_minutes=0.0,
                level=ConsistencyLevel.INSUFFICIENT_DATA,
                valid_nights=len(timed),
            )

        onset_minutes = np.array([r.onset_time.minutes_of_day for r in timed], dtype=float)
        wake_minutes = np.array([r.wake_time.minutes_of_day for r in timed], dtype=float)

        # ddof=0: population standard deviation
        std_dev = float((np.std(onset_minutes) + np.std(wake_minutes)) / 2)

        return ConsistencyResult(
            std_dev_minutes=std_dev,
            level=self.thresholds.classify(std_dev),
            valid_nights=len(timed),
        )
