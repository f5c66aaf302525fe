"""
Sleep Efficiency Estimator
==========================

Time in bed and sleep efficiency per night.

With real onset and wake times, time in bed is the elapsed clock time
(wrapping past midnight). Without them it is estimated as duration plus
a fixed onset latency, and the night is marked as estimated.
Efficiency is deliberately left unclamped: values above 100 % expose
estimation anomalies instead of hiding them.
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import logging

from sleep_models.data_models import NightRecord
from sleep_engine.parameters import SleepNeedParameters

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class EfficiencyEstimate:
    """Time in bed and efficiency for one night"""
    time_in_bed_h: float
    efficiency_pct: float
    estimated: bool


class SleepEfficiencyEstimator:
    """Computes time in bed (real or estimated) and efficiency"""

    def __init__(self, params: Optional[SleepNeedParameters] = None):
        self.params = params or SleepNeedParameters()

    def time_in_bed(self, record: NightRecord) -> Tuple[float, bool]:
        """Return (hours in bed, estimated?)"""
        if record.has_full_timing:
            elapsed = record.wake_time.minutes_of_day - record.onset_time.minutes_of_day
            if elapsed < 0:
                elapsed += MINUTES_PER_DAY
            return elapsed / 60, False

        logger.debug(
            f"[{record.date}] Missing onset/wake time; estimating time in bed "
            f"as duration + {self.params.onset_latency_hours}h"
        )
        return record.sleep_duration_h + self.params.onset_latency_hours, True

    @staticmethod
    def efficiency(duration_h: float, time_in_bed_h: float) -> float:
        return 100 * duration_h / time_in_bed_h if time_in_bed_h > 0 else 0.0

    def estimate(self, record: NightRecord) -> EfficiencyEstimate:
        time_in_bed_h, estimated = self.time_in_bed(record)
        return EfficiencyEstimate(
            time_in_bed_h=time_in_bed_h,
            efficiency_pct=self.efficiency(record.sleep_duration_h, time_in_bed_h),
            estimated=estimated,
        )
