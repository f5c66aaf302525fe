"""
Sleep Debt / Balance Calculator
===============================

Nightly debt and balance against a fixed recommended baseline, and the
window-level debt/credit summary.

Debt is one-sided and zero-floored per night; surplus nights add to a
separate credit total and never pay down debt.
"""

from typing import List, Optional

from sleep_models.data_models import NightRecord, SleepDebtSummary, DebtStatus
from sleep_engine.parameters import EngineConfig


class SleepDebtCalculator:
    """Debt/balance accounting against the configured sleep need"""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig.default_config()
        self.recommended_hours = self.config.sleep_need.recommended_sleep_hours
        self.thresholds = self.config.recommendations

    def night_debt(self, duration_h: float) -> float:
        return max(0.0, self.recommended_hours - duration_h)

    def night_balance(self, duration_h: float) -> float:
        return duration_h - self.recommended_hours

    def classify(self, cumulative_debt_h: float) -> DebtStatus:
        if cumulative_debt_h > self.thresholds.high_debt_hours:
            return DebtStatus.HIGH
        if cumulative_debt_h > self.thresholds.moderate_debt_hours:
            return DebtStatus.MODERATE
        return DebtStatus.MINIMAL

    def summarize(self, records: List[NightRecord]) -> SleepDebtSummary:
        """Cumulative debt, credit and deficit/surplus day counts for a window"""
        debts = [self.night_debt(r.sleep_duration_h) for r in records]
        balances = [self.night_balance(r.sleep_duration_h) for r in records]

        cumulative_debt = sum(debts)
        return SleepDebtSummary(
            cumulative_debt_h=cumulative_debt,
            cumulative_credit_h=sum(max(0.0, b) for b in balances),
            deficit_days=sum(1 for d in debts if d > 0),
            surplus_days=sum(1 for b in balances if b > 0),
            status=self.classify(cumulative_debt),
        )
