"""
Sleep Analytics Engine Tests
============================

End-to-end window analysis from raw records: per-night metrics, window
aggregates, recommendations, timeline, period slicing and the
presentation dict.

Run: python -m pytest tests/test_analyzer.py -v
"""

from datetime import date
import json

import pandas as pd
import pytest

from sleep_models.data_models import Chronotype, ConsistencyLevel, DebtStatus, StressIndicator
from sleep_engine import SleepAnalyticsEngine, EngineConfig
from sleep_engine.recommendations import MSG_MODERATE_DEBT, MSG_LOW_DEEP, MSG_LOW_SPO2, MSG_ON_TRACK


def _make_window():
    return [
        {
            'date': '2025-03-09',
            'sleep_duration_h': 7.0,
            'deep_sleep_pct': 20, 'rem_sleep_pct': 22, 'light_sleep_pct': 58,
            'sleep_onset_time': '22:45', 'wake_time': '06:15',
            'hrv_night': 65, 'resting_hr': 52, 'spo2_night': 97,
        },
        {
            'date': '2025-03-10',
            'sleep_duration_h': 6.5,
            'deep_sleep_pct': 15, 'rem_sleep_pct': 17, 'light_sleep_pct': 68,
            'sleep_onset_time': '23:30', 'wake_time': '00:00',
            'hrv_night': 0, 'resting_hr': 58, 'spo2_night': 94,
        },
        {
            'date': '2025-03-11',
            'sleep_duration_h': 8.5,
            'deep_sleep_pct': 24, 'rem_sleep_pct': 21, 'light_sleep_pct': 55,
            'sleep_onset_time': '22:15', 'wake_time': '07:00',
            'hrv_night': 70, 'resting_hr': 55, 'spo2_night': 93,
        },
    ]


# ============================================================================
# Full window
# ============================================================================

class TestWindowAnalysis:

    def setup_method(self):
        self.engine = SleepAnalyticsEngine()
        self.analysis = self.engine.analyze(_make_window())

    def test_daily_metrics(self):
        metrics = self.analysis.daily_metrics
        assert [m.date for m in metrics] == [date(2025, 3, 9), date(2025, 3, 10), date(2025, 3, 11)]
        assert [m.sleep_debt for m in metrics] == [1.0, 1.5, 0.0]
        assert metrics[0].time_in_bed_h == pytest.approx(7.5)
        assert not metrics[0].time_in_bed_estimated
        # "00:00" wake is missing, so time in bed falls back to duration + latency
        assert metrics[1].time_in_bed_h == pytest.approx(7.0)
        assert metrics[1].time_in_bed_estimated
        assert self.analysis.has_estimated_efficiency

    def test_chronotypes(self):
        assert [m.chronotype for m in self.analysis.daily_metrics] == [
            Chronotype.INTERMEDIATE, Chronotype.EVENING, Chronotype.INTERMEDIATE,
        ]
        assert self.analysis.latest_chronotype == Chronotype.INTERMEDIATE

    def test_stress_flags(self):
        assert self.analysis.daily_metrics[0].stress_indicators == frozenset()
        assert self.analysis.daily_metrics[1].stress_indicators == frozenset()

    def test_debt_summary(self):
        summary = self.analysis.debt_summary
        assert summary.cumulative_debt_h == pytest.approx(2.5)
        assert summary.cumulative_credit_h == pytest.approx(0.5)
        assert summary.status == DebtStatus.MODERATE

    def test_consistency_uses_timed_nights(self):
        consistency = self.analysis.consistency
        assert consistency.valid_nights == 2
        assert consistency.std_dev_minutes == pytest.approx(18.75)
        assert consistency.level == ConsistencyLevel.MODERATE

    def test_quality(self):
        assert len(self.analysis.quality_scores) == 3
        assert self.analysis.latest_quality.score == 100
        scores = [q.score for q in self.analysis.quality_scores]
        assert self.analysis.average_quality_score == pytest.approx(sum(scores) / 3)

    def test_averages(self):
        assert self.analysis.avg_duration_h == pytest.approx(22 / 3)
        assert self.analysis.avg_deep_pct == pytest.approx(59 / 3)
        assert self.analysis.avg_rem_pct == pytest.approx(20.0)
        assert self.analysis.low_spo2_nights == 2

    def test_recommendations(self):
        assert self.analysis.recommendations == [MSG_MODERATE_DEBT, MSG_LOW_DEEP, MSG_LOW_SPO2]

    def test_latest_stage_distribution(self):
        dist = self.analysis.latest_stage_distribution
        assert dist.total == pytest.approx(100.0)
        assert dist.deep_pct == pytest.approx(24.0)

    def test_timing(self):
        timing = self.analysis.timing
        assert [t.has_real_timing for t in timing] == [True, False, True]
        # 23:30 onset + 6.5 h estimated wake wraps to 06:00
        assert timing[1].wake_minutes == 360

    def test_timeline(self):
        timeline = self.analysis.timeline
        # 03-10 night clipped to 360 min at the window start; 03-11 night whole
        assert timeline.total_min == 360 + 510
        assert all(0 <= s.start_abs_min < s.end_abs_min <= 2880 for s in timeline.segments)

    def test_deterministic(self):
        again = self.engine.analyze(_make_window())
        assert again.to_dict() == self.analysis.to_dict()

    def test_to_dict_is_json_compatible(self):
        payload = json.loads(json.dumps(self.analysis.to_dict()))
        assert payload['debt_summary']['status'] == 'Moderate'
        assert payload['consistency']['level'] == 'Moderate'
        assert payload['daily_metrics'][1]['chronotype'] == 'Evening Type'
        assert payload['timeline']['totals']['total_min'] == 870
        assert payload['timeline']['window_start'].startswith('2025-03-10T00:00:00')


# ============================================================================
# Window selection and input forms
# ============================================================================

class TestWindowInputs:

    def setup_method(self):
        self.engine = SleepAnalyticsEngine()

    def test_period_days_keeps_latest(self):
        analysis = self.engine.analyze(_make_window(), period_days=2)

        assert analysis.night_count == 2
        assert analysis.records[0].date == date(2025, 3, 10)
        assert analysis.debt_summary.status == DebtStatus.MINIMAL
        assert analysis.consistency.level == ConsistencyLevel.INSUFFICIENT_DATA
        assert analysis.recommendations == [MSG_LOW_DEEP, MSG_LOW_SPO2]

    @pytest.mark.parametrize('period_days', [None, 0, 30])
    def test_period_days_keeps_all(self, period_days):
        assert self.engine.analyze(_make_window(), period_days=period_days).night_count == 3

    def test_dataframe_matches_list(self):
        from_list = self.engine.analyze(_make_window())
        from_frame = self.engine.analyze(pd.DataFrame(_make_window()))
        assert from_frame.to_dict() == from_list.to_dict()

    @pytest.mark.parametrize('window', [[], None, 'garbage', 17])
    def test_empty_or_invalid_window(self, window):
        analysis = self.engine.analyze(window)

        assert analysis.night_count == 0
        assert analysis.daily_metrics == []
        assert analysis.debt_summary.cumulative_debt_h == 0.0
        assert analysis.consistency.level == ConsistencyLevel.INSUFFICIENT_DATA
        assert analysis.average_quality_score == 0.0
        assert analysis.latest_quality is None
        assert analysis.timeline is None
        assert analysis.recommendations == []
        assert analysis.latest_chronotype == Chronotype.UNKNOWN

    @pytest.mark.parametrize('raw', [
        {'date': '9999-12-31', 'sleep_duration_h': 8.0},
        {'date': '0001-01-01', 'sleep_duration_h': 8.0},
        {'date': '2025-03-11', 'sleep_duration_h': 1e12},
        {'date': '2025-03-11', 'sleep_duration_h': 1e12, 'wake_time': '07:00'},
        {'date': '2025-03-11', 'sleep_duration_h': 1e6, 'sleep_onset_time': '22:00', 'wake_time': '06:00'},
        {'date': '2025-03-11', 'sleep_duration_h': 1e308},
    ])
    def test_extreme_records_do_not_raise(self, raw):
        analysis = self.engine.analyze([raw])

        assert analysis.night_count == 1
        assert len(analysis.quality_scores) == 1
        assert 0 <= analysis.timing[0].wake_minutes < 1440
        if analysis.timeline is not None:
            assert all(0 <= s.start_abs_min < s.end_abs_min <= 2880 for s in analysis.timeline.segments)
        json.dumps(analysis.to_dict())

    def test_first_calendar_day_has_no_timeline(self):
        analysis = self.engine.analyze([{'date': '0001-01-01', 'sleep_duration_h': 8.0}])
        assert analysis.timeline is None
        assert analysis.daily_metrics[0].sleep_debt == 0.0

    def test_single_sparse_record(self):
        analysis = self.engine.analyze([{'date': '2025-03-11', 'sleep_duration_h': 7.5}])

        metrics = analysis.daily_metrics[0]
        assert metrics.chronotype == Chronotype.UNKNOWN
        assert metrics.time_in_bed_estimated
        assert metrics.stress_indicators == frozenset()
        assert analysis.consistency.level == ConsistencyLevel.INSUFFICIENT_DATA
        # No stage data: the whole night is drawn as light sleep
        assert analysis.timeline.total_min == 450
        assert analysis.timeline.light_min == 450

    def test_short_night_flags(self):
        analysis = self.engine.analyze([{
            'date': '2025-03-11', 'sleep_duration_h': 5.0,
            'hrv_night': 32, 'resting_hr': 74, 'deep_sleep_pct': 12, 'rem_sleep_pct': 14,
            'light_sleep_pct': 74,
        }])
        assert analysis.daily_metrics[0].stress_indicators == set(StressIndicator)

    def test_well_rested_window(self):
        window = [
            {
                'date': f'2025-03-{day:02d}', 'sleep_duration_h': 8.2,
                'deep_sleep_pct': 22, 'rem_sleep_pct': 21, 'light_sleep_pct': 57,
                'sleep_onset_time': '22:30', 'wake_time': '07:00', 'spo2_night': 97,
            }
            for day in range(5, 12)
        ]
        analysis = self.engine.analyze(window)
        assert analysis.recommendations == [MSG_ON_TRACK]
        assert analysis.consistency.level == ConsistencyLevel.HIGH


# ============================================================================
# Configuration
# ============================================================================

class TestEngineConfiguration:

    def test_higher_sleep_need(self):
        engine = SleepAnalyticsEngine(EngineConfig.adolescent_athlete_config())
        analysis = engine.analyze(_make_window())
        assert [m.sleep_debt for m in analysis.daily_metrics] == [2.0, 2.5, 0.5]
        assert analysis.debt_summary.status == DebtStatus.HIGH

    def test_timezone_config(self):
        engine = SleepAnalyticsEngine(EngineConfig.default_config(timezone='America/New_York'))
        analysis = engine.analyze(_make_window())
        assert analysis.timeline.window_start.tzinfo.zone == 'America/New_York'
