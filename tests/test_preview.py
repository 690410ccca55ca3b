"""
Tests for srs/preview.py — rating previews and interval labels.
"""
from srs.config import DAY_MS, HOUR_MS, MINUTE_MS
from srs.preview import format_interval, schedule_all_ratings
from srs.state import Rating, SchedulerState

T = 1_700_000_000_000


def due_in(ms, suspended=0):
    return SchedulerState(due_ts=T + ms, suspended=suspended)


class TestScheduleAllRatings:
    def test_returns_all_four(self):
        results = schedule_all_ratings(SchedulerState(due_ts=T), now=T)
        assert set(results) == set(Rating)

    def test_new_card_previews(self):
        results = schedule_all_ratings(SchedulerState(due_ts=T), now=T)
        assert format_interval(results[Rating.AGAIN], T) == '10m'
        assert format_interval(results[Rating.HARD], T) == '10m'
        assert format_interval(results[Rating.GOOD], T) == '1h'
        assert format_interval(results[Rating.EASY], T) == '6d'

    def test_leech_preview(self):
        state = SchedulerState(ivl_days=10, reps=5, lapses=7, due_ts=T)
        results = schedule_all_ratings(state, now=T)
        assert format_interval(results[Rating.AGAIN], T) == 'leech'
        assert format_interval(results[Rating.GOOD], T) != 'leech'


class TestFormatInterval:
    def test_minutes(self):
        assert format_interval(due_in(10 * MINUTE_MS), T) == '10m'

    def test_past_due_shows_1m(self):
        assert format_interval(due_in(-30 * MINUTE_MS), T) == '1m'

    def test_hours(self):
        assert format_interval(due_in(HOUR_MS), T) == '1h'
        assert format_interval(due_in(5 * HOUR_MS), T) == '5h'

    def test_days(self):
        assert format_interval(due_in(DAY_MS), T) == '1d'
        assert format_interval(due_in(29 * DAY_MS), T) == '29d'

    def test_months(self):
        assert format_interval(due_in(30 * DAY_MS), T) == '1mo'
        assert format_interval(due_in(60 * DAY_MS), T) == '2mo'
        assert format_interval(due_in(364 * DAY_MS), T).endswith('mo')

    def test_years(self):
        assert format_interval(due_in(365 * DAY_MS), T) == '1.0y'

    def test_suspended(self):
        assert format_interval(due_in(DAY_MS, suspended=1), T) == 'leech'
