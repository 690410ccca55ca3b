"""
Tests for srs/state.py and srs/config.py.
"""
import pytest

from srs.config import DEFAULT_CONFIG, MINUTE_MS, SchedulerConfig
from srs.state import CardPhase, SchedulerState, STATE_FIELDS, phase_of


class TestSchedulerState:
    def test_defaults_match_fresh_card(self):
        s = SchedulerState.new(123)
        assert s.ivl_days == 0
        assert s.ease == 2.5
        assert s.reps == 0
        assert s.lapses == 0
        assert s.difficulty == 0.5
        assert s.learning_stage == 0
        assert s.suspended == 0
        assert s.due_ts == 123

    def test_from_row_ignores_extra_keys(self):
        row = {
            'card_id': 9, 'front': 'hond', 'back': 'dog',
            'ivl_days': 4, 'ease': 2.1, 'reps': 3, 'lapses': 1, 'due_ts': 1000,
            'learning_stage': 0, 'difficulty': 0.3, 'suspended': 0,
        }
        s = SchedulerState.from_row(row)
        assert s == SchedulerState(4, 2.1, 3, 1, 1000, 0, 0.3, 0)

    def test_as_dict_has_every_field(self):
        assert tuple(SchedulerState().as_dict()) == STATE_FIELDS

    def test_is_immutable(self):
        with pytest.raises(AttributeError):
            SchedulerState().reps = 3


class TestPhase:
    def test_new(self):
        assert phase_of(SchedulerState()) is CardPhase.NEW

    def test_learning_before_first_graduation(self):
        assert phase_of(SchedulerState(learning_stage=1)) is CardPhase.LEARNING

    def test_relearning_after_lapse(self):
        assert phase_of(SchedulerState(reps=4, learning_stage=1, ivl_days=3)) is CardPhase.LEARNING

    def test_review(self):
        assert phase_of(SchedulerState(reps=1, ivl_days=1)) is CardPhase.REVIEW

    def test_suspended_wins(self):
        assert phase_of(SchedulerState(reps=3, suspended=1)) is CardPhase.SUSPENDED
        assert SchedulerState(suspended=1).phase is CardPhase.SUSPENDED


class TestSchedulerConfig:
    def test_defaults(self):
        assert DEFAULT_CONFIG.learning_steps_ms == (600_000, 3_600_000)
        assert DEFAULT_CONFIG.leech_lapses == 8
        assert DEFAULT_CONFIG.difficulty_deltas == (0.12, 0.06, -0.02, -0.08)

    def test_from_minutes(self):
        config = SchedulerConfig.from_minutes([1, 15.5], leech_lapses=4)
        assert config.learning_steps_ms == (MINUTE_MS, 930_000)
        assert config.leech_lapses == 4

    @pytest.mark.parametrize('kwargs', [
        {'learning_steps_ms': ()},
        {'learning_steps_ms': (0, 60_000)},
        {'leech_lapses': 0},
        {'difficulty_deltas': (0.1, 0.2)},
        {'min_ease': 3.0},
    ])
    def test_rejects_bad_policy(self, kwargs):
        with pytest.raises(ValueError):
            SchedulerConfig(**kwargs)
