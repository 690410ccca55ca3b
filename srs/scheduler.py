"""
Spaced repetition scheduler.

schedule(state, rating, now) -> next state. Pure: no I/O, no clock reads
unless `now` is omitted, never mutates the input.

Ratings: 'again' (0), 'hard' (1), 'good' (2), 'easy' (3)

Learning cards walk a short ladder (10m, 1h) before graduating to day-scale
review intervals. A failed review sends the card back to the first rung and
halves its interval. Eight lapses suspend the card as a leech.
"""

import math
import time
from dataclasses import replace

from srs.config import DAY_MS, DEFAULT_CONFIG, SchedulerConfig
from srs.state import CardPhase, Rating, SchedulerState, phase_of


class InvalidRating(ValueError):
    """Rating outside 0..3. Always a caller bug."""

    def __init__(self, rating):
        super().__init__(f"Unknown rating {rating!r}, expected one of 0, 1, 2, 3")
        self.rating = rating


def now_ms() -> int:
    return int(time.time() * 1000)


def clamp(value: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, value))


def round_half_up(value: float) -> int:
    # round() is banker's rounding: round(2.5) == 2, we want 3
    return int(math.floor(value + 0.5))


def ease_from_difficulty(difficulty: float, config: SchedulerConfig = DEFAULT_CONFIG) -> float:
    """Map difficulty [0..1] to ease: 0 -> 2.5, 1 -> 1.3."""
    return clamp(
        config.ease_base - difficulty * config.ease_per_difficulty,
        config.min_ease,
        config.max_ease,
    )


def validate_rating(rating) -> Rating:
    try:
        return Rating(rating)
    except (ValueError, TypeError):
        raise InvalidRating(rating) from None


def schedule(
    state: SchedulerState,
    rating: int,
    now: int | None = None,
    config: SchedulerConfig = DEFAULT_CONFIG,
) -> SchedulerState:
    """
    Given the card's current state and a rating (0-3), return its next state.

    Raises InvalidRating for anything outside 0..3.
    """
    rating = validate_rating(rating)
    if now is None:
        now = now_ms()

    phase = phase_of(state)
    if phase is CardPhase.SUSPENDED:
        # Leeches stay out of the queue until unsuspended by hand
        return replace(state)

    # Difficulty drifts first; ease is always derived from it
    difficulty = clamp(state.difficulty + config.difficulty_deltas[rating], 0.0, 1.0)
    state = replace(state, difficulty=difficulty, ease=ease_from_difficulty(difficulty, config))

    if phase is CardPhase.REVIEW:
        return _schedule_review(state, rating, now, config)
    return _schedule_learning(state, phase, rating, now, config)


def _schedule_learning(
    state: SchedulerState,
    phase: CardPhase,
    rating: Rating,
    now: int,
    config: SchedulerConfig,
) -> SchedulerState:
    """Handle new and learning cards."""
    steps = config.learning_steps_ms
    ivl_days = max(1, state.ivl_days)

    if rating == Rating.AGAIN:
        return _lapse(state, ivl_days, now, config)

    if rating == Rating.EASY:
        # Skip the rest of the ladder
        days = max(1, round_half_up(
            config.easy_graduation_base + config.easy_graduation_per_ease * state.ease
        ))
        return _graduate(state, days, now)

    # Hard stays on the current rung, good moves up one. New cards start on rung 1.
    stage = 1 if phase is CardPhase.NEW else state.learning_stage
    if rating == Rating.GOOD:
        stage += 1

    if stage <= len(steps):
        return replace(
            state,
            ivl_days=ivl_days,
            learning_stage=stage,
            due_ts=now + steps[max(0, stage - 1)],
        )

    # Ladder done: first day-scale interval
    return _graduate(state, 1, now)


def _schedule_review(
    state: SchedulerState,
    rating: Rating,
    now: int,
    config: SchedulerConfig,
) -> SchedulerState:
    """Handle graduated cards."""
    ivl_days = state.ivl_days

    if rating == Rating.AGAIN:
        # Relearn from rung 1; reps is kept, the halved interval is the new baseline
        halved = max(1, round_half_up(ivl_days * config.lapse_interval_factor))
        return _lapse(state, halved, now, config)

    if rating == Rating.HARD:
        factor = config.hard_base + config.hard_per_difficulty * state.difficulty
    elif rating == Rating.GOOD:
        factor = config.good_base + config.good_per_ease * state.ease
    else:
        factor = config.easy_base + config.easy_per_ease * state.ease

    days = max(1, round_half_up(ivl_days * factor))
    return replace(
        state,
        ivl_days=days,
        reps=state.reps + 1,
        due_ts=now + days * DAY_MS,
    )


def _lapse(state: SchedulerState, ivl_days: int, now: int, config: SchedulerConfig) -> SchedulerState:
    lapses = state.lapses + 1
    return replace(
        state,
        ivl_days=ivl_days,
        lapses=lapses,
        learning_stage=1,
        due_ts=now + config.learning_steps_ms[0],
        suspended=1 if lapses >= config.leech_lapses else state.suspended,
    )


def _graduate(state: SchedulerState, ivl_days: int, now: int) -> SchedulerState:
    return replace(
        state,
        ivl_days=ivl_days,
        reps=state.reps + 1,
        learning_stage=0,
        due_ts=now + ivl_days * DAY_MS,
    )
