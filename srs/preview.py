"""Interval previews for the rating buttons."""

from srs.config import DAY_MS, DEFAULT_CONFIG, HOUR_MS, MINUTE_MS, SchedulerConfig
from srs.scheduler import now_ms, schedule
from srs.state import Rating, SchedulerState


def schedule_all_ratings(
    state: SchedulerState,
    now: int | None = None,
    config: SchedulerConfig = DEFAULT_CONFIG,
) -> dict[Rating, SchedulerState]:
    """Next state for every rating, all computed against the same `now`."""
    if now is None:
        now = now_ms()
    return {rating: schedule(state, rating, now, config) for rating in Rating}


def format_interval(result: SchedulerState, now: int) -> str:
    """Human-readable time until `result` is due, e.g. '10m', '1h', '6d', '2mo', '1.2y'."""
    if result.suspended:
        return 'leech'

    wait = max(0, result.due_ts - now)
    if wait < HOUR_MS:
        return f"{max(1, round(wait / MINUTE_MS))}m"
    if wait < DAY_MS:
        return f"{round(wait / HOUR_MS)}h"

    days = round(wait / DAY_MS)
    if days < 30:
        return f"{days}d"
    elif days < 365:
        return f"{round(days / 30)}mo"
    return f"{round(days / 365, 1)}y"
