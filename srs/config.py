"""
Scheduler policy: every tunable number the scheduler uses, in one place.

DEFAULT_CONFIG reproduces the reference curve:
  learning ladder 10m -> 1h, leech after 8 lapses,
  difficulty drift +0.12 / +0.06 / -0.02 / -0.08 for Again / Hard / Good / Easy,
  ease = clamp(2.5 - difficulty * 1.2, 1.3, 2.6).
"""

from dataclasses import dataclass

MINUTE_MS = 60_000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 86_400_000


@dataclass(frozen=True)
class SchedulerConfig:
    # Short steps for new and lapsed cards, in milliseconds
    learning_steps_ms: tuple[int, ...] = (10 * MINUTE_MS, 60 * MINUTE_MS)

    # Auto-suspend once lapses reach this
    leech_lapses: int = 8

    # Indexed by rating (Again, Hard, Good, Easy)
    difficulty_deltas: tuple[float, float, float, float] = (0.12, 0.06, -0.02, -0.08)

    ease_base: float = 2.5
    ease_per_difficulty: float = 1.2
    min_ease: float = 1.3
    max_ease: float = 2.6

    # Easy straight out of learning: 2 + 2 * ease days
    easy_graduation_base: float = 2.0
    easy_graduation_per_ease: float = 2.0

    # Review-mode interval multipliers
    lapse_interval_factor: float = 0.5
    hard_base: float = 0.7
    hard_per_difficulty: float = 0.1
    good_base: float = 1.0
    good_per_ease: float = 0.5
    easy_base: float = 1.2
    easy_per_ease: float = 0.8

    def __post_init__(self):
        if not self.learning_steps_ms:
            raise ValueError("learning_steps_ms needs at least one step")
        if any(step <= 0 for step in self.learning_steps_ms):
            raise ValueError(f"learning steps must be positive, got {self.learning_steps_ms}")
        if self.leech_lapses < 1:
            raise ValueError(f"leech_lapses must be >= 1, got {self.leech_lapses}")
        if len(self.difficulty_deltas) != 4:
            raise ValueError("difficulty_deltas needs one entry per rating (4)")
        if self.min_ease > self.max_ease:
            raise ValueError(f"min_ease {self.min_ease} is above max_ease {self.max_ease}")

    @classmethod
    def from_minutes(cls, steps_min, leech_lapses: int = 8) -> 'SchedulerConfig':
        """Build a config from a ladder given in minutes, e.g. [10, 60]."""
        return cls(
            learning_steps_ms=tuple(int(m * MINUTE_MS) for m in steps_min),
            leech_lapses=leech_lapses,
        )


DEFAULT_CONFIG = SchedulerConfig()
