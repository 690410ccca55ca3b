"""
Review state of a single card, plus the rating scale.

Phases: NEW -> LEARNING -> REVIEW -> SUSPENDED (leech, terminal)
        REVIEW -> LEARNING on a failed recall

The stored record is flat; phase_of() derives the phase from it.
"""

from dataclasses import asdict, dataclass, fields
from enum import Enum, IntEnum
from typing import Any, Mapping


class Rating(IntEnum):
    AGAIN = 0
    HARD = 1
    GOOD = 2
    EASY = 3


class CardPhase(Enum):
    NEW = 'new'
    LEARNING = 'learning'
    REVIEW = 'review'
    SUSPENDED = 'suspended'


@dataclass(frozen=True)
class SchedulerState:
    ivl_days: int = 0
    ease: float = 2.5
    reps: int = 0
    lapses: int = 0
    due_ts: int = 0
    learning_stage: int = 0
    difficulty: float = 0.5
    suspended: int = 0

    @classmethod
    def new(cls, now: int) -> 'SchedulerState':
        """Fresh card, presentable from `now`."""
        return cls(due_ts=now)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'SchedulerState':
        """Build from a DB row or dict; extra keys (card_id, front, ...) are ignored."""
        return cls(
            ivl_days=int(row['ivl_days']),
            ease=float(row['ease']),
            reps=int(row['reps']),
            lapses=int(row['lapses']),
            due_ts=int(row['due_ts']),
            learning_stage=int(row['learning_stage']),
            difficulty=float(row['difficulty']),
            suspended=int(row['suspended']),
        )

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    @property
    def phase(self) -> CardPhase:
        return phase_of(self)


STATE_FIELDS = tuple(f.name for f in fields(SchedulerState))


def phase_of(state: SchedulerState) -> CardPhase:
    if state.suspended:
        return CardPhase.SUSPENDED
    if state.reps == 0 and state.learning_stage == 0:
        return CardPhase.NEW
    if state.learning_stage > 0 or state.reps == 0:
        return CardPhase.LEARNING
    return CardPhase.REVIEW
