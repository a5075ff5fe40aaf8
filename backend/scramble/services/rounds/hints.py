"""Timed letter hints.

Checkpoints are offsets from the round's configured duration, evaluated on
the remaining time after each one-second decrement:

- half the duration left: reveal one more letter of every unfound target
- HINT_WAVE_SECONDS left: a second reveal pass
- under WARNING_SECONDS left: a feedback-only warning signal each tick
"""

import random
from dataclasses import dataclass, field
from typing import List, Optional

from .state import RoundState

HINT_WAVE_SECONDS = 16
WARNING_SECONDS = 10


@dataclass
class TickSignal:
    remaining: int
    revealed: List[str] = field(default_factory=list)
    warning: bool = False


def reveal_pass(state: RoundState, rng: Optional[random.Random] = None) -> List[str]:
    """Reveal one random hidden letter of each unfound target word.

    Words with nothing left to reveal are skipped. Returns the words that
    changed.
    """
    rng = rng or random
    changed = []
    for status in state.unfound_targets():
        hidden = status.unrevealed()
        if not hidden:
            continue
        status.revealed_indices.add(rng.choice(hidden))
        changed.append(status.word)
    return changed


def reveal_passes_due(remaining: int, duration: int) -> int:
    passes = 0
    if remaining == duration // 2:
        passes += 1
    if remaining == HINT_WAVE_SECONDS:
        passes += 1
    return passes


def apply_tick(state: RoundState, rng: Optional[random.Random] = None) -> TickSignal:
    remaining = state.remaining_seconds
    signal = TickSignal(remaining=remaining, warning=0 < remaining < WARNING_SECONDS)
    for _ in range(reveal_passes_due(remaining, state.config.duration_seconds)):
        for word in reveal_pass(state, rng):
            if word not in signal.revealed:
                signal.revealed.append(word)
    return signal
