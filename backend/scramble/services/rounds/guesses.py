from dataclasses import dataclass
from typing import Optional

from .leaderboard import Leaderboard
from .state import ActivityEntry, ActivityLog, RoundState


@dataclass(frozen=True)
class GuessOutcome:
    accepted: bool = False
    word: Optional[str] = None
    username: Optional[str] = None
    points: int = 0
    is_bonus: bool = False
    cleared: bool = False
    activity: Optional[ActivityEntry] = None


IGNORED = GuessOutcome()


def normalize_guess(text) -> str:
    if text is None:
        return ''
    return str(text).strip().upper()


def process_guess(state: RoundState, leaderboard: Leaderboard, activity: ActivityLog,
                  text, username: str, override_points: Optional[int] = None) -> GuessOutcome:
    """Resolve one guess against the round.

    Unknown, empty and already-found words are ignored; the first finder of
    a word keeps it. `override_points` replaces the word's value at the
    moment it is accepted (zero-point admin finds).
    """
    word = normalize_guess(text)
    if not word:
        return IGNORED
    status = state.words.get(word)
    if status is None or status.found:
        return IGNORED

    status.found = True
    status.found_by = username
    if override_points is not None:
        status.points = max(0, int(override_points))
    points = status.points

    entry = activity.append(word, username, points, is_bonus=not status.is_target)
    if points > 0:
        leaderboard.credit(username, points)

    return GuessOutcome(
        accepted=True,
        word=word,
        username=username,
        points=points,
        is_bonus=not status.is_target,
        cleared=status.is_target and state.is_cleared(),
        activity=entry,
    )
