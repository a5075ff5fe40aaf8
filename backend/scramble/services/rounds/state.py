import itertools
import random
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Set

from .difficulty import RoundConfig
from .scoring import shuffle_word, word_score
from .selector import RootSelection

RECENT_ACTIVITY_LIMIT = 8
MASK_CHAR = '_'


@dataclass
class WordStatus:
    word: str
    is_target: bool
    points: int
    found: bool = False
    found_by: Optional[str] = None
    revealed_indices: Set[int] = field(default_factory=set)

    def unrevealed(self) -> List[int]:
        return [i for i in range(len(self.word)) if i not in self.revealed_indices]

    def masked(self) -> str:
        if self.found:
            return self.word
        return ''.join(ch if i in self.revealed_indices else MASK_CHAR for i, ch in enumerate(self.word))

    def to_dict(self, reveal: bool = False) -> dict:
        return {
            'word': self.word if (self.found or reveal) else None,
            'display': self.word if reveal else self.masked(),
            'length': len(self.word),
            'is_target': self.is_target,
            'found': self.found,
            'found_by': self.found_by,
            'points': self.points,
            'revealed_indices': sorted(self.revealed_indices),
        }


@dataclass
class RoundState:
    level: int
    root: str
    scrambled: str
    config: RoundConfig
    remaining_seconds: int
    words: Dict[str, WordStatus] = field(default_factory=dict)

    def targets(self) -> List[WordStatus]:
        return [w for w in self.words.values() if w.is_target]

    def unfound_targets(self) -> List[WordStatus]:
        return [w for w in self.words.values() if w.is_target and not w.found]

    def is_cleared(self) -> bool:
        return all(w.found for w in self.targets())

    def grouped_targets(self) -> Dict[int, List[WordStatus]]:
        """Target words by length, longest group first, alphabetical within."""
        groups: Dict[int, List[WordStatus]] = {}
        for status in sorted(self.targets(), key=lambda s: (-len(s.word), s.word)):
            groups.setdefault(len(status.word), []).append(status)
        return groups


def build_round_state(level: int, config: RoundConfig, selection: RootSelection,
                      rng: Optional[random.Random] = None) -> RoundState:
    words: Dict[str, WordStatus] = {}
    for word in selection.targets:
        words[word] = WordStatus(word=word, is_target=True, points=word_score(word))
    for word in selection.bonuses:
        words.setdefault(word, WordStatus(word=word, is_target=False, points=word_score(word)))
    return RoundState(
        level=level,
        root=selection.root,
        scrambled=shuffle_word(selection.root, rng),
        config=config,
        remaining_seconds=config.duration_seconds,
        words=words,
    )


@dataclass(frozen=True)
class ActivityEntry:
    id: int
    word: str
    username: str
    points: int
    is_bonus: bool

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'word': self.word,
            'username': self.username,
            'points': self.points,
            'is_bonus': self.is_bonus,
        }


class ActivityLog:
    """Trailing window of recent finds, for display only."""

    def __init__(self, limit: int = RECENT_ACTIVITY_LIMIT):
        self._entries: Deque[ActivityEntry] = deque(maxlen=limit)
        self._ids = itertools.count(1)

    def append(self, word: str, username: str, points: int, is_bonus: bool) -> ActivityEntry:
        entry = ActivityEntry(id=next(self._ids), word=word, username=username, points=points, is_bonus=is_bonus)
        self._entries.append(entry)
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def entries(self) -> List[ActivityEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
