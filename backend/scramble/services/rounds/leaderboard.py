from dataclasses import dataclass
from typing import Dict, List


@dataclass
class LeaderboardEntry:
    username: str
    score: int

    def to_dict(self) -> dict:
        return {'username': self.username, 'score': self.score}


class Leaderboard:
    """Cumulative per-user scores for one game session.

    Kept sorted by score, highest first. Ties keep the order in which the
    users first reached that score.
    """

    def __init__(self):
        self._entries: List[LeaderboardEntry] = []
        self._by_user: Dict[str, LeaderboardEntry] = {}

    def credit(self, username: str, points: int) -> LeaderboardEntry:
        if points < 0:
            raise ValueError('points must be non-negative')
        entry = self._by_user.get(username)
        if entry is None:
            entry = LeaderboardEntry(username=username, score=points)
            self._by_user[username] = entry
            self._entries.append(entry)
        else:
            entry.score += points
        self._entries.sort(key=lambda e: e.score, reverse=True)
        return entry

    def score_of(self, username: str) -> int:
        entry = self._by_user.get(username)
        return entry.score if entry else 0

    def reset(self) -> None:
        self._entries.clear()
        self._by_user.clear()

    def entries(self) -> List[LeaderboardEntry]:
        return [LeaderboardEntry(e.username, e.score) for e in self._entries]

    def to_list(self) -> List[dict]:
        return [e.to_dict() for e in self._entries]

    def __len__(self) -> int:
        return len(self._entries)
