import random
from collections import Counter
from typing import Optional

LETTER_POINTS = {
    'A': 1, 'B': 3, 'C': 3, 'D': 2, 'E': 1, 'F': 4, 'G': 2, 'H': 4, 'I': 1,
    'J': 8, 'K': 5, 'L': 1, 'M': 3, 'N': 1, 'O': 1, 'P': 3, 'Q': 10, 'R': 1,
    'S': 1, 'T': 1, 'U': 1, 'V': 4, 'W': 4, 'X': 8, 'Y': 4, 'Z': 10,
}

SHUFFLE_ATTEMPTS = 5


def word_score(word: str) -> int:
    """Scrabble letter values summed, times ten. Unknown characters score 0."""
    return sum(LETTER_POINTS.get(ch, 0) for ch in word.upper()) * 10


def letter_counts(word: str) -> Counter:
    return Counter(word)


def can_form(word: str, source_counts: Counter) -> bool:
    """True if `word` uses no letter more often than `source_counts` allows.

    Order is irrelevant: this is a multiset-subset test, not a substring test.
    """
    needed = Counter(word)
    for ch, count in needed.items():
        if source_counts.get(ch, 0) < count:
            return False
    return True


def shuffle_word(word: str, rng: Optional[random.Random] = None) -> str:
    """Return a permutation of `word`, preferring one that differs from it.

    Gives up after SHUFFLE_ATTEMPTS tries, so words like 'AAAA' come back
    unchanged.
    """
    if len(word) < 2:
        return word
    rng = rng or random
    letters = list(word)
    for _ in range(SHUFFLE_ATTEMPTS):
        rng.shuffle(letters)
        if ''.join(letters) != word:
            break
    return ''.join(letters)
