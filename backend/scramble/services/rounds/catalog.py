from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, Iterable, Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class TargetWordEntry:
    word: str
    rank: int
    eligible: bool = True


@dataclass(frozen=True)
class WordCatalog:
    """Ranked target words, in source-list order.

    The loader does not deduplicate; when a word appears more than once the
    last entry shadows the earlier ones in `lookup`.
    """
    entries: Tuple[TargetWordEntry, ...] = ()
    _index: Dict[str, TargetWordEntry] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        for entry in self.entries:
            self._index[entry.word] = entry

    @classmethod
    def from_entries(cls, entries: Iterable[TargetWordEntry]) -> 'WordCatalog':
        return cls(tuple(entries))

    def lookup(self, word: str) -> Optional[TargetWordEntry]:
        return self._index.get(word)

    def __len__(self) -> int:
        return len(self.entries)


def signature(word: str) -> str:
    return ''.join(sorted(word))


class LetterIndex:
    """Dictionary words grouped by their sorted letters.

    A word is formable from a root iff its signature is the signature of
    some sub-multiset of the root, so `subwords` enumerates those (at most
    2**len(root)) instead of scanning the whole dictionary.
    """

    def __init__(self, words: Iterable[str] = ()):
        groups: Dict[str, List[str]] = {}
        for word in set(words):
            groups.setdefault(signature(word), []).append(word)
        self._groups: Dict[str, Tuple[str, ...]] = {k: tuple(sorted(v)) for k, v in groups.items()}
        self._size = sum(len(v) for v in self._groups.values())

    def subwords(self, root: str) -> List[str]:
        letters = sorted(root)
        seen = set()
        found: List[str] = []
        for size in range(1, len(letters) + 1):
            for combo in combinations(letters, size):
                key = ''.join(combo)
                if key in seen:
                    continue
                seen.add(key)
                found.extend(self._groups.get(key, ()))
        return found

    def __contains__(self, word) -> bool:
        return isinstance(word, str) and word in self._groups.get(signature(word), ())

    def __iter__(self) -> Iterator[str]:
        for words in self._groups.values():
            yield from words

    def __len__(self) -> int:
        return self._size


def as_letter_index(dictionary: Iterable[str]) -> LetterIndex:
    return dictionary if isinstance(dictionary, LetterIndex) else LetterIndex(dictionary)
