"""Root word search and subword classification.

The search is a bounded random sample: draw a root, find every dictionary
word formable from its letters, classify them into targets and bonuses, and
stop at the first root that yields enough targets. If none does within the
attempt budget the best trial is returned as-is, so a thin catalog gives a
short round instead of no round.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from .catalog import TargetWordEntry, WordCatalog, as_letter_index
from .difficulty import RoundConfig
from .scoring import can_form, letter_counts

logger = logging.getLogger(__name__)

ROOT_SEARCH_ATTEMPTS = 30
ROOT_POOL_FLOOR = 50
TARGET_QUOTA = 12
MIN_WORD_LEN = 3


class RoundGenerationError(Exception):
    pass


class NoPlayableWordsError(RoundGenerationError):
    """No catalog entry is long enough to serve as a root."""


@dataclass
class RootSelection:
    root: str
    targets: List[str] = field(default_factory=list)
    bonuses: List[str] = field(default_factory=list)


def normalize_priority_words(words: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for raw in words or ():
        if not isinstance(raw, str):
            continue
        word = raw.strip().upper()
        if len(word) < MIN_WORD_LEN or not word.isalpha() or not word.isascii():
            continue
        if word not in seen:
            seen.add(word)
            result.append(word)
    return result


def candidate_pool(catalog: WordCatalog, root_length: int, floor: int = ROOT_POOL_FLOOR) -> List[TargetWordEntry]:
    pool = [e for e in catalog.entries if len(e.word) == root_length]
    if len(pool) < floor:
        pool = [e for e in catalog.entries if len(e.word) >= root_length]
    return pool


def formable_words(root: str, dictionary: Iterable[str]) -> List[str]:
    return as_letter_index(dictionary).subwords(root)


def _rank_key(catalog: WordCatalog):
    def key(word: str):
        entry = catalog.lookup(word)
        if entry is None:
            return (2, 0, word)
        # eligible, common words take the scarce target slots first;
        # equal ranks are broken alphabetically
        return (0 if entry.eligible else 1, entry.rank, word)
    return key


def classify(root: str, catalog: WordCatalog, dictionary: Iterable[str], config: RoundConfig,
             priority_words: Sequence[str] = ()) -> RootSelection:
    counts = letter_counts(root)
    selection = RootSelection(root=root)
    taken = set()

    for word in priority_words:
        if word not in taken and can_form(word, counts):
            selection.targets.append(word)
            taken.add(word)

    remaining = sorted((w for w in formable_words(root, dictionary) if w not in taken), key=_rank_key(catalog))
    per_length: Dict[int, int] = {}
    for word in remaining:
        length = len(word)
        entry = catalog.lookup(word)
        cap = config.cap_for(length)
        if (
            length < config.min_target_len
            or length > config.max_target_len
            or entry is None
            or not entry.eligible
            or (cap is not None and per_length.get(length, 0) >= cap)
            or len(selection.targets) >= config.max_targets
        ):
            selection.bonuses.append(word)
            continue
        selection.targets.append(word)
        per_length[length] = per_length.get(length, 0) + 1
    return selection


def select_root(catalog: WordCatalog, dictionary: Iterable[str], config: RoundConfig,
                priority_words: Iterable[str] = (), rng: Optional[random.Random] = None,
                attempts: int = ROOT_SEARCH_ATTEMPTS, pool_floor: int = ROOT_POOL_FLOOR,
                quota: int = TARGET_QUOTA) -> RootSelection:
    """Pick a root for `config` and split its subwords into targets and bonuses.

    Raises NoPlayableWordsError only when the catalog has no entry of at
    least `config.root_length` letters. Otherwise always returns a
    selection, possibly below `quota`. Pass a prebuilt LetterIndex as
    `dictionary` to skip indexing on every call.
    """
    rng = rng or random.Random()
    pool = candidate_pool(catalog, config.root_length, pool_floor)
    if not pool:
        raise NoPlayableWordsError(f"no catalog word with at least {config.root_length} letters")

    index = as_letter_index(dictionary)
    priority = normalize_priority_words(priority_words)
    best: Optional[RootSelection] = None
    for attempt in range(max(1, attempts)):
        entry = rng.choice(pool)
        trial = classify(entry.word, catalog, index, config, priority)
        if len(trial.targets) >= quota:
            logger.debug(f"[root-found] root={trial.root} targets={len(trial.targets)} attempt={attempt + 1}")
            return trial
        if best is None or len(trial.targets) > len(best.targets):
            best = trial

    logger.info(f"[root-best-effort] root={best.root} targets={len(best.targets)} quota={quota}")
    return best
