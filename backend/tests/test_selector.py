import random
import time

import pytest

from scramble.services.rounds.catalog import LetterIndex, TargetWordEntry, WordCatalog
from scramble.services.rounds.difficulty import RoundConfig, config_for_level
from scramble.services.rounds.scoring import can_form, letter_counts
from scramble.services.rounds.selector import (
    NoPlayableWordsError,
    candidate_pool,
    classify,
    formable_words,
    normalize_priority_words,
    select_root,
)

OPEN_CONFIG = RoundConfig(root_length=6, min_target_len=3, max_target_len=6, duration_seconds=100, max_targets=15)

STREAM_WORDS = ['STREAM', 'MASTER', 'STEAM', 'TEAMS', 'MATES', 'MEATS', 'TEAM', 'MATE', 'MEAT', 'TAME',
                'REST', 'STAR', 'ARM', 'ART', 'EAT', 'SEA', 'TEA', 'SET']


class PickInOrder:
    """rng stub: choice() walks the sequence from the start."""

    def __init__(self):
        self.calls = 0

    def choice(self, seq):
        item = seq[self.calls % len(seq)]
        self.calls += 1
        return item


def test_formable_words_use_multiset_subset():
    dictionary = {'MASTER', 'STREAM', 'STEAM', 'TEAM', 'MATTER', 'STREAMS', 'ZEST'}
    assert sorted(formable_words('STREAM', dictionary)) == ['MASTER', 'STEAM', 'STREAM', 'TEAM']


def test_letter_index_matches_a_full_scan():
    dictionary = {'MASTER', 'STREAM', 'STEAM', 'TEAM', 'MATTER', 'STREAMS', 'ZEST', 'ARM', 'RAM', 'MAR', 'MEET'}
    index = LetterIndex(dictionary | {'TEAM'})
    assert len(index) == len(dictionary)
    assert 'RAM' in index
    assert 'ZZZ' not in index
    stream = letter_counts('STREAM')
    assert sorted(index.subwords('STREAM')) == sorted(w for w in dictionary if can_form(w, stream))


def test_root_search_stays_fast_on_large_dictionaries(catalog_of):
    rng = random.Random(0)
    alphabet = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ'
    words = {''.join(rng.choice(alphabet) for _ in range(rng.randint(3, 8))) for _ in range(250000)}
    roots = [''.join(rng.choice(alphabet) for _ in range(6)) for _ in range(60)]
    index = LetterIndex(words)

    started = time.perf_counter()
    # quota is out of reach, so every attempt runs
    selection = select_root(catalog_of(*roots), index, config_for_level(1), rng=random.Random(1), quota=1000)
    elapsed = time.perf_counter() - started
    assert elapsed < 1.0
    assert selection.root in roots


def test_targets_follow_catalog_rank(catalog_of):
    catalog = catalog_of('TEAM', 'STEAM', 'STREAM')
    selection = classify('STREAM', catalog, {'STREAM', 'STEAM', 'TEAM'}, OPEN_CONFIG)
    assert selection.targets == ['TEAM', 'STEAM', 'STREAM']
    assert selection.bonuses == []


def test_words_missing_from_catalog_or_ineligible_become_bonuses(catalog_of):
    catalog = catalog_of('STREAM', 'STEAM', 'TEAM', ineligible=('TEAM',))
    selection = classify('STREAM', catalog, {'STREAM', 'STEAM', 'TEAM', 'MEAT'}, OPEN_CONFIG)
    assert selection.targets == ['STREAM', 'STEAM']
    assert sorted(selection.bonuses) == ['MEAT', 'TEAM']


def test_length_range_and_caps_push_words_to_bonuses(catalog_of):
    catalog = catalog_of('TEAM', 'MATE', 'MEAT', 'STEAM', 'ARM', 'STREAM')
    dictionary = {'TEAM', 'MATE', 'MEAT', 'STEAM', 'ARM', 'STREAM'}
    config = RoundConfig(root_length=6, min_target_len=4, max_target_len=5, duration_seconds=100,
                         max_targets=15, length_caps={4: 2})
    selection = classify('STREAM', catalog, dictionary, config)
    assert selection.targets == ['TEAM', 'MATE', 'STEAM']
    assert sorted(selection.bonuses) == ['ARM', 'MEAT', 'STREAM']


def test_max_targets_caps_the_target_set(catalog_of):
    catalog = catalog_of(*STREAM_WORDS)
    config = RoundConfig(root_length=6, min_target_len=3, max_target_len=6, duration_seconds=100, max_targets=5)
    selection = classify('STREAM', catalog, set(STREAM_WORDS), config)
    assert selection.targets == STREAM_WORDS[:5]
    assert len(selection.bonuses) == len(STREAM_WORDS) - 5


def test_priority_words_bypass_rules_and_are_not_duplicated(catalog_of):
    catalog = catalog_of('STREAM', 'REST', ineligible=('REST',))
    config = RoundConfig(root_length=6, min_target_len=5, max_target_len=6, duration_seconds=100, max_targets=15)
    priority = normalize_priority_words([' rest ', 'REST', 'arm', 'zzz', 'ab', 'st4r', 42])
    assert priority == ['REST', 'ARM', 'ZZZ']
    selection = classify('STREAM', catalog, {'STREAM', 'REST'}, config, priority)
    # REST is ineligible and too short, ARM is not in any list; both forced in
    assert selection.targets == ['REST', 'ARM', 'STREAM']
    assert 'REST' not in selection.bonuses
    assert 'ZZZ' not in selection.targets + selection.bonuses


def test_equal_ranks_break_ties_alphabetically():
    catalog = WordCatalog.from_entries([
        TargetWordEntry('TEAM', 5), TargetWordEntry('MEAT', 5), TargetWordEntry('MATE', 5),
    ])
    selection = classify('STREAM', catalog, {'TEAM', 'MEAT', 'MATE'}, OPEN_CONFIG)
    assert selection.targets == ['MATE', 'MEAT', 'TEAM']


def test_duplicate_catalog_entries_last_one_wins():
    catalog = WordCatalog.from_entries([
        TargetWordEntry('TEAM', 0, True), TargetWordEntry('TEAM', 9, False),
    ])
    assert catalog.lookup('TEAM').rank == 9
    assert len(catalog) == 2
    selection = classify('STREAM', catalog, {'TEAM'}, OPEN_CONFIG)
    assert selection.bonuses == ['TEAM']


def test_pool_widens_when_exact_length_is_scarce(catalog_of):
    catalog = catalog_of('STREAM', 'MASTERS', 'TEA')
    assert [e.word for e in candidate_pool(catalog, 6, floor=50)] == ['STREAM', 'MASTERS']
    assert [e.word for e in candidate_pool(catalog, 6, floor=1)] == ['STREAM']


def test_empty_pool_raises_no_playable_words(catalog_of):
    catalog = catalog_of('TEA', 'ARM')
    with pytest.raises(NoPlayableWordsError):
        select_root(catalog, {'TEA', 'ARM'}, config_for_level(1))


def test_first_root_meeting_quota_wins(catalog_of):
    catalog = catalog_of('GAMING', *STREAM_WORDS)
    rng = PickInOrder()
    selection = select_root(catalog, set(STREAM_WORDS) | {'GAMING'}, OPEN_CONFIG, rng=rng, quota=1)
    assert selection.root == 'GAMING'
    assert rng.calls == 1


def test_best_trial_returned_when_quota_never_met(catalog_of):
    catalog = catalog_of('GAMING', *STREAM_WORDS)
    rng = PickInOrder()
    selection = select_root(catalog, set(STREAM_WORDS) | {'GAMING'}, OPEN_CONFIG,
                            rng=rng, quota=100, attempts=2)
    assert rng.calls == 2
    assert selection.root == 'STREAM'
    assert len(selection.targets) == OPEN_CONFIG.max_targets


@pytest.mark.parametrize('seed', range(10))
def test_generated_rounds_hold_their_invariants(seed, catalog_of):
    words = STREAM_WORDS + ['GAMING', 'AMING', 'GAIN', 'MAIN', 'NAG', 'PLAYER', 'PLAY', 'REPLAY', 'PEARLY',
                            'PALER', 'EARLY', 'LAYER', 'RELAY', 'YEAR', 'PEAR', 'REAL']
    catalog = catalog_of(*words)
    priority = ['pear', 'tame', 'gain']
    selection = select_root(catalog, set(words), config_for_level(1), priority_words=priority,
                            rng=random.Random(seed), quota=12)
    counts = letter_counts(selection.root)
    assert all(can_form(w, counts) for w in selection.targets + selection.bonuses)
    assert not set(selection.targets) & set(selection.bonuses)
    assert len(selection.targets) == len(set(selection.targets))
    for word in normalize_priority_words(priority):
        if can_form(word, counts):
            assert word in selection.targets
