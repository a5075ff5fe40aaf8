"""Round state machine for one game session.

Phases:
    SETUP     word lists not loaded yet
    MENU      lists loaded, waiting for the chat feed to connect
    PLAYING   a round is live (or about to start after a clear/skip)
    GAMEOVER  the timer ran out or an admin ended the game

The machine never sleeps or spawns anything itself. Timed work arrives as
`tick()` calls from the driver, and delayed level starts go through the
injected `defer(delay, fn)` callable. Each deferred continuation carries the
epoch it was scheduled in; any later transition bumps the epoch, so a
continuation that fires after the game was stopped, restarted or moved on
is dropped instead of resurrecting a stale round.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

from .catalog import LetterIndex, WordCatalog, as_letter_index
from .difficulty import config_for_level
from .guesses import IGNORED, GuessOutcome, process_guess
from .hints import TickSignal, apply_tick, reveal_pass
from .leaderboard import Leaderboard
from .scoring import shuffle_word
from .selector import (
    ROOT_POOL_FLOOR,
    ROOT_SEARCH_ATTEMPTS,
    TARGET_QUOTA,
    RoundGenerationError,
    normalize_priority_words,
    select_root,
)
from .state import RECENT_ACTIVITY_LIMIT, ActivityLog, RoundState, build_round_state

Defer = Callable[[float, Callable[[], None]], None]
Notify = Callable[[str, dict], None]

ADMIN_COMMANDS = ('simulate', 'skip', 'jump', 'time', 'end', 'hint')


class Phase(Enum):
    SETUP = 'setup'
    MENU = 'menu'
    PLAYING = 'playing'
    GAMEOVER = 'gameover'


@dataclass(frozen=True)
class MachineSettings:
    clear_delay: float = 2.0
    skip_delay: float = 0.5
    time_step: int = 30
    reshuffle_interval: int = 15
    recent_limit: int = RECENT_ACTIVITY_LIMIT
    root_attempts: int = ROOT_SEARCH_ATTEMPTS
    pool_floor: int = ROOT_POOL_FLOOR
    target_quota: int = TARGET_QUOTA

    @classmethod
    def from_config(cls, config) -> 'MachineSettings':
        return cls(
            clear_delay=float(config.get('LEVEL_CLEAR_DELAY_SEC', cls.clear_delay)),
            skip_delay=float(config.get('ADMIN_SKIP_DELAY_SEC', cls.skip_delay)),
            time_step=int(config.get('ADMIN_TIME_STEP_SEC', cls.time_step)),
            reshuffle_interval=int(config.get('RESHUFFLE_INTERVAL_SEC', cls.reshuffle_interval)),
            recent_limit=int(config.get('RECENT_ACTIVITY_LIMIT', cls.recent_limit)),
            root_attempts=int(config.get('ROOT_SEARCH_ATTEMPTS', cls.root_attempts)),
            pool_floor=int(config.get('ROOT_POOL_FLOOR', cls.pool_floor)),
            target_quota=int(config.get('TARGET_QUOTA', cls.target_quota)),
        )


def run_now(delay: float, fn: Callable[[], None]) -> None:
    fn()


def _discard(event: str, payload: dict) -> None:
    pass


class RoundStateMachine:

    def __init__(self, channel: str = 'default', settings: Optional[MachineSettings] = None,
                 defer: Optional[Defer] = None, notify: Optional[Notify] = None,
                 rng: Optional[random.Random] = None, logger: Optional[logging.Logger] = None,
                 priority_words: Iterable[str] = ()):
        self.channel = channel
        self.settings = settings or MachineSettings()
        self.phase = Phase.SETUP
        self.catalog = WordCatalog()
        self.dictionary = LetterIndex()
        self.round: Optional[RoundState] = None
        self.level = 0
        self.score = 0
        self.leaderboard = Leaderboard()
        self.activity = ActivityLog(self.settings.recent_limit)
        self.priority_words = normalize_priority_words(priority_words)
        self.timer_running = False
        self._defer = defer or run_now
        self._notify = notify or _discard
        self._rng = rng or random.Random()
        self._log = logger or logging.getLogger(__name__)
        self._epoch = 0
        self._ticks = 0

    # ---- setup / menu ----

    def load_words(self, catalog: WordCatalog, dictionary: Iterable[str]) -> bool:
        if self.phase not in (Phase.SETUP, Phase.MENU):
            self._log.warning(f"[words-ignored] channel={self.channel} phase={self.phase.value}")
            return False
        dictionary = as_letter_index(dictionary)
        if not len(catalog) or not len(dictionary):
            self._log.warning(
                f"[words-missing] channel={self.channel} targets={len(catalog)} dictionary={len(dictionary)}"
            )
            return False
        self.catalog = catalog
        self.dictionary = dictionary
        self.phase = Phase.MENU
        self._notify('state_update', {'phase': self.phase.value})
        return True

    def set_priority_words(self, words: Iterable[str]) -> list:
        self.priority_words = normalize_priority_words(words)
        return list(self.priority_words)

    def connect(self) -> bool:
        """The chat feed is live: start level 1."""
        if self.phase != Phase.MENU:
            return False
        self._reset_scores()
        return self.start_level(1)

    # ---- levels ----

    def start_level(self, level: int) -> bool:
        config = config_for_level(level)
        try:
            selection = select_root(
                self.catalog,
                self.dictionary,
                config,
                priority_words=self.priority_words,
                rng=self._rng,
                attempts=self.settings.root_attempts,
                pool_floor=self.settings.pool_floor,
                quota=self.settings.target_quota,
            )
        except RoundGenerationError as exc:
            self._epoch += 1
            self.timer_running = False
            self.round = None
            self._log.error(f"[level-abort] channel={self.channel} level={level} reason={exc}")
            self._notify('state_update', {'phase': self.phase.value, 'error': 'no playable words'})
            return False

        self._epoch += 1
        self.level = level
        self.round = build_round_state(level, config, selection, self._rng)
        self.activity.clear()
        self._ticks = 0
        self.timer_running = True
        self.phase = Phase.PLAYING
        self._log.info(
            f"[level-start] channel={self.channel} level={level} root={self.round.root} "
            f"targets={len(selection.targets)} bonuses={len(selection.bonuses)} duration={config.duration_seconds}s"
        )
        self._notify('level_started', {'level': level, 'scrambled': self.round.scrambled})
        return True

    def _defer_level(self, level: int, delay: float) -> None:
        self._epoch += 1
        token = self._epoch

        def resume():
            self._resume_level(token, level)

        self._defer(delay, resume)

    def _resume_level(self, token: int, level: int) -> bool:
        if token != self._epoch or self.phase != Phase.PLAYING:
            self._log.info(
                f"[timer-abort] channel={self.channel} level={level} token={token} "
                f"epoch={self._epoch} phase={self.phase.value}"
            )
            return False
        return self.start_level(level)

    def _game_over(self, reason: str) -> None:
        self._epoch += 1
        self.timer_running = False
        self.phase = Phase.GAMEOVER
        self._log.info(f"[game-over] channel={self.channel} level={self.level} score={self.score} reason={reason}")
        self._notify('game_over', {'level': self.level, 'score': self.score, 'reason': reason})

    def stop(self) -> bool:
        """Leave the game for the menu, dropping the round and all scores."""
        if self.phase not in (Phase.PLAYING, Phase.GAMEOVER):
            return False
        self._epoch += 1
        self.timer_running = False
        self.round = None
        self.level = 0
        self._reset_scores()
        self.phase = Phase.MENU
        self._log.info(f"[stop] channel={self.channel}")
        self._notify('state_update', {'phase': self.phase.value})
        return True

    def restart(self) -> bool:
        if self.phase != Phase.GAMEOVER:
            return False
        self._reset_scores()
        return self.start_level(1)

    def _reset_scores(self) -> None:
        self.score = 0
        self.leaderboard.reset()
        self.activity.clear()

    # ---- events ----

    def tick(self) -> Optional[TickSignal]:
        if self.phase != Phase.PLAYING or not self.timer_running or self.round is None:
            return None
        current = self.round
        if current.remaining_seconds <= 1:
            current.remaining_seconds = 0
            self._game_over('timeout')
            return TickSignal(remaining=0)

        current.remaining_seconds -= 1
        self._ticks += 1
        signal = apply_tick(current, self._rng)
        interval = self.settings.reshuffle_interval
        if interval > 0 and self._ticks % interval == 0:
            current.scrambled = shuffle_word(current.root, self._rng)
        if signal.revealed:
            self._notify('hints_revealed', {'words': len(signal.revealed)})
        if signal.warning:
            self._notify('tick_warning', {'remaining': signal.remaining})
        self._notify('tick', {'remaining': signal.remaining})
        return signal

    def guess(self, text, username: str, override_points: Optional[int] = None) -> GuessOutcome:
        if self.phase != Phase.PLAYING or self.round is None:
            return IGNORED
        outcome = process_guess(self.round, self.leaderboard, self.activity, text, username, override_points)
        if not outcome.accepted:
            return outcome
        self.score += outcome.points
        self._notify('word_found', outcome.activity.to_dict())
        if outcome.cleared:
            self.timer_running = False
            self._log.info(
                f"[level-clear] channel={self.channel} level={self.level} "
                f"remaining={self.round.remaining_seconds}s last={outcome.word} by={username}"
            )
            self._notify('level_cleared', {'level': self.level})
            self._defer_level(self.level + 1, self.settings.clear_delay)
        return outcome

    def shuffle(self) -> Optional[str]:
        if self.round is None:
            return None
        self.round.scrambled = shuffle_word(self.round.root, self._rng)
        self._notify('state_update', {'scrambled': self.round.scrambled})
        return self.round.scrambled

    # ---- admin ----

    def admin(self, command: str, authorized: bool = False, **payload) -> bool:
        """Apply a trusted operator command.

        The caller decides `authorized`; unauthorized commands are dropped
        without a trace in the game state. Returns True if the command
        changed something.
        """
        if not authorized:
            return False
        if self.phase != Phase.PLAYING:
            self._log.info(f"[admin-ignored] channel={self.channel} command={command} phase={self.phase.value}")
            return False
        handler = getattr(self, f"_admin_{command}", None) if command in ADMIN_COMMANDS else None
        if handler is None:
            self._log.warning(f"[admin-unknown] channel={self.channel} command={command}")
            return False
        try:
            applied = handler(**payload)
        except (TypeError, ValueError) as exc:
            self._log.warning(f"[admin-bad-payload] channel={self.channel} command={command} error={exc}")
            return False
        if applied:
            self._log.info(f"[admin] channel={self.channel} command={command}")
        return applied

    def _admin_simulate(self, text='', username='Admin', points=None, **_):
        override = int(points) if points is not None else None
        return self.guess(text, username or 'Admin', override_points=override).accepted

    def _admin_skip(self, **_):
        self.timer_running = False
        self._notify('level_cleared', {'level': self.level, 'skipped': True})
        self._defer_level(self.level + 1, self.settings.skip_delay)
        return True

    def _admin_jump(self, level=None, **_):
        level = int(level)
        if level < 1:
            return False
        return self.start_level(level)

    def _admin_time(self, delta=None, **_):
        if self.round is None:
            return False
        delta = self.settings.time_step if delta is None else int(delta)
        self.round.remaining_seconds = max(0, self.round.remaining_seconds + delta)
        self._notify('tick', {'remaining': self.round.remaining_seconds})
        return True

    def _admin_end(self, **_):
        self._game_over('admin')
        return True

    def _admin_hint(self, **_):
        if self.round is None:
            return False
        revealed = reveal_pass(self.round, self._rng)
        self._notify('hints_revealed', {'words': len(revealed)})
        return True

    # ---- presentation ----

    def snapshot(self, reveal: bool = False) -> dict:
        current = self.round
        data = {
            'channel': self.channel,
            'phase': self.phase.value,
            'level': self.level,
            'score': self.score,
            'timer_running': self.timer_running,
            'leaderboard': self.leaderboard.to_list(),
            'recent': [e.to_dict() for e in self.activity.entries()],
            'round': None,
        }
        if reveal:
            data['priority_words'] = list(self.priority_words)
        if current is None:
            return data

        targets = current.targets()
        bonuses = [w for w in current.words.values() if not w.is_target]
        data['round'] = {
            'level': current.level,
            'root': current.root if reveal else None,
            'scrambled': current.scrambled,
            'remaining_seconds': current.remaining_seconds,
            'duration_seconds': current.config.duration_seconds,
            'config': current.config.to_dict(),
            'words': {
                str(length): [s.to_dict(reveal) for s in group]
                for length, group in current.grouped_targets().items()
            },
            'total_targets': len(targets),
            'words_remaining': sum(1 for s in targets if not s.found),
            'bonus_total': len(bonuses),
            'bonus_found': [s.to_dict() for s in sorted(bonuses, key=lambda s: s.word) if s.found],
        }
        return data
