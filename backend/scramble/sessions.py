"""One RoundStateMachine per chat channel, plus the lock that serializes it."""

import threading
from collections import deque
from typing import Callable, Dict, Optional, Tuple

from scramble import socketio
from scramble.services.rounds import MachineSettings, RoundStateMachine
from scramble.services.rounds.scheduler import make_deferrer, start_ticker

NAMESPACE = '/ws'
EXTENSION_KEY = 'scramble.sessions'
WORDS_KEY = 'scramble.words'


def normalize_channel(channel) -> str:
    return str(channel or '').strip().upper()


def room_name(channel: str) -> str:
    return f"session:{channel}"


class GameSession:
    """A machine and everything needed to mutate it safely.

    All mutations go through dispatch(): ticks, guesses and admin commands
    each run to completion while holding the lock, and continuations queued
    during a dispatch run before the lock is released.
    """

    def __init__(self, channel: str):
        self.channel = channel
        self.machine: Optional[RoundStateMachine] = None
        self.closed = False
        self.ticker_started = False
        self._lock = threading.Lock()
        self._queued = deque()

    def dispatch(self, fn: Callable[[RoundStateMachine], object]):
        with self._lock:
            if self.closed:
                return None
            result = fn(self.machine)
            while self._queued:
                self._queued.popleft()()
            return result

    def enqueue(self, fn: Callable[[], None]) -> None:
        self._queued.append(fn)

    def snapshot(self, reveal: bool = False) -> dict:
        with self._lock:
            return self.machine.snapshot(reveal=reveal)

    def close(self) -> None:
        with self._lock:
            self.closed = True
            self._queued.clear()
            self.machine.stop()


def _emitter(channel: str):
    room = room_name(channel)

    def notify(event: str, payload: dict) -> None:
        socketio.emit(event, dict(payload, channel=channel), to=room, namespace=NAMESPACE)

    return notify


class SessionRegistry:

    def __init__(self):
        self._sessions: Dict[str, GameSession] = {}
        self._lock = threading.Lock()

    def get(self, channel) -> Optional[GameSession]:
        return self._sessions.get(normalize_channel(channel))

    def get_or_create(self, app, channel) -> Tuple[GameSession, bool]:
        channel = normalize_channel(channel)
        with self._lock:
            session = self._sessions.get(channel)
            if session is not None:
                return session, False
            session = GameSession(channel)
            session.machine = RoundStateMachine(
                channel=channel,
                settings=MachineSettings.from_config(app.config),
                defer=make_deferrer(app, session),
                notify=_emitter(channel),
                logger=app.logger,
                priority_words=app.config.get('PRIORITY_WORDS') or (),
            )
            catalog, dictionary = app.extensions[WORDS_KEY]
            session.machine.load_words(catalog, dictionary)
            self._sessions[channel] = session
        app.logger.info(f"[session-open] channel={channel} phase={session.machine.phase.value}")
        start_ticker(app, session)
        return session, True

    def close(self, app, channel) -> bool:
        channel = normalize_channel(channel)
        with self._lock:
            session = self._sessions.pop(channel, None)
        if session is None:
            return False
        session.close()
        app.logger.info(f"[session-close] channel={channel}")
        return True

    def __len__(self) -> int:
        return len(self._sessions)


def get_registry(app) -> SessionRegistry:
    return app.extensions[EXTENSION_KEY]
