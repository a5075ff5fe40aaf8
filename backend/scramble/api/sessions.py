from flask import Blueprint, current_app, jsonify, request
import time

from scramble import bcrypt
from scramble.services.rounds.machine import ADMIN_COMMANDS
from scramble.sessions import get_registry
from scramble.transport import coerce_chat_payload

sessions = Blueprint('sessions', __name__)

_last_admin_action: dict[str, float] = {}


def _session_or_404(channel):
    session = get_registry(current_app).get(channel)
    if session is None:
        return None, (jsonify({'error': 'Session not found'}), 404)
    return session, None


def _is_admin() -> bool:
    """True if the request carries the operator key matching ADMIN_KEY_HASH."""
    key = request.headers.get('X-Admin-Key') or ''
    key_hash = current_app.config.get('ADMIN_KEY_HASH')
    if not key or not key_hash:
        return False
    try:
        return bcrypt.check_password_hash(key_hash, key)
    except ValueError as exc:
        current_app.logger.warning(f"[admin-hash-invalid] error={exc}")
        return False


def _debounced(channel: str, command: str) -> bool:
    debounce_ms = int(current_app.config.get('ADMIN_DEBOUNCE_MS', 0))
    if debounce_ms <= 0:
        return False
    key = f"{channel}:{command}"
    now = time.time() * 1000.0
    last = _last_admin_action.get(key, 0)
    if now - last < debounce_ms:
        return True
    _last_admin_action[key] = now
    return False


@sessions.route('', methods=['POST'])
def open_session():
    """Create the game session for a chat channel (idempotent)."""
    data = request.get_json(silent=True) or {}
    channel = str(data.get('channel') or '').strip()
    if not channel:
        return jsonify({'error': 'channel is required'}), 400
    session, created = get_registry(current_app).get_or_create(current_app._get_current_object(), channel)
    return jsonify(session.snapshot()), 201 if created else 200


@sessions.route('/<string:channel>', methods=['DELETE'])
def close_session(channel):
    if not get_registry(current_app).close(current_app, channel):
        return jsonify({'error': 'Session not found'}), 404
    return jsonify({'message': 'Session closed'})


@sessions.route('/<string:channel>/state', methods=['GET'])
def get_state(channel):
    session, error = _session_or_404(channel)
    if error:
        return error
    reveal = request.args.get('reveal') in ('1', 'true') and _is_admin()
    return jsonify(session.snapshot(reveal=reveal))


@sessions.route('/<string:channel>/connect', methods=['POST'])
def connect_feed(channel):
    """The chat feed for this channel is live: MENU -> PLAYING at level 1."""
    session, error = _session_or_404(channel)
    if error:
        return error
    started = session.dispatch(lambda m: m.connect())
    if not started:
        return jsonify({'error': 'Session is not waiting in the menu', 'state': session.snapshot()}), 409
    return jsonify(session.snapshot())


@sessions.route('/<string:channel>/stop', methods=['POST'])
def stop_game(channel):
    session, error = _session_or_404(channel)
    if error:
        return error
    session.dispatch(lambda m: m.stop())
    return jsonify(session.snapshot())


@sessions.route('/<string:channel>/restart', methods=['POST'])
def restart_game(channel):
    session, error = _session_or_404(channel)
    if error:
        return error
    if not session.dispatch(lambda m: m.restart()):
        return jsonify({'error': 'Game is not over', 'state': session.snapshot()}), 409
    return jsonify(session.snapshot())


@sessions.route('/<string:channel>/shuffle', methods=['POST'])
def shuffle_letters(channel):
    session, error = _session_or_404(channel)
    if error:
        return error
    scrambled = session.dispatch(lambda m: m.shuffle())
    return jsonify({'scrambled': scrambled})


@sessions.route('/<string:channel>/messages', methods=['POST'])
def receive_message(channel):
    """Webhook entry for chat relays; same handling as the socket feed."""
    session, error = _session_or_404(channel)
    if error:
        return error
    coerced = coerce_chat_payload(request.get_json(silent=True))
    if coerced is None:
        return jsonify({'accepted': False})
    text, username = coerced
    outcome = session.dispatch(lambda m: m.guess(text, username))
    return jsonify({
        'accepted': bool(outcome and outcome.accepted),
        'word': outcome.word if outcome else None,
        'points': outcome.points if outcome else 0,
        'is_bonus': outcome.is_bonus if outcome else False,
        'cleared': outcome.cleared if outcome else False,
    })


@sessions.route('/<string:channel>/priority-words', methods=['PUT'])
def set_priority_words(channel):
    session, error = _session_or_404(channel)
    if error:
        return error
    if not _is_admin():
        return jsonify({'accepted': False})
    data = request.get_json(silent=True) or {}
    words = data.get('words')
    if not isinstance(words, list):
        return jsonify({'error': 'words must be a list'}), 400
    applied = session.dispatch(lambda m: m.set_priority_words(words))
    return jsonify({'accepted': True, 'words': applied})


@sessions.route('/<string:channel>/admin/<string:command>', methods=['POST'])
def admin_command(channel, command):
    session, error = _session_or_404(channel)
    if error:
        return error
    if command not in ADMIN_COMMANDS:
        return jsonify({'error': f'Unknown command {command}'}), 404
    authorized = _is_admin()
    if authorized and _debounced(session.channel, command):
        return jsonify({'message': 'debounced'}), 202
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        payload = {}
    payload = {k: v for k, v in payload.items() if k not in ('command', 'authorized')}
    applied = session.dispatch(lambda m: m.admin(command, authorized=authorized, **payload))
    return jsonify({'accepted': bool(applied), 'state': session.snapshot(reveal=authorized)})
