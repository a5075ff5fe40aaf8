from flask import current_app
from flask_socketio import emit, join_room, leave_room

from scramble import socketio
from scramble.sessions import get_registry, normalize_channel, room_name
from scramble.transport import coerce_chat_payload


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_session(data):
    """Subscribe a display client to a channel's presentation feed."""
    channel = normalize_channel((data or {}).get('channel'))
    if not channel:
        emit('error', {'message': 'channel is required'})
        return
    room = room_name(channel)
    join_room(room)
    session = get_registry(current_app).get(channel)
    emit('joined', {'room': room, 'state': session.snapshot() if session else None})


def handle_leave_session(data):
    channel = normalize_channel((data or {}).get('channel'))
    if not channel:
        emit('error', {'message': 'channel is required'})
        return
    room = room_name(channel)
    leave_room(room)
    emit('left', {'room': room})


def handle_chat_message(data):
    """Chat relay entry: one message from the channel's chat.

    Accepts the raw provider payload (dict or JSON string) with the target
    channel under `channel`; the rest is coerced to (text, username).
    """
    if not isinstance(data, dict):
        emit('error', {'message': 'channel is required'})
        return
    channel = normalize_channel(data.get('channel'))
    session = get_registry(current_app).get(channel) if channel else None
    if session is None:
        emit('error', {'message': 'Session not found'})
        return
    coerced = coerce_chat_payload(data.get('payload', data))
    if coerced is None:
        return
    text, username = coerced
    outcome = session.dispatch(lambda m: m.guess(text, username))
    if outcome and outcome.accepted:
        emit('guess_result', {'word': outcome.word, 'points': outcome.points, 'cleared': outcome.cleared})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_session', handle_join_session, namespace=namespace)
        socketio.on_event('leave_session', handle_leave_session, namespace=namespace)
        socketio.on_event('chat_message', handle_chat_message, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
