"""Coerce loosely shaped chat events into (text, username).

Relays forward whatever their chat provider sends: a dict or a JSON string,
with the text under `content` or `message` and the author under
`sender.username` or `user.username`. Nothing past this module sees those
shapes.
"""

import json
from typing import Any, Optional, Tuple

UNKNOWN_USER = 'Unknown'
MAX_USERNAME_LEN = 64
TEXT_KEYS = ('content', 'message', 'text')


def _username(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        value = value.get('username')
    if isinstance(value, str) and value.strip():
        return value.strip()[:MAX_USERNAME_LEN]
    return None


def coerce_chat_payload(data: Any) -> Optional[Tuple[str, str]]:
    if isinstance(data, (bytes, bytearray)):
        data = data.decode('utf-8', 'replace')
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except ValueError:
            return None
    if not isinstance(data, dict):
        return None

    text = next((v for v in (data.get(k) for k in TEXT_KEYS) if isinstance(v, str) and v.strip()), None)
    if text is None:
        return None
    user = (
        _username(data.get('sender'))
        or _username(data.get('user'))
        or _username(data.get('username'))
        or UNKNOWN_USER
    )
    return text, user
