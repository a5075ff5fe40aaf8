import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Word lists; leave both unset to play on the built-in fallback catalog
    TARGETS_PATH = os.environ.get('TARGETS_PATH')
    DICTIONARY_PATH = os.environ.get('DICTIONARY_PATH')
    # bcrypt hash of the operator key (see `flask hash-admin-key`). Unset disables admin.
    ADMIN_KEY_HASH = os.environ.get('ADMIN_KEY_HASH')
    # Comma-separated words forced into the target set whenever formable
    PRIORITY_WORDS = [w for w in os.environ.get('PRIORITY_WORDS', '').split(',') if w.strip()]
    # Timers (seconds)
    TICK_INTERVAL_SEC = float(os.environ.get('TICK_INTERVAL_SEC', '1.0'))
    LEVEL_CLEAR_DELAY_SEC = float(os.environ.get('LEVEL_CLEAR_DELAY_SEC', '2.0'))
    ADMIN_SKIP_DELAY_SEC = float(os.environ.get('ADMIN_SKIP_DELAY_SEC', '0.5'))
    ADMIN_TIME_STEP_SEC = int(os.environ.get('ADMIN_TIME_STEP_SEC', '30'))
    RESHUFFLE_INTERVAL_SEC = int(os.environ.get('RESHUFFLE_INTERVAL_SEC', '15'))
    # Round generation
    ROOT_SEARCH_ATTEMPTS = int(os.environ.get('ROOT_SEARCH_ATTEMPTS', '30'))
    ROOT_POOL_FLOOR = int(os.environ.get('ROOT_POOL_FLOOR', '50'))
    TARGET_QUOTA = int(os.environ.get('TARGET_QUOTA', '12'))
    # Display
    RECENT_ACTIVITY_LIMIT = int(os.environ.get('RECENT_ACTIVITY_LIMIT', '8'))
    # Optional: debounce admin commands (ms). 0 disables.
    ADMIN_DEBOUNCE_MS = int(os.environ.get('ADMIN_DEBOUNCE_MS', '0'))
    # Optional: heartbeat interval for timer worker logs (ticks). 0 disables.
    TIMER_HEARTBEAT_SEC = int(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
