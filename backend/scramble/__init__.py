import random

import click
from flask import Flask
from flask_bcrypt import Bcrypt
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

bcrypt = Bcrypt()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    bcrypt.init_app(flask_app)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Word lists are loaded once and shared read-only by every session
    from scramble.services.rounds.catalog import LetterIndex
    from scramble.wordlists import load_word_lists
    from scramble.sessions import EXTENSION_KEY, WORDS_KEY, SessionRegistry
    catalog, dictionary = load_word_lists(
        flask_app.config.get('TARGETS_PATH'),
        flask_app.config.get('DICTIONARY_PATH'),
    )
    dictionary = LetterIndex(dictionary)
    flask_app.extensions[WORDS_KEY] = (catalog, dictionary)
    flask_app.extensions[EXTENSION_KEY] = SessionRegistry()
    flask_app.logger.info(f"[words-loaded] targets={len(catalog)} dictionary={len(dictionary)}")

    # Import and register blueprints here
    from scramble.main import main
    flask_app.register_blueprint(main)

    from scramble.api.sessions import sessions
    flask_app.register_blueprint(sessions, url_prefix='/api/sessions')

    # Register Socket.IO event handlers
    from scramble.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('preview-round')
    @click.option('--level', default=1, show_default=True, type=int, help='Level to generate for.')
    @click.option('--seed', default=None, type=int, help='Seed for a reproducible round.')
    def preview_round_command(level, seed):
        """Generate one round from the loaded word lists and print it."""
        from scramble.services.rounds import RoundGenerationError, config_for_level, select_root
        cfg = flask_app.config
        round_config = config_for_level(level)
        try:
            selection = select_root(
                catalog,
                dictionary,
                round_config,
                priority_words=cfg.get('PRIORITY_WORDS') or (),
                rng=random.Random(seed),
                attempts=int(cfg.get('ROOT_SEARCH_ATTEMPTS', 30)),
                pool_floor=int(cfg.get('ROOT_POOL_FLOOR', 50)),
                quota=int(cfg.get('TARGET_QUOTA', 12)),
            )
        except RoundGenerationError as exc:
            raise click.ClickException(str(exc))
        click.echo(f"Level {level}: root {selection.root} ({round_config.duration_seconds}s)")
        click.echo(f"Targets ({len(selection.targets)}): {', '.join(selection.targets)}")
        click.echo(f"Bonuses ({len(selection.bonuses)}): {', '.join(sorted(selection.bonuses))}")

    @click.command('hash-admin-key')
    @click.argument('key')
    def hash_admin_key_command(key):
        """Print a bcrypt hash of KEY for the ADMIN_KEY_HASH setting."""
        click.echo(bcrypt.generate_password_hash(key).decode('utf-8'))

    flask_app.cli.add_command(preview_round_command)
    flask_app.cli.add_command(hash_admin_key_command)

    return flask_app
