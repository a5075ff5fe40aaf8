from flask import Blueprint, current_app, jsonify

from scramble.sessions import WORDS_KEY, get_registry

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Chat Scramble game server!'})

@main.route('/health')
def health():
    catalog, dictionary = current_app.extensions[WORDS_KEY]
    return jsonify({
        'status': 'ok',
        'targets': len(catalog),
        'dictionary': len(dictionary),
        'sessions': len(get_registry(current_app)),
    })
