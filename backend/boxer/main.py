from flask import Blueprint, jsonify
from boxer.services.leaderboard import get_leaderboard

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({
        'message': 'Welcome to the Keyboard Boxer server!',
        'leaderboard_backend': get_leaderboard().store.backend,
    })
