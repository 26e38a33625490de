from flask import Blueprint, jsonify, request, current_app
from boxer.services.leaderboard import (
    InvalidName,
    InvalidScore,
    LeaderboardError,
    NetworkError,
    RejectedWrite,
    StorageUnavailable,
    get_leaderboard,
)


leaderboard = Blueprint('leaderboard', __name__)

_STATUS_BY_ERROR = (
    (InvalidName, 400),
    (InvalidScore, 400),
    (RejectedWrite, 422),
    (NetworkError, 503),
    (StorageUnavailable, 503),
)


@leaderboard.errorhandler(LeaderboardError)
def handle_leaderboard_error(exc):
    status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 500)
    current_app.logger.warning(f"[leaderboard-error] kind={exc.kind} status={status}: {exc}")
    return jsonify({'error': str(exc), 'kind': exc.kind, 'retryable': exc.retryable}), status


def _int_arg(name):
    """Integer query argument, None when absent. Raises ValueError when malformed."""
    raw = request.args.get(name)
    if raw is None:
        return None
    return int(raw)


@leaderboard.route('', methods=['GET'])
def list_entries():
    try:
        limit = _int_arg('limit')
    except ValueError:
        limit = -1
    if limit is not None and limit < 0:
        return jsonify({'error': 'limit must be a non-negative integer'}), 400
    board = get_leaderboard()
    entries = board.store.list(limit=limit)
    return jsonify({
        'backend': board.store.backend,
        'entries': [e.to_dict() for e in entries],
    })


@leaderboard.route('', methods=['POST'])
def submit_entry():
    data = request.get_json(silent=True) or {}
    result = get_leaderboard().gateway.submit(data.get('name'), data.get('score'), data.get('rank'))
    return jsonify(result.to_dict()), 201


@leaderboard.route('/position', methods=['GET'])
def position():
    try:
        score = _int_arg('score')
    except ValueError:
        score = None
    if score is None:
        return jsonify({'error': 'score must be an integer'}), 400
    return jsonify({'score': score, 'position': get_leaderboard().ranking.position_of(score)})
