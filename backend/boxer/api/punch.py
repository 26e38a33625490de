from flask import Blueprint, jsonify, request, current_app
from boxer.services.judge import JudgeError
from boxer.services.leaderboard import InvalidScore, classify


punch = Blueprint('punch', __name__)


def _fallback_result(reason: str) -> dict:
    return {
        'score': 0,
        'rank': 'C',
        'comment': f'System error: {reason}',
        'effect': 'none',
    }


@punch.route('/punch', methods=['POST'])
def judge_punch():
    """Score a punch description.

    Collaborator failures still answer 200 with a zero score so the client
    can show a result screen.
    """
    data = request.get_json(silent=True) or {}
    user_input = data.get('user_input')
    if not isinstance(user_input, str) or not user_input.strip():
        return jsonify({'error': 'Invalid input'}), 400
    max_length = int(current_app.config.get('PUNCH_INPUT_MAX_LENGTH', 50))
    if len(user_input) > max_length:
        return jsonify({'error': f'Input must be at most {max_length} characters'}), 400

    judge = current_app.extensions['punch_judge']
    current_app.logger.info(f"[punch] input={user_input!r}")
    try:
        verdict = judge.judge(user_input)
    except JudgeError as exc:
        current_app.logger.warning(f"[punch-fallback] judge failed: {exc}")
        return jsonify(_fallback_result(str(exc)))

    try:
        result = classify(verdict.get('score'), verdict.get('rank'))
    except InvalidScore as exc:
        current_app.logger.warning(f"[punch-fallback] unusable score: {exc}")
        return jsonify(_fallback_result(str(exc)))

    if result.derived:
        current_app.logger.info(f"[punch] rank {verdict.get('rank')!r} replaced by {result.rank} for score={result.score}")
    return jsonify({
        'score': result.score,
        'rank': result.rank,
        'comment': verdict.get('comment', ''),
        'effect': verdict.get('effect', 'none'),
    })
