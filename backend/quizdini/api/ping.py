from flask import Blueprint, jsonify, request, abort
from quizdini.services.telemetry import record_ping, MATCH_GAME_TYPE

ping = Blueprint('ping', __name__)


@ping.route('', methods=['POST'])
@ping.route('/', methods=['POST'])
def create_ping():
    """
    Stores the final results of one play session.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, description='Request body must be a JSON object')
    game_id = data.get('gameId')
    if not game_id:
        abort(400, description='gameId is required')

    record = record_ping(
        game_id=str(game_id),
        game_type=data.get('gameType') or MATCH_GAME_TYPE,
        results=data.get('results'),
        ip_address=request.remote_addr,
    )
    return jsonify(record.to_dict())
