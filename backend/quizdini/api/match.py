from flask import Blueprint, jsonify
from quizdini.services.catalog import fetch_match

match = Blueprint('match', __name__)


@match.route('/<string:match_id>', methods=['GET'])
def get_match(match_id):
    """
    Returns the match definition, or an empty object when no match has this id.
    """
    definition = fetch_match(match_id)
    # Empty object signifies not found; clients render a not-found view
    return jsonify(definition or {})
