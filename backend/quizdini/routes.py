from flask import Blueprint, jsonify, current_app
from werkzeug.exceptions import HTTPException

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Quizdini match server!'})

@main.app_errorhandler(HTTPException)
def handle_http_error(err):
    return jsonify({
        'statusCode': err.code,
        'message': err.description or err.name,
        'code': err.name,
    }), err.code

@main.app_errorhandler(Exception)
def handle_unexpected_error(err):
    current_app.logger.exception(f"[error] unhandled {type(err).__name__}: {err}")
    return jsonify({
        'statusCode': 500,
        'message': str(err) or 'Internal Server Error',
        'code': None,
    }), 500
