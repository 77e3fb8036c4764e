from flask_socketio import emit
from flask import current_app, request
from quizdini import socketio
from quizdini.services.catalog import fetch_match
from quizdini.services.match.scheduler import scheduler_for
from quizdini.services.match.session import MatchSession
from quizdini.services.telemetry import make_reporter
from typing import Dict, Optional


# One match session per connected socket
_sid_to_session: Dict[str, MatchSession] = {}


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _current_session() -> Optional[MatchSession]:
    session = _sid_to_session.get(_get_sid())
    if session is None:
        emit('error', {'message': 'No match loaded'})
    return session


def _emitter(sid: str, namespace: str):
    # Use socketio.emit since sessions also emit from background timers
    def _emit(event, payload):
        socketio.emit(event, payload, to=sid, namespace=namespace)
    return _emit


def _end_session(sid: str) -> None:
    session = _sid_to_session.pop(sid, None)
    if session is not None:
        session.teardown()


def get_session(sid: str) -> Optional[MatchSession]:
    return _sid_to_session.get(sid)


def handle_connect(auth=None):
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(reason=None):
    _end_session(_get_sid())


def handle_load_match(data=None):
    match_id = (data or {}).get('match_id')
    if not match_id:
        emit('error', {'message': 'match_id is required'})
        return
    definition = fetch_match(str(match_id))
    if not definition:
        emit('match_not_found', {'match_id': match_id})
        return

    sid = _get_sid()
    _end_session(sid)
    app = current_app._get_current_object()
    cfg = app.config
    try:
        session = MatchSession(
            definition,
            emit=_emitter(sid, request.namespace),
            scheduler=scheduler_for(app, socketio),
            reporter=make_reporter(app, str(match_id), request.remote_addr),
            interval_ms=int(cfg.get('TIMER_INTERVAL_MS', 100)),
            enter_delay_ms=int(cfg.get('BOARD_ENTER_DELAY_MS', 500)),
            round_settle_ms=int(cfg.get('ROUND_SETTLE_MS', 500)),
            game_over_settle_ms=int(cfg.get('GAME_OVER_SETTLE_MS', 1000)),
        )
    except ValueError as exc:
        emit('error', {'message': str(exc)})
        return
    _sid_to_session[sid] = session
    app.logger.info(f"[match-loaded] sid={sid} match={match_id}")
    emit('match_loaded', {'match': definition, 'state': session.snapshot()})


def handle_start(data=None):
    session = _current_session()
    if session:
        session.start()


def handle_play_again(data=None):
    session = _current_session()
    if session:
        session.play_again()


def handle_board_entered(data=None):
    session = _current_session()
    if session:
        session.board_entered()


def handle_drop(data=None):
    data = data or {}
    session = _current_session()
    if session:
        session.drop(data.get('term_id'), data.get('definition_id'))


def handle_tile_exited(data=None):
    data = data or {}
    session = _current_session()
    if session:
        session.tile_exited(data.get('tile_id'), data.get('role'))


_HANDLERS = {
    'connect': handle_connect,
    'disconnect': handle_disconnect,
    'load_match': handle_load_match,
    'start': handle_start,
    'play_again': handle_play_again,
    'board_entered': handle_board_entered,
    'drop': handle_drop,
    'tile_exited': handle_tile_exited,
}


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    for event, handler in _HANDLERS.items():
        socketio.on_event(event, handler, namespace='/ws')

    if testing:
        # Test-only mirror on default namespace
        for event, handler in _HANDLERS.items():
            socketio.on_event(event, handler, namespace='/')
