from quizdini import socketio_events
from quizdini.models import Ping


PAIRS = [{'term': 'A', 'definition': 'X'}, {'term': 'B', 'definition': 'Y'}]


def events_named(received, name):
    return [pkt['args'][0] for pkt in received if pkt['name'] == name]


def only_session():
    sessions = list(socketio_events._sid_to_session.values())
    assert len(sessions) == 1
    return sessions[0]


def test_socket_connect(sio_client):
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'connected' for pkt in received)


def test_load_match_not_found(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('load_match', {'match_id': 'missing'}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert events_named(received, 'match_not_found') == [{'match_id': 'missing'}]


def test_load_match_requires_id(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('load_match', {}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert events_named(received, 'error')


def test_events_before_load_report_error(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('start', {}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert events_named(received, 'error') == [{'message': 'No match loaded'}]


def test_full_game_flow(sio_client, seed_match):
    match_id = seed_match(PAIRS)
    sio_client.get_received('/ws')

    sio_client.emit('load_match', {'match_id': match_id}, namespace='/ws')
    loaded = events_named(sio_client.get_received('/ws'), 'match_loaded')
    assert loaded[0]['match']['title'] == 'Capitals'
    assert loaded[0]['state']['phase'] == 'splash'

    sio_client.emit('start', {}, namespace='/ws')
    sio_client.emit('board_entered', {}, namespace='/ws')
    updates = events_named(sio_client.get_received('/ws'), 'state_update')
    state = updates[-1]
    assert state['phase'] == 'playing'
    assert len(state['terms']) == len(state['definitions']) == 2

    term_a = next(t for t in state['terms'] if t['text'] == 'A')
    def_x = next(d for d in state['definitions'] if d['text'] == 'X')
    sio_client.emit('drop', {'term_id': term_a['id'], 'definition_id': def_x['id']}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert events_named(received, 'drop_result')[0]['matched'] is True
    state = events_named(received, 'state_update')[-1]
    assert (state['correct'], state['score'], state['unmatched']) == (1, 1, 1)

    sio_client.emit('tile_exited', {'tile_id': term_a['id'], 'role': 'term'}, namespace='/ws')
    state = events_named(sio_client.get_received('/ws'), 'state_update')[-1]
    assert all(t['id'] != term_a['id'] for t in state['terms'])

    # Run the clock out
    session = only_session()
    session.scheduler.run_ticks(10)
    session.scheduler.run_delayed()
    received = sio_client.get_received('/ws')
    over = events_named(received, 'game_over')
    assert len(over) == 1
    assert over[0]['correct'] == 1 and over[0]['score'] == 1

    ping = Ping.query.filter_by(game_id=match_id).one()
    assert ping.game_type == 'M'
    assert ping.results['score'] == 1

    # Play again starts a fresh session on the same socket
    sio_client.emit('play_again', {}, namespace='/ws')
    state = events_named(sio_client.get_received('/ws'), 'state_update')[-1]
    assert state['phase'] == 'dealing'
    assert (state['correct'], state['incorrect'], state['score']) == (0, 0, 0)


def test_disconnect_tears_down_session(flask_app, seed_match):
    from quizdini import socketio
    match_id = seed_match(PAIRS)
    client = socketio.test_client(flask_app, namespace='/ws')
    client.emit('load_match', {'match_id': match_id}, namespace='/ws')
    session = only_session()

    client.disconnect(namespace='/ws')
    assert session.closed
    assert socketio_events._sid_to_session == {}
