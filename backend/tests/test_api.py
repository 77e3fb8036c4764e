from quizdini import db
from quizdini.models import Match, Ping


PAIRS = [{'term': 'France', 'definition': 'Paris'}, {'term': 'Peru', 'definition': 'Lima'}]


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_get_match(client, seed_match):
    match_id = seed_match(PAIRS)
    res = client.get(f'/api/match/{match_id}')
    assert res.status_code == 200
    game = res.get_json()
    assert game['id'] == match_id
    assert game['title'] == 'Capitals'
    assert game['author'] == 'Mr. Smith'
    assert game['pairs'] == PAIRS
    assert game['options']['itemsPerBoard'] == 2
    assert 'user_id' not in game


def test_get_match_not_found_returns_empty_object(client):
    res = client.get('/api/match/missing')
    assert res.status_code == 200
    assert res.get_json() == {}


def test_get_match_reads_through_cache(flask_app, client, seed_match):
    match_id = seed_match(PAIRS)
    assert client.get(f'/api/match/{match_id}').get_json()['title'] == 'Capitals'

    # Change the stored document; the cached copy keeps being served
    match = Match.query.filter_by(match_id=match_id).first()
    match.title = 'Renamed'
    db.session.commit()
    assert client.get(f'/api/match/{match_id}').get_json()['title'] == 'Capitals'

    flask_app.extensions['match_cache'].clear()
    assert client.get(f'/api/match/{match_id}').get_json()['title'] == 'Renamed'


def test_not_found_is_not_cached(flask_app, client, seed_match):
    assert client.get('/api/match/later').get_json() == {}
    seed_match(PAIRS, match_id='later')
    assert client.get('/api/match/later').get_json()['id'] == 'later'


def test_cache_can_be_disabled(flask_app, client, seed_match):
    flask_app.extensions['match_cache'] = None
    match_id = seed_match(PAIRS)
    assert client.get(f'/api/match/{match_id}').get_json()['title'] == 'Capitals'
    match = Match.query.filter_by(match_id=match_id).first()
    match.title = 'Renamed'
    db.session.commit()
    assert client.get(f'/api/match/{match_id}').get_json()['title'] == 'Renamed'


def test_generated_match_id(flask_app):
    match = Match(title='No id', pairs=PAIRS)
    db.session.add(match)
    db.session.commit()
    assert match.match_id and len(match.match_id) == 8


def test_create_ping(client):
    results = {'correct': 4, 'incorrect': 1, 'score': 3}
    res = client.post(
        '/api/ping',
        json={'gameId': 'abc123', 'gameType': 'M', 'results': results},
        environ_base={'REMOTE_ADDR': '::ffff:10.1.2.3'},
    )
    assert res.status_code == 200
    ping = res.get_json()
    assert ping['game_id'] == 'abc123'
    assert ping['game_type'] == 'M'
    assert ping['results'] == results
    assert ping['ip_address'] == '10.1.2.3'
    assert ping['create_date']
    assert Ping.query.count() == 1


def test_create_ping_trailing_slash(client):
    res = client.post('/api/ping/', json={'gameId': 'abc123', 'gameType': 'M', 'results': {}})
    assert res.status_code == 200
    assert Ping.query.count() == 1


def test_create_ping_requires_game_id(client):
    res = client.post('/api/ping', json={'gameType': 'M', 'results': {}})
    assert res.status_code == 400
    body = res.get_json()
    assert body['statusCode'] == 400
    assert 'gameId' in body['message']
    assert Ping.query.count() == 0


def test_create_ping_rejects_non_object(client):
    res = client.post('/api/ping', data='nope', content_type='text/plain')
    assert res.status_code == 400


def test_unknown_route_uses_json_errors(client):
    res = client.get('/api/nothing-here')
    assert res.status_code == 404
    body = res.get_json()
    assert body['statusCode'] == 404
    assert body['code'] == 'Not Found'
