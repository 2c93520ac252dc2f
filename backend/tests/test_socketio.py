import json

from conftest import FixedDraw


def _events(sio_client, name='game_event'):
    return [pkt['args'][0] for pkt in sio_client.get_received('/ws') if pkt['name'] == name]


def test_socket_connect_registers_and_greets(sio_client, engine):
    assert sio_client.is_connected('/ws')
    events = _events(sio_client)
    # manual mode keeps betting open, so the greeting is a countdown
    assert [e['type'] for e in events] == ['COUNTDOWN']
    assert 'timeRemaining' in events[0]
    assert len(engine.connections) == 1


def test_bet_event_reaches_engine_and_result_comes_back(sio_client, engine):
    sio_client.get_received('/ws')
    engine.draw_source = FixedDraw(6)

    sio_client.emit('bet', {'nickname': 'Alice', 'betAmount': 100, 'pickedNumber': 6}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'bet_received' for pkt in received)
    assert len(engine.bets) == 1

    engine.resolve_round()
    events = _events(sio_client)
    assert [e['type'] for e in events] == ['ROUND_RESULT', 'ROUND_END']
    result = events[0]
    assert result['winningNumber'] == 6
    assert abs(result['winning'] - 990.0) < 1e-6
    assert result['winners'][0]['nickname'] == 'Alice'
    assert 'timeRemaining' not in result


def test_text_frame_bet_is_accepted(sio_client, engine):
    sio_client.send(json.dumps({'nickname': 'Bob', 'betAmount': 5.5, 'pickedNumber': 2}), namespace='/ws')
    bet = next(iter(engine.bets.snapshot()))
    assert bet.nickname == 'Bob'
    assert bet.bet_amount == 5.5


def test_malformed_frame_is_dropped_silently(sio_client, engine):
    sio_client.get_received('/ws')
    sio_client.send('not json at all', namespace='/ws')
    sio_client.emit('bet', {'nickname': 'Eve', 'betAmount': 'lots', 'pickedNumber': 1}, namespace='/ws')
    sio_client.emit('bet', {'nickname': 'Eve', 'betAmount': 10 ** 400, 'pickedNumber': 1}, namespace='/ws')
    assert len(engine.bets) == 0
    assert sio_client.get_received('/ws') == []


def test_bet_after_window_closed_gets_error(sio_client, engine):
    engine.resolve_round()
    sio_client.get_received('/ws')

    sio_client.emit('bet', {'nickname': 'Alice', 'betAmount': 10, 'pickedNumber': 3}, namespace='/ws')
    events = _events(sio_client)
    assert [e['type'] for e in events] == ['ERROR']
    assert len(engine.bets) == 0


def test_disconnect_unregisters_and_forfeits_bet(flask_app, sio_client, engine):
    from guessnumber import socketio as _sio
    other = _sio.test_client(flask_app, namespace='/ws')
    other.emit('bet', {'nickname': 'Quitter', 'betAmount': 10, 'pickedNumber': 3}, namespace='/ws')
    assert len(engine.connections) == 2
    assert len(engine.bets) == 1

    other.disconnect(namespace='/ws')

    assert len(engine.connections) == 1
    assert len(engine.bets) == 0
    # remaining client still gets broadcasts
    sio_client.get_received('/ws')
    engine.resolve_round()
    assert [e['type'] for e in _events(sio_client)] == ['ROUND_RESULT', 'ROUND_END']
