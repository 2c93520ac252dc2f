from guessnumber.models import Phase


def test_hello_returns_greeting(client):
    res = client.get('/hello')
    assert res.status_code == 200
    assert res.get_data(as_text=True) == 'Hello, Guess Number!'


def test_app_builds_manual_engine_in_tests(flask_app, engine):
    assert engine.manual
    assert engine.phase is Phase.BETTING
    assert not engine.running


def test_simulate_rtp_command(flask_app):
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['simulate-rtp', '--rounds', '2000', '--workers', '2', '--seed', '5'])
    assert result.exit_code == 0, result.output
    assert 'Rounds played:   2000' in result.output
    assert 'Expected RTP:    0.990000' in result.output
