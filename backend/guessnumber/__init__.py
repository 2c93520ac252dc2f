from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('ALLOWED_ORIGINS') or []
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from guessnumber.main import main
    flask_app.register_blueprint(main)

    from guessnumber.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    # One engine per app; it owns the connection and bet registries
    from guessnumber.services.rounds import RoundEngine
    engine = RoundEngine(
        duration=flask_app.config.get('ROUND_DURATION_SEC', 10),
        tick=flask_app.config.get('ROUND_TICK_SEC', 1.0),
        logger=flask_app.logger,
        start_background_task=socketio.start_background_task,
    )
    flask_app.extensions['round_engine'] = engine

    if not flask_app.config.get('TESTING') or flask_app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        engine.start()

    @click.command('simulate-rtp')
    @click.option('--rounds', default=100_000, show_default=True, help='Number of rounds to play.')
    @click.option('--stake', default=100.0, show_default=True, help='Stake placed every round.')
    @click.option('--workers', default=None, type=int, help='Worker threads (defaults to RTP_SIMULATION_WORKERS).')
    @click.option('--seed', default=None, type=int, help='Seed for reproducible draws.')
    def simulate_rtp_command(rounds, stake, workers, seed):
        """Plays many manual-mode rounds and reports the return to player."""
        from guessnumber.services.rounds.payout import MULTIPLIER
        from guessnumber.services.rounds.simulation import simulate_rtp
        if workers is None:
            workers = flask_app.config.get('RTP_SIMULATION_WORKERS', 4)
        result = simulate_rtp(rounds, stake=stake, workers=workers, seed=seed)
        click.echo(f'Rounds played:   {result.rounds}')
        click.echo(f'Total wagered:   {result.wagered:.2f}')
        click.echo(f'Total won:       {result.won:.2f}')
        click.echo(f'Win rate:        {result.win_rate * 100:.4f}%')
        click.echo(f'Actual RTP:      {result.rtp:.6f}')
        click.echo(f'Expected RTP:    {MULTIPLIER / 10:.6f}')

    flask_app.cli.add_command(simulate_rtp_command)

    return flask_app
