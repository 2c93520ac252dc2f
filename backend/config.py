import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Betting window length in ticks. 0 or less puts the engine in manual-drive mode.
    ROUND_DURATION_SEC = int(os.environ.get('ROUND_DURATION_SEC', '10'))
    # Length of one tick (seconds)
    ROUND_TICK_SEC = float(os.environ.get('ROUND_TICK_SEC', '1.0'))
    ALLOWED_ORIGINS = [
        o.strip() for o in os.environ.get(
            'ALLOWED_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173'
        ).split(',') if o.strip()
    ]
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Worker threads used by `flask simulate-rtp`
    RTP_SIMULATION_WORKERS = int(os.environ.get('RTP_SIMULATION_WORKERS', '4'))
