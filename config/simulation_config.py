import os

from dotenv import load_dotenv

load_dotenv()


class SimulationSettings:
    """
    Simulation and real-time delivery settings

    Modes:
    - push: the server owns an interval timer and pushes events over WebSocket
    - pull: no server timer, callers drive ticks via POST /api/simulation/trigger
    """

    MODE = os.getenv('SIMULATION_MODE', 'push').lower()

    # Defaults for the global SimulationConfig record
    DEFAULT_PATTERN = 'random'
    DEFAULT_UPDATE_INTERVAL = 10
    DEFAULT_ALERT_THRESHOLD = 90

    # Bounds enforced on configuration patches
    MIN_UPDATE_INTERVAL = 5
    MAX_UPDATE_INTERVAL = 60
    MIN_ALERT_THRESHOLD = 70
    MAX_ALERT_THRESHOLD = 100

    # Reading retention (FIFO per bin)
    READINGS_PER_BIN = int(os.getenv('READINGS_PER_BIN', 50))
    DEFAULT_READINGS_LIMIT = 20

    # Seed one bin when storage is empty
    SEED_DEFAULT_BIN = os.getenv('SEED_DEFAULT_BIN', 'True').lower() == 'true'
    DEFAULT_BIN_NAME = 'Main Lobby'
    DEFAULT_BIN_LOCATION = 'Building A - Ground Floor'

    # WebSocket push server
    WEBSOCKET_ENABLED = os.getenv('WEBSOCKET_ENABLED', 'True').lower() == 'true'
    WEBSOCKET_HOST = os.getenv('WEBSOCKET_HOST', '0.0.0.0')
    WEBSOCKET_PORT = int(os.getenv('WEBSOCKET_PORT', 5001))
    # Undelivered messages per observer before it is dropped
    WEBSOCKET_MAX_PENDING = int(os.getenv('WEBSOCKET_MAX_PENDING', 100))

    # Polling observer
    POLL_INTERVAL = float(os.getenv('POLL_INTERVAL', 2))
    API_BASE_URL = os.getenv('API_BASE_URL', 'http://localhost:5000/api')
    HTTP_TIMEOUT = 5

    @classmethod
    def is_push_mode(cls) -> bool:
        """Check if the server owns the tick timer"""
        return cls.MODE != 'pull'
