import logging
import signal
import sys
import time

from flask import Flask, request
from flask_cors import CORS

from src.shared.infrastructure.logging import setup_logging
from config.app_config import AppConfig
from config.simulation_config import SimulationSettings
from src.container import Container

logger = logging.getLogger(__name__)


def create_flask_app(container: Container) -> Flask:
    """
    Create and configure Flask application

    Args:
        container: Dependency injection container

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)

    # CORS: allow-list from ALLOWED_ORIGINS, every origin when unset
    CORS(
        app,
        origins=AppConfig.get_allowed_origins(),
        supports_credentials=True,
        methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS'],
        allow_headers=['Content-Type', 'Authorization']
    )

    # Register blueprints
    app.register_blueprint(container.bin_controller.get_blueprint())
    app.register_blueprint(container.simulation_controller.get_blueprint())
    app.register_blueprint(container.health_controller.get_blueprint())

    @app.before_request
    def start_timer():
        request.environ['dustbin.started_at'] = time.perf_counter()

    @app.after_request
    def log_api_request(response):
        if request.path.startswith('/api'):
            started_at = request.environ.get('dustbin.started_at', time.perf_counter())
            duration_ms = (time.perf_counter() - started_at) * 1000
            logger.info(
                f"{request.method} {request.path} {response.status_code} "
                f"in {duration_ms:.0f}ms"
            )
        return response

    logger.info("Flask app created")
    return app


def main():
    """Main application entry point"""
    setup_logging()

    logger.info("=" * 80)
    logger.info("DUSTBIN MONITOR - FILL LEVEL SIMULATION")
    logger.info("=" * 80)

    # Create container
    container = Container()

    # Create Flask app
    app = create_flask_app(container)

    # Set up graceful shutdown
    def signal_handler(sig, frame):
        logger.info(f"Received signal {sig}, initiating shutdown...")
        container.shutdown()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        container.start_background_services()
    except Exception as e:
        logger.error(f"Failed to start background services: {e}")
        logger.warning("Continuing without push delivery (degraded mode)")

    logger.info("=" * 80)
    logger.info(f"Starting Flask server on {AppConfig.FLASK_HOST}:{AppConfig.FLASK_PORT}")
    logger.info(f"Debug mode: {AppConfig.FLASK_DEBUG}")
    logger.info(f"Simulation mode: {SimulationSettings.MODE}")
    if container.websocket_server is not None:
        logger.info(
            f"WebSocket: ws://{SimulationSettings.WEBSOCKET_HOST}:"
            f"{SimulationSettings.WEBSOCKET_PORT}"
        )
    logger.info("=" * 80)
    logger.info("Available endpoints:")
    logger.info("  - GET    /api/bins")
    logger.info("  - POST   /api/bins")
    logger.info("  - GET    /api/bins/<id>")
    logger.info("  - GET    /api/bins/<id>/readings?limit=N")
    logger.info("  - GET    /api/bins/<id>/statistics")
    logger.info("  - GET    /api/simulation/config")
    logger.info("  - PATCH  /api/simulation/config")
    logger.info("  - POST   /api/simulation/start|stop|reset|trigger")
    logger.info("  - GET    /health")
    logger.info("  - GET    /info")
    logger.info("=" * 80)

    try:
        app.run(
            host=AppConfig.FLASK_HOST,
            port=AppConfig.FLASK_PORT,
            debug=AppConfig.FLASK_DEBUG,
            use_reloader=False  # Disable reloader to avoid duplicate timers
        )
    except Exception as e:
        logger.error(f"Flask server error: {e}", exc_info=True)
    finally:
        container.shutdown()


if __name__ == '__main__':
    main()
