import logging
from flask import Blueprint, jsonify

from src.binmonitoring.domain.exceptions import StorageError

logger = logging.getLogger(__name__)


class HealthController:
    """
    Controller for health and info endpoints
    """

    def __init__(self, container):
        """
        Initialize controller with container

        Args:
            container: DI container with all dependencies
        """
        self.container = container
        self.blueprint = Blueprint('health', __name__)
        self._register_routes()

    def _register_routes(self):
        """Register all routes"""
        self.blueprint.add_url_rule(
            '/health',
            'health_check',
            self.health_check,
            methods=['GET']
        )

        self.blueprint.add_url_rule(
            '/info',
            'info',
            self.info,
            methods=['GET']
        )

    def health_check(self):
        """
        GET /health

        Healthy when storage answers; degraded otherwise
        """
        try:
            self.container.storage.get_simulation_config()
            storage_ok = True
        except StorageError as e:
            logger.warning(f"Health check: storage unavailable: {e}")
            storage_ok = False

        status = {
            'status': 'healthy' if storage_ok else 'degraded',
            'storage_available': storage_ok,
            'timer_active': self.container.scheduler.has_active_timer(),
            'websocket_running': self.container.websocket_running(),
            'mqtt_connected': self.container.mqtt_connected()
        }

        status_code = 200 if storage_ok else 503
        return jsonify(status), status_code

    def info(self):
        """
        GET /info

        Application info endpoint
        """
        try:
            config = self.container.bin_service.get_simulation_config()
            bins = self.container.bin_service.get_all_bins()

            return jsonify({
                'name': 'Dustbin Monitor',
                'version': '1.0.0',
                'mode': 'push' if self.container.scheduler.push_mode else 'pull',
                'storage': type(self.container.storage).__name__,
                'simulation': {
                    'state': self.container.scheduler.state.value,
                    'config': config.to_dict(),
                    'bins_count': len(bins)
                },
                'observers': {
                    'websocket_connections': self.container.websocket_hub.connection_count(),
                    'event_listeners': self.container.broadcaster.listener_count()
                },
                'mqtt': {
                    'enabled': self.container.mqtt_manager is not None,
                    'connected': self.container.mqtt_connected()
                }
            }), 200

        except StorageError as e:
            logger.error(f"Error in info endpoint: {e}")
            return jsonify({'error': 'Internal server error'}), 500

    def get_blueprint(self):
        """Get Flask Blueprint"""
        return self.blueprint
