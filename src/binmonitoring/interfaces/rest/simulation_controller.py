import logging

from flask import Blueprint, request, jsonify

from src.binmonitoring.application.services import BinService, SimulationScheduler
from src.binmonitoring.domain.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)


class SimulationController:
    """
    REST API Controller for the simulation lifecycle

    Endpoints:
    - GET   /api/simulation/config - Current configuration
    - PATCH /api/simulation/config - Partial configuration update
    - POST  /api/simulation/start - Start (or restart) the simulation
    - POST  /api/simulation/stop - Stop the simulation
    - POST  /api/simulation/reset - Stop and empty every bin
    - POST  /api/simulation/trigger - Run one tick if running (pull mode)
    """

    def __init__(self, scheduler: SimulationScheduler, bin_service: BinService):
        """
        Initialize controller with dependencies

        Args:
            scheduler: Simulation lifecycle owner
            bin_service: Service used for config reads
        """
        self.scheduler = scheduler
        self.bin_service = bin_service
        self.blueprint = Blueprint('simulation', __name__)
        self._register_routes()

    def _register_routes(self):
        """Register all routes for this controller"""
        self.blueprint.add_url_rule(
            '/api/simulation/config',
            'get_config',
            self.get_config,
            methods=['GET']
        )

        self.blueprint.add_url_rule(
            '/api/simulation/config',
            'update_config',
            self.update_config,
            methods=['PATCH']
        )

        for action in ('start', 'stop', 'reset', 'trigger'):
            self.blueprint.add_url_rule(
                f'/api/simulation/{action}',
                action,
                getattr(self, action),
                methods=['POST']
            )

    def get_config(self):
        """
        GET /api/simulation/config

        Response:
        {
            "pattern": "random",
            "updateInterval": 10,
            "alertThreshold": 90,
            "isRunning": false
        }
        """
        try:
            config = self.bin_service.get_simulation_config()
            return jsonify(config.to_dict()), 200

        except StorageError as e:
            logger.error(f"Error fetching simulation config: {e}")
            return jsonify({'error': 'Failed to fetch simulation config'}), 500

    def update_config(self):
        """
        PATCH /api/simulation/config

        Request Body (JSON), every field optional:
        {
            "pattern": "linear",
            "updateInterval": 5,
            "alertThreshold": 85
        }

        Response:
        - 200 OK: merged configuration
        - 400 Bad Request: any field unknown, mistyped or out of range
        """
        try:
            config = self.scheduler.reconfigure(request.get_json(silent=True))
            return jsonify(config.to_dict()), 200

        except ValidationError as e:
            logger.warning(f"Rejected configuration patch: {e}")
            return jsonify({'error': 'Invalid configuration', 'details': str(e)}), 400

        except StorageError as e:
            logger.error(f"Error updating simulation config: {e}")
            return jsonify({'error': 'Failed to update simulation config'}), 500

    def start(self):
        """POST /api/simulation/start"""
        return self._control(self.scheduler.start, 'Simulation started', 'start')

    def stop(self):
        """POST /api/simulation/stop"""
        return self._control(self.scheduler.stop, 'Simulation stopped', 'stop')

    def reset(self):
        """POST /api/simulation/reset"""
        return self._control(self.scheduler.reset, 'Simulation reset', 'reset')

    def trigger(self):
        """
        POST /api/simulation/trigger

        Response:
        {
            "message": "Simulation updated",
            "updated": true,
            "config": {...}
        }
        """
        try:
            result = self.scheduler.trigger()
            config = self.bin_service.get_simulation_config()

            if not result.updated and not config.is_running:
                return jsonify({
                    'message': 'Simulation is not running',
                    'updated': False
                }), 200

            return jsonify({
                'message': 'Simulation updated',
                'updated': result.updated,
                'config': config.to_dict()
            }), 200

        except StorageError as e:
            logger.error(f"Error triggering simulation tick: {e}")
            return jsonify({'error': 'Failed to update simulation'}), 500

    def _control(self, operation, message: str, action: str):
        try:
            config = operation()
            return jsonify({'message': message, 'config': config.to_dict()}), 200

        except StorageError as e:
            logger.error(f"Error during simulation {action}: {e}")
            return jsonify({'error': f'Failed to {action} simulation'}), 500

    def get_blueprint(self):
        """Get Flask Blueprint for registration"""
        return self.blueprint
