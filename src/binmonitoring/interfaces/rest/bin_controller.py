import logging

from flask import Blueprint, request, jsonify

from src.binmonitoring.application.services import BinService
from src.binmonitoring.domain.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)

MAX_READINGS_LIMIT = 1000


class BinController:
    """
    REST API Controller for Bins

    Endpoints:
    - GET  /api/bins - List all bins
    - POST /api/bins - Register a new bin
    - GET  /api/bins/<bin_id> - Get one bin
    - GET  /api/bins/<bin_id>/readings - Latest readings (oldest first)
    - GET  /api/bins/<bin_id>/statistics - Summary of the reading history
    """

    def __init__(self, bin_service: BinService):
        """
        Initialize controller with dependencies

        Args:
            bin_service: Service for bin queries and creation
        """
        self.bin_service = bin_service
        self.blueprint = Blueprint('bins', __name__)
        self._register_routes()

    def _register_routes(self):
        """Register all routes for this controller"""
        self.blueprint.add_url_rule(
            '/api/bins',
            'list_bins',
            self.list_bins,
            methods=['GET']
        )

        self.blueprint.add_url_rule(
            '/api/bins',
            'create_bin',
            self.create_bin,
            methods=['POST']
        )

        self.blueprint.add_url_rule(
            '/api/bins/<bin_id>',
            'get_bin',
            self.get_bin,
            methods=['GET']
        )

        self.blueprint.add_url_rule(
            '/api/bins/<bin_id>/readings',
            'get_readings',
            self.get_readings,
            methods=['GET']
        )

        self.blueprint.add_url_rule(
            '/api/bins/<bin_id>/statistics',
            'get_statistics',
            self.get_statistics,
            methods=['GET']
        )

    def list_bins(self):
        """
        GET /api/bins

        Response: [ {bin}, ... ]
        """
        try:
            bins = self.bin_service.get_all_bins()
            return jsonify([b.to_dict() for b in bins]), 200

        except StorageError as e:
            logger.error(f"Error listing bins: {e}")
            return jsonify({'error': 'Failed to fetch bins'}), 500

    def create_bin(self):
        """
        POST /api/bins

        Request Body (JSON):
        {
            "name": "Cafeteria",
            "location": "Building B - First Floor",
            "alertThreshold": 85,
            "isActive": true
        }

        Response:
        - 201 Created: the new bin
        - 400 Bad Request: Invalid request data
        - 500 Internal Server Error: Storage failure
        """
        if not request.is_json:
            return jsonify({
                'error': 'Content-Type must be application/json'
            }), 400

        try:
            dustbin = self.bin_service.create_bin(request.get_json(silent=True))
            return jsonify(dustbin.to_dict()), 201

        except ValidationError as e:
            return jsonify({'error': str(e)}), 400

        except StorageError as e:
            logger.error(f"Error creating bin: {e}")
            return jsonify({'error': 'Failed to create bin'}), 500

    def get_bin(self, bin_id: str):
        """
        GET /api/bins/<bin_id>

        Response:
        - 200 OK: the bin
        - 404 Not Found: unknown bin id
        """
        try:
            dustbin = self.bin_service.get_bin(bin_id)
            if dustbin is None:
                return jsonify({'error': 'Bin not found'}), 404
            return jsonify(dustbin.to_dict()), 200

        except StorageError as e:
            logger.error(f"Error fetching bin {bin_id}: {e}")
            return jsonify({'error': 'Failed to fetch bin'}), 500

    def get_readings(self, bin_id: str):
        """
        GET /api/bins/<bin_id>/readings

        Query Parameters:
            limit: int (optional) - Maximum number of readings (default: 20)

        Response: [ {reading}, ... ] ordered oldest to newest
        """
        limit = request.args.get('limit', default=20, type=int)

        if limit < 1 or limit > MAX_READINGS_LIMIT:
            return jsonify({
                'error': f'limit must be between 1 and {MAX_READINGS_LIMIT}'
            }), 400

        try:
            readings = self.bin_service.get_readings(bin_id, limit)
            if readings is None:
                return jsonify({'error': 'Bin not found'}), 404
            return jsonify([r.to_dict() for r in readings]), 200

        except StorageError as e:
            logger.error(f"Error fetching readings for bin {bin_id}: {e}")
            return jsonify({'error': 'Failed to fetch readings'}), 500

    def get_statistics(self, bin_id: str):
        """
        GET /api/bins/<bin_id>/statistics

        Response:
        {
            "totalUpdates": 12,
            "averageFillRate": 216.0,
            "maxFillLevel": 54,
            "alertCount": 0,
            "secondsToFull": 100
        }
        """
        try:
            statistics = self.bin_service.get_statistics(bin_id)
            if statistics is None:
                return jsonify({'error': 'Bin not found'}), 404
            return jsonify(statistics.to_dict()), 200

        except StorageError as e:
            logger.error(f"Error computing statistics for bin {bin_id}: {e}")
            return jsonify({'error': 'Failed to compute statistics'}), 500

    def get_blueprint(self):
        """Get Flask Blueprint for registration"""
        return self.blueprint
