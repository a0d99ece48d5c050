from flask import Flask, jsonify, request
from datetime import datetime
import logging
import os
import atexit
import math

from compass_manager import CompassManager, CompassUnavailableError, create_compass_manager
from config.storage_keys import SLOT_COUNT
from navigation.core.data_types import Coordinate

logger = logging.getLogger(__name__)


def validate_coordinates(lat, lon):
    """
    Validate GPS coordinates

    Args:
        lat: Latitude value
        lon: Longitude value

    Returns:
        tuple: (is_valid: bool, error_message: str or None)
    """
    # Type check
    if isinstance(lat, bool) or isinstance(lon, bool) or \
            not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
        return False, "Coordinates must be numbers"

    # NaN/Inf check
    if math.isnan(lat) or math.isnan(lon):
        return False, "Invalid coordinate values (NaN)"

    if math.isinf(lat) or math.isinf(lon):
        return False, "Invalid coordinate values (Infinity)"

    # Range check
    if not (-90 <= lat <= 90):
        return False, "Latitude must be between -90 and 90"

    if not (-180 <= lon <= 180):
        return False, "Longitude must be between -180 and 180"

    return True, None


def validate_heading(heading):
    """
    Validate compass heading

    Returns:
        tuple: (is_valid: bool, error_message: str or None)
    """
    if isinstance(heading, bool) or not isinstance(heading, (int, float)):
        return False, "Heading must be a number"
    if math.isnan(heading) or math.isinf(heading):
        return False, "Invalid heading value"
    if not (0 <= heading < 360):
        return False, "Heading must be in the range [0, 360)"
    return True, None


def _parse_slot(value):
    try:
        slot = int(value)
    except (ValueError, TypeError):
        return None
    return slot if 0 <= slot < SLOT_COUNT else None


class CompassAppError(Exception):
    """Application-specific error for the compass service"""
    pass


def create_app(manager: CompassManager = None):
    """
    Flask application factory

    Args:
        manager: Pre-built compass manager; built from environment config and
            started when omitted
    """
    app = Flask(__name__)

    app.config.update(
        SECRET_KEY=os.getenv('FLASK_SECRET_KEY', os.urandom(24)),
        DEBUG=os.getenv('FLASK_DEBUG', 'False').lower() == 'true',
    )

    if manager is None:
        manager = create_compass_manager()
        if not manager.start():
            logger.error("Compass failed to start - API will report it as unavailable")

        # Register cleanup handler
        def cleanup():
            """Cleanup on application shutdown"""
            logger.info("Application shutting down...")
            try:
                manager.stop()
            except Exception as e:
                logger.error(f"Error during compass shutdown: {e}")

        atexit.register(cleanup)

    app.extensions['compass_manager'] = manager

    _register_routes(app, manager)
    _register_error_handlers(app)

    return app


def _register_error_handlers(app):
    """Register global error handlers"""

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Endpoint not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal server error: {error}", exc_info=True)
        return jsonify({"error": "Internal server error"}), 500

    @app.errorhandler(CompassAppError)
    def compass_error(error):
        logger.error(f"Compass application error: {error}")
        return jsonify({"error": str(error)}), 503

    @app.errorhandler(CompassUnavailableError)
    def compass_unavailable(error):
        logger.error(f"Compass control loop unavailable: {error}")
        return jsonify({"error": "Compass system not responding"}), 503


def _register_routes(app, manager: CompassManager):
    """Register Flask routes"""

    def require_running():
        if not manager.is_running:
            raise CompassAppError("Compass system not running")

    @app.route('/api/health')
    def api_health():
        """Service health"""
        status = manager.get_status()
        status['timestamp'] = datetime.utcnow().isoformat() + "Z"
        return jsonify(status), (200 if status['running'] else 503)

    @app.route('/api/direction')
    def api_direction():
        """Current distance, bearing and arrow angle"""
        require_running()
        return jsonify(manager.get_direction_state())

    @app.route('/api/position', methods=['POST'])
    def api_position():
        """Push a device position"""
        data = request.get_json(silent=True)
        if not data:
            return jsonify({"error": "No data provided"}), 400

        lat = data.get('lat')
        lon = data.get('lon')
        if lat is None or lon is None:
            return jsonify({"error": "lat and lon are required"}), 400

        valid, error = validate_coordinates(lat, lon)
        if not valid:
            return jsonify({"error": error, "success": False}), 400

        require_running()
        manager.push_position(float(lat), float(lon))
        return jsonify({"success": True})

    @app.route('/api/heading', methods=['POST'])
    def api_heading():
        """Push a compass heading"""
        data = request.get_json(silent=True)
        if not data or data.get('heading') is None:
            return jsonify({"error": "heading is required"}), 400

        heading = data.get('heading')
        valid, error = validate_heading(heading)
        if not valid:
            return jsonify({"error": error, "success": False}), 400

        require_running()
        manager.push_heading(float(heading))
        return jsonify({"success": True})

    @app.route('/api/destinations', methods=['GET'])
    def api_get_destinations():
        """All configured destination slots"""
        require_running()
        return jsonify(manager.get_destinations())

    @app.route('/api/destinations/<slot>', methods=['PUT'])
    def api_save_destination(slot):
        """Save an address (and optionally its coordinate) for a slot"""
        slot_index = _parse_slot(slot)
        if slot_index is None:
            return jsonify({"error": f"slot must be 0..{SLOT_COUNT - 1}"}), 400

        data = request.get_json(silent=True)
        if not data:
            return jsonify({"error": "No data provided"}), 400

        address = data.get('address')
        if not isinstance(address, str) or not address.strip():
            return jsonify({"error": "address is required"}), 400

        label = data.get('label')
        if label is not None and not isinstance(label, str):
            return jsonify({"error": "label must be a string"}), 400

        coordinate = None
        lat, lon = data.get('lat'), data.get('lon')
        if lat is not None or lon is not None:
            valid, error = validate_coordinates(lat, lon)
            if not valid:
                return jsonify({"error": error, "success": False}), 400
            coordinate = Coordinate(float(lat), float(lon))

        require_running()
        destination = manager.save_destination(slot_index, address, label, coordinate)
        return jsonify({"success": True, "destination": destination})

    @app.route('/api/destinations/<slot>', methods=['DELETE'])
    def api_clear_destination(slot):
        """Clear a slot"""
        slot_index = _parse_slot(slot)
        if slot_index is None:
            return jsonify({"error": f"slot must be 0..{SLOT_COUNT - 1}"}), 400

        require_running()
        if manager.clear_destination(slot_index):
            return jsonify({"success": True, "message": f"Slot {slot_index} cleared"})
        return jsonify({"error": f"Slot {slot_index} is not configured"}), 404

    @app.route('/api/destinations/select', methods=['POST'])
    def api_select_destination():
        """Point the arrow at another slot"""
        data = request.get_json(silent=True)
        if not data or 'slot' not in data:
            return jsonify({"error": "slot is required"}), 400

        slot_index = _parse_slot(data.get('slot'))
        if slot_index is None:
            return jsonify({"error": f"slot must be 0..{SLOT_COUNT - 1}"}), 400

        require_running()
        if manager.select_slot(slot_index):
            return jsonify({"success": True, "selected_slot": slot_index})
        return jsonify({
            "success": False,
            "show_setup_prompt": True,
            "error": f"Slot {slot_index} has no address"
        }), 409

    @app.route('/api/destinations/reload', methods=['POST'])
    def api_reload_destinations():
        """Re-read destinations from storage"""
        require_running()
        started = manager.reload()
        return jsonify({"success": True, "geocoding_started": started})

    @app.route('/api/spin', methods=['POST'])
    def api_spin():
        """Spin the arrow once"""
        require_running()
        return jsonify({"success": manager.spin()})

    @app.route('/api/display-profile', methods=['POST'])
    def api_display_profile():
        """Switch between foreground and background arrow smoothing"""
        data = request.get_json(silent=True)
        if not data or not isinstance(data.get('active'), bool):
            return jsonify({"error": "active (boolean) is required"}), 400

        require_running()
        manager.set_display_profile(data['active'])
        return jsonify({"success": True, "active": data['active']})

    @app.route('/api/snapshot')
    def api_snapshot():
        """Last published snapshot"""
        snapshot = manager.get_snapshot()
        if snapshot is None:
            return jsonify({"error": "No snapshot published yet"}), 404
        return jsonify(snapshot)

    @app.route('/api/live-activity')
    def api_live_activity():
        """Running live activity, if any"""
        return jsonify({"activity": manager.get_live_activity()})

    @app.route('/api/geocoding/suggestions')
    def api_suggestions():
        """Address suggestions for partial input"""
        text = request.args.get('q', '')
        return jsonify({"suggestions": manager.get_suggestions(text)})

    @app.route('/api/metrics')
    def api_metrics():
        """Direction and publishing counters"""
        require_running()
        return jsonify(manager.get_metrics())
