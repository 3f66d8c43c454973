"""Debug and diagnostics routes."""
from flask import Blueprint, current_app, jsonify

debug_bp = Blueprint('debug', __name__)


@debug_bp.route('/debug/gateway', methods=['GET'])
def debug_gateway():
    """Test the Gemini connection."""
    gateway = current_app.extensions["interview_service"].gateway
    if not hasattr(gateway, "ping"):
        return jsonify({"ok": False, "error": "Gateway has no diagnostics"}), 501
    result = gateway.ping()
    return jsonify(result), 200 if result.get("ok") else 503
