"""
api.routes_health - /api/v1/health liveness check.
"""

from flask import jsonify

from api import api_bp


@api_bp.route("/health")
def health():
    return jsonify({"ok": True})
