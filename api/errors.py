"""
api.errors - JSON error handlers for the API blueprint.
"""

import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError

from api import api_bp
from services.employee_store import StoreError

logger = logging.getLogger(__name__)


@api_bp.errorhandler(400)
def api_bad_request(_e):
    return jsonify({"error": "bad request"}), 400


@api_bp.errorhandler(404)
def api_not_found(_e):
    return jsonify({"error": "not found"}), 404


@api_bp.errorhandler(413)
def api_too_large(_e):
    return jsonify({"error": "upload too large"}), 413


@api_bp.errorhandler(StoreError)
@api_bp.errorhandler(SQLAlchemyError)
def api_storage_unavailable(e):
    logger.error(f"Storage error while serving request: {e}")
    return jsonify({"error": "storage unavailable"}), 503


@api_bp.errorhandler(500)
def api_server_error(_e):
    return jsonify({"error": "internal server error"}), 500
