"""
api.routes_import - /api/v1/imports endpoints.

Accepts a roster CSV via multipart upload and exposes the resulting
ImportJob records.  The actor's identity and role are supplied by the
upstream auth provider in the X-Actor-Email / X-Actor-Role headers.
"""

from flask import request, jsonify, Response

import config
from api import api_bp
from db import get_session
from import_engine import run_import, ImportNotPermitted
from services.import_job_log import ImportJobLog


@api_bp.route("/imports/csv", methods=["POST"])
def api_import_csv():
    """
    POST /api/v1/imports/csv

    Multipart: field 'file' (.csv), optional 'uploadedBy'.
    200 with {jobId, report}; 400 when the report carries fatal errors.
    """
    actor_email = request.headers.get("X-Actor-Email", "").strip()
    actor_role = request.headers.get("X-Actor-Role", "").strip().lower()
    if not actor_email or not actor_role:
        return jsonify({"error": "Authentication required."}), 401
    if actor_role not in config.IMPORT_ROLES:
        return jsonify({"error": "Insufficient role for CSV imports."}), 403

    f = request.files.get("file")
    if not f:
        return jsonify({"error": "CSV file is required."}), 400
    if not (f.filename or "").lower().endswith(".csv"):
        return jsonify({"error": "Only .csv files are supported."}), 400

    content = f.read(config.MAX_UPLOAD_BYTES + 1)
    if not content:
        return jsonify({"error": "CSV file is empty."}), 400
    if len(content) > config.MAX_UPLOAD_BYTES:
        return jsonify({"error": f"CSV file exceeds the {config.MAX_UPLOAD_BYTES} byte upload limit."}), 400

    uploaded_by = request.form.get("uploadedBy", "").strip() or actor_email

    try:
        result = run_import(
            content,
            uploaded_by,
            actor_role=actor_role,
            source_file_name=f.filename,
        )
    except ImportNotPermitted as exc:
        return jsonify({"error": str(exc)}), 403

    status = 400 if result.report.is_fatal else 200
    return jsonify(result.to_dict()), status


@api_bp.route("/imports")
def list_imports():
    """GET /api/v1/imports  (most recent jobs, newest first)"""
    session = get_session()
    try:
        jobs = ImportJobLog(session).recent(config.RECENT_JOBS_LIMIT)
        return jsonify({"jobs": [j.to_dict(include_report=False) for j in jobs]})
    finally:
        session.close()


@api_bp.route("/imports/<job_id>")
def get_import(job_id: str):
    """GET /api/v1/imports/{job_id}"""
    session = get_session()
    try:
        job = ImportJobLog(session).get(job_id)
        if not job:
            return jsonify({"error": "not found"}), 404
        return jsonify(job.to_dict())
    finally:
        session.close()


@api_bp.route("/imports/<job_id>/errors.csv")
def get_import_errors_csv(job_id: str):
    """GET /api/v1/imports/{job_id}/errors.csv  (rejected-rows download)"""
    session = get_session()
    try:
        job = ImportJobLog(session).get(job_id)
        if not job:
            return jsonify({"error": "not found"}), 404
        error_csv = job.report.get("errorCsv")
        if not error_csv:
            return jsonify({"error": "no rejected rows for this job"}), 404
        return Response(
            error_csv,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=import-{job.id}-errors.csv"},
        )
    finally:
        session.close()
