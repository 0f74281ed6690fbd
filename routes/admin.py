from flask import Blueprint, jsonify, request

from security.cleanup import sweep
from security.credentials import reset_password
from security.rate_limit import evaluate_rate_limit, login_attempt_stats
from security.service_auth import require_service_token

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


@admin_bp.get("/rate-limit")
@require_service_token
def rate_limit_status():
    username = (request.args.get("username") or "").strip()
    if not username:
        return jsonify(error="username is required"), 400
    ip = (request.args.get("ip") or "").strip() or None

    decision = evaluate_rate_limit(username, ip)
    return jsonify(decision.to_dict()), 200


@admin_bp.get("/login-attempts/stats")
@require_service_token
def attempt_stats():
    username = (request.args.get("username") or "").strip()
    if not username:
        return jsonify(error="username is required"), 400

    window_minutes = request.args.get("window_minutes", 60, type=int)
    if window_minutes <= 0:
        return jsonify(error="window_minutes must be a positive integer"), 400

    return jsonify(login_attempt_stats(username, window_minutes)), 200


@admin_bp.post("/login-attempts/sweep")
@require_service_token
def sweep_attempts():
    deleted = sweep()
    return jsonify(deleted=deleted), 200


@admin_bp.post("/accounts/<int:account_id>/reset_password")
@require_service_token
def reset_account_password(account_id: int):
    try:
        temporary_password = reset_password(account_id)
    except LookupError:
        return jsonify(error="Personnel not found"), 404
    return jsonify(success=True, temporary_password=temporary_password), 200
