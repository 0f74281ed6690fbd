from flask import Blueprint, request, jsonify

from security.credentials import FailureKind, change_password, verify_credentials
from security.rate_limit import RateLimitKind
from security.service_auth import require_service_token
from utils.request_info import client_ip

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

_STATUS_BY_KIND = {
    RateLimitKind.IP_RATE_LIMIT.value: 429,
    RateLimitKind.ACCOUNT_LOCKED.value: 429,
    RateLimitKind.USERNAME_RATE_LIMIT.value: 429,
    FailureKind.INVALID_CREDENTIALS.value: 401,
    FailureKind.NO_PASSWORD.value: 401,
    FailureKind.DEACTIVATED.value: 403,
}


def _ip_from(data: dict):
    # the identity layer forwards the end user's address; fall back to whoever called us
    ip = data.get("ip_address")
    if isinstance(ip, str) and ip.strip():
        return ip.strip()[:64]
    return client_ip()


@auth_bp.post("/verify")
@require_service_token
def verify():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        data = {}
    username = data.get("username")
    password = data.get("password")

    if not isinstance(username, str) or not username or not isinstance(password, str) or not password:
        return jsonify(error="Please provide both username and password"), 400

    result = verify_credentials(username, password, _ip_from(data))
    if result.success:
        return jsonify(result.to_dict()), 200
    return jsonify(result.to_dict()), _STATUS_BY_KIND.get(result.kind, 401)


@auth_bp.post("/change_password")
@require_service_token
def change_password_route():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        data = {}
    username = data.get("username") or ""
    current_password = data.get("current_password") or ""
    new_password = data.get("new_password") or ""

    if not username or not current_password or not new_password:
        return jsonify(error="username, current_password and new_password are required"), 400

    result = change_password(username, current_password, new_password, _ip_from(data))
    if not result.success:
        if result.kind:
            return jsonify(error=result.error, kind=result.kind), 429
        if result.details:
            return jsonify(error="Password does not meet policy", details=result.details), 400
        return jsonify(error=result.error), 400
    return jsonify(message=result.message), 200
