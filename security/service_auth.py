import hmac
from functools import wraps
from flask import current_app, jsonify, request

SERVICE_TOKEN_HEADER = "X-Service-Token"


def has_service_token() -> bool:
    expected = current_app.config.get("SERVICE_TOKEN")
    presented = request.headers.get(SERVICE_TOKEN_HEADER)
    if not expected or not presented:
        return False
    return hmac.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


def require_service_token(fn):
    """
    Guards endpoints meant for the identity layer and admin tooling.
    Refuses everything when no SERVICE_TOKEN is configured.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not current_app.config.get("SERVICE_TOKEN"):
            return jsonify(error="Service token not configured"), 503
        if not has_service_token():
            return jsonify(error="Forbidden"), 403
        return fn(*args, **kwargs)
    return wrapper
