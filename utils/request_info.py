from flask import request


def client_ip():
    """
    First hop of X-Forwarded-For, else the socket address. None when neither is known.
    """
    forwarded = request.headers.get("X-Forwarded-For", "")
    first = forwarded.split(",")[0].strip() if forwarded else ""
    ip = first or request.remote_addr
    # matches LoginAttempt.ip_address
    return ip[:64] if ip else None
