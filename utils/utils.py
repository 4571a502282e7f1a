from functools import wraps
from flask import request, jsonify, g
from utils.tokens import decode_jwt


def get_request_token():
    """The access_token cookie, or a Bearer token for non-browser clients."""
    token = request.cookies.get("access_token")
    if token:
        return token

    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[len("Bearer "):].strip()
        if token and token not in ("null", "undefined"):
            return token
    return None


def login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = get_request_token()
        if not token:
            return jsonify({"error": "Unauthorized"}), 401

        decoded = decode_jwt(token)
        if not decoded:
            return jsonify({"error": "Invalid token"}), 401
        g.user = decoded

        return f(*args, **kwargs)

    return decorated_function


def roles_required(*roles):
    """Use below @login_required."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if g.user.get("role") not in roles:
                return jsonify({"error": "Forbidden"}), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator
