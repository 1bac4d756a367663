from functools import wraps
from flask import current_app, g, jsonify, request

from .errors import AuthError
from .extensions import get_auth


def read_tokens():
    """Candidate session tokens: the admin cookie first, then a Bearer header."""
    tokens = []
    cookie = request.cookies.get(current_app.config["AUTH_COOKIE_NAME"])
    if cookie:
        tokens.append(cookie)
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        bearer = auth.split(" ", 1)[1].strip()
        if bearer and bearer not in tokens:
            tokens.append(bearer)
    return tokens


def authenticate_request():
    """(session, user) for the first live token; AuthError from the first failure otherwise."""
    auth = get_auth()
    tokens = read_tokens()
    if not tokens:
        return auth.authenticate(None)
    first_error = None
    for token in tokens:
        try:
            return auth.authenticate(token)
        except AuthError as e:
            first_error = first_error or e
    raise first_error


def clear_session_cookie(resp):
    resp.delete_cookie(current_app.config["AUTH_COOKIE_NAME"])
    return resp


def require_auth(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            _, user = authenticate_request()
        except AuthError as e:
            current_app.logger.warning("auth gate: %s %s -> %s", request.method, request.path, e.message)
            resp = jsonify({"error": e.message})
            resp.status_code = 401
            return clear_session_cookie(resp)
        g.admin_user = user
        return func(*args, **kwargs)

    return wrapper
