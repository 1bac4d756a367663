# routes/auth.py
from flask import Blueprint, current_app, jsonify

from ..auth_mw import clear_session_cookie, read_tokens
from ..extensions import get_auth
from ..utils.parsing import json_body

bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@bp.post("/login")
def login():
    d = json_body()
    auth = get_auth()
    result = auth.login(d.get("username"), d.get("password"))

    resp = jsonify({
        "success": True,
        "token": result.session["token"],
        "expiresAt": result.session["expiresAt"],
        "user": result.user,
    })
    resp.set_cookie(
        current_app.config["AUTH_COOKIE_NAME"],
        result.session["token"],
        max_age=auth.ttl_seconds,
        httponly=True,
        secure=current_app.config["COOKIE_SECURE"],
        samesite="Strict",
    )
    return resp


@bp.post("/logout")
def logout():
    auth = get_auth()
    for token in read_tokens():
        auth.logout(token)
    resp = jsonify({"success": True, "message": "Logged out successfully"})
    return clear_session_cookie(resp)


@bp.get("/verify")
def verify():
    auth = get_auth()
    tokens = read_tokens()
    result = {"authenticated": False}
    for token in tokens:
        result = auth.verify(token)
        if result["authenticated"]:
            break
    resp = jsonify(result)
    if not result["authenticated"] and tokens:
        clear_session_cookie(resp)
    return resp
