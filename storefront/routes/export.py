# routes/export.py
from flask import Blueprint, current_app, g, jsonify

from ..auth_mw import require_auth
from ..extensions import get_store

bp = Blueprint("export", __name__, url_prefix="/api/export")

EXPORT_FILENAME = "minhphat-data-export.json"


@bp.get("")
@require_auth
def export_data():
    snapshot = get_store().export_all()
    current_app.logger.info("data export by %s", g.admin_user["username"])
    resp = jsonify(snapshot)
    resp.headers["Content-Disposition"] = f'attachment; filename="{EXPORT_FILENAME}"'
    return resp
