# routes/content.py
from flask import Blueprint, request

from ..auth_mw import require_auth
from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import get_store
from ..store.base import CONTENT_FIELDS
from ..utils.parsing import bilingual, is_bilingual, json_body, parse_int
from ..utils.responses import no_content, ok

bp = Blueprint("content", __name__, url_prefix="/api/content")

CONTENT_TYPES = {"text", "html", "markdown"}


def clean_content(data: dict, partial: bool = False) -> dict:
    data = {k: v for k, v in data.items() if k not in ("id", "createdAt", "updatedAt")}

    for field in ("key", "section"):
        if not partial or field in data:
            value = data.get(field)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"Content {field} is required")
            data[field] = value.strip()

    if not partial or "value" in data:
        if not is_bilingual(data.get("value")):
            raise ValidationError("Content value in both languages is required")
        data["value"] = bilingual(data["value"])

    if "type" in data or not partial:
        data["type"] = data.get("type") or "text"
        if data["type"] not in CONTENT_TYPES:
            raise ValidationError("Content type must be one of: html, markdown, text")

    if "sortOrder" in data:
        order = parse_int(data["sortOrder"], None, 0)
        if order is None:
            raise ValidationError("sortOrder must be a non-negative integer")
        data["sortOrder"] = order
    return data


def _check_unique(key: str, section: str, exclude_id=None):
    existing = get_store().get_content_by_key(key, section=section)
    if existing and existing["id"] != exclude_id:
        raise ConflictError("Content key already exists in this section")


@bp.get("")
def list_content():
    section = request.args.get("section") or None
    key = request.args.get("key") or None
    return ok({"content": get_store().get_all_content(section=section, key=key)})


@bp.get("/key/<key>")
def get_content_by_key(key):
    content = get_store().get_content_by_key(key, section=request.args.get("section") or None)
    if not content:
        raise NotFoundError("Content not found")
    return ok(content)


@bp.get("/section/<section>")
def get_content_by_section(section):
    content = get_store().get_content_by_section(section)
    return ok({"content": content, "section": section, "total": len(content)})


@bp.get("/<content_id>")
def get_content(content_id):
    content = get_store().get_content_by_id(content_id)
    if not content:
        raise NotFoundError("Content not found")
    return ok(content)


@bp.post("")
@require_auth
def create_content():
    data = clean_content(json_body())
    _check_unique(data["key"], data["section"])
    return ok(get_store().create_content(data), 201)


@bp.put("/<content_id>")
@require_auth
def update_content(content_id):
    store = get_store()
    current = store.get_content_by_id(content_id)
    if not current:
        raise NotFoundError("Content not found")
    patch = clean_content(json_body(), partial=True)
    if not any(k in CONTENT_FIELDS for k in patch):
        raise ValidationError("No updates provided")
    if "key" in patch or "section" in patch:
        _check_unique(patch.get("key", current["key"]), patch.get("section", current["section"]),
                      exclude_id=content_id)
    return ok(store.update_content(content_id, patch))


@bp.delete("/<content_id>")
@require_auth
def delete_content(content_id):
    if not get_store().delete_content(content_id):
        raise NotFoundError("Content not found")
    return no_content()
