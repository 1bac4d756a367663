# routes/categories.py
from flask import Blueprint, current_app

from ..auth_mw import require_auth
from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import get_store
from ..store.base import CATEGORY_FIELDS
from ..utils.parsing import (
    SLUG_RE,
    bilingual,
    is_admin_request,
    is_bilingual,
    json_body,
    parse_bool,
    parse_int,
)
from ..utils.responses import no_content, ok

bp = Blueprint("categories", __name__, url_prefix="/api/categories")


def _visible(category) -> bool:
    return bool(category) and (category["isActive"] or is_admin_request())


def clean_category(data: dict, partial: bool = False) -> dict:
    data = {k: v for k, v in data.items() if k not in ("id", "count", "createdAt", "updatedAt")}

    if not partial or "name" in data:
        if not is_bilingual(data.get("name")):
            raise ValidationError("Category name in both languages is required")
        data["name"] = bilingual(data["name"])

    if "description" in data:
        desc = data["description"] or {}
        if not isinstance(desc, dict):
            raise ValidationError("Category description must be an {en, vi} object")
        data["description"] = {"en": desc.get("en") or "", "vi": desc.get("vi") or ""}

    if not partial or "slug" in data:
        slug = (data.get("slug") or "").strip().lower()
        if not slug:
            raise ValidationError("Category slug is required")
        if not SLUG_RE.match(slug):
            raise ValidationError("Category slug may only contain a-z, 0-9 and single dashes")
        data["slug"] = slug

    if "sortOrder" in data:
        order = parse_int(data["sortOrder"], None, 0)
        if order is None:
            raise ValidationError("sortOrder must be a non-negative integer")
        data["sortOrder"] = order

    if "isActive" in data:
        flag = parse_bool(data["isActive"])
        if flag is None:
            raise ValidationError("isActive must be a boolean")
        data["isActive"] = flag
    return data


@bp.get("")
def list_categories():
    categories = get_store().get_all_categories()
    if not is_admin_request():
        categories = [c for c in categories if c["isActive"]]
    return ok({"categories": categories})


@bp.get("/slug/<slug>")
def get_category_by_slug(slug):
    category = get_store().get_category_by_slug(slug)
    if not _visible(category):
        raise NotFoundError("Category not found")
    return ok(category)


@bp.get("/<category_id>")
def get_category(category_id):
    category = get_store().get_category_by_id(category_id)
    if not _visible(category):
        raise NotFoundError("Category not found")
    return ok(category)


@bp.post("")
@require_auth
def create_category():
    data = clean_category(json_body())
    store = get_store()
    if store.get_category_by_slug(data["slug"]):
        raise ConflictError("Category slug already exists")
    data.setdefault("isActive", True)
    category = store.create_category(data)
    current_app.logger.info("category created: %s (%s)", category["id"], category["slug"])
    return ok(category, 201)


@bp.put("/<category_id>")
@require_auth
def update_category(category_id):
    store = get_store()
    if not store.get_category_by_id(category_id):
        raise NotFoundError("Category not found")
    patch = clean_category(json_body(), partial=True)
    if not any(k in CATEGORY_FIELDS for k in patch):
        raise ValidationError("No updates provided")
    if "slug" in patch:
        existing = store.get_category_by_slug(patch["slug"])
        if existing and existing["id"] != category_id:
            raise ConflictError("Category slug already exists")
    return ok(store.update_category(category_id, patch))


@bp.delete("/<category_id>")
@require_auth
def delete_category(category_id):
    store = get_store()
    # the store itself deletes unconditionally; the guard lives here
    if store.get_products_by_category(category_id):
        raise ConflictError("Cannot delete category with existing products. Move or delete products first.")
    if not store.delete_category(category_id):
        raise NotFoundError("Category not found")
    current_app.logger.info("category deleted: %s", category_id)
    return no_content()
