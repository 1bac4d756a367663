# routes/products.py
import math

from flask import Blueprint, current_app, request

from ..auth_mw import require_auth
from ..errors import NotFoundError, ValidationError
from ..extensions import get_store
from ..store.base import PRODUCT_FIELDS
from ..utils.parsing import (
    LANGUAGES,
    apply_aliases,
    bilingual,
    is_admin_request,
    is_bilingual,
    json_body,
    parse_bool,
    parse_int,
    positive_number,
)
from ..utils.responses import no_content, ok

bp = Blueprint("products", __name__, url_prefix="/api/products")

# older admin clients send these names
ALIASES = {
    "organic": "isOrganic",
    "seasonal": "isSeasonal",
    "featured": "isFeatured",
    "reviews": "reviewsCount",
    "nutritionalInfo": "nutrition",
}
BOOL_FIELDS = ("inStock", "isOrganic", "isSeasonal", "isFeatured")


def resolve_category(ref):
    """Category by id, falling back to slug."""
    if not ref or not isinstance(ref, str):
        return None
    store = get_store()
    return store.get_category_by_id(ref) or store.get_category_by_slug(ref)


STR_FIELDS = ("unit", "origin", "badgeColor")


def _bilingual_text(value, message) -> dict:
    """Optional {en, vi} text; missing sides become empty strings."""
    value = value or {}
    if not isinstance(value, dict):
        raise ValidationError(message)
    out = {}
    for lang in LANGUAGES:
        text = value.get(lang)
        if text is None:
            text = ""
        if not isinstance(text, str):
            raise ValidationError(message)
        out[lang] = text
    return out


def _rating(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError("rating must be a number between 0 and 5")
    if not math.isfinite(value) or not 0 <= value <= 5:
        raise ValidationError("rating must be a number between 0 and 5")
    return float(value)


def clean_product(data: dict, partial: bool = False) -> dict:
    data = apply_aliases(data, ALIASES)
    data.pop("id", None)
    data.pop("createdAt", None)
    data.pop("updatedAt", None)

    if not partial or "name" in data:
        if not is_bilingual(data.get("name")):
            raise ValidationError("Product name in both languages is required")
        data["name"] = bilingual(data["name"])

    if "description" in data:
        data["description"] = _bilingual_text(data["description"],
                                              "Product description must be an {en, vi} object")

    if not partial or "price" in data:
        data["price"] = positive_number(data.get("price"), "price")

    if data.get("originalPrice") is not None:
        data["originalPrice"] = positive_number(data["originalPrice"], "original price")

    if not partial or "category" in data:
        if not data.get("category"):
            raise ValidationError("Category is required")
        category = resolve_category(data["category"])
        if not category:
            raise ValidationError("Category not found")
        data["category"] = category["id"]

    for field in BOOL_FIELDS:
        if field in data:
            flag = parse_bool(data[field])
            if flag is None:
                raise ValidationError(f"{field} must be a boolean")
            data[field] = flag

    if "rating" in data:
        data["rating"] = _rating(data["rating"])

    if "reviewsCount" in data:
        count = data["reviewsCount"]
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValidationError("reviewsCount must be a non-negative integer")

    if "image" in data:
        if data["image"] is None:
            data["image"] = ""
        if not isinstance(data["image"], str):
            raise ValidationError("image must be a string")

    for field in STR_FIELDS:
        if data.get(field) is not None and not isinstance(data[field], str):
            raise ValidationError(f"{field} must be a string")

    if data.get("badge") is not None:
        if not is_bilingual(data["badge"]):
            raise ValidationError("badge must be an {en, vi} object")
        data["badge"] = bilingual(data["badge"])

    if data.get("nutrition") is not None and not isinstance(data["nutrition"], dict):
        raise ValidationError("nutrition must be an object")

    if "images" in data:
        images = data["images"] if data["images"] is not None else []
        if not isinstance(images, list) or not all(isinstance(i, str) for i in images):
            raise ValidationError("images must be a list of strings")
        data["images"] = images
    return data


@bp.get("")
def list_products():
    store = get_store()
    args = request.args

    category_id = None
    if args.get("category"):
        category = resolve_category(args["category"])
        category_id = category["id"] if category else args["category"]

    page = parse_int(args.get("page"), 1, 1)
    limit = parse_int(args.get("limit"), 12, 1, current_app.config["MAX_PAGE_SIZE"])

    if parse_bool(args.get("featured")):
        products = store.get_featured_products(in_stock=None if is_admin_request() else True)
        if category_id:
            products = [p for p in products if p["category"] == category_id]
    else:
        products = store.get_all_products(category=category_id)

    if parse_bool(args.get("organic")):
        products = [p for p in products if p["isOrganic"]]
    if parse_bool(args.get("seasonal")):
        products = [p for p in products if p["isSeasonal"]]

    kw = (args.get("search") or "").strip().lower()
    if kw:
        products = [
            p for p in products
            if any(kw in (text or "").lower() for text in (
                p["name"]["en"], p["name"]["vi"],
                p["description"]["en"], p["description"]["vi"],
            ))
        ]

    if not is_admin_request():
        products = [p for p in products if p["inStock"]]

    total = len(products)
    start = (page - 1) * limit
    return ok({
        "products": products[start:start + limit],
        "total": total,
        "page": page,
        "limit": limit,
        "pages": (total + limit - 1) // limit,
    })


@bp.get("/category/<category_id>")
def products_by_category(category_id):
    category = resolve_category(category_id)
    cid = category["id"] if category else category_id
    products = get_store().get_products_by_category(cid)
    if not is_admin_request():
        products = [p for p in products if p["inStock"]]
    return ok({"products": products, "total": len(products), "categoryId": cid})


@bp.get("/<product_id>")
def get_product(product_id):
    product = get_store().get_product_by_id(product_id)
    if not product:
        raise NotFoundError("Product not found")
    return ok(product)


@bp.post("")
@require_auth
def create_product():
    data = clean_product(json_body())
    data.setdefault("rating", 0)
    data.setdefault("reviewsCount", 0)
    data.setdefault("inStock", True)
    product = get_store().create_product(data)
    current_app.logger.info("product created: %s (%s)", product["id"], product["name"]["en"])
    return ok(product, 201)


@bp.put("/<product_id>")
@require_auth
def update_product(product_id):
    store = get_store()
    if not store.get_product_by_id(product_id):
        raise NotFoundError("Product not found")
    patch = clean_product(json_body(), partial=True)
    if not any(k in PRODUCT_FIELDS for k in patch):
        raise ValidationError("No updates provided")
    return ok(store.update_product(product_id, patch))


@bp.delete("/<product_id>")
@require_auth
def delete_product(product_id):
    if not get_store().delete_product(product_id):
        raise NotFoundError("Product not found")
    current_app.logger.info("product deleted: %s", product_id)
    return no_content()
