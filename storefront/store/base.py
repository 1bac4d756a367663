"""
Store contract shared by the in-memory and SQL backends.

Entities travel as plain dicts shaped like the JSON the API returns
(camelCase keys, bilingual fields as {"en", "vi"} pairs), so routes never
need to know which backend is active.
"""
import copy
import hashlib
import hmac
import re
import secrets
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Dict, List, Optional, Tuple

from werkzeug.security import check_password_hash, generate_password_hash

from ..utils.clock import iso, utcnow

EXPORT_VERSION = "1.0"

PRODUCT_FIELDS = {
    "name": {"en": "", "vi": ""},
    "description": {"en": "", "vi": ""},
    "price": 0.0,
    "originalPrice": None,
    "image": "",
    "images": [],
    "category": "",
    "inStock": True,
    "rating": 0.0,
    "reviewsCount": 0,
    "unit": "kg",
    "origin": None,
    "badge": None,
    "badgeColor": None,
    "nutrition": None,
    "isOrganic": False,
    "isSeasonal": False,
    "isFeatured": False,
}

CATEGORY_FIELDS = {
    "name": {"en": "", "vi": ""},
    "description": {"en": "", "vi": ""},
    "slug": "",
    "emoji": None,
    "color": None,
    "image": None,
    "parentId": None,
    "sortOrder": 0,
    "isActive": True,
}

CONTENT_FIELDS = {
    "key": "",
    "value": {"en": "", "vi": ""},
    "type": "text",
    "section": "",
    "sortOrder": 0,
}

# filter keyword -> product field
PRODUCT_FILTERS = {
    "category": "category",
    "organic": "isOrganic",
    "seasonal": "isSeasonal",
    "featured": "isFeatured",
    "in_stock": "inStock",
}

_LEGACY_MD5 = re.compile(r"^[0-9a-f]{32}$")


def pick_fields(fields: dict, data: dict) -> dict:
    """Full record for create: every known field, defaults where absent."""
    return {k: copy.deepcopy(data[k] if k in data else default) for k, default in fields.items()}


def patch_fields(fields: dict, patch: dict) -> dict:
    """Only the known fields present in the patch."""
    return {k: copy.deepcopy(v) for k, v in patch.items() if k in fields}


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def check_password(stored_hash: str, password: str) -> bool:
    if not stored_hash:
        return False
    if _LEGACY_MD5.match(stored_hash):
        # unsalted digests written by the old storefront
        candidate = hashlib.md5(password.encode("utf-8")).hexdigest()
        return hmac.compare_digest(stored_hash, candidate)
    return check_password_hash(stored_hash, password)


def needs_rehash(stored_hash: str) -> bool:
    return bool(_LEGACY_MD5.match(stored_hash or ""))


def new_token() -> str:
    return secrets.token_hex(32)


def public_user(user: dict) -> dict:
    return {
        "id": user["id"],
        "username": user["username"],
        "fullName": user.get("fullName"),
        "email": user.get("email"),
    }


class Store(ABC):
    """Storage contract for products, categories, content, newsletter and admin auth."""

    backend = "abstract"

    def __init__(self, session_ttl: timedelta = timedelta(minutes=15)):
        self.session_ttl = session_ttl

    # ---------- Products ----------
    @abstractmethod
    def get_all_products(self, **filters) -> List[dict]: ...

    @abstractmethod
    def get_product_by_id(self, product_id: str) -> Optional[dict]: ...

    @abstractmethod
    def create_product(self, data: dict) -> dict: ...

    @abstractmethod
    def update_product(self, product_id: str, patch: dict) -> Optional[dict]: ...

    @abstractmethod
    def delete_product(self, product_id: str) -> bool: ...

    def get_products_by_category(self, category_id: str) -> List[dict]:
        return self.get_all_products(category=category_id)

    def get_featured_products(self, limit: Optional[int] = None, in_stock: Optional[bool] = True) -> List[dict]:
        """Featured products, best rated first. in_stock=None includes sold-out items."""
        rows = self.get_all_products(featured=True, in_stock=in_stock)
        rows.sort(key=lambda p: p.get("rating") or 0, reverse=True)
        return rows[:limit] if limit else rows

    # ---------- Categories ----------
    @abstractmethod
    def get_all_categories(self) -> List[dict]: ...

    @abstractmethod
    def get_category_by_id(self, category_id: str) -> Optional[dict]: ...

    @abstractmethod
    def get_category_by_slug(self, slug: str) -> Optional[dict]: ...

    @abstractmethod
    def create_category(self, data: dict) -> dict: ...

    @abstractmethod
    def update_category(self, category_id: str, patch: dict) -> Optional[dict]: ...

    @abstractmethod
    def delete_category(self, category_id: str) -> bool: ...

    # ---------- Content ----------
    @abstractmethod
    def get_all_content(self, section: Optional[str] = None, key: Optional[str] = None) -> List[dict]: ...

    @abstractmethod
    def get_content_by_id(self, content_id: str) -> Optional[dict]: ...

    @abstractmethod
    def create_content(self, data: dict) -> dict: ...

    @abstractmethod
    def update_content(self, content_id: str, patch: dict) -> Optional[dict]: ...

    @abstractmethod
    def delete_content(self, content_id: str) -> bool: ...

    def get_content_by_key(self, key: str, section: Optional[str] = None) -> Optional[dict]:
        rows = self.get_all_content(section=section, key=key)
        return rows[0] if rows else None

    def get_content_by_section(self, section: str) -> List[dict]:
        return self.get_all_content(section=section)

    # ---------- Newsletter ----------
    @abstractmethod
    def subscribe_newsletter(self, email: str, language: str = "en",
                             name: Optional[str] = None) -> Tuple[dict, bool]:
        """Upsert on email. Returns (subscription, created)."""

    @abstractmethod
    def get_newsletter_by_email(self, email: str) -> Optional[dict]: ...

    @abstractmethod
    def get_all_newsletters(self) -> List[dict]: ...

    @abstractmethod
    def unsubscribe_newsletter(self, email: str) -> Optional[dict]: ...

    # ---------- Admin users ----------
    @abstractmethod
    def create_admin_user(self, username: str, password: str, full_name: Optional[str] = None,
                          email: Optional[str] = None) -> dict: ...

    @abstractmethod
    def get_admin_user_by_id(self, user_id: str) -> Optional[dict]: ...

    @abstractmethod
    def get_admin_user_by_username(self, username: str) -> Optional[dict]: ...

    @abstractmethod
    def count_admin_users(self) -> int: ...

    @abstractmethod
    def update_admin_user_last_login(self, user_id: str) -> None: ...

    @abstractmethod
    def set_admin_password_hash(self, user_id: str, password_hash: str) -> None: ...

    @abstractmethod
    def set_admin_user_active(self, user_id: str, active: bool) -> Optional[dict]: ...

    @abstractmethod
    def delete_admin_user(self, user_id: str) -> bool: ...

    def verify_password(self, username: str, password: str) -> Optional[dict]:
        user = self.get_admin_user_by_username(username)
        if not user or not user.get("isActive"):
            return None
        if not check_password(user["passwordHash"], password):
            return None
        if needs_rehash(user["passwordHash"]):
            self.set_admin_password_hash(user["id"], hash_password(password))
            user = self.get_admin_user_by_id(user["id"])
        return user

    # ---------- Admin sessions ----------
    @abstractmethod
    def create_session(self, user_id: str, ttl: Optional[timedelta] = None) -> dict: ...

    @abstractmethod
    def get_session(self, token: str) -> Optional[dict]:
        """Live session for the token; an expired one is deleted and reported missing."""

    @abstractmethod
    def delete_session(self, token: str) -> bool: ...

    @abstractmethod
    def sweep_expired_sessions(self) -> int: ...

    def _expiry(self, ttl: Optional[timedelta]):
        return utcnow() + (ttl if ttl is not None else self.session_ttl)

    # ---------- Snapshot ----------
    def export_all(self) -> Dict[str, object]:
        return {
            "products": self.get_all_products(),
            "categories": self.get_all_categories(),
            "content": self.get_all_content(),
            "newsletters": self.get_all_newsletters(),
            "exportedAt": iso(utcnow()),
            "version": EXPORT_VERSION,
        }

    def close(self) -> None:
        pass
