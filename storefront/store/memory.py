import copy
import secrets
import threading
import time
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from ..errors import ConflictError
from ..utils.clock import bump, iso, utcnow
from .base import (
    CATEGORY_FIELDS,
    CONTENT_FIELDS,
    PRODUCT_FIELDS,
    PRODUCT_FILTERS,
    Store,
    hash_password,
    new_token,
    patch_fields,
    pick_fields,
)

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(n: int) -> str:
    out = ""
    while True:
        n, r = divmod(n, 36)
        out = _ALPHABET[r] + out
        if n == 0:
            return out


def generate_id() -> str:
    return _base36(int(time.time() * 1000)) + _base36(secrets.randbits(48))


def _out(record: dict) -> dict:
    """Copy of a record with datetimes rendered as ISO strings."""
    return {k: iso(v) if isinstance(v, datetime) else copy.deepcopy(v) for k, v in record.items()}


class MemoryStore(Store):
    """
    Process-lifetime store backed by dicts.

    State is lost on restart and reseeded at startup. A single re-entrant
    lock serialises mutations because the WSGI server may run requests on
    several threads.
    """

    backend = "memory"

    def __init__(self, session_ttl: timedelta = timedelta(minutes=15)):
        super().__init__(session_ttl)
        self._lock = threading.RLock()
        self._products = {}
        self._categories = {}
        self._content = {}
        self._newsletters = {}    # keyed by normalized email
        self._admin_users = {}
        self._sessions = {}       # keyed by token

    def _new_id(self, table: dict) -> str:
        while True:
            new_id = generate_id()
            if new_id not in table:
                return new_id

    def _insert(self, table: dict, record: dict, record_id: Optional[str] = None) -> dict:
        now = utcnow()
        record.update(id=record_id or self._new_id(table), createdAt=now, updatedAt=now)
        table[record["id"]] = record
        return record

    def _merge(self, table: dict, record_id: str, changes: dict) -> Optional[dict]:
        current = table.get(record_id)
        if current is None:
            return None
        current.update(changes)
        current["updatedAt"] = bump(current["updatedAt"])
        return current

    # ---------- Products ----------
    def get_all_products(self, **filters) -> List[dict]:
        wanted = {PRODUCT_FILTERS[k]: v for k, v in filters.items() if v is not None}
        with self._lock:
            rows = [p for p in self._products.values()
                    if all(p.get(field) == v for field, v in wanted.items())]
            rows = sorted(rows, key=lambda p: p["createdAt"], reverse=True)
            return [_out(p) for p in rows]

    def get_product_by_id(self, product_id: str) -> Optional[dict]:
        with self._lock:
            p = self._products.get(product_id)
            return _out(p) if p else None

    def create_product(self, data: dict) -> dict:
        with self._lock:
            return _out(self._insert(self._products, pick_fields(PRODUCT_FIELDS, data)))

    def update_product(self, product_id: str, patch: dict) -> Optional[dict]:
        with self._lock:
            p = self._merge(self._products, product_id, patch_fields(PRODUCT_FIELDS, patch))
            return _out(p) if p else None

    def delete_product(self, product_id: str) -> bool:
        with self._lock:
            return self._products.pop(product_id, None) is not None

    # ---------- Categories ----------
    def _count(self, category_id: str) -> int:
        return sum(1 for p in self._products.values() if p["category"] == category_id)

    def _category_out(self, c: dict) -> dict:
        out = _out(c)
        out["count"] = self._count(c["id"])
        return out

    def _slug_taken(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        return any(c["slug"] == slug and c["id"] != exclude_id for c in self._categories.values())

    def get_all_categories(self) -> List[dict]:
        with self._lock:
            rows = sorted(self._categories.values(), key=lambda c: (c["sortOrder"], c["name"]["en"]))
            return [self._category_out(c) for c in rows]

    def get_category_by_id(self, category_id: str) -> Optional[dict]:
        with self._lock:
            c = self._categories.get(category_id)
            return self._category_out(c) if c else None

    def get_category_by_slug(self, slug: str) -> Optional[dict]:
        with self._lock:
            c = next((c for c in self._categories.values() if c["slug"] == slug), None)
            return self._category_out(c) if c else None

    def create_category(self, data: dict) -> dict:
        record = pick_fields(CATEGORY_FIELDS, data)
        with self._lock:
            if self._slug_taken(record["slug"]):
                raise ConflictError("Category slug already exists")
            # seed rows keep readable ids such as "fruits"
            record_id = data.get("id")
            if record_id in self._categories:
                raise ConflictError("Category id already exists")
            return self._category_out(self._insert(self._categories, record, record_id))

    def update_category(self, category_id: str, patch: dict) -> Optional[dict]:
        changes = patch_fields(CATEGORY_FIELDS, patch)
        with self._lock:
            if "slug" in changes and self._slug_taken(changes["slug"], exclude_id=category_id):
                raise ConflictError("Category slug already exists")
            c = self._merge(self._categories, category_id, changes)
            return self._category_out(c) if c else None

    def delete_category(self, category_id: str) -> bool:
        with self._lock:
            return self._categories.pop(category_id, None) is not None

    # ---------- Content ----------
    def get_all_content(self, section: Optional[str] = None, key: Optional[str] = None) -> List[dict]:
        with self._lock:
            rows = [c for c in self._content.values()
                    if (section is None or c["section"] == section)
                    and (key is None or c["key"] == key)]
            rows.sort(key=lambda c: (c["section"], c["sortOrder"], c["key"]))
            return [_out(c) for c in rows]

    def get_content_by_id(self, content_id: str) -> Optional[dict]:
        with self._lock:
            c = self._content.get(content_id)
            return _out(c) if c else None

    def create_content(self, data: dict) -> dict:
        with self._lock:
            return _out(self._insert(self._content, pick_fields(CONTENT_FIELDS, data)))

    def update_content(self, content_id: str, patch: dict) -> Optional[dict]:
        with self._lock:
            c = self._merge(self._content, content_id, patch_fields(CONTENT_FIELDS, patch))
            return _out(c) if c else None

    def delete_content(self, content_id: str) -> bool:
        with self._lock:
            return self._content.pop(content_id, None) is not None

    # ---------- Newsletter ----------
    def subscribe_newsletter(self, email: str, language: str = "en",
                             name: Optional[str] = None) -> Tuple[dict, bool]:
        email = email.strip().lower()
        with self._lock:
            existing = self._newsletters.get(email)
            now = utcnow()
            if existing:
                existing.update(language=language, status="active", isActive=True,
                                updatedAt=bump(existing["updatedAt"]))
                if name:
                    existing["name"] = name
                return _out(existing), False
            record = {
                "id": self._new_id({n["id"]: n for n in self._newsletters.values()}),
                "email": email,
                "name": name,
                "language": language,
                "status": "active",
                "isActive": True,
                "subscribedAt": now,
                "updatedAt": now,
            }
            self._newsletters[email] = record
            return _out(record), True

    def get_newsletter_by_email(self, email: str) -> Optional[dict]:
        with self._lock:
            n = self._newsletters.get(email.strip().lower())
            return _out(n) if n else None

    def get_all_newsletters(self) -> List[dict]:
        with self._lock:
            rows = sorted(self._newsletters.values(), key=lambda n: n["subscribedAt"], reverse=True)
            return [_out(n) for n in rows]

    def unsubscribe_newsletter(self, email: str) -> Optional[dict]:
        with self._lock:
            n = self._newsletters.get(email.strip().lower())
            if not n:
                return None
            n.update(status="unsubscribed", isActive=False, updatedAt=bump(n["updatedAt"]))
            return _out(n)

    # ---------- Admin users ----------
    def create_admin_user(self, username: str, password: str, full_name: Optional[str] = None,
                          email: Optional[str] = None) -> dict:
        with self._lock:
            if any(u["username"] == username for u in self._admin_users.values()):
                raise ConflictError("Username already exists")
            record = {
                "username": username,
                "passwordHash": hash_password(password),
                "fullName": full_name,
                "email": email,
                "isActive": True,
                "lastLogin": None,
            }
            return _out(self._insert(self._admin_users, record))

    def get_admin_user_by_id(self, user_id: str) -> Optional[dict]:
        with self._lock:
            u = self._admin_users.get(user_id)
            return _out(u) if u else None

    def get_admin_user_by_username(self, username: str) -> Optional[dict]:
        with self._lock:
            u = next((u for u in self._admin_users.values() if u["username"] == username), None)
            return _out(u) if u else None

    def count_admin_users(self) -> int:
        with self._lock:
            return len(self._admin_users)

    def update_admin_user_last_login(self, user_id: str) -> None:
        with self._lock:
            self._merge(self._admin_users, user_id, {"lastLogin": utcnow()})

    def set_admin_password_hash(self, user_id: str, password_hash: str) -> None:
        with self._lock:
            self._merge(self._admin_users, user_id, {"passwordHash": password_hash})

    def set_admin_user_active(self, user_id: str, active: bool) -> Optional[dict]:
        with self._lock:
            u = self._merge(self._admin_users, user_id, {"isActive": bool(active)})
            return _out(u) if u else None

    def delete_admin_user(self, user_id: str) -> bool:
        with self._lock:
            if self._admin_users.pop(user_id, None) is None:
                return False
            for token in [t for t, s in self._sessions.items() if s["userId"] == user_id]:
                del self._sessions[token]
            return True

    # ---------- Admin sessions ----------
    def create_session(self, user_id: str, ttl: Optional[timedelta] = None) -> dict:
        with self._lock:
            token = new_token()
            record = {
                "id": self._new_id({s["id"]: s for s in self._sessions.values()}),
                "token": token,
                "userId": user_id,
                "expiresAt": self._expiry(ttl),
                "createdAt": utcnow(),
            }
            self._sessions[token] = record
            return _out(record)

    def get_session(self, token: str) -> Optional[dict]:
        with self._lock:
            s = self._sessions.get(token)
            if s is None:
                return None
            if s["expiresAt"] <= utcnow():
                del self._sessions[token]
                return None
            return _out(s)

    def delete_session(self, token: str) -> bool:
        with self._lock:
            return self._sessions.pop(token, None) is not None

    def sweep_expired_sessions(self) -> int:
        now = utcnow()
        with self._lock:
            expired = [t for t, s in self._sessions.items() if s["expiresAt"] <= now]
            for token in expired:
                del self._sessions[token]
            return len(expired)
