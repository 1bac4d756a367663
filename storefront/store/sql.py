from datetime import timedelta
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ..errors import ConflictError
from ..models import AdminSession, AdminUser, Category, Content, Newsletter, Product
from ..utils.clock import bump, utcnow
from .base import (
    CATEGORY_FIELDS,
    CONTENT_FIELDS,
    PRODUCT_FIELDS,
    Store,
    hash_password,
    new_token,
    patch_fields,
    pick_fields,
)

# filter keyword -> Product column
_PRODUCT_COLUMNS = {
    "category": Product.category,
    "organic": Product.organic,
    "seasonal": Product.seasonal,
    "featured": Product.featured,
    "in_stock": Product.in_stock,
}


class SqlStore(Store):
    """
    Store on a Flask-SQLAlchemy database (SQLite file by default).

    Every call is its own unit of work: commit on success, rollback on
    failure. Calls need an application context.
    """

    backend = "sql"

    def __init__(self, db, session_ttl: timedelta = timedelta(minutes=15)):
        super().__init__(session_ttl)
        self.db = db

    def _commit(self, conflict_message: Optional[str] = None):
        try:
            self.db.session.commit()
        except IntegrityError:
            self.db.session.rollback()
            if conflict_message:
                raise ConflictError(conflict_message)
            raise
        except Exception:
            self.db.session.rollback()
            raise

    def _get(self, model, record_id):
        return self.db.session.get(model, record_id)

    def _delete(self, model, record_id) -> bool:
        row = self._get(model, record_id)
        if row is None:
            return False
        self.db.session.delete(row)
        self._commit()
        return True

    # ---------- Products ----------
    def get_all_products(self, **filters) -> List[dict]:
        q = Product.query
        for name, value in filters.items():
            if value is not None:
                q = q.filter(_PRODUCT_COLUMNS[name] == value)
        return [p.to_dict() for p in q.order_by(Product.created_at.desc()).all()]

    def get_product_by_id(self, product_id: str) -> Optional[dict]:
        p = self._get(Product, product_id)
        return p.to_dict() if p else None

    def create_product(self, data: dict) -> dict:
        now = utcnow()
        p = Product(created_at=now, updated_at=now)
        p.apply(pick_fields(PRODUCT_FIELDS, data))
        self.db.session.add(p)
        self._commit()
        return p.to_dict()

    def update_product(self, product_id: str, patch: dict) -> Optional[dict]:
        p = self._get(Product, product_id)
        if p is None:
            return None
        p.apply(patch_fields(PRODUCT_FIELDS, patch))
        p.updated_at = bump(p.updated_at)
        self._commit()
        return p.to_dict()

    def delete_product(self, product_id: str) -> bool:
        return self._delete(Product, product_id)

    # ---------- Categories ----------
    def _counts(self) -> dict:
        rows = (self.db.session.query(Product.category, func.count(Product.id))
                .group_by(Product.category).all())
        return dict(rows)

    def _category_out(self, c: Category) -> dict:
        count = Product.query.filter(Product.category == c.id).count()
        return c.to_dict(count=count)

    def get_all_categories(self) -> List[dict]:
        counts = self._counts()
        rows = Category.query.order_by(Category.sort_order, Category.name_en).all()
        return [c.to_dict(count=counts.get(c.id, 0)) for c in rows]

    def get_category_by_id(self, category_id: str) -> Optional[dict]:
        c = self._get(Category, category_id)
        return self._category_out(c) if c else None

    def get_category_by_slug(self, slug: str) -> Optional[dict]:
        c = Category.query.filter_by(slug=slug).first()
        return self._category_out(c) if c else None

    def create_category(self, data: dict) -> dict:
        record = pick_fields(CATEGORY_FIELDS, data)
        if Category.query.filter_by(slug=record["slug"]).first():
            raise ConflictError("Category slug already exists")
        now = utcnow()
        c = Category(created_at=now, updated_at=now)
        if data.get("id"):
            # seed rows keep readable ids such as "fruits"
            c.id = data["id"]
        c.apply(record)
        self.db.session.add(c)
        self._commit("Category slug already exists")
        return self._category_out(c)

    def update_category(self, category_id: str, patch: dict) -> Optional[dict]:
        c = self._get(Category, category_id)
        if c is None:
            return None
        changes = patch_fields(CATEGORY_FIELDS, patch)
        if "slug" in changes:
            clash = Category.query.filter(Category.slug == changes["slug"], Category.id != category_id).first()
            if clash:
                raise ConflictError("Category slug already exists")
        c.apply(changes)
        c.updated_at = bump(c.updated_at)
        self._commit("Category slug already exists")
        return self._category_out(c)

    def delete_category(self, category_id: str) -> bool:
        return self._delete(Category, category_id)

    # ---------- Content ----------
    def get_all_content(self, section: Optional[str] = None, key: Optional[str] = None) -> List[dict]:
        q = Content.query
        if section is not None:
            q = q.filter(Content.section == section)
        if key is not None:
            q = q.filter(Content.key == key)
        q = q.order_by(Content.section, Content.sort_order, Content.key)
        return [c.to_dict() for c in q.all()]

    def get_content_by_id(self, content_id: str) -> Optional[dict]:
        c = self._get(Content, content_id)
        return c.to_dict() if c else None

    def create_content(self, data: dict) -> dict:
        now = utcnow()
        c = Content(created_at=now, updated_at=now)
        c.apply(pick_fields(CONTENT_FIELDS, data))
        self.db.session.add(c)
        self._commit()
        return c.to_dict()

    def update_content(self, content_id: str, patch: dict) -> Optional[dict]:
        c = self._get(Content, content_id)
        if c is None:
            return None
        c.apply(patch_fields(CONTENT_FIELDS, patch))
        c.updated_at = bump(c.updated_at)
        self._commit()
        return c.to_dict()

    def delete_content(self, content_id: str) -> bool:
        return self._delete(Content, content_id)

    # ---------- Newsletter ----------
    def subscribe_newsletter(self, email: str, language: str = "en",
                             name: Optional[str] = None) -> Tuple[dict, bool]:
        email = email.strip().lower()
        n = Newsletter.query.filter_by(email=email).first()
        created = n is None
        if created:
            now = utcnow()
            n = Newsletter(email=email, name=name, language=language, status="active",
                           subscribed_at=now, updated_at=now)
            self.db.session.add(n)
        else:
            n.language = language
            n.status = "active"
            if name:
                n.name = name
            n.updated_at = bump(n.updated_at)
        self._commit("Email already subscribed")
        return n.to_dict(), created

    def get_newsletter_by_email(self, email: str) -> Optional[dict]:
        n = Newsletter.query.filter_by(email=email.strip().lower()).first()
        return n.to_dict() if n else None

    def get_all_newsletters(self) -> List[dict]:
        rows = Newsletter.query.order_by(Newsletter.subscribed_at.desc()).all()
        return [n.to_dict() for n in rows]

    def unsubscribe_newsletter(self, email: str) -> Optional[dict]:
        n = Newsletter.query.filter_by(email=email.strip().lower()).first()
        if n is None:
            return None
        n.status = "unsubscribed"
        n.updated_at = bump(n.updated_at)
        self._commit()
        return n.to_dict()

    # ---------- Admin users ----------
    def create_admin_user(self, username: str, password: str, full_name: Optional[str] = None,
                          email: Optional[str] = None) -> dict:
        if AdminUser.query.filter_by(username=username).first():
            raise ConflictError("Username already exists")
        now = utcnow()
        u = AdminUser(username=username, password_hash=hash_password(password),
                      full_name=full_name, email=email, is_active=True,
                      created_at=now, updated_at=now)
        self.db.session.add(u)
        self._commit("Username already exists")
        return u.to_dict()

    def get_admin_user_by_id(self, user_id: str) -> Optional[dict]:
        u = self._get(AdminUser, user_id)
        return u.to_dict() if u else None

    def get_admin_user_by_username(self, username: str) -> Optional[dict]:
        u = AdminUser.query.filter_by(username=username).first()
        return u.to_dict() if u else None

    def count_admin_users(self) -> int:
        return AdminUser.query.count()

    def _touch_user(self, user_id: str, **changes) -> Optional[AdminUser]:
        u = self._get(AdminUser, user_id)
        if u is None:
            return None
        for k, v in changes.items():
            setattr(u, k, v)
        u.updated_at = bump(u.updated_at)
        self._commit()
        return u

    def update_admin_user_last_login(self, user_id: str) -> None:
        self._touch_user(user_id, last_login=utcnow())

    def set_admin_password_hash(self, user_id: str, password_hash: str) -> None:
        self._touch_user(user_id, password_hash=password_hash)

    def set_admin_user_active(self, user_id: str, active: bool) -> Optional[dict]:
        u = self._touch_user(user_id, is_active=bool(active))
        return u.to_dict() if u else None

    def delete_admin_user(self, user_id: str) -> bool:
        # sessions go with the user through the relationship cascade
        return self._delete(AdminUser, user_id)

    # ---------- Admin sessions ----------
    def create_session(self, user_id: str, ttl: Optional[timedelta] = None) -> dict:
        s = AdminSession(token=new_token(), user_id=user_id,
                         expires_at=self._expiry(ttl), created_at=utcnow())
        self.db.session.add(s)
        self._commit()
        return s.to_dict()

    def get_session(self, token: str) -> Optional[dict]:
        s = AdminSession.query.filter_by(token=token).first()
        if s is None:
            return None
        if s.expires_at <= utcnow():
            self.db.session.delete(s)
            self._commit()
            return None
        return s.to_dict()

    def delete_session(self, token: str) -> bool:
        deleted = AdminSession.query.filter_by(token=token).delete()
        self._commit()
        return deleted > 0

    def sweep_expired_sessions(self) -> int:
        deleted = AdminSession.query.filter(AdminSession.expires_at <= utcnow()).delete()
        self._commit()
        return deleted

    def close(self) -> None:
        self.db.session.remove()
