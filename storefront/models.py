# models.py
import uuid

from .extensions import db
from .utils.clock import iso, utcnow


def new_uuid() -> str:
    return str(uuid.uuid4())


class Product(db.Model):
    __tablename__ = "products"

    id             = db.Column(db.String(36), primary_key=True, default=new_uuid)
    name_en        = db.Column(db.String(180), nullable=False)
    name_vi        = db.Column(db.String(180), nullable=False)
    description_en = db.Column(db.Text, nullable=False, default="")
    description_vi = db.Column(db.Text, nullable=False, default="")
    price          = db.Column(db.Float, nullable=False)
    original_price = db.Column(db.Float)
    image          = db.Column(db.String(255), nullable=False, default="")
    images         = db.Column(db.JSON)                        # list[str] gallery
    category       = db.Column(db.String(36), nullable=False, index=True)
    in_stock       = db.Column(db.Boolean, default=True, index=True)
    rating         = db.Column(db.Float, default=0)
    reviews_count  = db.Column(db.Integer, default=0)
    unit           = db.Column(db.String(20), default="kg")
    origin         = db.Column(db.String(120))
    badge_en       = db.Column(db.String(60))
    badge_vi       = db.Column(db.String(60))
    badge_color    = db.Column(db.String(60))
    nutrition      = db.Column(db.JSON)
    organic        = db.Column(db.Boolean, default=False, index=True)
    seasonal       = db.Column(db.Boolean, default=False, index=True)
    featured       = db.Column(db.Boolean, default=False, index=True)
    created_at     = db.Column(db.DateTime, default=utcnow, index=True)
    updated_at     = db.Column(db.DateTime, default=utcnow)

    # DTO key -> column, for the scalar fields
    COLUMNS = {
        "price": "price", "originalPrice": "original_price", "image": "image",
        "images": "images", "category": "category", "inStock": "in_stock",
        "rating": "rating", "reviewsCount": "reviews_count", "unit": "unit",
        "origin": "origin", "badgeColor": "badge_color", "nutrition": "nutrition",
        "isOrganic": "organic", "isSeasonal": "seasonal", "isFeatured": "featured",
    }

    def apply(self, data: dict):
        if "name" in data:
            self.name_en, self.name_vi = data["name"]["en"], data["name"]["vi"]
        if "description" in data:
            d = data["description"] or {}
            self.description_en, self.description_vi = d.get("en", ""), d.get("vi", "")
        if "badge" in data:
            b = data["badge"] or {}
            self.badge_en, self.badge_vi = b.get("en"), b.get("vi")
        for key, col in self.COLUMNS.items():
            if key in data:
                setattr(self, col, data[key])

    def to_dict(self):
        return {
            "id": self.id,
            "name": {"en": self.name_en, "vi": self.name_vi},
            "description": {"en": self.description_en, "vi": self.description_vi},
            "price": self.price,
            "originalPrice": self.original_price,
            "image": self.image,
            "images": list(self.images or []),
            "category": self.category,
            "inStock": bool(self.in_stock),
            "rating": self.rating or 0,
            "reviewsCount": self.reviews_count or 0,
            "unit": self.unit,
            "origin": self.origin,
            "badge": {"en": self.badge_en, "vi": self.badge_vi} if self.badge_en or self.badge_vi else None,
            "badgeColor": self.badge_color,
            "nutrition": self.nutrition,
            "isOrganic": bool(self.organic),
            "isSeasonal": bool(self.seasonal),
            "isFeatured": bool(self.featured),
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }


class Category(db.Model):
    __tablename__ = "categories"

    id             = db.Column(db.String(36), primary_key=True, default=new_uuid)
    name_en        = db.Column(db.String(120), nullable=False)
    name_vi        = db.Column(db.String(120), nullable=False)
    description_en = db.Column(db.Text)
    description_vi = db.Column(db.Text)
    slug           = db.Column(db.String(120), unique=True, nullable=False, index=True)
    emoji          = db.Column(db.String(16))
    color          = db.Column(db.String(60))
    image          = db.Column(db.String(255))
    parent_id      = db.Column(db.String(36))
    sort_order     = db.Column(db.Integer, default=0)
    is_active      = db.Column(db.Boolean, default=True)
    created_at     = db.Column(db.DateTime, default=utcnow)
    updated_at     = db.Column(db.DateTime, default=utcnow)

    COLUMNS = {
        "slug": "slug", "emoji": "emoji", "color": "color", "image": "image",
        "parentId": "parent_id", "sortOrder": "sort_order", "isActive": "is_active",
    }

    def apply(self, data: dict):
        if "name" in data:
            self.name_en, self.name_vi = data["name"]["en"], data["name"]["vi"]
        if "description" in data:
            d = data["description"] or {}
            self.description_en, self.description_vi = d.get("en"), d.get("vi")
        for key, col in self.COLUMNS.items():
            if key in data:
                setattr(self, col, data[key])

    def to_dict(self, count: int = 0):
        return {
            "id": self.id,
            "name": {"en": self.name_en, "vi": self.name_vi},
            "description": {"en": self.description_en or "", "vi": self.description_vi or ""},
            "slug": self.slug,
            "emoji": self.emoji,
            "color": self.color,
            "image": self.image,
            "parentId": self.parent_id,
            "count": count,
            "sortOrder": self.sort_order or 0,
            "isActive": bool(self.is_active),
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }


class Content(db.Model):
    __tablename__ = "content"

    id         = db.Column(db.String(36), primary_key=True, default=new_uuid)
    key        = db.Column(db.String(120), nullable=False, index=True)
    value_en   = db.Column(db.Text)
    value_vi   = db.Column(db.Text)
    type       = db.Column(db.String(20), nullable=False, default="text")
    section    = db.Column(db.String(60), index=True)
    sort_order = db.Column(db.Integer, default=0)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow)

    def apply(self, data: dict):
        if "value" in data:
            self.value_en, self.value_vi = data["value"]["en"], data["value"]["vi"]
        if "key" in data:       self.key = data["key"]
        if "type" in data:      self.type = data["type"]
        if "section" in data:   self.section = data["section"]
        if "sortOrder" in data: self.sort_order = data["sortOrder"]

    def to_dict(self):
        return {
            "id": self.id,
            "key": self.key,
            "value": {"en": self.value_en, "vi": self.value_vi},
            "type": self.type,
            "section": self.section,
            "sortOrder": self.sort_order or 0,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }


class Newsletter(db.Model):
    __tablename__ = "newsletters"

    id            = db.Column(db.String(36), primary_key=True, default=new_uuid)
    email         = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name          = db.Column(db.String(120))
    language      = db.Column(db.String(2), default="en")
    status        = db.Column(db.String(20), default="active")
    subscribed_at = db.Column(db.DateTime, default=utcnow)
    updated_at    = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "language": self.language,
            "status": self.status,
            "isActive": self.status == "active",
            "subscribedAt": iso(self.subscribed_at),
            "updatedAt": iso(self.updated_at),
        }


class AdminUser(db.Model):
    __tablename__ = "admin_users"

    id            = db.Column(db.String(36), primary_key=True, default=new_uuid)
    username      = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name     = db.Column(db.String(120))
    email         = db.Column(db.String(120))
    is_active     = db.Column(db.Boolean, default=True)
    last_login    = db.Column(db.DateTime)
    created_at    = db.Column(db.DateTime, default=utcnow)
    updated_at    = db.Column(db.DateTime, default=utcnow)

    sessions = db.relationship("AdminSession", back_populates="user",
                               cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "passwordHash": self.password_hash,
            "fullName": self.full_name,
            "email": self.email,
            "isActive": bool(self.is_active),
            "lastLogin": iso(self.last_login),
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }


class AdminSession(db.Model):
    __tablename__ = "admin_sessions"

    id         = db.Column(db.String(36), primary_key=True, default=new_uuid)
    token      = db.Column(db.String(64), unique=True, nullable=False, index=True)
    user_id    = db.Column(db.String(36), db.ForeignKey("admin_users.id", ondelete="CASCADE"),
                           nullable=False, index=True)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    user = db.relationship("AdminUser", back_populates="sessions")

    def to_dict(self):
        return {
            "id": self.id,
            "token": self.token,
            "userId": self.user_id,
            "expiresAt": iso(self.expires_at),
            "createdAt": iso(self.created_at),
        }
