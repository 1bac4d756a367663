import hashlib
import re
from datetime import timedelta

import pytest

from storefront.errors import ConflictError
from storefront.store import seed
from storefront.store.base import check_password, hash_password, needs_rehash
from storefront.store.memory import generate_id

from conftest import category_payload, product_payload


def test_seeded_catalog(store):
    assert store.count_admin_users() == 1
    assert len(store.get_all_products()) == 7
    assert [c["slug"] for c in store.get_all_categories()] == ["fruits", "vegetables", "tropical", "bundles"]
    assert store.get_content_by_key("hero_title")["value"]["vi"] == "Trái cây tươi giao hàng hàng ngày"


def test_seed_is_idempotent(store):
    seed(store)
    assert store.count_admin_users() == 1
    assert len(store.get_all_products()) == 7
    assert len(store.get_all_categories()) == 4
    assert len(store.get_all_content()) == 4


def test_product_crud(store):
    created = store.create_product(product_payload())
    assert created["id"]
    assert created["createdAt"] == created["updatedAt"]
    assert created["isOrganic"] is False
    assert created["images"] == []

    fetched = store.get_product_by_id(created["id"])
    assert fetched["name"] == {"en": "Pomelo", "vi": "Bưởi"}

    updated = store.update_product(created["id"], {"price": 5.25, "id": "hijack", "createdAt": "1999"})
    assert updated["id"] == created["id"]
    assert updated["createdAt"] == created["createdAt"]
    assert updated["price"] == 5.25
    assert updated["name"] == created["name"]
    assert updated["updatedAt"] > created["updatedAt"]

    again = store.update_product(created["id"], {"inStock": False})
    assert again["updatedAt"] > updated["updatedAt"]

    assert store.delete_product(created["id"]) is True
    assert store.get_product_by_id(created["id"]) is None
    assert store.delete_product(created["id"]) is False


def test_update_missing_product_returns_none(store):
    assert store.update_product("missing", {"price": 1}) is None


def test_product_filters(store):
    organic = store.get_all_products(organic=True)
    assert len(organic) == 4
    assert all(p["isOrganic"] for p in organic)

    in_stock_organic = store.get_all_products(organic=True, in_stock=True)
    assert len(in_stock_organic) == 3

    vegetables = store.get_products_by_category("vegetables")
    assert {p["name"]["en"] for p in vegetables} == {"Baby Spinach", "Organic Kale", "Heirloom Tomatoes"}


def test_featured_products_best_rated_first(store):
    featured = store.get_featured_products()
    assert [p["name"]["en"] for p in featured] == [
        "Honeycrisp Apples", "Fresh Strawberries", "Organic Bananas",
    ]
    assert len(store.get_featured_products(limit=2)) == 2


def test_category_count_follows_products(store):
    counts = {c["slug"]: c["count"] for c in store.get_all_categories()}
    assert counts == {"fruits": 3, "vegetables": 3, "tropical": 1, "bundles": 0}

    store.create_product(product_payload(category="bundles"))
    assert store.get_category_by_slug("bundles")["count"] == 1


def test_category_slug_unique(store):
    store.create_category(category_payload())
    with pytest.raises(ConflictError):
        store.create_category(category_payload(name={"en": "Other", "vi": "Khác"}))

    other = store.create_category(category_payload(slug="berries"))
    with pytest.raises(ConflictError):
        store.update_category(other["id"], {"slug": "citrus"})
    # renaming to its own slug is not a clash
    assert store.update_category(other["id"], {"slug": "berries", "sortOrder": 9})["sortOrder"] == 9


def test_category_delete_is_unconditional(store):
    assert store.delete_category("fruits") is True
    assert store.get_category_by_id("fruits") is None
    # products are left pointing at the removed id
    assert len(store.get_products_by_category("fruits")) == 3


def test_content_lookups(store):
    hero = store.get_content_by_section("hero")
    assert [c["key"] for c in hero] == ["hero_title", "hero_subtitle"]
    assert store.get_content_by_key("hero_title", section="features") is None

    item = store.create_content({"key": "about", "value": {"en": "About", "vi": "Giới thiệu"},
                                 "type": "markdown", "section": "footer"})
    assert store.get_content_by_id(item["id"])["type"] == "markdown"
    updated = store.update_content(item["id"], {"sortOrder": 3})
    assert updated["sortOrder"] == 3
    assert updated["key"] == "about"
    assert store.delete_content(item["id"]) is True
    assert store.get_content_by_id(item["id"]) is None


def test_newsletter_upsert(store):
    row, created = store.subscribe_newsletter("Lan@Example.com", language="vi", name="Lan")
    assert created is True
    assert row["email"] == "lan@example.com"
    assert row["status"] == "active"

    again, created = store.subscribe_newsletter("lan@example.com", language="en")
    assert created is False
    assert again["id"] == row["id"]
    assert again["language"] == "en"
    assert again["name"] == "Lan"
    assert len(store.get_all_newsletters()) == 1
    assert store.get_newsletter_by_email(" LAN@example.com")["id"] == row["id"]
    assert store.get_newsletter_by_email("other@example.com") is None


def test_newsletter_unsubscribe_and_reactivate(store):
    store.subscribe_newsletter("minh@example.com")
    gone = store.unsubscribe_newsletter("MINH@example.com")
    assert gone["status"] == "unsubscribed"
    assert gone["isActive"] is False
    assert store.unsubscribe_newsletter("nobody@example.com") is None

    back, created = store.subscribe_newsletter("minh@example.com")
    assert created is False
    assert back["isActive"] is True


def test_verify_password(store):
    assert store.verify_password("admin", "admin123")["username"] == "admin"
    assert store.verify_password("admin", "wrong") is None
    assert store.verify_password("ghost", "admin123") is None

    user = store.get_admin_user_by_username("admin")
    store.set_admin_user_active(user["id"], False)
    assert store.verify_password("admin", "admin123") is None


def test_legacy_md5_hash_is_upgraded(store):
    user = store.create_admin_user("legacy", "placeholder")
    store.set_admin_password_hash(user["id"], hashlib.md5(b"oldpass").hexdigest())

    assert store.verify_password("legacy", "nope") is None
    verified = store.verify_password("legacy", "oldpass")
    assert verified is not None
    assert not needs_rehash(verified["passwordHash"])
    assert store.verify_password("legacy", "oldpass") is not None


def test_duplicate_admin_username(store):
    with pytest.raises(ConflictError):
        store.create_admin_user("admin", "other")


def test_session_lifecycle(store):
    user = store.get_admin_user_by_username("admin")
    session = store.create_session(user["id"])
    assert re.fullmatch(r"[0-9a-f]{64}", session["token"])
    assert store.get_session(session["token"])["userId"] == user["id"]

    assert store.delete_session(session["token"]) is True
    assert store.get_session(session["token"]) is None
    assert store.delete_session(session["token"]) is False


def test_expired_session_is_dropped_on_read(store):
    user = store.get_admin_user_by_username("admin")
    stale = store.create_session(user["id"], ttl=timedelta(seconds=-1))
    assert store.get_session(stale["token"]) is None
    assert store.sweep_expired_sessions() == 0


def test_sweep_expired_sessions(store):
    user = store.get_admin_user_by_username("admin")
    live = store.create_session(user["id"])
    store.create_session(user["id"], ttl=timedelta(seconds=-5))
    store.create_session(user["id"], ttl=timedelta(seconds=-1))

    assert store.sweep_expired_sessions() == 2
    assert store.get_session(live["token"]) is not None


def test_deleting_user_drops_sessions(store):
    user = store.create_admin_user("temp", "secret")
    session = store.create_session(user["id"])
    assert store.delete_admin_user(user["id"]) is True
    assert store.get_session(session["token"]) is None
    assert store.delete_admin_user(user["id"]) is False


def test_last_login_is_recorded(store):
    user = store.get_admin_user_by_username("admin")
    assert user["lastLogin"] is None
    store.update_admin_user_last_login(user["id"])
    assert store.get_admin_user_by_id(user["id"])["lastLogin"] is not None


def test_export_snapshot(store):
    store.subscribe_newsletter("an@example.com")
    snap = store.export_all()
    assert set(snap) == {"products", "categories", "content", "newsletters", "exportedAt", "version"}
    assert snap["version"] == "1.0"
    assert len(snap["products"]) == 7
    assert snap["newsletters"][0]["email"] == "an@example.com"


def test_password_helpers():
    hashed = hash_password("s3cret")
    assert hashed != "s3cret"
    assert check_password(hashed, "s3cret")
    assert not check_password(hashed, "other")
    assert not check_password("", "s3cret")


def test_memory_ids_are_base36():
    ids = {generate_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(re.fullmatch(r"[0-9a-z]+", i) for i in ids)


def test_featured_products_can_include_sold_out(store):
    sold_out = store.create_product(product_payload(isFeatured=True, inStock=False, rating=3.0))
    assert sold_out["id"] not in [p["id"] for p in store.get_featured_products()]
    everything = store.get_featured_products(in_stock=None)
    assert sold_out["id"] in [p["id"] for p in everything]
    assert len(everything) == 4
