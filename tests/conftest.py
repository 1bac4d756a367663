import pytest

from storefront.app import create_app
from storefront.config import TestConfig
from storefront.extensions import db

ADMIN = {"username": "admin", "password": "admin123"}


class SqlTestConfig(TestConfig):
    STORE_BACKEND = "sql"


CONFIGS = {"memory": TestConfig, "sql": SqlTestConfig}


@pytest.fixture(params=sorted(CONFIGS))
def app(request):
    app = create_app(CONFIGS[request.param])
    yield app
    with app.app_context():
        app.extensions["storefront"]["store"].close()
        if request.param == "sql":
            db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app):
    c = app.test_client()
    resp = login(c)
    assert resp.status_code == 200, resp.get_json()
    return c


@pytest.fixture
def store(app):
    # Store-only tests; do not mix with client requests in the same test.
    with app.app_context():
        yield app.extensions["storefront"]["store"]


def login(client, username=ADMIN["username"], password=ADMIN["password"]):
    return client.post("/api/auth/login", json={"username": username, "password": password})


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def product_payload(**overrides):
    data = {
        "name": {"en": "Pomelo", "vi": "Bưởi"},
        "description": {"en": "Sweet pomelo", "vi": "Bưởi ngọt"},
        "price": 4.5,
        "image": "🍈",
        "category": "fruits",
        "unit": "kg",
        "origin": "Bến Tre, Việt Nam",
    }
    data.update(overrides)
    return data


def category_payload(**overrides):
    data = {
        "name": {"en": "Citrus", "vi": "Cam quýt"},
        "description": {"en": "Citrus fruits", "vi": "Trái cây họ cam quýt"},
        "slug": "citrus",
        "emoji": "🍋",
        "sortOrder": 5,
    }
    data.update(overrides)
    return data
