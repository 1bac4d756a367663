# app.py
import logging
import os

from flask import Flask, jsonify, request

from . import __version__
from .config import Config
from .errors import register_error_handlers
from .extensions import db
from . import models  # noqa: F401  registers the tables
from .routes import register_blueprints
from .services import AuthService, SessionSweeper
from .store import build_store, seed


def add_cors(app):
    # credentials are allowed, so the origin is echoed instead of "*"
    @app.after_request
    def add_cors_headers(resp):
        origin = request.headers.get("Origin")
        if origin:
            resp.headers["Access-Control-Allow-Origin"] = origin
            resp.headers["Vary"] = "Origin"
            resp.headers["Access-Control-Allow-Credentials"] = "true"
            resp.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
            resp.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization, x-admin"
        return resp


def create_app(config=None, store=None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config or Config)
    app.json.ensure_ascii = False  # Vietnamese text stays readable

    logging.basicConfig(level=app.config.get("LOG_LEVEL", "INFO"))

    if app.config["STORE_BACKEND"] == "sql" or getattr(store, "backend", None) == "sql":
        db.init_app(app)
        with app.app_context():
            db.create_all()

    if store is None:
        store = build_store(app)

    if app.config["SEED_DATA"]:
        with app.app_context():
            seed(
                store,
                admin_username=app.config["ADMIN_USERNAME"],
                admin_password=app.config["ADMIN_PASSWORD"],
                admin_full_name=app.config["ADMIN_FULL_NAME"],
                admin_email=app.config["ADMIN_EMAIL"],
            )

    app.extensions["storefront"] = {"store": store, "auth": AuthService(store), "sweeper": None}

    interval = app.config["SESSION_SWEEP_SECONDS"]
    if interval > 0:
        app.extensions["storefront"]["sweeper"] = SessionSweeper(app, store, interval).start()

    register_error_handlers(app)
    register_blueprints(app)
    add_cors(app)

    @app.get("/")
    def root():
        return jsonify(service="storefront", version=__version__, status="ok", backend=store.backend, prefix="/api")

    @app.get("/health")
    def health():
        return jsonify(ok=True), 200

    @app.get("/api/ping")
    def ping():
        return jsonify(message=app.config["PING_MESSAGE"])

    app.logger.info("storefront ready (backend=%s, session ttl=%s min)",
                    store.backend, app.config["SESSION_TTL_MINUTES"])
    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", 8080)), debug=os.getenv("FLASK_DEBUG") == "1")
