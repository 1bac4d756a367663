from datetime import timedelta

from .base import Store
from .memory import MemoryStore
from .seed import seed

__all__ = ["Store", "MemoryStore", "build_store", "seed"]


def build_store(app) -> Store:
    """Pick the backend named by STORE_BACKEND. Called once at startup."""
    ttl = timedelta(minutes=app.config["SESSION_TTL_MINUTES"])
    backend = app.config["STORE_BACKEND"]
    if backend == "memory":
        return MemoryStore(session_ttl=ttl)
    if backend == "sql":
        from ..extensions import db
        from .sql import SqlStore
        return SqlStore(db, session_ttl=ttl)
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r} (expected 'memory' or 'sql')")
