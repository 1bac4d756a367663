import math
import re
from flask import request

from ..errors import ValidationError

LANGUAGES = ("en", "vi")
SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def parse_int(v, default=None, minv=None, maxv=None):
    if v is None or v == "":
        return default
    try:
        n = int(v)
        if minv is not None and n < minv:
            return default
        if maxv is not None and n > maxv:
            return maxv
        return n
    except (TypeError, ValueError):
        return default


def parse_bool(v) -> bool | None:
    if v is None:
        return None
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in ("1", "true", "yes", "on"):
        return True
    if s in ("0", "false", "no", "off"):
        return False
    return None


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def is_bilingual(value) -> bool:
    """A bilingual field is a {en, vi} pair with both sides non-empty."""
    if not isinstance(value, dict):
        return False
    return all(isinstance(value.get(lang), str) and value[lang].strip() for lang in LANGUAGES)


def bilingual(value) -> dict:
    return {lang: value[lang].strip() for lang in LANGUAGES}


def apply_aliases(data: dict, aliases: dict) -> dict:
    out = dict(data)
    for old, new in aliases.items():
        if old in out and new not in out:
            out[new] = out.pop(old)
        else:
            out.pop(old, None)
    return out


def positive_number(value, field: str) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"Valid {field} is required")
    try:
        n = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Valid {field} is required")
    if not math.isfinite(n) or n <= 0:
        raise ValidationError(f"Valid {field} is required")
    return n


def normalize_email(s: str | None) -> str | None:
    if not s:
        return None
    return s.strip().lower()


def is_admin_request() -> bool:
    return (request.headers.get("x-admin") or "").strip().lower() == "true"
