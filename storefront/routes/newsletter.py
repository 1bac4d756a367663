# routes/newsletter.py
from flask import Blueprint, current_app

from ..auth_mw import require_auth
from ..errors import NotFoundError, ValidationError
from ..extensions import get_store
from ..utils.parsing import EMAIL_RE, LANGUAGES, json_body, normalize_email
from ..utils.responses import ok

bp = Blueprint("newsletter", __name__, url_prefix="/api/newsletter")


def _email(d: dict) -> str:
    email = normalize_email(d.get("email") if isinstance(d.get("email"), str) else None)
    if not email or not EMAIL_RE.match(email):
        raise ValidationError("Valid email is required")
    return email


@bp.post("/subscribe")
def subscribe():
    d = json_body()
    email = _email(d)
    language = d.get("language") or "en"
    if not isinstance(language, str) or language not in LANGUAGES:
        raise ValidationError('Language must be "en" or "vi"')
    name = d.get("name")
    if name is not None and not isinstance(name, str):
        raise ValidationError("Name must be a string")
    name = (name or "").strip() or None

    sub, created = get_store().subscribe_newsletter(email, language=language, name=name)
    if created:
        current_app.logger.info("newsletter subscription: %s", email)
    return ok({
        "message": "Successfully subscribed to newsletter" if created else "Subscription updated",
        "subscription": {
            "id": sub["id"],
            "email": sub["email"],
            "language": sub["language"],
            "name": sub["name"],
        },
    }, 201 if created else 200)


@bp.post("/unsubscribe")
def unsubscribe():
    email = _email(json_body())
    sub = get_store().unsubscribe_newsletter(email)
    if not sub:
        raise NotFoundError("Subscription not found")
    return ok({"message": "Unsubscribed", "email": sub["email"]})


@bp.get("")
@require_auth
def list_subscribers():
    rows = get_store().get_all_newsletters()
    return ok({"subscribers": rows, "total": len(rows)})
