"""lambda/users.py — Admin user management: list and create.

Both routes sit behind require_admin; the admin's own email/password ride in
the body next to the payload.
"""
import uuid

from botocore.exceptions import BotoCoreError, ClientError

from helpers import (
    ok, _to_py, hash_password, iso_utc, now_utc,
    ValidationError, InternalError,
    MSG, ROLE_LABELS, DEFAULT_ROLE, DEFAULT_STORE_LIMIT,
    PASSWORD_MIN_LENGTH, BCRYPT_MAX_BYTES,
)
from auth import require_admin
from logging_utils import log_app_event

_LIST_FIELDS = ("id", "name", "email", "role", "store_limit", "is_active", "created_at")


@require_admin()
def list_users(store, body, admin):
    """POST /users/list — every user, newest first. No pagination."""
    try:
        items = _to_py(store.scan("users", fields=_LIST_FIELDS))
    except (BotoCoreError, ClientError) as e:
        log_app_event("users", "error", action="list", error=str(e)[:300])
        raise InternalError(MSG["list_failed"]) from e
    items.sort(key=lambda u: u.get("created_at") or "", reverse=True)
    for u in items:
        u["role_text"] = ROLE_LABELS.get(u.get("role"), u.get("role"))
    return ok({"data": items})


def _new_user_fields(body: dict) -> dict:
    """The new account's fields: a nested `user` object, else user_* top-level keys."""
    nested = body.get("user")
    if isinstance(nested, dict):
        return nested
    return {
        "name":        body.get("name"),
        "email":       body.get("user_email"),
        "password":    body.get("user_password"),
        "role":        body.get("role"),
        "store_limit": body.get("store_limit"),
    }


def _store_limit(value) -> int:
    if value in (None, "", 0):
        return DEFAULT_STORE_LIMIT
    if isinstance(value, bool):
        raise ValidationError(MSG["bad_store_limit"])
    try:
        limit = int(value)
    except (TypeError, ValueError):
        raise ValidationError(MSG["bad_store_limit"])
    if limit != value and str(limit) != str(value).strip():
        raise ValidationError(MSG["bad_store_limit"])
    return limit


@require_admin()
def create_user(store, body, admin):
    """POST /users/create"""
    fields   = _new_user_fields(body)
    name     = fields.get("name")
    email    = fields.get("email")
    password = fields.get("password")
    name     = name.strip() if isinstance(name, str) else ""
    email    = email.strip() if isinstance(email, str) else ""
    password = password if isinstance(password, str) else ""

    if not name or not email or not password:
        raise ValidationError(MSG["missing_fields"])
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(MSG["password_too_short"])
    if len(password.encode()) > BCRYPT_MAX_BYTES:
        raise ValidationError(MSG["password_too_long"])
    store_limit = _store_limit(fields.get("store_limit"))

    if store.users_by_email(email):
        raise ValidationError(MSG["email_taken"])

    item = {
        "id":            str(uuid.uuid4()),
        "name":          name,
        "email":         email,
        "password_hash": hash_password(password),
        "role":          fields.get("role") or DEFAULT_ROLE,
        "store_limit":   store_limit,
        "is_active":     True,
        "created_by":    admin["id"],
        "created_at":    iso_utc(now_utc()),
    }
    try:
        store.put_user(item)
    except (BotoCoreError, ClientError) as e:
        log_app_event("users", "error", action="create", email=email, error=str(e)[:300])
        raise InternalError(f"{MSG['create_failed']}: {e}") from e

    log_app_event("users", "info", action="create", email=email,
                  role=item["role"], created_by=admin["email"])
    return ok({
        "message": MSG["create_ok"],
        "data": {k: item[k] for k in ("id", "name", "email", "role", "store_limit")},
    })
