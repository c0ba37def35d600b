"""lambda/auth.py — Super-admin credential check and the admin login route.

There are no sessions: every protected route re-sends email + password in the
body and require_admin re-runs the full check (lookup + bcrypt) per request.
"""
from functools import wraps

from helpers import (
    ok, ValidationError, AuthError,
    verify_password, burn_password_check,
    MSG, ROLE_SUPER_ADMIN,
)
from logging_utils import log_auth_event


class AuthFailure(AuthError):
    """Credential check failed. reason: 'missing' | 'not_found' | 'wrong_password'."""

    def __init__(self, reason: str, message: str = None):
        super().__init__(message or MSG["auth_failed"])
        self.reason = reason


def _credentials(body: dict):
    email    = body.get("email")
    password = body.get("password")
    email    = email.strip() if isinstance(email, str) else ""
    password = password if isinstance(password, str) else ""
    return email, password


def verify_admin(store, email: str, password: str) -> dict:
    """Return {id, name, email, role} for an active super-admin, else raise AuthFailure."""
    if not email or not password:
        raise AuthFailure("missing", MSG["missing_login"])

    matches = store.active_users_by_email(email, ROLE_SUPER_ADMIN)

    # Timing-safe: pay for one bcrypt comparison even when there is no account
    if len(matches) != 1:
        burn_password_check(password)
        raise AuthFailure("not_found", MSG["account_not_found"])

    admin = matches[0]
    if not verify_password(password, admin.get("password_hash", "")):
        raise AuthFailure("wrong_password", MSG["wrong_password"])

    return {
        "id":    admin["id"],
        "name":  admin.get("name", ""),
        "email": admin["email"],
        "role":  admin["role"],
    }


def require_admin(missing_status=401):
    """Decorator that gates a route behind super-admin credentials in the body.

    The wrapped handler is called as f(store, body, admin). Missing credentials
    answer `missing_status`; every other failure is a generic 401.
    """
    def decorator(f):
        @wraps(f)
        def wrapper(store, body, *args, **kwargs):
            email, password = _credentials(body)
            if not email or not password:
                log_auth_event(email, False, "missing")
                if missing_status == 400:
                    raise ValidationError(MSG["auth_required"])
                raise AuthError(MSG["auth_failed"])
            try:
                admin = verify_admin(store, email, password)
            except AuthFailure as e:
                log_auth_event(email, False, e.reason)
                raise AuthError(MSG["auth_failed"]) from e
            return f(store, body, admin, *args, **kwargs)
        return wrapper
    return decorator


def admin_login(store, body):
    """POST /admin/login"""
    email, password = _credentials(body)
    if not email or not password:
        log_auth_event(email, False, "missing")
        raise ValidationError(MSG["missing_login"])
    try:
        admin = verify_admin(store, email, password)
    except AuthFailure as e:
        log_auth_event(email, False, e.reason)
        raise
    log_auth_event(email, True)
    return ok({"message": MSG["login_ok"], "user": admin})
