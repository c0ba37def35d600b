"""lambda/helpers.py — Shared utilities, configuration, errors and constants.

Imported by all other lambda modules. Contains no business logic.
The DynamoDB handle itself lives in datastore.py and is injected per request.
"""
import base64
import binascii
import json
import os
import bcrypt
from decimal import Decimal
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from logging_utils import log_app_event
from messages import messages_for, role_labels_for

# ── Configuration ─────────────────────────────────────────────────────────────

REGION            = os.environ.get("RC_REGION", "us-east-1")
USERS_TABLE       = os.environ.get("USERS_TABLE", "rongcheng-users")
STORES_TABLE      = os.environ.get("STORES_TABLE", "rongcheng-stores")
USERS_EMAIL_INDEX = os.environ.get("USERS_EMAIL_INDEX", "email-index")
DYNAMODB_ENDPOINT = (os.environ.get("DYNAMODB_ENDPOINT", "") or "").strip() or None
LOCALE            = (os.environ.get("RC_LOCALE", "zh") or "zh").strip().lower()
TIMEZONE          = ZoneInfo((os.environ.get("RC_TIMEZONE", "UTC") or "UTC").strip())
BASE_PATH         = (os.environ.get("RC_BASE_PATH", "/.netlify/functions/api") or "").rstrip("/")

MSG         = messages_for(LOCALE)
ROLE_LABELS = role_labels_for(LOCALE)

BCRYPT_ROUNDS       = 10
BCRYPT_MAX_BYTES    = 72
PASSWORD_MIN_LENGTH = 6
DEFAULT_STORE_LIMIT = 10

ROLE_SUPER_ADMIN = "super_admin"
ROLE_EMPLOYEE    = "employee"
DEFAULT_ROLE     = ROLE_EMPLOYEE

CORS = {
    "Access-Control-Allow-Origin":  "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
    "Content-Type": "application/json",
}

# ── Errors ────────────────────────────────────────────────────────────────────

class ApiError(Exception):
    """Failure with a user-facing message; the router turns it into err()."""
    status = 500

    def __init__(self, message, **extra):
        super().__init__(message)
        self.message = message
        self.extra   = extra


class ValidationError(ApiError):
    status = 400


class AuthError(ApiError):
    status = 401


class NotFoundError(ApiError):
    status = 404


class InternalError(ApiError):
    status = 500

# ── JSON encoder ──────────────────────────────────────────────────────────────

class _Enc(json.JSONEncoder):
    def default(self, o):
        if isinstance(o, Decimal):
            return int(o) if o == int(o) else float(o)
        return super().default(o)

# ── Response helpers ──────────────────────────────────────────────────────────

def ok(body, status=200):
    return {"statusCode": status, "headers": CORS,
            "body": json.dumps({"success": True, **body}, cls=_Enc, ensure_ascii=False)}

def err(msg, status=400, _extra=None):
    log_app_event("api", "error" if status >= 500 else "warn",
                  status=status, message=str(msg)[:300])
    body = {"success": False, "message": msg}
    if _extra:
        body.update(_extra)
    return {"statusCode": status, "headers": CORS,
            "body": json.dumps(body, cls=_Enc, ensure_ascii=False)}

# ── Data helpers ──────────────────────────────────────────────────────────────

def _to_py(obj):
    """Recursively convert DynamoDB Decimal types to int/float."""
    if isinstance(obj, Decimal):
        return int(obj) if obj == int(obj) else float(obj)
    if isinstance(obj, dict):  return {k: _to_py(v) for k, v in obj.items()}
    if isinstance(obj, list):  return [_to_py(i) for i in obj]
    return obj

def get_body(event) -> dict:
    """Decode the JSON request body. Malformed JSON raises ValidationError."""
    raw = event.get("body") or ""
    if raw and event.get("isBase64Encoded"):
        try:
            raw = base64.b64decode(raw).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            raise ValidationError(MSG["bad_json"])
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        raise ValidationError(MSG["bad_json"])
    if not isinstance(body, dict):
        raise ValidationError(MSG["bad_json"])
    return body

def iso_utc(dt: datetime) -> str:
    """'2026-10-18T09:30:00.000Z' — fixed-width UTC with millisecond precision."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

def now_utc() -> datetime:
    return datetime.now(timezone.utc)

# ── Password hashing (bcrypt) ─────────────────────────────────────────────────

_dummy_hash = None

def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """bcrypt hash with a fresh salt. Returns the '$2b$10$...' string."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()

def verify_password(password: str, stored_hash: str) -> bool:
    """Check a password against a stored bcrypt hash.
    Missing, malformed or over-long inputs verify as False."""
    if not password or not stored_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode(), stored_hash.encode())
    except ValueError:
        return False

def burn_password_check(password: str):
    """Run one bcrypt comparison against a throwaway hash (timing parity)."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = hash_password("rongcheng-timing-parity")
    verify_password(password or "x", _dummy_hash)
