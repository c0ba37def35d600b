"""lambda/logging_utils.py — Request, auth-event and application-event logging.

Everything goes through the `rongcheng` logger; the Lambda runtime forwards
it to CloudWatch. Lines are short `key=value` records so they stay greppable
in Logs Insights. Passwords and hashes are never passed in here.
"""
import logging
import os

LOG_LEVEL = (os.environ.get("RC_LOG_LEVEL", "INFO") or "INFO").strip().upper()

logger = logging.getLogger("rongcheng")
logger.setLevel(LOG_LEVEL)

_LEVELS = {
    "debug": logging.DEBUG,
    "info":  logging.INFO,
    "warn":  logging.WARNING,
    "error": logging.ERROR,
}


def _fmt(fields: dict) -> str:
    return " ".join(f"{k}={v!r}" for k, v in fields.items() if v is not None)


def log_request(method: str, path: str):
    logger.info("[RC] request method=%s path=%s", method, path)


def log_auth_event(email: str, success: bool, reason: str = ""):
    """Record one credential check. reason: '' | 'missing' | 'not_found' | 'wrong_password'."""
    level = logging.INFO if success else logging.WARNING
    logger.log(level, "[RC] auth %s", _fmt({
        "email":   email or "(unknown)",
        "success": success,
        "reason":  reason or None,
    }))


def log_app_event(source: str, level: str = "info", **fields):
    """Structured application log entry.
    source: 'api' | 'dashboard' | 'users'"""
    logger.log(_LEVELS.get(level, logging.INFO), "[RC] %s %s", source, _fmt(fields))
