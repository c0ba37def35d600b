"""lambda/handler.py — API Gateway / Netlify Functions router.

Thin routing layer only — no business logic lives here.
Lambda handler entry point: handler.handler

route() takes the Datastore explicitly so tests can hand in one bound to
mocked tables; handler() builds a fresh one per invocation.
"""
from helpers import (
    ok, err, get_body, iso_utc, now_utc,
    ApiError, NotFoundError,
    CORS, MSG, BASE_PATH,
)
from datastore import Datastore
from logging_utils import log_request, logger

from auth      import admin_login
from dashboard import dashboard_data
from users     import list_users, create_user

_POST_ROUTES = {
    "/admin/login":    admin_login,
    "/dashboard/data": dashboard_data,
    "/users/list":     list_users,
    "/users/create":   create_user,
}


def handler(event, context):
    return route(event, Datastore.from_env())


def _method_and_path(event):
    http_ctx = (event.get("requestContext") or {}).get("http") or {}
    method   = (http_ctx.get("method") or event.get("httpMethod") or "GET").upper()
    path     = http_ctx.get("path") or event.get("rawPath") or event.get("path") or "/"
    if BASE_PATH and (path == BASE_PATH or path.startswith(BASE_PATH + "/")):
        path = path[len(BASE_PATH):] or "/"
    return method, path


def health():
    return ok({"message": MSG["health"], "timestamp": iso_utc(now_utc())})


def route(event, store):
    method, path = _method_and_path(event)

    if method == "OPTIONS":
        return {"statusCode": 200, "headers": CORS, "body": ""}

    log_request(method, path)
    try:
        if path == "/health" and method == "GET": return health()

        post = _POST_ROUTES.get(path) if method == "POST" else None
        if post: return post(store, get_body(event))

        raise NotFoundError(MSG["not_found"], path=path, method=method)

    except ApiError as e:
        return err(e.message, e.status, _extra=e.extra)
    except Exception as e:
        logger.exception("[RC] unhandled error method=%s path=%s", method, path)
        return err(f"{MSG['internal']}: {e}", 500)
