"""tests/test_handler.py — Routing, CORS, error boundary and the /health route."""
import base64
import json

import handler as handler_mod
from handler import route
from conftest import ADMIN_EMAIL, ADMIN_PASSWORD, make_event, parse

CREDS = {"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}


class TestRouting:
    def test_options_preflight(self, store):
        resp = route(make_event("/anything", method="OPTIONS"), store)
        assert resp["statusCode"] == 200
        assert resp["body"] == ""
        assert resp["headers"]["Access-Control-Allow-Origin"] == "*"

    def test_health(self, store):
        resp = route(make_event("/health", method="GET"), store)
        body = parse(resp)
        assert resp["statusCode"] == 200
        assert body["success"] is True
        assert body["message"] == "荣诚商家移动管理端 API 运行正常"
        assert body["timestamp"].endswith("Z")

    def test_unknown_route_404(self, store):
        resp = route(make_event("/nope", method="DELETE"), store)
        body = parse(resp)
        assert resp["statusCode"] == 404
        assert body == {"success": False, "message": "接口不存在",
                        "path": "/nope", "method": "DELETE"}

    def test_wrong_method_404(self, store):
        assert route(make_event("/admin/login", method="GET"), store)["statusCode"] == 404

    def test_unprefixed_path(self, store):
        assert route(make_event("/health", method="GET", prefix=""), store)["statusCode"] == 200

    def test_http_api_v2_event(self, store):
        event = {"requestContext": {"http": {"method": "GET", "path": "/health"}}}
        assert route(event, store)["statusCode"] == 200

    def test_cors_on_every_response(self, store, admin):
        for event in (make_event("/health", method="GET"),
                      make_event("/nope"),
                      make_event("/admin/login", body={})):
            assert route(event, store)["headers"]["Access-Control-Allow-Origin"] == "*"


class TestBodies:
    def test_malformed_json_400(self, store):
        resp = route(make_event("/admin/login", raw_body="{not json"), store)
        assert resp["statusCode"] == 400
        assert parse(resp)["success"] is False

    def test_health_ignores_body(self, store):
        resp = route(make_event("/health", method="GET", raw_body="{not json"), store)
        assert resp["statusCode"] == 200

    def test_unknown_route_with_bad_body_404(self, store):
        assert route(make_event("/nope", raw_body="{not json"), store)["statusCode"] == 404
        assert route(make_event("/users/list", method="GET", raw_body="{not json"), store)["statusCode"] == 404

    def test_non_object_json_400(self, store):
        assert route(make_event("/admin/login", raw_body="[1, 2]"), store)["statusCode"] == 400

    def test_base64_body(self, store, admin):
        raw   = base64.b64encode(json.dumps(CREDS).encode()).decode()
        event = {**make_event("/admin/login", raw_body=raw), "isBase64Encoded": True}
        assert route(event, store)["statusCode"] == 200


class TestLoginRoute:
    def test_success(self, store, admin):
        resp = route(make_event("/admin/login", body=CREDS), store)
        body = parse(resp)
        assert resp["statusCode"] == 200
        assert body["user"] == {"id": admin["id"], "name": "Boss",
                                "email": ADMIN_EMAIL, "role": "super_admin"}

    def test_missing_fields_400(self, store):
        resp = route(make_event("/admin/login", body={"email": ADMIN_EMAIL}), store)
        assert resp["statusCode"] == 400
        assert parse(resp)["message"] == "请输入邮箱和密码"

    def test_unknown_account_401(self, store, admin):
        resp = route(make_event("/admin/login",
                                body={"email": "admin@test.com", "password": "whatever"}), store)
        assert resp["statusCode"] == 401
        assert parse(resp)["message"] == "管理员账户不存在或已被禁用"

    def test_wrong_password_401(self, store, admin):
        resp = route(make_event("/admin/login",
                                body={"email": ADMIN_EMAIL, "password": "whatever"}), store)
        assert resp["statusCode"] == 401
        assert parse(resp)["message"] == "密码错误"


class TestProtectedRoutes:
    def test_dashboard_missing_credentials_400(self, store):
        assert route(make_event("/dashboard/data", body={}), store)["statusCode"] == 400

    def test_dashboard_ok(self, store, admin):
        resp = route(make_event("/dashboard/data", body=CREDS), store)
        assert resp["statusCode"] == 200
        assert parse(resp)["data"]["summary"]["total_users"] == 1

    def test_users_list_missing_credentials_401(self, store):
        resp = route(make_event("/users/list", body={}), store)
        assert resp["statusCode"] == 401
        assert parse(resp)["message"] == "认证失败"

    def test_users_list_ok(self, store, admin):
        body = parse(route(make_event("/users/list", body=CREDS), store))
        assert [u["email"] for u in body["data"]] == [ADMIN_EMAIL]

    def test_create_short_password_400(self, store, admin):
        body = {**CREDS, "user": {"name": "n", "email": "n@example.com", "password": "12345"}}
        assert route(make_event("/users/create", body=body), store)["statusCode"] == 400

    def test_create_then_list(self, store, admin):
        body = {**CREDS, "user": {"name": "新人", "email": "new@example.com", "password": "abcdef"}}
        assert route(make_event("/users/create", body=body), store)["statusCode"] == 200
        listed = parse(route(make_event("/users/list", body=CREDS), store))["data"]
        assert {u["email"] for u in listed} == {ADMIN_EMAIL, "new@example.com"}


class TestErrorBoundary:
    def test_unexpected_exception_500(self, store, admin, monkeypatch):
        def boom(*a, **kw):
            raise RuntimeError("disk on fire")
        monkeypatch.setattr(store, "count", boom)
        resp = route(make_event("/dashboard/data", body=CREDS), store)
        assert resp["statusCode"] == 500
        assert parse(resp)["message"] == "服务器内部错误: disk on fire"

    def test_handler_builds_its_own_datastore(self, store, monkeypatch):
        monkeypatch.setattr(handler_mod.Datastore, "from_env", classmethod(lambda cls: store))
        resp = handler_mod.handler(make_event("/health", method="GET"), None)
        assert resp["statusCode"] == 200
