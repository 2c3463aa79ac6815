"""HTTP-level tests: auth endpoints, the JWT gate middleware and protected routes."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import jwt
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from app.core.config import Settings, get_settings
from app.core.database import SessionLocal, engine
from app.core.gate import ExcludedPaths, GateConfig
from app.core.security import create_access_token
from app.main import app
from app.middleware.jwt_gate import JwtGateMiddleware
from app.models import Base
from app.services.seed import seed_reference_data

ALICE = {
    "username": "alice",
    "fullName": "Alice A",
    "email": "alice@x.com",
    "password": "secret1",
}


class ApiTestCase(unittest.TestCase):
    """Recreates the schema on the shared in-memory database before each test."""

    def setUp(self) -> None:
        Base.metadata.drop_all(engine)
        Base.metadata.create_all(engine)
        db = SessionLocal()
        try:
            seed_reference_data(db)
        finally:
            db.close()
        patcher = patch("app.core.security.BCRYPT_ROUNDS", 4)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.client = TestClient(app)

    def register(self, **overrides: str):
        return self.client.post("/api/auth/register", json={**ALICE, **overrides})

    def login(self, identifier: str = "alice@x.com", password: str = "secret1"):
        return self.client.post(
            "/api/auth/login",
            json={"usernameOrEmail": identifier, "password": password},
        )

    def token(self) -> str:
        self.register()
        return self.login().json()["token"]


class TestRegisterAndLogin(ApiTestCase):
    def test_register_then_login_scenario(self) -> None:
        response = self.register()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"message": "User registered successfully."})
        self.assertNotIn("secret1", response.text)

        again = self.register()
        self.assertEqual(again.status_code, 400)

        login = self.login()
        self.assertEqual(login.status_code, 200)
        body = login.json()
        self.assertEqual(len(body["token"].split(".")), 3)
        self.assertEqual(body["username"], "alice")
        self.assertEqual(body["email"], "alice@x.com")

        self.assertEqual(self.login(password="wrong-password").status_code, 401)

    def test_mixed_case_email_logs_in_as_registered(self) -> None:
        self.assertEqual(self.register(email="Alice@Example.COM").status_code, 200)
        response = self.login(identifier="Alice@Example.COM")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["username"], "alice")
        self.assertEqual(self.login(identifier="Alice@example.com").status_code, 200)

    def test_failures_use_error_body(self) -> None:
        self.register()
        conflict = self.register()
        self.assertEqual(conflict.json(), {"error": "User already exists."})
        unauthorized = self.login(password="wrong-password")
        self.assertEqual(unauthorized.json(), {"error": "Invalid credentials."})
        self.assertEqual(unauthorized.headers["www-authenticate"], "Bearer")

    def test_login_by_username(self) -> None:
        self.register()
        self.assertEqual(self.login(identifier="alice").status_code, 200)

    def test_login_unknown_user(self) -> None:
        response = self.login(identifier="nobody")
        self.assertEqual(response.status_code, 401)

    def test_duplicate_email_is_rejected(self) -> None:
        self.register()
        self.assertEqual(self.register(username="alice2").status_code, 400)

    def test_invalid_register_bodies_are_400(self) -> None:
        self.assertEqual(self.register(email="not-an-email").status_code, 400)
        self.assertEqual(self.register(password="12345").status_code, 400)
        self.assertEqual(self.register(username="a" * 51).status_code, 400)
        response = self.client.post("/api/auth/register", json={"username": "x"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("details", response.json())

    def test_login_without_signing_key_is_500(self) -> None:
        self.register()
        unconfigured = Settings(_env_file=None, JWT_KEY=None)
        with patch("app.api.auth.get_settings", return_value=unconfigured):
            response = self.login()
        self.assertEqual(response.status_code, 500)


class TestGateOnProtectedRoutes(ApiTestCase):
    def test_missing_header(self) -> None:
        response = self.client.get("/api/users/me")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["kind"], "MissingAuthHeader")
        self.assertEqual(response.json()["error"], "Authorization header is required")
        self.assertEqual(response.headers["www-authenticate"], "Bearer")

    def test_me_with_bearer_token(self) -> None:
        token = self.token()
        response = self.client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["username"], "alice")
        self.assertEqual(body["fullName"], "Alice A")
        self.assertEqual(body["roleId"], 2)
        self.assertTrue(body["isActive"])
        self.assertNotIn("passwordHash", body)

    def test_me_with_schemeless_token(self) -> None:
        token = self.token()
        response = self.client.get("/api/users/me", headers={"Authorization": token})
        self.assertEqual(response.status_code, 200)

    def test_lowercase_scheme(self) -> None:
        token = self.token()
        response = self.client.get("/api/users/me", headers={"Authorization": f"bearer {token}"})
        self.assertEqual(response.status_code, 200)

    def test_empty_and_malformed_tokens(self) -> None:
        cases = {
            "Bearer": "MalformedToken",
            "Bearer abc": "MalformedToken",
            "Bearer a.b.c.d": "MalformedToken",
        }
        for header, kind in cases.items():
            response = self.client.get("/api/users/me", headers={"Authorization": header})
            self.assertEqual(response.status_code, 401, header)
            self.assertEqual(response.json()["kind"], kind, header)

    def test_foreign_key_signature(self) -> None:
        settings = get_settings()
        forged = jwt.encode(
            {
                "sub": "alice",
                "nameid": "1",
                "iss": settings.JWT_ISSUER,
                "aud": settings.JWT_AUDIENCE,
                "exp": datetime.now(UTC) + timedelta(hours=1),
            },
            "some-other-signing-key-0123456789abcdef012345",
            algorithm="HS256",
        )
        response = self.client.get("/api/users/me", headers={"Authorization": f"Bearer {forged}"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["kind"], "InvalidSignature")

    def test_expired_token(self) -> None:
        self.register()
        issued = datetime.now(UTC) - timedelta(hours=2)
        token = create_access_token(1, "alice", get_settings(), now=issued)
        response = self.client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["kind"], "TokenExpired")

    def test_token_for_missing_user_is_404(self) -> None:
        token = create_access_token(999, "ghost", get_settings())
        response = self.client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 404)

    def test_roles_listing(self) -> None:
        token = self.token()
        response = self.client.get("/api/roles", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 200)
        roles = {r["name"]: r for r in response.json()["roles"]}
        self.assertEqual(set(roles), {"User", "Guest", "Admin"})
        self.assertEqual(
            [p["name"] for p in roles["Admin"]["permissions"]],
            ["Manage Users", "Manage Roles"],
        )

    def test_roles_require_token(self) -> None:
        self.assertEqual(self.client.get("/api/roles").status_code, 401)


class TestExcludedRoutes(ApiTestCase):
    def test_health_is_public(self) -> None:
        response = self.client.get("/api/health")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["database"], "connected")
        self.assertTrue(body["jwtConfigured"])

    def test_auth_routes_ignore_bad_header(self) -> None:
        response = self.client.post(
            "/api/auth/register",
            json=ALICE,
            headers={"Authorization": "Bearer garbage"},
        )
        self.assertEqual(response.status_code, 200)

    def test_swagger_is_public_and_declares_bearer(self) -> None:
        self.assertEqual(self.client.get("/swagger").status_code, 200)
        schema = self.client.get("/swagger/v1/swagger.json")
        self.assertEqual(schema.status_code, 200)
        schemes = schema.json()["components"]["securitySchemes"]
        self.assertEqual(schemes["HTTPBearer"]["scheme"], "bearer")

    def test_excluded_match_is_case_insensitive(self) -> None:
        response = self.client.get("/SWAGGER/v1/swagger.json", headers={"Authorization": "garbage"})
        self.assertNotEqual(response.status_code, 401)


def _gated_app(config: GateConfig) -> FastAPI:
    """Small app exposing what the gate attaches to the request."""
    gated = FastAPI()
    gated.add_middleware(JwtGateMiddleware, config=config)

    @gated.get("/open/ping")
    def ping() -> dict[str, str]:
        return {"pong": "ok"}

    @gated.get("/whoami")
    def whoami(request: Request) -> dict[str, object]:
        identity = request.state.identity
        return {
            "user_id": identity.user_id,
            "username": identity.username,
            "jti": request.state.token_claims["jti"],
            "principal": request.user.display_name,
            "authenticated": request.user.is_authenticated,
            "scopes": request.auth.scopes,
        }

    return gated


class TestGateMiddleware(unittest.TestCase):
    def test_identity_is_attached_to_request(self) -> None:
        settings = get_settings()
        client = TestClient(_gated_app(GateConfig.from_settings(settings)))
        token = create_access_token(7, "bob", settings)
        response = client.get("/whoami", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["user_id"], "7")
        self.assertEqual(body["username"], "bob")
        self.assertEqual(body["principal"], "bob")
        self.assertTrue(body["authenticated"])
        self.assertEqual(body["scopes"], ["authenticated"])
        self.assertTrue(body["jti"])

    def test_missing_signing_key_is_500(self) -> None:
        config = GateConfig(signing_key=None, excluded_paths=ExcludedPaths.of(["/open"]))
        client = TestClient(_gated_app(config))
        response = client.get("/whoami", headers={"Authorization": "Bearer a.b.c"})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.json(),
            {"error": "JWT configuration is missing", "kind": "ServerMisconfigured"},
        )
        self.assertNotIn("www-authenticate", response.headers)
        self.assertEqual(client.get("/open/ping").status_code, 200)


if __name__ == "__main__":
    unittest.main()
