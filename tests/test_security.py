"""Unit tests for app.core.security: bcrypt hashing and token issuance."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import jwt

from app.core.config import Settings
from app.core.gate import GateConfig, RequestIdentity, validate_token
from app.core.security import (
    SigningKeyNotConfiguredError,
    create_access_token,
    hash_password,
    verify_password,
)

KEY = "security-test-key-0123456789abcdef0123456789ab"


def _settings(**overrides: object) -> Settings:
    values = {
        "JWT_KEY": KEY,
        "JWT_ISSUER": "issuer-a",
        "JWT_AUDIENCE": "audience-a",
        "JWT_EXPIRE_MINUTES": 60,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestPasswordHashing(unittest.TestCase):
    def setUp(self) -> None:
        patcher = patch("app.core.security.BCRYPT_ROUNDS", 4)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_hash_is_not_plaintext_and_verifies(self) -> None:
        hashed = hash_password("secret1")
        self.assertNotEqual(hashed, "secret1")
        self.assertTrue(verify_password("secret1", hashed))
        self.assertFalse(verify_password("secret2", hashed))

    def test_same_password_gets_different_salts(self) -> None:
        self.assertNotEqual(hash_password("secret1"), hash_password("secret1"))

    def test_garbage_hash_does_not_verify(self) -> None:
        self.assertFalse(verify_password("secret1", "not-a-bcrypt-hash"))


class TestCreateAccessToken(unittest.TestCase):
    def test_claims(self) -> None:
        now = datetime.now(UTC)
        token = create_access_token(7, "bob", _settings(), now=now)
        self.assertEqual(token.count("."), 2)
        claims = jwt.decode(token, KEY, algorithms=["HS256"], audience="audience-a", issuer="issuer-a")
        self.assertEqual(claims["sub"], "bob")
        self.assertEqual(claims["unique_name"], "bob")
        self.assertEqual(claims["nameid"], "7")
        self.assertEqual(claims["exp"] - claims["iat"], 3600)
        self.assertTrue(claims["jti"])

    def test_jti_is_fresh_per_token(self) -> None:
        settings = _settings()
        first = jwt.decode(
            create_access_token(7, "bob", settings), options={"verify_signature": False}
        )
        second = jwt.decode(
            create_access_token(7, "bob", settings), options={"verify_signature": False}
        )
        self.assertNotEqual(first["jti"], second["jti"])

    def test_missing_key_raises(self) -> None:
        with self.assertRaises(SigningKeyNotConfiguredError):
            create_access_token(7, "bob", _settings(JWT_KEY=None))

    def test_blank_key_is_treated_as_missing(self) -> None:
        with self.assertRaises(SigningKeyNotConfiguredError):
            create_access_token(7, "bob", _settings(JWT_KEY="   "))

    def test_issued_token_passes_gate_until_expiry(self) -> None:
        settings = _settings()
        issued = datetime(2025, 3, 1, 8, 0, tzinfo=UTC)
        token = create_access_token(7, "bob", settings, now=issued)
        config = GateConfig.from_settings(settings)

        result = validate_token(token, config, now=issued + timedelta(minutes=59))
        self.assertIsInstance(result, RequestIdentity)
        self.assertEqual((result.user_id, result.username), ("7", "bob"))

        expired = validate_token(token, config, now=issued + timedelta(hours=1))
        self.assertEqual(expired.kind, "TokenExpired")


class TestSettingsGateConfig(unittest.TestCase):
    def test_excluded_paths_from_settings(self) -> None:
        config = GateConfig.from_settings(_settings(AUTH_EXCLUDED_PATHS=("/Open", "/docs")))
        self.assertEqual(config.excluded_paths.prefixes, ("/open", "/docs"))
        self.assertTrue(config.signing_key_configured)

    def test_rejects_non_hmac_algorithm(self) -> None:
        with self.assertRaises(ValueError):
            _settings(JWT_ALGORITHM="RS256")


if __name__ == "__main__":
    unittest.main()
