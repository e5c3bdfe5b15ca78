"""Unit tests for password hashing and access/refresh token handling."""

import unittest
from datetime import UTC, datetime, timedelta

import jwt

from civreg.core.config import get_settings
from civreg.core.errors import TokenExpiredError, TokenInvalidError
from civreg.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)


class TestPasswordHashing(unittest.TestCase):
    def test_hash_is_not_plaintext_and_verifies(self) -> None:
        hashed = hash_password("secret1", rounds=4)
        self.assertNotEqual(hashed, "secret1")
        self.assertTrue(verify_password("secret1", hashed))

    def test_changed_password_verifies_only_against_new_plaintext(self) -> None:
        for old, new in [("secret1", "secret2"), ("abcdef", "ABCDEF"), ("p@ssw0rd!", "p@ssw0rd?")]:
            with self.subTest(old=old, new=new):
                new_hash = hash_password(new, rounds=4)
                self.assertTrue(verify_password(new, new_hash))
                self.assertFalse(verify_password(old, new_hash))

    def test_garbage_hash_does_not_verify(self) -> None:
        self.assertFalse(verify_password("secret1", "not-a-bcrypt-hash"))


class TestTokens(unittest.TestCase):
    def test_access_token_carries_user_id(self) -> None:
        token = create_access_token(42)
        self.assertEqual(decode_token(token, "access"), 42)

    def test_refresh_token_carries_user_id(self) -> None:
        token = create_refresh_token(7)
        self.assertEqual(decode_token(token, "refresh"), 7)

    def test_access_token_is_not_a_refresh_token(self) -> None:
        with self.assertRaises(TokenInvalidError):
            decode_token(create_access_token(1), "refresh")

    def test_refresh_token_is_not_an_access_token(self) -> None:
        with self.assertRaises(TokenInvalidError):
            decode_token(create_refresh_token(1), "access")

    def test_tampered_token_is_invalid(self) -> None:
        token = create_access_token(1)
        with self.assertRaises(TokenInvalidError):
            decode_token(token[:-2] + ("aa" if not token.endswith("aa") else "bb"), "access")

    def test_malformed_token_is_invalid(self) -> None:
        with self.assertRaises(TokenInvalidError):
            decode_token("not.a.jwt", "access")

    def test_expired_token_is_distinguished_from_invalid(self) -> None:
        settings = get_settings()
        past = datetime.now(UTC) - timedelta(minutes=30)
        token = jwt.encode(
            {"sub": "1", "typ": "access", "iat": past, "exp": past + timedelta(minutes=15)},
            settings.ACCESS_TOKEN_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
        )
        with self.assertRaises(TokenExpiredError):
            decode_token(token, "access")

    def test_token_without_subject_is_invalid(self) -> None:
        settings = get_settings()
        now = datetime.now(UTC)
        token = jwt.encode(
            {"typ": "access", "iat": now, "exp": now + timedelta(minutes=5)},
            settings.ACCESS_TOKEN_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
        )
        with self.assertRaises(TokenInvalidError):
            decode_token(token, "access")
