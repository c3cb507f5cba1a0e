"""Tests for auth utility functions."""
import pytest
from datetime import timedelta
from jose import JWTError, jwt


class TestPasswordHashing:
    """Tests for password hashing functions."""

    def test_hash_is_salted_bcrypt(self):
        from bizmanager.utils.auth import hash_password

        hashed = hash_password("s3cret-pass")

        assert hashed.startswith("$2b$")
        assert hashed != hash_password("s3cret-pass")

    def test_verify_password(self):
        from bizmanager.utils.auth import hash_password, verify_password

        hashed = hash_password("s3cret-pass")

        assert verify_password("s3cret-pass", hashed) is True
        assert verify_password("wrong", hashed) is False
        assert verify_password("", hashed) is False


class TestAccessTokens:
    """Tests for JWT access tokens."""

    def test_round_trip_user_id(self):
        from bizmanager.utils.auth import create_access_token, verify_access_token

        token = create_access_token(user_id="user123")

        assert verify_access_token(token) == "user123"

    def test_token_claims(self):
        from bizmanager.config import settings
        from bizmanager.utils.auth import create_access_token

        token = create_access_token(user_id="user123", expires_delta=timedelta(hours=1))
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])

        assert payload["sub"] == "user123"
        assert "exp" in payload

    def test_expired_token_rejected(self):
        from bizmanager.utils.auth import create_access_token, verify_access_token

        token = create_access_token(user_id="user123", expires_delta=timedelta(seconds=-1))

        with pytest.raises(JWTError):
            verify_access_token(token)

    def test_garbage_token_rejected(self):
        from bizmanager.utils.auth import verify_access_token

        with pytest.raises(JWTError):
            verify_access_token("invalid.token.here")

    def test_missing_subject_rejected(self):
        from bizmanager.config import settings
        from bizmanager.utils.auth import verify_access_token

        token = jwt.encode({"role": "admin"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)

        with pytest.raises(JWTError, match="sub"):
            verify_access_token(token)
