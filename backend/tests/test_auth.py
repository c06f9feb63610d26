"""Tests for token verification and role checks."""

from datetime import timedelta
from uuid import uuid4

import jwt
import pytest

from app.core.auth import (
    authenticate_token,
    create_access_token,
    decode_access_token,
    is_admin,
)
from app.core.config import settings


class TestTokens:
    def test_round_trip(self, driver):
        assert decode_access_token(create_access_token(driver.id)) == driver.id

    def test_expired(self, driver):
        token = create_access_token(driver.id, expires_in=timedelta(seconds=-1))
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token)

    def test_wrong_type(self, driver):
        token = jwt.encode(
            {"sub": str(driver.id), "type": "refresh"},
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token(token)

    def test_authenticate_token(self, db_session, driver):
        assert authenticate_token(create_access_token(driver.id), db_session).id == driver.id
        assert authenticate_token(create_access_token(uuid4()), db_session) is None
        assert authenticate_token("garbage", db_session) is None

    def test_is_admin(self, driver, admin):
        assert is_admin(admin)
        assert not is_admin(driver)


class TestAuthHeaders:
    def test_expired_token_rejected(self, client, driver):
        token = create_access_token(driver.id, expires_in=timedelta(seconds=-1))
        response = client.get(
            "/v1/bookings/", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Token expired"

    def test_malformed_header(self, client, driver):
        response = client.get("/v1/bookings/", headers={"Authorization": "Token abc"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid authorization header format"

    def test_deleted_user(self, client):
        token = create_access_token(uuid4())
        response = client.get("/v1/bookings/", headers={"Authorization": f"Bearer {token}"})
        assert response.json()["detail"] == "User not found"
