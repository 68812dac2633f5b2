"""
Unit tests for authentication functionality
"""

import asyncio
from datetime import timedelta

import pytest
from jose import jwt

from app.auth.auth_handler import ALGORITHM, SECRET_KEY, auth_handler
from app.models.user import User
from app.services.activity_logger import ActivityLogger
from app.services.user_service import UserService
from app.utils.error_handler import ConflictError

class TestLogin:
    """Test cases for the session issuer"""

    def test_login_success(self, client, make_user):
        """Valid credentials return the public profile and a token"""
        user = make_user(email="ana@clinic.mx", password="Secret123!")

        response = client.post("/api/auth/login", json={"email": "ana@clinic.mx", "password": "Secret123!"})
        assert response.status_code == 200

        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Authentication successful"
        assert body["data"]["user"]["id"] == user.id
        assert body["data"]["user"]["email"] == "ana@clinic.mx"
        assert body["data"]["user"]["fullName"] == "Ana Torres"
        assert body["data"]["user"]["role"] == "therapist"
        assert "passwordHash" not in body["data"]["user"]
        assert "password_hash" not in body["data"]["user"]

    def test_token_claims_and_expiry(self, client, make_user):
        """Token decodes to the same user and expires exactly 24 hours after issuance"""
        user = make_user(email="admin@clinic.mx", password="Secret123!", role="admin")

        response = client.post("/api/auth/login", json={"email": "admin@clinic.mx", "password": "Secret123!"})
        token = response.json()["data"]["token"]

        claims = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        assert claims["userId"] == user.id
        assert claims["email"] == "admin@clinic.mx"
        assert claims["role"] == "admin"
        assert claims["exp"] - claims["iat"] == 24 * 60 * 60

    def test_login_wrong_password(self, client, make_user):
        make_user(email="ana@clinic.mx", password="Secret123!")

        response = client.post("/api/auth/login", json={"email": "ana@clinic.mx", "password": "Wrong123!"})
        assert response.status_code == 401
        assert response.json()["success"] is False
        assert response.json()["message"] == "Invalid credentials"

    def test_login_nonexistent_user(self, client, make_user):
        response = client.post("/api/auth/login", json={"email": "nobody@clinic.mx", "password": "Secret123!"})
        assert response.status_code == 401
        assert response.json()["error"] == "AUTH_ERROR"

    def test_login_inactive_user_rejected_even_with_right_password(self, client, make_user):
        make_user(email="former@clinic.mx", password="Secret123!", is_active=False)

        for password in ["Secret123!", "anything"]:
            response = client.post("/api/auth/login", json={"email": "former@clinic.mx", "password": password})
            assert response.status_code == 401
            assert response.json()["message"] == "Invalid credentials"

    def test_login_email_is_case_sensitive(self, client, make_user):
        make_user(email="ana@clinic.mx", password="Secret123!")

        response = client.post("/api/auth/login", json={"email": "Ana@clinic.mx", "password": "Secret123!"})
        assert response.status_code == 401

    def test_login_missing_fields(self, client, make_user):
        """Missing or blank fields are a 400, not a 401"""
        payloads = [
            {"email": "ana@clinic.mx"},
            {"password": "Secret123!"},
            {"email": "", "password": "Secret123!"},
            {"email": "ana@clinic.mx", "password": "   "},
            {},
        ]

        for payload in payloads:
            response = client.post("/api/auth/login", json=payload)
            assert response.status_code == 400
            assert response.json()["success"] is False
            assert response.json()["message"] == "Email and password are required"

    def test_login_malformed_body(self, client, make_user):
        response = client.post(
            "/api/auth/login",
            content="not json",
            headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_login_attempts_are_audited(self, client, db, make_user):
        user = make_user(email="ana@clinic.mx", password="Secret123!")

        client.post("/api/auth/login", json={"email": "ana@clinic.mx", "password": "nope"})
        client.post("/api/auth/login", json={"email": "ana@clinic.mx", "password": "Secret123!"})

        activities = ActivityLogger(db).get_recent_activities()
        status_codes = sorted(a.status_code for a in activities)
        assert status_codes == [200, 401]
        assert any(a.user_id == user.id for a in activities if a.status_code == 200)

class TestSessionVerifier:
    """Test cases for token verification"""

    def test_verify_valid_token(self, make_user):
        user = make_user()
        token = auth_handler.create_session_token(user)

        claims = auth_handler.verify_token(token)
        assert claims["userId"] == user.id
        assert claims["role"] == "therapist"

    def test_verify_expired_token_returns_none(self):
        token = auth_handler.create_access_token({"userId": "abc"}, expires_delta=timedelta(seconds=-1))
        assert auth_handler.verify_token(token) is None

    def test_verify_tampered_token_returns_none(self):
        token = auth_handler.create_access_token({"userId": "abc"})
        forged = jwt.encode(jwt.get_unverified_claims(token), "another-secret", algorithm=ALGORITHM)
        assert auth_handler.verify_token(forged) is None

    @pytest.mark.parametrize("token", ["", "invalid_token", "a.b.c"])
    def test_verify_garbage_returns_none(self, token):
        assert auth_handler.verify_token(token) is None

class TestAuthenticatedEndpoints:
    """Test cases for endpoints behind a bearer token"""

    def test_get_current_user(self, client, make_user):
        make_user(email="ana@clinic.mx", password="Secret123!")
        token = client.post(
            "/api/auth/login", json={"email": "ana@clinic.mx", "password": "Secret123!"}
        ).json()["data"]["token"]

        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["data"]["email"] == "ana@clinic.mx"

    def test_unauthorized_access(self, client, make_user):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_invalid_token(self, client, make_user):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer invalid_token"})
        assert response.status_code == 401

    def test_deactivated_after_login(self, client, db, make_user):
        user = make_user(email="ana@clinic.mx", password="Secret123!")
        token = auth_handler.create_session_token(user)

        user.is_active = False
        db.commit()

        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

class TestUserService:
    """Test cases for administrative user provisioning"""

    def test_create_user_hashes_password(self, db, make_user):
        user = asyncio.run(UserService(db).create_user("new@clinic.mx", "Secret123!", "New Person", role_name="assistant"))

        assert user.password_hash != "Secret123!"
        assert auth_handler.verify_password("Secret123!", user.password_hash)
        assert user.role_name == "assistant"

    def test_create_user_duplicate_email(self, db, make_user):
        make_user(email="ana@clinic.mx")

        with pytest.raises(ConflictError):
            asyncio.run(UserService(db).create_user("ana@clinic.mx", "Secret123!", "Someone Else"))

    def test_create_user_duplicate_rejected_by_store(self, db, make_user, monkeypatch):
        make_user(email="ana@clinic.mx")
        monkeypatch.setattr(UserService, "_email_taken", lambda self, email: False)

        with pytest.raises(ConflictError):
            asyncio.run(UserService(db).create_user("ana@clinic.mx", "Secret123!", "Someone Else"))

        assert db.query(User).filter(User.email == "ana@clinic.mx").count() == 1

if __name__ == "__main__":
    pytest.main([__file__])
