"""
Authentication and authorization handler for the clinic API
Issues and verifies session tokens for clinic staff
"""

from datetime import datetime, timedelta
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from passlib.context import CryptContext
from jose import JWTError, jwt
import os

from app.utils.error_handler import AuthError

# Security configuration
SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-change-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_HOURS = int(os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", "24"))

# New hashes use pbkdf2_sha256; bcrypt hashes from the previous system still verify
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto", bcrypt__rounds=4)
security = HTTPBearer(auto_error=False)

class AuthHandler:
    """Handles authentication and authorization"""

    def __init__(self):
        self.pwd_context = pwd_context

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash"""
        try:
            return self.pwd_context.verify(plain_password, hashed_password)
        except (ValueError, TypeError):
            # Unrecognised or malformed hash
            return False

    def get_password_hash(self, password: str) -> str:
        """Hash a password"""
        return self.pwd_context.hash(password)

    def create_access_token(self, data: dict, expires_delta: Optional[timedelta] = None, issued_at: Optional[datetime] = None):
        """Create a signed session token embedding the given claims"""
        to_encode = data.copy()
        issued_at = issued_at or datetime.utcnow()
        if expires_delta:
            expire = issued_at + expires_delta
        else:
            expire = issued_at + timedelta(hours=ACCESS_TOKEN_EXPIRE_HOURS)

        to_encode.update({"iat": issued_at, "exp": expire})
        encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
        return encoded_jwt

    def create_session_token(self, user) -> str:
        """Mint the session token for an authenticated user profile"""
        return self.create_access_token({
            "userId": user.id,
            "email": user.email,
            "role": user.role_name
        })

    def verify_token(self, token: str) -> Optional[dict]:
        """Verify and decode a session token, returning None when invalid or expired"""
        if not token:
            return None
        try:
            return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        except JWTError:
            return None

auth_handler = AuthHandler()

def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)):
    """Dependency to get the claims of the authenticated caller"""
    if credentials is None:
        raise AuthError("Not authenticated")

    payload = auth_handler.verify_token(credentials.credentials)
    if payload is None or payload.get("userId") is None:
        raise AuthError("Could not validate credentials")

    return {
        "user_id": payload.get("userId"),
        "email": payload.get("email"),
        "role": payload.get("role")
    }

