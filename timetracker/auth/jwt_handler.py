"""
Access tokens and password hashing.

A token carries the user's id (``sub``), email and role, so the API can
authorize a request without reading the user row.
"""
import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext
from uuid import UUID

SECRET_KEY = os.getenv("SECRET_KEY", secrets.token_urlsafe(32))
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))
ACCESS_TOKEN_TYPE = "access"
MIN_PASSWORD_LENGTH = 8

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class JWTHandler:
    """Signs and verifies HS256 access tokens."""

    @staticmethod
    def create_access_token(claims: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
        """
        Sign ``claims`` with an issued-at and an expiry.

        The lifetime defaults to ``ACCESS_TOKEN_EXPIRE_MINUTES``.
        """
        issued_at = datetime.now(timezone.utc)
        lifetime = expires_delta if expires_delta is not None else timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
        payload = {**claims, "iat": issued_at, "exp": issued_at + lifetime}
        return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)

    @staticmethod
    def verify_token(token: str) -> Optional[Dict[str, Any]]:
        """Return the decoded claims, or None if the signature or expiry check fails."""
        try:
            return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        except JWTError:
            return None

    @staticmethod
    def create_user_token(user_id: UUID, email: str, role: str,
                          expires_delta: Optional[timedelta] = None) -> str:
        """
        Issue the access token for a signed-in user.

        Args:
            user_id: User ID, stored as ``sub``
            email: User email
            role: ``ADMIN`` or ``USER``
            expires_delta: Optional lifetime override

        Returns:
            str: Signed token
        """
        return JWTHandler.create_access_token(
            {"sub": str(user_id), "email": email, "role": role, "type": ACCESS_TOKEN_TYPE},
            expires_delta,
        )


class PasswordHandler:

    @staticmethod
    def hash_password(password: str) -> str:
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, password_hash: str) -> bool:
        return pwd_context.verify(plain_password, password_hash)

    @staticmethod
    def validate_password_strength(password: str) -> bool:
        """Passwords must be at least eight characters long."""
        return len(password) >= MIN_PASSWORD_LENGTH
