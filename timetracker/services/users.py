"""User service - account registration, login and lookup."""
import logging
from typing import List
from uuid import UUID, uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth.jwt_handler import PasswordHandler
from ..core.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from ..database.models import User, UserRole

logger = logging.getLogger(__name__)


class UserService:
    """Service for handling user accounts."""

    def __init__(self, db: Session):
        self.db = db

    def register_user(self, name: str, email: str, password: str) -> User:
        """
        Register a new user.

        The very first account becomes the administrator; every later
        account is a regular user.

        Raises:
            ValidationError: If the password is too weak
            ConflictError: If the email is already registered
        """
        if not PasswordHandler.validate_password_strength(password):
            raise ValidationError("Password does not meet requirements")

        email = email.lower()
        if self.db.query(User).filter(User.email == email).first():
            raise ConflictError("User with this email already exists")

        role = UserRole.ADMIN if self.db.query(User.id).first() is None else UserRole.USER
        user = User(
            id=uuid4(),
            name=name,
            email=email,
            password_hash=PasswordHandler.hash_password(password),
            role=role,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("User with this email already exists")
        self.db.refresh(user)

        logger.info("Registered user %s with role %s", user.id, role.value)
        return user

    def authenticate(self, email: str, password: str) -> User:
        """
        Verify credentials.

        Raises:
            AuthenticationError: If the email is unknown or the password is wrong
        """
        user = self.db.query(User).filter(User.email == email.lower()).first()
        if not user or not PasswordHandler.verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid credentials")
        return user

    def get_user(self, user_id: UUID) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(self) -> List[User]:
        return self.db.query(User).order_by(User.name).all()
