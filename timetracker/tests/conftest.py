"""
Pytest configuration and fixtures for backend testing.

Provides an in-memory database, a FastAPI test client wired to it, seeded
users and bearer-token headers for each role.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Generator
from uuid import uuid4
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from timetracker.api.main import app
from timetracker.auth.jwt_handler import JWTHandler, PasswordHandler
from timetracker.database.connection import get_db, DatabaseManager, TestSessionLocal
from timetracker.database.models import Project, ProjectMember, TimeEntry, User, UserRole
from .test_base import TEST_PASSWORD


@pytest.fixture(scope="session")
def password_hash() -> str:
    """Hash the shared test password once; bcrypt is slow on purpose."""
    return PasswordHandler.hash_password(TEST_PASSWORD)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh schema and a database session for each test."""
    DatabaseManager.reset_test_db()
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session):
    """Create FastAPI test client with database dependency override."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: Session, password_hash: str) -> Callable[..., User]:
    """Factory inserting a user row."""
    def _make_user(name: str, email: str, role: UserRole = UserRole.USER) -> User:
        user = User(id=uuid4(), name=name, email=email, password_hash=password_hash, role=role)
        db_session.add(user)
        db_session.commit()
        return user
    return _make_user


@pytest.fixture
def admin_user(make_user) -> User:
    return make_user("Admin User", "admin@example.com", UserRole.ADMIN)


@pytest.fixture
def regular_user(make_user) -> User:
    return make_user("Test User", "test@example.com")


@pytest.fixture
def other_user(make_user) -> User:
    return make_user("Other User", "other@example.com")


def headers_for(user: User) -> Dict[str, str]:
    token = JWTHandler.create_user_token(user.id, user.email, user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user: User) -> Dict[str, str]:
    """Authentication headers for the admin."""
    return headers_for(admin_user)


@pytest.fixture
def auth_headers(regular_user: User) -> Dict[str, str]:
    """Authentication headers for the regular user."""
    return headers_for(regular_user)


@pytest.fixture
def other_headers(other_user: User) -> Dict[str, str]:
    """Authentication headers for a second regular user."""
    return headers_for(other_user)


@pytest.fixture
def make_project(db_session: Session) -> Callable[..., Project]:
    """Factory inserting a project with the given members."""
    def _make_project(name: str, members=(), description: str = None, created_at: datetime = None) -> Project:
        project = Project(id=uuid4(), name=name, description=description,
                          created_at=created_at or datetime.now(timezone.utc))
        db_session.add(project)
        for member in members:
            db_session.add(ProjectMember(id=uuid4(), project_id=project.id, user_id=member.id))
        db_session.commit()
        return project
    return _make_project


@pytest.fixture
def member_project(make_project, regular_user: User) -> Project:
    """Project the regular user belongs to."""
    return make_project("Website", members=[regular_user], description="Marketing site")


@pytest.fixture
def foreign_project(make_project, other_user: User) -> Project:
    """Project the regular user does not belong to."""
    return make_project("Internal", members=[other_user])


@pytest.fixture
def make_entry(db_session: Session) -> Callable[..., TimeEntry]:
    """Factory inserting a time entry; ``minutes=None`` leaves it open."""
    def _make_entry(user: User, project: Project, start: datetime, minutes=None,
                    description: str = "Work", is_active: bool = False) -> TimeEntry:
        end = start + timedelta(minutes=minutes) if minutes is not None else None
        entry = TimeEntry(
            id=uuid4(),
            user_id=user.id,
            project_id=project.id,
            description=description,
            start_time=start,
            end_time=end,
            duration=minutes,
            is_active=is_active,
        )
        db_session.add(entry)
        db_session.commit()
        return entry
    return _make_entry
