"""
Pytest configuration and fixtures for Gazette tests.
"""

import os
import struct
import tempfile
import zlib

# Settings are read when gazette.core.config is first imported
os.environ.setdefault("SECRET_KEY", "test_secret_key_for_testing_only")
os.environ["DATABASE_URI"] = "sqlite:///:memory:"
os.environ["COOKIE_SECURE"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="gazette-uploads-")

import pytest
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.middleware.sessions import SessionMiddleware

from gazette.core.access import Principal
from gazette.core.auth import AUTH_COOKIE, create_access_token
from gazette.core.database import Base, get_db, utcnow
from gazette.core.passwords import hash_password
from gazette.api.outcomes import register_exception_handlers
from gazette.main import include_routers
from gazette.models.user import User
from gazette.models.category import Category
from gazette.models.article import Article
from gazette.services.media import MediaStore, get_media_store

# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"
TEST_PASSWORD = "correct-horse-battery"


def make_png(width: int = 2, height: int = 2) -> bytes:
    """Smallest well-formed PNG libmagic recognizes."""

    def chunk(tag: bytes, data: bytes) -> bytes:
        crc = zlib.crc32(tag + data) & 0xFFFFFFFF
        return struct.pack(">I", len(data)) + tag + data + struct.pack(">I", crc)

    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    rows = b"".join(b"\x00" + b"\xff\x00\x00" * width for _ in range(height))
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", header)
        + chunk(b"IDAT", zlib.compress(rows))
        + chunk(b"IEND", b"")
    )


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def media_store(tmp_path) -> MediaStore:
    """Photo store writing into a per-test directory."""
    return MediaStore(str(tmp_path / "uploads"), max_size=64 * 1024)


@pytest.fixture
def user_password() -> str:
    """Plain password of every user fixture."""
    return TEST_PASSWORD


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture(scope="function")
def test_app(db_session, media_store):
    """Create a FastAPI test app without lifespan events."""
    test_app = FastAPI(title="Gazette - Test", version="1.0.0")
    test_app.add_middleware(SessionMiddleware, secret_key="test-session-secret")
    register_exception_handlers(test_app)
    include_routers(test_app)

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    test_app.dependency_overrides[get_db] = override_get_db
    test_app.dependency_overrides[get_media_store] = lambda: media_store

    return test_app


@pytest.fixture(scope="function")
def client(test_app) -> TestClient:
    """Anonymous test client. Redirects are returned, not followed."""
    return TestClient(test_app, raise_server_exceptions=False, follow_redirects=False)


def _client_for(test_app, user: User) -> TestClient:
    client = TestClient(test_app, raise_server_exceptions=False, follow_redirects=False)
    client.cookies.set(AUTH_COOKIE, create_access_token(data={"sub": user.id}))
    return client


def _make_user(db_session, email: str, roles) -> User:
    now = utcnow()
    user = User(
        email=email,
        roles=roles,
        password_hash=hash_password(TEST_PASSWORD),
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def test_user(db_session) -> User:
    """A registered reader without admin rights."""
    return _make_user(db_session, "reader@example.com", ["ROLE_USER"])


@pytest.fixture(scope="function")
def admin_user(db_session) -> User:
    return _make_user(db_session, "editor@example.com", ["ROLE_USER", "ROLE_ADMIN"])


@pytest.fixture(scope="function")
def other_admin(db_session) -> User:
    return _make_user(db_session, "chief@example.com", ["ROLE_USER", "ROLE_ADMIN"])


@pytest.fixture
def admin(admin_user) -> Principal:
    return Principal.from_role_names(admin_user.id, admin_user.email, admin_user.roles)


@pytest.fixture
def reader(test_user) -> Principal:
    return Principal.from_role_names(test_user.id, test_user.email, test_user.roles)


@pytest.fixture
def anonymous() -> Principal:
    return Principal.anonymous()


@pytest.fixture(scope="function")
def user_client(test_app, test_user) -> TestClient:
    return _client_for(test_app, test_user)


@pytest.fixture(scope="function")
def admin_client(test_app, admin_user) -> TestClient:
    return _client_for(test_app, admin_user)


@pytest.fixture(scope="function")
def test_category(db_session) -> Category:
    """Create a test category."""
    now = utcnow()
    category = Category(name="Sport", alias="sport", created_at=now, updated_at=now)
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture(scope="function")
def other_category(db_session) -> Category:
    now = utcnow()
    category = Category(name="Cinéma", alias="cinema", created_at=now, updated_at=now)
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture(scope="function")
def test_article(db_session, test_category, admin_user) -> Article:
    """Create a published article in the Sport category."""
    now = utcnow()
    article = Article(
        title="Match du jour",
        alias="match-du-jour",
        content="Le compte rendu du match.",
        category_id=test_category.id,
        author_id=admin_user.id,
        created_at=now,
        updated_at=now,
    )
    db_session.add(article)
    db_session.commit()
    db_session.refresh(article)
    return article


@pytest.fixture(scope="function")
def archived_article(db_session, test_category, admin_user) -> Article:
    now = utcnow()
    article = Article(
        title="Vieux résultat",
        alias="vieux-resultat",
        content="Archivé.",
        category_id=test_category.id,
        author_id=admin_user.id,
        created_at=now,
        updated_at=now,
        deleted_at=now,
    )
    db_session.add(article)
    db_session.commit()
    db_session.refresh(article)
    return article
