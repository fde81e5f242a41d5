"""Shared test fixtures for all tests."""
import os
import tempfile

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="almoxarifado-logs-"))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from almoxarifado.core.database import Base, get_db
from almoxarifado.core.security import create_access_token, get_password_hash
from almoxarifado.models import User, UserRole, Category, StockItem
from almoxarifado.main import app

TEST_PASSWORD = "secret123"


@pytest.fixture(scope="session")
def password_hash():
    """Hash once; bcrypt is slow."""
    return get_password_hash(TEST_PASSWORD)


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh in-memory SQLite database for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    TestingSessionLocal = sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False
    )

    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def client(test_db):
    """Create a test client with dependency override."""
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _make_user(db, password_hash, email, name, role):
    user = User(
        email=email,
        name=name,
        password_hash=password_hash,
        role=role.value,
        is_active=True
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def admin_user(test_db, password_hash):
    return _make_user(test_db, password_hash, "admin@example.com", "Ana Admin", UserRole.ADMIN)


@pytest.fixture
def operator_user(test_db, password_hash):
    return _make_user(test_db, password_hash, "operador@example.com", "Otto Operador", UserRole.OPERATOR)


@pytest.fixture
def viewer_user(test_db, password_hash):
    return _make_user(test_db, password_hash, "leitor@example.com", "Vera Leitora", UserRole.VIEWER)


@pytest.fixture
def custodian(test_db, password_hash):
    """Field technician receiving loaned cases."""
    return _make_user(test_db, password_hash, "tecnico@example.com", "Tiago Tecnico", UserRole.OPERATOR)


def auth_headers_for(user):
    token = create_access_token(subject=user.id, additional_claims={"role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers_for(admin_user)


@pytest.fixture
def operator_headers(operator_user):
    return auth_headers_for(operator_user)


@pytest.fixture
def viewer_headers(viewer_user):
    return auth_headers_for(viewer_user)


@pytest.fixture
def category(test_db):
    category = Category(name="Ferramentas", active=True)
    test_db.add(category)
    test_db.commit()
    return category


@pytest.fixture
def make_item(test_db):
    """Factory for stock items with sequential test barcodes."""
    counter = {"n": 0}

    def _make(name="Multimetro", quantity=10, min_quantity=5, category=None, active=True, **kwargs):
        counter["n"] += 1
        item = StockItem(
            barcode=f"TEST-{counter['n']:05d}",
            name=name,
            quantity=quantity,
            min_quantity=min_quantity,
            category_id=category.id if category else None,
            active=active,
            **kwargs
        )
        test_db.add(item)
        test_db.commit()
        return item

    return _make


@pytest.fixture
def item(make_item, category):
    """Item A: quantity 10, minimum 5."""
    return make_item(name="Multimetro Fluke", quantity=10, min_quantity=5, category=category)


@pytest.fixture
def test_password():
    return TEST_PASSWORD
