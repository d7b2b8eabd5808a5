import os

# Settings are read once at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_URL"] = "https://test-project.supabase.co"
os.environ["SUPABASE_KEY"] = "test-anon-key"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ["VNPAY_TMN_CODE"] = "TESTTMN1"
os.environ["VNPAY_HASH_SECRET"] = "test-hash-secret"
os.environ.pop("SUPABASE_SERVICE_ROLE_KEY", None)

import uuid

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from storefront.core.auth import get_current_user
from storefront.database import get_session
from storefront.main import app
from storefront.models.product import Product
from storefront.models.user import User

STORAGE_PREFIX = (
    "https://test-project.supabase.co/storage/v1/object/public/assets/"
)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session):
    # Requests share the test session so assertions see their writes
    app.dependency_overrides[get_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def storage(monkeypatch):
    """Record Storage calls instead of talking to Supabase."""
    calls = {"uploaded": [], "deleted": []}

    def fake_upload(path, file_bytes, content_type):
        calls["uploaded"].append((path, content_type, len(file_bytes)))
        return STORAGE_PREFIX + path

    def fake_delete(url):
        calls["deleted"].append(url)

    monkeypatch.setattr(
        "storefront.services.product_service.upload_to_storage", fake_upload
    )
    monkeypatch.setattr(
        "storefront.services.product_service.delete_public_url", fake_delete
    )
    return calls


def _make_user(session: Session, email: str, role: str = "user") -> User:
    user = User(id=uuid.uuid4(), email=email, name=email.split("@")[0], role=role)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def customer(session):
    return _make_user(session, "alice@storefront.vn")


@pytest.fixture
def other_customer(session):
    return _make_user(session, "bob@storefront.vn")


@pytest.fixture
def admin(session):
    return _make_user(session, "admin@storefront.vn", role="admin")


@pytest.fixture
def login(client):
    """Act as the given user (None = guest) for subsequent requests."""

    def _login(user: User | None):
        user_id = user.id if user else None

        def _current_user(session: Session = Depends(get_session)):
            if user_id is None:
                return None
            return session.get(User, user_id)

        app.dependency_overrides[get_current_user] = _current_user
        return client

    return _login


@pytest.fixture
def make_product(session):
    def _make(name: str, price: float, description: str = "A freshly baked item"):
        product = Product(name=name, description=description, price=price)
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make
