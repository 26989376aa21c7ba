"""
pytest fixtures
"""

import os

# Point the application engine at an in-memory DB before the app is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import Settings, get_settings
from app.core.storage_utils import ImageStore
from app.database import get_session
from app.main import app
from app.models.product import Product  # noqa: F401
from app.repositories.product_repo import ProductRepository
from app.services.product_service import ProductService



@pytest.fixture
def image_dir(tmp_path):
    """Image root for one test; not created until the first upload."""
    return tmp_path / "images"


@pytest.fixture
def settings(image_dir) -> Settings:
    return Settings(DATABASE_URL="sqlite://", IMAGE_DIR=str(image_dir))


@pytest.fixture
def engine():
    """
    In-memory SQLite engine shared across threads (StaticPool), so the
    TestClient worker thread sees the same database as the test.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine) -> Session:
    with Session(engine) as session:
        yield session


@pytest.fixture
def store(image_dir) -> ImageStore:
    return ImageStore(image_dir)


@pytest.fixture
def service(store) -> ProductService:
    return ProductService(ProductRepository(), store)


@pytest.fixture
def client(session, settings):
    """TestClient with the DB session and settings overridden."""

    def override_get_session():
        yield session

    def override_get_settings():
        return settings

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_settings] = override_get_settings

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
