"""Pytest configuration: set test env before any pinshare imports so settings use test values."""

import os
from contextlib import ExitStack
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

# Set before pinshare imports so a bare Settings() sees test values
os.environ.setdefault("PINSHARE_JWT_SECRET", "test-jwt-secret-at-least-32-characters-long")
os.environ.setdefault("PINSHARE_RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("PINSHARE_STORAGE_ENDPOINT", "storage.test:9000")

from pinshare.config import Settings  # noqa: E402
from pinshare.db.session import Database  # noqa: E402
from pinshare.files.storage import ObjectStorage  # noqa: E402
from pinshare.main import create_app  # noqa: E402

TEST_STORAGE_URL = "http://storage.test"
TEST_BUCKET = "test-bucket"


def make_settings(tmp_path, **overrides) -> Settings:
    """Settings pointing at a throwaway SQLite file under tmp_path."""
    values = {
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        "jwt_secret": "test-jwt-secret-at-least-32-characters-long",
        "storage_public_url": TEST_STORAGE_URL,
        "storage_bucket": TEST_BUCKET,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def minio_client():
    """Stand-in for minio.Minio; every call succeeds unless a test sets side_effect."""
    client = MagicMock()
    client.bucket_exists.return_value = True
    return client


@pytest.fixture
def storage(minio_client) -> ObjectStorage:
    return ObjectStorage(minio_client, bucket=TEST_BUCKET, public_url=TEST_STORAGE_URL, folder="file-share-app")


@pytest.fixture
def client(tmp_path, storage):
    """TestClient for the account-gated deployment. Context manager so lifespan runs (init_db)."""
    app = create_app(make_settings(tmp_path), storage=storage)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def anon_client(tmp_path, storage):
    """TestClient for the anonymous deployment (no tokens, global names)."""
    app = create_app(make_settings(tmp_path, require_auth=False), storage=storage)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_client(tmp_path, storage):
    """Factory for TestClients over apps built with overridden settings."""
    with ExitStack() as stack:

        def factory(**overrides) -> TestClient:
            app = create_app(make_settings(tmp_path, **overrides), storage=storage)
            return stack.enter_context(TestClient(app))

        yield factory


@pytest_asyncio.fixture
async def db(tmp_path):
    """Fresh database with tables created."""
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'service.db'}")
    await database.init()
    yield database
    await database.dispose()
