import asyncio
import os
import tempfile

# configuration is read at import time, so point it at a scratch database first
_TMP_DIR = tempfile.mkdtemp(prefix="kitchen-tests-")
os.environ["DB_TYPE"] = "sqlite"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/test.db"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["APP_DOMAIN"] = "https://kitchen.example"

import pytest
from fastapi.testclient import TestClient

from app.core.db import Base, engine
from app.services.cart_service import CartRegistry
from main import app
from tests.factories import create_user, in_session


async def _reset_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture(autouse=True)
def reset_db():
    asyncio.run(_reset_schema())
    app.state.carts = CartRegistry()
    yield


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_id():
    return in_session(lambda db: create_user(db, username="admin", role="admin"))


@pytest.fixture
def admin_headers(client, admin_id):
    response = client.post("/auth/login", json={"username": "admin", "password": "secret123"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
