import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("JWT_SECRET", "test-secret-for-session-tokens-0123456789")
os.environ.setdefault("APP_ENV", "development")

from auth import security  # noqa: E402
from core import db  # noqa: E402
from fakes import FakePool  # noqa: E402
from main import app  # noqa: E402


@pytest.fixture(autouse=True)
def uploads_dir(tmp_path, monkeypatch):
    """
    Point uploaded files at a per-test temporary directory.
    """
    path = tmp_path / "uploads"
    monkeypatch.setenv("UPLOADS_DIR", str(path))
    return path


@pytest_asyncio.fixture
async def client():
    """
    HTTPX AsyncClient bound to the FastAPI app. The lifespan (DB pool) is not
    started; tests patch repositories or install a fake pool instead.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest.fixture
def auth_headers():
    """
    Factory returning request headers that carry a valid session cookie.
    """

    def _make(user_id: int = 1, username: str = "driver", display_name: str | None = None) -> dict[str, str]:
        token = security.issue_token(
            user_id=user_id,
            username=username,
            display_name=display_name or username,
        )
        return {"Cookie": f"{security.SESSION_COOKIE_NAME}={token}"}

    return _make


@pytest.fixture
def fake_pool(monkeypatch):
    """
    Install a recording FakePool as the process pool. Set `.conn.handler`
    to script results or failures.
    """
    pool = FakePool()
    monkeypatch.setattr(db, "_pool", pool)
    return pool
