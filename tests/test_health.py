"""Health endpoint tests."""

import pytest
from sqlalchemy.exc import OperationalError

from lingopal import cache
from lingopal.api import health
from lingopal.db.engine import get_db


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health endpoint should return server status and version."""
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["server"] == "ok"
    assert data["database"] == "ok"
    assert "version" in data


@pytest.mark.asyncio
async def test_health_without_redis_is_still_healthy(client):
    """Redis is optional: unconfigured means "disabled", not degraded."""
    data = (await client.get("/api/health")).json()
    assert data["redis"] == "disabled"
    assert data["status"] == "healthy"


@pytest.mark.asyncio
async def test_root_banner(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.text == "API is running..."


# ═══════════════════════════════════════════════════════════
# Failing dependencies
# ═══════════════════════════════════════════════════════════


class BrokenSession:
    async def execute(self, *args, **kwargs):
        raise OperationalError(
            "SELECT 1",
            {},
            Exception("password authentication failed for user 'lingo' at 10.0.3.7:5432"),
        )


class BrokenRedis:
    async def ping(self):
        raise ConnectionError("Error 111 connecting to cache.internal:6379")


@pytest.mark.asyncio
async def test_database_failure_is_degraded_without_detail(app, client):
    async def broken_db():
        yield BrokenSession()

    app.dependency_overrides[get_db] = broken_db
    r = await client.get("/api/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "degraded"
    assert data["database"] == "error"
    assert "10.0.3.7" not in r.text
    assert "lingo" not in r.text


@pytest.mark.asyncio
async def test_redis_failure_is_degraded_without_detail(client, monkeypatch):
    monkeypatch.setattr(health, "get_redis", lambda: BrokenRedis())
    r = await client.get("/api/health")
    data = r.json()
    assert data["status"] == "degraded"
    assert data["redis"] == "error"
    assert "cache.internal" not in r.text


class UnreachableRedis:
    def __init__(self):
        self.closed = False

    async def ping(self):
        raise ConnectionError("Error 111 connecting to cache.internal:6379")

    async def aclose(self):
        self.closed = True


@pytest.mark.asyncio
async def test_init_redis_closes_client_when_ping_fails(monkeypatch):
    fake = UnreachableRedis()
    monkeypatch.setattr(cache.aioredis, "from_url", lambda url, **kwargs: fake)

    with pytest.raises(ConnectionError):
        await cache.init_redis("redis://cache.internal:6379/0")
    assert fake.closed is True
    assert cache.get_redis() is None
