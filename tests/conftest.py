"""Test fixtures — a throwaway SQLite database per test, fake mail and AI.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own SQLite file under tmp_path, with the schema
   created straight from the ORM metadata. Nothing leaks between tests.
2. get_db is overridden to open a NEW session per request, the same way
   production does, so a handler never sees another request's identity map.
3. The mailer and the AI client are replaced with in-memory fakes through
   their dependency functions, so no SMTP server or API key is needed.

Auth is NOT mocked: tests sign up and log in through the real endpoints
and send real Bearer tokens.
"""

import bcrypt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from lingopal.config import Settings
from lingopal.db.engine import get_db
from lingopal.db.models import Base
from lingopal.dependencies import get_mailer, get_tutor_ai
from lingopal.main import create_app
from lingopal.schemas.ai import PracticeSentence, TutorReply
from lingopal.services.mailer import MailDeliveryError
from lingopal.services.tutor_ai import AIServiceError

PASSWORD = "secret123"


# ═══════════════════════════════════════════════════════════
# Fakes
# ═══════════════════════════════════════════════════════════


class FakeMailer:
    """Records outgoing mail instead of talking to SMTP."""

    def __init__(self):
        self.sent: list[dict] = []
        self.fail = False

    async def send(self, to: str, subject: str, html: str) -> None:
        if self.fail:
            raise MailDeliveryError("connection refused")
        self.sent.append({"to": to, "subject": subject, "html": html})


class FakeTutorAI:
    """Canned answers for the AI endpoints; set fail=True to simulate an outage."""

    def __init__(self):
        self.fail = False
        self.calls: list[tuple] = []

    def _check(self, feature, *args):
        self.calls.append((feature, *args))
        if self.fail:
            raise AIServiceError("quota exceeded")

    async def chat_reply(self, history, assistant_name, scenario):
        self._check("chat", history, assistant_name, scenario)
        return TutorReply(
            response=f"Nice to meet you! I'm {assistant_name}.",
            translation=f"Rất vui được gặp bạn! Tôi là {assistant_name}.",
        )

    async def suggest_rephrasings(self, text_to_improve):
        self._check("suggestions", text_to_improve)
        return [
            "I would like a cup of coffee.",
            "Could I get a coffee, please?",
            "May I have a coffee?",
        ]

    async def suggest_topic(self, scenario, history):
        self._check("topic_suggestion", scenario, history)
        return TutorReply(
            response='How about this: "What do you recommend?"',
            translation='Thử nói thế này xem: "Bạn gợi ý món gì?"',
        )

    async def random_sentence(self):
        self._check("random_sentence")
        return PracticeSentence(
            sentence="The quick brown fox jumps over the lazy dog near the river.",
            ipa="/ðə kwɪk braʊn fɒks/",
        )


# ═══════════════════════════════════════════════════════════
# Core fixtures
# ═══════════════════════════════════════════════════════════


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Minimum bcrypt cost in tests; hashes are still real bcrypt hashes."""
    real_gensalt = bcrypt.gensalt
    monkeypatch.setattr(
        bcrypt, "gensalt", lambda rounds=12, prefix=b"2b": real_gensalt(4, prefix)
    )


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'lingopal.db'}",
        jwt_secret="test-jwt-secret",
        ai_api_key="test-ai-key",
        email_user="tutor@example.com",
        email_pass="app-password",
        frontend_url="https://app.example.com/",
    )


@pytest_asyncio.fixture()
async def session_factory(settings):
    engine = create_async_engine(settings.database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture()
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture()
def tutor() -> FakeTutorAI:
    return FakeTutorAI()


@pytest.fixture()
def app(settings, session_factory, mailer, tutor):
    app = create_app(settings)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_tutor_ai] = lambda: tutor
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ═══════════════════════════════════════════════════════════
# Account helpers
# ═══════════════════════════════════════════════════════════


def user_payload(username: str, **overrides) -> dict:
    payload = {
        "full_name": username.capitalize() + " Nguyen",
        "dob": "1998-04-12",
        "gender": "female",
        "username": username,
        "email": f"{username}@example.com",
        "password": PASSWORD,
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def signup(client):
    """Register an account through the API; returns the created user."""

    async def _signup(username: str, **overrides) -> dict:
        r = await client.post("/api/auth/signup", json=user_payload(username, **overrides))
        assert r.status_code == 201, r.text
        return r.json()["user"]

    return _signup


@pytest.fixture()
def login(client):
    """Log in and return Authorization headers for the account."""

    async def _login(identifier: str, password: str = PASSWORD) -> dict:
        r = await client.post(
            "/api/auth/login", json={"identifier": identifier, "password": password}
        )
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['access_token']}"}

    return _login


@pytest_asyncio.fixture()
async def admin(signup, login):
    """The first account ever created, which is therefore the admin."""
    user = await signup("alice")
    assert user["is_admin"] is True
    return {"user": user, "headers": await login("alice")}


@pytest_asyncio.fixture()
async def member(admin, signup, login):
    """A regular account, created after the admin."""
    user = await signup("bob", gender="male")
    assert user["is_admin"] is False
    return {"user": user, "headers": await login("bob")}
