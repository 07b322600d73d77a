"""
Shared fixtures: a SQLite file database per test, fake NLP and identity
collaborators, and a TestClient wired to both through dependency overrides.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DAILY_SUMMARY_ENABLED"] = "false"

from datetime import datetime, time, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from journal_insights.database import get_db, get_engine, init_db
from journal_insights.main import app
from journal_insights.models import DailySummary, JournalEntry, User
from journal_insights.services.clock import server_now, server_today
from journal_insights.services.identity import AuthError, IdentityClaims, get_identity_verifier
from journal_insights.services.insights_client import (
    GenerationError,
    InsightsClient,
    get_insights_client,
)

VALID_TOKEN = "mock-insights-token"
NEW_USER_TOKEN = "mock-new-user-token"
GOOGLE_TOKEN = "mock-google-token"
TEST_UID = "test-insights-uid"
NEW_UID = "test-new-uid"


class FakeInsightsClient(InsightsClient):
    """Records calls and returns canned payloads; can be told to fail."""

    def __init__(self):
        self.emotions = [{"emotion": "neutral", "confidence": 0.5}]
        self.quote = {
            "title": "Keep Going",
            "quote": "The journey of a thousand miles begins with one step.",
            "author": "Lao Tzu",
            "citation": "Tao Te Ching",
            "explanation": "Small daily reflections add up.",
        }
        self.summary = {
            "summary": "You spent the week finding calm in small routines.",
            "key_themes": ["routine", "calm", "family"],
            "emotional_trends": {"positive": 0.6, "negative": 0.2, "ambiguous": 0.2},
        }
        self.fail = set()
        self.fail_for_users = set()
        self.on_generate_quote = None
        self.on_summarize = None
        self.closed = False
        self.calls = {"classify": 0, "quote": 0, "summarize": 0}
        self.last_entries = None

    def close(self):
        self.closed = True

    def classify_emotions(self, text):
        self.calls["classify"] += 1
        if "classify" in self.fail:
            raise GenerationError("classifier unavailable")
        return self.emotions

    def generate_quote(self, entries):
        self.calls["quote"] += 1
        self.last_entries = entries
        if "quote" in self.fail:
            raise GenerationError("quote service unavailable")
        if self.on_generate_quote:
            self.on_generate_quote()
        return self.quote

    def summarize(self, entries, user_id=None):
        self.calls["summarize"] += 1
        self.last_entries = entries
        if user_id in self.fail_for_users:
            raise RuntimeError(f"unexpected failure for user {user_id}")
        if "summarize" in self.fail:
            raise GenerationError("summary service unavailable")
        if self.on_summarize:
            self.on_summarize()
        return self.summary


class FakeVerifier:
    def __init__(self, tokens):
        self.tokens = tokens

    def verify(self, token):
        claims = self.tokens.get(token)
        if claims is None:
            raise AuthError("Invalid token")
        return claims


@pytest.fixture
def engine(tmp_path):
    engine = get_engine(f"sqlite:///{tmp_path / 'journal.db'}")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def make_user(db, uid=TEST_UID, email="insights-test@example.com", username="insightstester"):
    user = User(
        identity_uid=uid,
        email=email,
        email_verified=True,
        first_name="Insights",
        last_name="Tester",
        username=username,
        auth_provider="email",
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def user(db):
    return make_user(db)


@pytest.fixture
def other_user(db):
    return make_user(db, uid="other-uid", email="other@example.com", username="other")


@pytest.fixture
def add_entry(db, user):
    """Insert an entry dated relative to the database clock."""
    def _add(days_ago=0, emotions=None, created_at=None, user_id=None,
             title="Test Entry", content="Test content"):
        if created_at is None:
            created_at = server_now(db) - timedelta(days=days_ago)
        entry = JournalEntry(
            user_id=user_id or user.id,
            title=title,
            content=content,
            emotions=emotions,
            created_at=created_at,
        )
        db.add(entry)
        db.commit()
        return entry
    return _add


@pytest.fixture
def add_summary(db, user):
    """Insert a stored summary for a date relative to the database's today."""
    def _add(days_ago=0, text="An earlier week of reflection.", user_id=None):
        summary_date = server_today(db) - timedelta(days=days_ago)
        summary = DailySummary(
            user_id=user_id or user.id,
            summary=text,
            key_themes=["work"],
            emotional_trends={"positive": 1},
            entry_count=2,
            analysis_period_start=summary_date - timedelta(days=7),
            analysis_period_end=summary_date - timedelta(days=1),
            summary_date=summary_date,
        )
        db.add(summary)
        db.commit()
        return summary
    return _add


@pytest.fixture
def yesterday_noon(db) -> datetime:
    """Midday of the previous server day."""
    return datetime.combine(server_today(db) - timedelta(days=1), time(12, 0))


@pytest.fixture
def insights_client():
    return FakeInsightsClient()


@pytest.fixture
def verifier():
    return FakeVerifier({
        VALID_TOKEN: IdentityClaims(TEST_UID, "insights-test@example.com", True),
        NEW_USER_TOKEN: IdentityClaims(NEW_UID, "new-user@example.com", True),
        GOOGLE_TOKEN: IdentityClaims("test-google-uid", "google-user@gmail.com", True),
    })


@pytest.fixture
def client(session_factory, insights_client, verifier):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_insights_client] = lambda: insights_client
    app.dependency_overrides[get_identity_verifier] = lambda: verifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {VALID_TOKEN}"}
