import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["REDIS_URL"] = ""
os.environ.pop("SUPABASE_URL", None)
os.environ.pop("SUPABASE_ANON_KEY", None)

from types import SimpleNamespace
from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ielts_trainer.client import Collection
from ielts_trainer.database import Base
from ielts_trainer.exceptions import AuthenticationError, AuthProviderError, StoreError
from ielts_trainer.schemas.auth import AuthSession, AuthUser
from ielts_trainer.utils.round_store import RoundStore


def make_question_row(**overrides):
    row = {
        "id": uuid4(),
        "type": "fill_in_the_blank",
        "category": "reading",
        "difficulty": "medium",
        "article_content": None,
        "question_text": "The capital of France is ____.",
        "options": None,
        "correct_answer": "Paris",
        "explanation": "Paris has been the capital since 987.",
    }
    row.update(overrides)
    return row


class FakeSessionClient:
    """In-memory stand-in for SessionClient that records every call"""

    def __init__(self, user=None, rpc_rows=None):
        self.user = user or AuthUser(id=uuid4(), email="learner@example.com")
        self.rpc_rows = list(rpc_rows or [])
        self.rpc_calls = []
        self.history = []
        self.entries = {Collection.FAVORITES: [], Collection.WRONG_BOOK: []}
        self.writes = []
        self.questions = {}
        self.profile = None
        self.fail_on = set()

    @property
    def user_id(self):
        return self.user.id

    def _maybe_fail(self, op):
        if op in self.fail_on:
            raise StoreError(f"{op} failed")

    def rpc(self, name, params):
        self._maybe_fail("rpc")
        self.rpc_calls.append((name, params))
        return list(self.rpc_rows)

    def insert_history(self, question_id, user_answer, is_correct):
        self._maybe_fail("insert_history")
        self.history.append({
            "user_id": self.user_id,
            "question_id": question_id,
            "user_answer": user_answer,
            "is_correct": is_correct,
        })

    def entry_exists(self, collection, question_id):
        self._maybe_fail("entry_exists")
        return question_id in self.entries[collection]

    def add_entry(self, collection, question_id):
        self._maybe_fail("add_entry")
        self.writes.append(("insert", collection, question_id))
        self.entries[collection].insert(0, question_id)

    def remove_entry(self, collection, question_id):
        self._maybe_fail("remove_entry")
        self.writes.append(("delete", collection, question_id))
        before = len(self.entries[collection])
        self.entries[collection] = [q for q in self.entries[collection] if q != question_id]
        return before - len(self.entries[collection])

    def list_entry_question_ids(self, collection):
        self._maybe_fail("list_entries")
        return list(self.entries[collection])

    def get_questions(self, question_ids):
        return [self.questions[q] for q in question_ids if q in self.questions]

    def get_profile(self):
        self._maybe_fail("get_profile")
        return self.profile

    def add_question(self, **overrides):
        row = make_question_row(**overrides)
        self.questions[row["id"]] = SimpleNamespace(**row)
        return row


class FakeAuthProvider:
    """Accepts 'good-token', 'good-refresh' and 'good-code' only"""

    def __init__(self, user):
        self.user = user
        self.down = False
        self.sent_links = []
        self.signed_out = []

    def _session(self):
        return AuthSession(access_token="good-token", refresh_token="new-refresh", user=self.user)

    def get_user(self, access_token):
        if self.down:
            raise AuthProviderError("auth down")
        if access_token == "good-token":
            return self.user
        raise AuthenticationError("invalid token")

    def refresh_session(self, refresh_token):
        if self.down:
            raise AuthProviderError("auth down")
        if refresh_token == "good-refresh":
            return self._session()
        raise AuthenticationError("invalid refresh token")

    def send_magic_link(self, email, redirect_to):
        self.sent_links.append((email, redirect_to))
        return "verifier-123"

    def exchange_code_for_session(self, code, code_verifier):
        if code == "good-code" and code_verifier == "verifier-123":
            return self._session()
        raise AuthenticationError("invalid code")

    def sign_out(self, access_token):
        self.signed_out.append(access_token)


@pytest.fixture
def user():
    return AuthUser(id=uuid4(), email="learner@example.com")


@pytest.fixture
def fake_client(user):
    return FakeSessionClient(user=user)


@pytest.fixture
def store():
    return RoundStore(redis_url=None, ttl=60)


@pytest.fixture
def fake_auth(user):
    return FakeAuthProvider(user)


@pytest.fixture
def db_session():
    """SQLite in-memory session with all tables created"""
    import ielts_trainer.models  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine)()
    yield session
    session.close()
    engine.dispose()
