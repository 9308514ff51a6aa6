# tests/conftest.py
"""
In-memory stand-in for the Supabase client.

Implements only the query-builder calls the trio code uses:
table().select().eq().limit().execute(), table().insert().execute(),
table().delete().eq().execute(), rpc().execute() and auth.get_user().
"""

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from app.config import settings
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.auth.service import clear_auth_cache
from app.modules.trios.models import FORMATION_BATCHES_TABLE
from app.modules.trios.service import TrioService


def api_error(message, code="XX000"):
    return APIError({"message": message, "code": code, "hint": None, "details": None})


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = None
        self.payload = None
        self.columns = None
        self.filters = []
        self.limit_to = None

    def select(self, columns="*"):
        self.op = "select"
        self.columns = None if columns == "*" else [c.strip() for c in columns.split(",")]
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def limit(self, count):
        self.limit_to = count
        return self

    def _matches(self, row):
        return all(row.get(column) == value for column, value in self.filters)

    def execute(self):
        self.db.calls.append((self.table, self.op))
        failure = self.db.failures.get((self.table, self.op))
        if failure is not None:
            raise failure
        rows = self.db.tables.setdefault(self.table, [])
        if self.op == "select":
            found = [dict(r) for r in rows if self._matches(r)]
            if self.limit_to is not None:
                found = found[:self.limit_to]
            if self.columns:
                found = [{c: r.get(c) for c in self.columns} for r in found]
            return SimpleNamespace(data=found)
        if self.op == "insert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            unique = self.db.unique.get(self.table)
            if unique:
                taken = {r.get(unique) for r in rows}
                for item in payload:
                    if item.get(unique) in taken:
                        raise api_error("duplicate key value violates unique constraint", code="23505")
            inserted = []
            for item in payload:
                row = dict(item)
                row.setdefault("id", str(uuid.uuid4()))
                row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
                inserted.append(row)
            rows.extend(inserted)
            return SimpleNamespace(data=[dict(r) for r in inserted])
        if self.op == "delete":
            removed = [r for r in rows if self._matches(r)]
            self.db.tables[self.table] = [r for r in rows if not self._matches(r)]
            return SimpleNamespace(data=removed)
        raise AssertionError(f"unsupported operation {self.op}")


class FakeRpc:
    def __init__(self, db, name, params):
        self.db = db
        self.name = name
        self.params = params

    def execute(self):
        self.db.rpc_calls.append((self.name, self.params))
        failure = self.db.rpc_failures.get(self.name)
        if failure is not None:
            raise failure
        handler = self.db.rpc_handlers.get(self.name)
        return SimpleNamespace(data=handler(self.params) if handler else None)


class FakeAuth:
    def __init__(self):
        self.users = {}

    def get_user(self, jwt=None):
        if jwt not in self.users:
            raise Exception("invalid JWT: token is expired")
        user_id = self.users[jwt]
        return SimpleNamespace(user=SimpleNamespace(id=user_id, email=f"{user_id}@example.com", app_metadata={}))


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.unique = {FORMATION_BATCHES_TABLE: "date"}
        self.failures = {}
        self.rpc_failures = {}
        self.rpc_handlers = {}
        self.calls = []
        self.rpc_calls = []
        self.auth = FakeAuth()

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params=None):
        return FakeRpc(self, name, params or {})

    def writes(self, table):
        return [c for c in self.calls if c == (table, "insert")]

    def rpc_names(self):
        return [name for name, _ in self.rpc_calls]


def make_profiles(count, birthday="1995-06-15", prefix="user"):
    return [{"user_id": f"{prefix}{i}", "birthday": birthday} for i in range(count)]


@pytest.fixture(autouse=True)
def _reset_auth_cache():
    clear_auth_cache()
    yield
    clear_auth_cache()


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def trio_service(fake_supabase):
    return TrioService(fake_supabase)


@pytest.fixture
def client(fake_supabase, monkeypatch):
    from app.main import app

    monkeypatch.setattr(settings, "formation_trigger_token", None)
    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_service_supabase] = lambda: fake_supabase
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
