"""
Shared test fixtures.

FakeSupabaseClient keeps rows in memory and applies filters, ordering,
exact counts and embedded relation selects the way PostgREST does for the
queries the services issue. FakeStorage keeps uploaded objects per bucket
and can be told to fail uploads or removals.
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("ENVIRONMENT", "development")

import copy
import pytest
from contextlib import ExitStack
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Callable, Generator, Optional
from unittest.mock import patch


# ===================
# FAKE DATABASE
# ===================

# (table, embedded relation) -> foreign key column on the parent row
MANY_TO_ONE = {
    ("products", "umkm_profiles"): "umkm_id",
    ("reviews", "products"): "product_id",
    ("product_images", "products"): "product_id",
    ("qr_scans", "products"): "product_id",
}

# (table, embedded relation) -> foreign key column on the child rows
ONE_TO_MANY = {
    ("products", "product_images"): "product_id",
    ("products", "reviews"): "product_id",
    ("umkm_profiles", "products"): "umkm_id",
}

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


def split_columns(columns: str) -> list[str]:
    """Split a select string on top-level commas."""
    parts, depth, current = [], 0, ""
    for char in columns:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        if char == "," and depth == 0:
            parts.append(current.strip())
            current = ""
        else:
            current += char
    if current.strip():
        parts.append(current.strip())
    return parts


def project(row: dict, columns: list[str]) -> dict:
    if "*" in columns:
        return copy.deepcopy(row)
    return {c: copy.deepcopy(row.get(c)) for c in columns}


class FakeResponse:
    def __init__(self, data=None, count: Optional[int] = None):
        self.data = data if data is not None else []
        self.count = count


class FakeQuery:
    """Chainable query builder bound to one table."""

    def __init__(self, client: "FakeSupabaseClient", table: str, operation: str, payload=None):
        self.client = client
        self.table = table
        self.operation = operation
        self.payload = payload
        self.columns = "*"
        self.count_mode = None
        self.filters: list[Callable[[dict], bool]] = []
        self.orders: list[tuple[str, bool]] = []
        self._limit: Optional[int] = None
        self._range: Optional[tuple[int, int]] = None
        self._single = False

    def select(self, columns: str = "*", count: Optional[str] = None):
        self.columns = columns
        self.count_mode = count
        return self

    def eq(self, column, value):
        value = getattr(value, "value", value)
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        value = getattr(value, "value", value)
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column, values):
        values = [getattr(v, "value", v) for v in values]
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc: bool = False):
        self.orders.append((column, desc))
        return self

    def limit(self, count: int):
        self._limit = count
        return self

    def range(self, start: int, end: int):
        self._range = (start, end)
        return self

    def single(self):
        self._single = True
        return self

    def _matches(self, row: dict) -> bool:
        return all(f(row) for f in self.filters)

    def _embed(self, row: dict) -> dict:
        plain, relations = [], []
        for part in split_columns(self.columns):
            if "(" in part:
                name, inner = part.split("(", 1)
                relations.append((name.strip(), split_columns(inner.rstrip(")"))))
            else:
                plain.append(part)

        result = project(row, plain or ["*"])
        for name, inner in relations:
            if (self.table, name) in MANY_TO_ONE:
                fk = MANY_TO_ONE[(self.table, name)]
                parent = next((r for r in self.client.tables[name] if r["id"] == row.get(fk)), None)
                result[name] = project(parent, inner) if parent else None
            elif (self.table, name) in ONE_TO_MANY:
                fk = ONE_TO_MANY[(self.table, name)]
                children = [r for r in self.client.tables[name] if r.get(fk) == row["id"]]
                result[name] = [project(child, inner) for child in children]
        return result

    def execute(self) -> FakeResponse:
        self.client.calls.append((self.table, self.operation))
        failure = self.client.failures.get((self.table, self.operation))
        if failure is not None and failure(self.payload):
            raise Exception(f"{self.operation} on {self.table} failed")

        rows = self.client.tables[self.table]

        if self.operation == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for item in items:
                row = self.client.new_row(self.table, item)
                rows.append(row)
                inserted.append(copy.deepcopy(row))
            return FakeResponse(inserted)

        matched = [row for row in rows if self._matches(row)]

        if self.operation == "update":
            for row in matched:
                row.update(copy.deepcopy(self.payload))
                if "updated_at" in row:
                    row["updated_at"] = self.client.now().isoformat()
            return FakeResponse([copy.deepcopy(row) for row in matched])

        if self.operation == "delete":
            self.client.tables[self.table] = [row for row in rows if not self._matches(row)]
            return FakeResponse([copy.deepcopy(row) for row in matched])

        for column, desc in reversed(self.orders):
            matched.sort(key=lambda r: (r.get(column) is None, r.get(column)), reverse=desc)

        count = len(matched) if self.count_mode == "exact" else None
        if self._range is not None:
            matched = matched[self._range[0]:self._range[1] + 1]
        if self._limit is not None:
            matched = matched[:self._limit]

        data = [self._embed(row) for row in matched]
        if self._single:
            if len(data) != 1:
                raise Exception("JSON object requested, multiple (or no) rows returned")
            return FakeResponse(data[0], count)
        return FakeResponse(data, count)


class FakeTable:
    def __init__(self, client: "FakeSupabaseClient", name: str):
        self.client = client
        self.name = name

    def select(self, columns: str = "*", count: Optional[str] = None) -> FakeQuery:
        return FakeQuery(self.client, self.name, "select").select(columns, count=count)

    def insert(self, payload) -> FakeQuery:
        return FakeQuery(self.client, self.name, "insert", payload)

    def update(self, payload) -> FakeQuery:
        return FakeQuery(self.client, self.name, "update", payload)

    def delete(self) -> FakeQuery:
        return FakeQuery(self.client, self.name, "delete")


# ===================
# FAKE STORAGE
# ===================

class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self.storage = storage
        self.name = name

    def upload(self, path: str, file: bytes, file_options: Optional[dict] = None):
        self.storage.calls.append(("upload", self.name, path))
        if self.storage.fail_upload_when and self.storage.fail_upload_when(path, file):
            raise Exception(f"upload of {path} rejected")
        objects = self.storage.objects.setdefault(self.name, {})
        if path in objects:
            raise Exception(f"The resource already exists: {path}")
        objects[path] = file
        return SimpleNamespace(path=path, full_path=f"{self.name}/{path}")

    def remove(self, paths: list[str]):
        for path in paths:
            self.storage.calls.append(("remove", self.name, path))
            if self.storage.fail_remove_when and self.storage.fail_remove_when(path):
                raise Exception(f"remove of {path} failed")
            self.storage.objects.get(self.name, {}).pop(path, None)
        return [{"name": p} for p in paths]


class FakeStorage:
    def __init__(self):
        self.objects: dict[str, dict[str, bytes]] = {}
        self.calls: list[tuple[str, str, str]] = []
        self.fail_upload_when: Optional[Callable[[str, bytes], bool]] = None
        self.fail_remove_when: Optional[Callable[[str], bool]] = None

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self, bucket)

    def paths(self, bucket: str = "products") -> set[str]:
        return set(self.objects.get(bucket, {}))


# ===================
# FAKE AUTH
# ===================

class FakeAuthAdmin:
    def __init__(self, auth: "FakeAuth"):
        self.auth = auth

    def sign_out(self, jwt: str, scope: str = "global"):
        self.auth.revoked.append(jwt)
        self.auth.tokens.pop(jwt, None)


class FakeAuth:
    """Email/password users and issued access tokens."""

    def __init__(self):
        self.users: dict[str, dict] = {}
        self.tokens: dict[str, dict] = {}
        self.revoked: list[str] = []
        self.admin = FakeAuthAdmin(self)

    def add_user(self, email: str, password: str, user_id: str = "admin-1") -> None:
        self.users[email] = {"id": user_id, "email": email, "password": password}

    def issue_token(self, email: str) -> str:
        user = self.users[email]
        token = f"token-{user['id']}-{len(self.tokens) + 1}"
        self.tokens[token] = user
        return token

    def sign_in_with_password(self, credentials: dict):
        user = self.users.get(credentials["email"])
        if user is None or user["password"] != credentials["password"]:
            raise Exception("Invalid login credentials")
        token = self.issue_token(user["email"])
        return SimpleNamespace(
            user=SimpleNamespace(id=user["id"], email=user["email"]),
            session=SimpleNamespace(access_token=token)
        )

    def get_user(self, jwt: str):
        user = self.tokens.get(jwt)
        if user is None:
            raise Exception("invalid JWT")
        return SimpleNamespace(user=SimpleNamespace(id=user["id"], email=user["email"]))


# ===================
# FAKE CLIENT
# ===================

class FakeSupabaseClient:
    """In-memory stand-in for supabase.Client."""

    TABLES = ("umkm_profiles", "products", "product_images", "reviews", "qr_scans")
    TIMESTAMPED = {
        "umkm_profiles": ("created_at", "updated_at"),
        "products": ("created_at", "updated_at"),
        "product_images": ("created_at",),
        "reviews": ("created_at",),
        "qr_scans": (),
    }

    def __init__(self):
        self.tables: dict[str, list[dict]] = {name: [] for name in self.TABLES}
        self.storage = FakeStorage()
        self.auth = FakeAuth()
        self.failures: dict[tuple[str, str], Callable] = {}
        self.calls: list[tuple[str, str]] = []
        self._ids = {name: 0 for name in self.TABLES}
        self._clock = 0

    def table(self, name: str) -> FakeTable:
        return FakeTable(self, name)

    def now(self) -> datetime:
        # Every write moves the clock so "newest first" is deterministic
        self._clock += 1
        return BASE_TIME + timedelta(seconds=self._clock)

    def new_row(self, table: str, item: dict) -> dict:
        row = copy.deepcopy(item)
        if "id" not in row:
            self._ids[table] += 1
            row["id"] = self._ids[table]
        else:
            self._ids[table] = max(self._ids[table], row["id"])
        stamp = self.now().isoformat()
        for column in self.TIMESTAMPED[table]:
            row.setdefault(column, stamp)
        return row

    def fail(self, table: str, operation: str, when: Optional[Callable] = None) -> None:
        """Make every matching query raise (or only when `when(payload)` is true)."""
        self.failures[(table, operation)] = when or (lambda payload: True)

    def rows(self, table: str, **filters) -> list[dict]:
        return [
            row for row in self.tables[table]
            if all(row.get(k) == v for k, v in filters.items())
        ]


# ===================
# FIXTURES
# ===================

SERVICE_MODULES = (
    "services.storage_service",
    "services.umkm_service",
    "services.media_service",
    "services.product_service",
    "services.review_service",
    "services.public_service",
    "services.dashboard_service",
    "services.auth_service",
)

SINGLETONS = (
    ("services.storage_service", "_product_storage"),
    ("services.storage_service", "_review_storage"),
    ("services.umkm_service", "_umkm_service"),
    ("services.media_service", "_media_service"),
    ("services.product_service", "_product_service"),
    ("services.review_service", "_review_service"),
    ("services.public_service", "_public_service"),
    ("services.qr_service", "_qr_service"),
    ("services.dashboard_service", "_dashboard_service"),
    ("services.auth_service", "_auth_service"),
)


@pytest.fixture
def fake_supabase() -> FakeSupabaseClient:
    """
    Empty in-memory Supabase project.

    Usage:
        def test_something(fake_supabase):
            fake_supabase.tables["products"].append({...})
    """
    return FakeSupabaseClient()


@pytest.fixture
def mock_db(fake_supabase) -> Generator:
    """
    Patch every service to use the fake client.

    Singletons are reset so each test builds services on the fake.
    """
    with ExitStack() as stack:
        for module in SERVICE_MODULES:
            stack.enter_context(patch(f"{module}.get_supabase_client", return_value=fake_supabase))
        stack.enter_context(patch("services.auth_service.get_auth_client", return_value=fake_supabase))
        stack.enter_context(patch("services.auth_service.get_admin_client", return_value=fake_supabase))
        stack.enter_context(patch("main.check_connection", return_value={"status": "unhealthy", "error": "test"}))
        for module, name in SINGLETONS:
            stack.enter_context(patch(f"{module}.{name}", None))
        yield fake_supabase


@pytest.fixture
def app_client(mock_db):
    """TestClient over the full application, not signed in."""
    from fastapi.testclient import TestClient
    from main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def admin_client(app_client, fake_supabase):
    """TestClient carrying a valid admin access token."""
    fake_supabase.auth.add_user("admin@wardig.id", "secret")
    token = fake_supabase.auth.issue_token("admin@wardig.id")
    app_client.headers["Authorization"] = f"Bearer {token}"
    return app_client
