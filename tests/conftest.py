import itertools
import re
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from adstudio.core.dependencies import get_current_user
from adstudio.core.exceptions import ExternalServiceError
from adstudio.database.supabase_client import get_service_supabase, get_supabase
from adstudio.main import app
from adstudio.modules.templates import manager as manager_module
from adstudio.modules.templates.heygen_client import get_heygen_client_factory


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


def _matches_ilike(value: Any, pattern: str) -> bool:
    if value is None:
        return False
    return pattern.strip("%").lower() in str(value).lower()


def _split_or_expression(expression: str) -> List[str]:
    """Split a PostgREST `or` expression on commas outside double quotes."""
    parts, current, quoted, escaped = [], [], False, False
    for char in expression:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"':
            quoted = not quoted
        elif char == "," and not quoted:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return parts


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        value = value[1:-1]
        return re.sub(r"\\(.)", r"\1", value)
    return value


class FakeQuery:
    """Just enough of the postgrest query builder for the services under test."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.payload: Any = None
        self.on_conflict: Optional[str] = None
        self.filters: List = []
        self.orders: List = []
        self.range_bounds = None
        self.limit_count = None
        self.single_mode: Optional[str] = None
        self.want_count = False

    # operations
    def select(self, *columns, count=None):
        self.op = "select"
        self.want_count = count is not None
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def update(self, payload):
        self.op, self.payload = "update", payload
        return self

    def upsert(self, payload, on_conflict=None):
        self.op, self.payload, self.on_conflict = "upsert", payload, on_conflict
        return self

    def delete(self):
        self.op = "delete"
        return self

    # filters
    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def lt(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) < value)
        return self

    def ilike(self, column, pattern):
        self.filters.append(lambda row: _matches_ilike(row.get(column), pattern))
        return self

    def overlaps(self, column, values):
        values = set(values)
        self.filters.append(lambda row: bool(values & set(row.get(column) or [])))
        return self

    def or_(self, expression):
        clauses = []
        for part in _split_or_expression(expression):
            column, operator, value = part.split(".", 2)
            assert operator == "ilike", operator
            clauses.append((column, _unquote(value)))
        self.filters.append(lambda row: any(_matches_ilike(row.get(c), v) for c, v in clauses))
        return self

    # modifiers
    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def range(self, start, end):
        self.range_bounds = (start, end)
        return self

    def limit(self, count):
        self.limit_count = count
        return self

    def maybe_single(self):
        self.single_mode = "maybe"
        return self

    def single(self):
        self.single_mode = "single"
        return self

    def _matching(self) -> List[Dict[str, Any]]:
        return [row for row in self.db.rows(self.table_name) if all(f(row) for f in self.filters)]

    def execute(self):
        self.db.calls.append((self.table_name, self.op))
        if self.table_name in self.db.fail_tables:
            raise RuntimeError(f"{self.table_name} unavailable")
        handler = getattr(self, f"_execute_{self.op}")
        return handler()

    def _execute_select(self):
        rows = self._matching()
        for column, desc in reversed(self.orders):
            rows.sort(key=lambda r: (r.get(column) is None, r.get(column)), reverse=desc)
        total = len(rows)
        if self.range_bounds:
            start, end = self.range_bounds
            rows = rows[start:end + 1]
        if self.limit_count is not None:
            rows = rows[:self.limit_count]
        rows = [dict(r) for r in rows]
        if self.single_mode:
            return FakeResponse(rows[0] if rows else None)
        return FakeResponse(rows, total if self.want_count else None)

    def _execute_insert(self):
        items = self.payload if isinstance(self.payload, list) else [self.payload]
        return FakeResponse([dict(self.db.add(self.table_name, item)) for item in items])

    def _execute_update(self):
        updated = []
        for row in self._matching():
            row.update(self.payload)
            updated.append(dict(row))
        return FakeResponse(updated)

    def _execute_upsert(self):
        items = self.payload if isinstance(self.payload, list) else [self.payload]
        keys = self.on_conflict.split(",") if self.on_conflict else ["id"]
        result = []
        for item in items:
            existing = next(
                (r for r in self.db.rows(self.table_name)
                 if all(k in item and r.get(k) == item[k] for k in keys)),
                None,
            )
            if existing:
                existing.update(item)
                result.append(dict(existing))
            else:
                result.append(dict(self.db.add(self.table_name, item)))
        return FakeResponse(result)

    def _execute_delete(self):
        doomed = self._matching()
        self.db.tables[self.table_name] = [r for r in self.db.rows(self.table_name) if r not in doomed]
        return FakeResponse([dict(r) for r in doomed])


class FakeAuthAdmin:
    def __init__(self):
        self.updates = []
        self.created = []
        self.fail = False

    def update_user_by_id(self, user_id, attributes):
        if self.fail:
            raise RuntimeError("auth admin unavailable")
        self.updates.append((user_id, attributes))

    def create_user(self, attributes):
        if self.fail:
            raise RuntimeError("auth admin unavailable")
        self.created.append(attributes)
        user = SimpleNamespace(id=f"auth-{len(self.created)}", email=attributes["email"])
        return SimpleNamespace(user=user)


class FakeAuth:
    def __init__(self):
        self.admin = FakeAuthAdmin()


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.calls: List = []
        self.fail_tables = set()
        self.auth = FakeAuth()
        self._clock = itertools.count()
        self._epoch = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.setdefault(table, [])

    def add(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        stored = dict(row)
        stored.setdefault("id", str(uuid.uuid4()))
        stored.setdefault("created_at", (self._epoch + timedelta(seconds=next(self._clock))).isoformat())
        self.rows(table).append(stored)
        return stored

    def seed(self, table: str, *rows: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [dict(self.add(table, row)) for row in rows]

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def touched(self, table: str) -> bool:
        return any(t == table for t, _ in self.calls)


class FakeHeyGen:
    """Stands in for HeyGenClient; templates maps template id to the raw API detail."""

    def __init__(self):
        self.templates: Dict[str, Dict[str, Any]] = {}
        self.listing: List[Dict[str, Any]] = []
        self.fail = False
        self.detail_calls = 0
        self.generated = []
        self.video_status = {
            "status": "processing", "video_url": None, "thumbnail_url": None, "gif_url": None, "error": None,
        }

    def _check(self):
        if self.fail:
            raise ExternalServiceError("HeyGen API error: 503 - unavailable", status_code=503, service="heygen")

    def list_templates(self):
        self._check()
        return self.listing

    def get_template(self, template_id):
        self.detail_calls += 1
        self._check()
        if template_id not in self.templates:
            raise ExternalServiceError("HeyGen API error: 404 - not found", status_code=404, service="heygen")
        return self.templates[template_id]

    def generate_from_template(self, template_id, variables, title, caption=False, test=False,
                               include_gif=True, callback_id=None):
        self._check()
        self.generated.append({"template_id": template_id, "variables": variables,
                               "title": title, "callback_id": callback_id})
        return "vid_123"

    def get_video_status(self, video_id):
        self._check()
        return dict(self.video_status)

    def close(self):
        pass


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def fake_heygen():
    return FakeHeyGen()


@pytest.fixture(autouse=True)
def clear_template_caches():
    manager_module._TEMPLATE_CACHE.clear()
    manager_module._CLIENT_CONFIG_CACHE.clear()
    yield
    manager_module._TEMPLATE_CACHE.clear()
    manager_module._CLIENT_CONFIG_CACHE.clear()


@pytest.fixture
def current_user():
    return {
        "id": "user-1",
        "email": "user@example.com",
        "user_metadata": {},
        "app_metadata": {"role": "user"},
    }


@pytest.fixture
def as_admin(current_user):
    current_user["app_metadata"]["role"] = "admin"
    return current_user


@pytest.fixture
def as_superadmin(current_user):
    current_user["app_metadata"]["role"] = "superadmin"
    return current_user


@pytest.fixture
def client(fake_supabase, fake_heygen, current_user):
    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_service_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_current_user] = lambda: current_user
    app.dependency_overrides[get_heygen_client_factory] = lambda: (lambda: fake_heygen)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
