"""In-memory stand-in for the parts of the Supabase client the services use."""
import copy
import re
import uuid
from types import SimpleNamespace
from typing import Any, Dict, List, Optional


class FakeResponse:
    def __init__(self, data: List[Dict[str, Any]], count: Optional[int] = None):
        self.data = data
        self.count = count


class UniqueViolation(Exception):
    code = "23505"


def _sort_key(value: Any):
    return (value is None, value if value is not None else 0)


def _like(pattern: str, value: Any) -> bool:
    if value is None:
        return False
    regex = "^" + ".*".join(re.escape(part) for part in pattern.split("%")) + "$"
    return re.match(regex, str(value), re.IGNORECASE | re.DOTALL) is not None


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.payload: Any = None
        self.on_conflict: Optional[str] = None
        self.filters: List = []
        self.orders: List = []
        self.limit_n: Optional[int] = None
        self.offset_n = 0
        self.count_mode: Optional[str] = None

    # operations
    def select(self, columns: str = "*", count: Optional[str] = None):
        self.op = "select"
        self.count_mode = count
        return self

    def insert(self, rows):
        self.op, self.payload = "insert", rows
        return self

    def upsert(self, rows, on_conflict: Optional[str] = None):
        self.op, self.payload, self.on_conflict = "upsert", rows, on_conflict
        return self

    def update(self, values: Dict[str, Any]):
        self.op, self.payload = "update", values
        return self

    def delete(self):
        self.op = "delete"
        return self

    # filters
    def eq(self, column, value):
        self.filters.append(lambda r: r.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda r: r.get(column) != value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda r: r.get(column) in values)
        return self

    def gt(self, column, value):
        self.filters.append(lambda r: r.get(column) is not None and r.get(column) > value)
        return self

    def gte(self, column, value):
        self.filters.append(lambda r: r.get(column) is not None and r.get(column) >= value)
        return self

    def lt(self, column, value):
        self.filters.append(lambda r: r.get(column) is not None and r.get(column) < value)
        return self

    def lte(self, column, value):
        self.filters.append(lambda r: r.get(column) is not None and r.get(column) <= value)
        return self

    def is_(self, column, value):
        expected = None if value in (None, "null") else value
        self.filters.append(lambda r: r.get(column) is expected or r.get(column) == expected)
        return self

    def ilike(self, column, pattern):
        self.filters.append(lambda r: _like(pattern, r.get(column)))
        return self

    def or_(self, expression: str):
        checks = []
        for clause in expression.split(","):
            column, op, value = clause.split(".", 2)
            if op == "ilike":
                checks.append(lambda r, c=column, v=value: _like(v, r.get(c)))
            elif op == "eq":
                checks.append(lambda r, c=column, v=value: str(r.get(c)) == v)
            else:
                raise NotImplementedError(op)
        self.filters.append(lambda r: any(check(r) for check in checks))
        return self

    # shaping
    def order(self, column, desc: bool = False):
        self.orders.append((column, desc))
        return self

    def limit(self, n: int):
        self.limit_n = n
        return self

    def offset(self, n: int):
        self.offset_n = n
        return self

    def range(self, start: int, end: int):
        self.offset_n = start
        self.limit_n = end - start + 1
        return self

    def single(self):
        self.limit_n = 1
        return self

    def maybe_single(self):
        self.limit_n = 1
        return self

    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table_name, self.op))
        if self.table_name in self.db.fail_tables:
            raise Exception(f"relation \"{self.table_name}\" is unavailable")
        rows = self.db.tables.setdefault(self.table_name, [])

        if self.op == "insert":
            new_rows = self.payload if isinstance(self.payload, list) else [self.payload]
            created = []
            for row in new_rows:
                row = copy.deepcopy(row)
                row.setdefault("id", str(uuid.uuid4()))
                self.db.check_unique(self.table_name, row)
                rows.append(row)
                created.append(copy.deepcopy(row))
            return FakeResponse(created)

        if self.op == "upsert":
            new_rows = self.payload if isinstance(self.payload, list) else [self.payload]
            keys = (self.on_conflict or "id").split(",")
            saved = []
            for row in new_rows:
                existing = next((r for r in rows if all(r.get(k) == row.get(k) for k in keys)), None)
                if existing is not None:
                    existing.update(copy.deepcopy(row))
                    saved.append(copy.deepcopy(existing))
                else:
                    row = copy.deepcopy(row)
                    row.setdefault("id", str(uuid.uuid4()))
                    rows.append(row)
                    saved.append(copy.deepcopy(row))
            return FakeResponse(saved)

        matched = [r for r in rows if self._matches(r)]

        if self.op == "update":
            for row in matched:
                row.update(copy.deepcopy(self.payload))
            return FakeResponse([copy.deepcopy(r) for r in matched])

        if self.op == "delete":
            self.db.tables[self.table_name] = [r for r in rows if not self._matches(r)]
            return FakeResponse([copy.deepcopy(r) for r in matched])

        indexed = list(enumerate(matched))
        for column, desc in reversed(self.orders):
            indexed.sort(key=lambda p: (_sort_key(p[1].get(column)), p[0]), reverse=desc)
        result = [row for _, row in indexed]
        total = len(result)
        result = result[self.offset_n:]
        if self.limit_n is not None:
            result = result[:self.limit_n]
        count = total if self.count_mode else None
        return FakeResponse([copy.deepcopy(r) for r in result], count)


class FakeAuth:
    """Users keyed by email; tokens map to user ids"""

    def __init__(self):
        self.users: Dict[str, SimpleNamespace] = {}
        self.passwords: Dict[str, str] = {}
        self.tokens: Dict[str, str] = {}
        self.confirm_email = False
        self.current_user_id: Optional[str] = None
        self.signed_out = 0

    def add_user(self, email: str, password: str = "secret123", metadata: Optional[Dict] = None, token: Optional[str] = None):
        user = SimpleNamespace(
            id=str(uuid.uuid4()),
            email=email,
            user_metadata=metadata or {},
            app_metadata={},
            created_at="2025-01-01T00:00:00+00:00",
            updated_at="2025-01-01T00:00:00+00:00",
        )
        self.users[email] = user
        self.passwords[email] = password
        if token:
            self.tokens[token] = user.id
        return user

    def _user_by_id(self, user_id):
        return next((u for u in self.users.values() if u.id == user_id), None)

    def _session(self, user):
        token = f"token-{user.id}"
        self.tokens[token] = user.id
        self.current_user_id = user.id
        return SimpleNamespace(access_token=token, expires_in=3600)

    def sign_up(self, credentials):
        email = credentials["email"]
        if email in self.users:
            raise Exception("User already registered")
        metadata = (credentials.get("options") or {}).get("data") or {}
        user = self.add_user(email, credentials["password"], metadata)
        session = None if self.confirm_email else self._session(user)
        return SimpleNamespace(user=user, session=session)

    def sign_in_with_password(self, credentials):
        email = credentials["email"]
        if self.passwords.get(email) != credentials["password"]:
            raise Exception("Invalid login credentials")
        user = self.users[email]
        return SimpleNamespace(user=user, session=self._session(user))

    def get_user(self, jwt=None):
        user_id = self.tokens.get(jwt)
        if not user_id:
            raise Exception("invalid JWT")
        return SimpleNamespace(user=self._user_by_id(user_id))

    def update_user(self, attributes):
        user = self._user_by_id(self.current_user_id)
        if user is not None:
            for key, value in (attributes.get("data") or {}).items():
                if value is None:
                    user.user_metadata.pop(key, None)
                else:
                    user.user_metadata[key] = value
        return SimpleNamespace(user=user)

    def sign_out(self):
        self.signed_out += 1


class FakeSupabase:
    def __init__(self, unique: Optional[Dict[str, List[str]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.unique = unique if unique is not None else {
            "user_roles": ["user_id"],
            "credit_wallets": ["user_id"],
        }
        self.fail_tables: set = set()
        self.calls: List = []
        self.auth = FakeAuth()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def check_unique(self, table: str, row: Dict[str, Any]):
        for column in self.unique.get(table, []):
            if any(r.get(column) == row.get(column) for r in self.tables.get(table, [])):
                raise UniqueViolation(f"duplicate key value violates unique constraint \"{table}_{column}_key\"")

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.get(table, [])

    def seed(self, table: str, *rows: Dict[str, Any]) -> List[Dict[str, Any]]:
        stored = []
        for row in rows:
            row = dict(row)
            row.setdefault("id", str(uuid.uuid4()))
            self.tables.setdefault(table, []).append(row)
            stored.append(row)
        return stored
