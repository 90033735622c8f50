"""In-memory stand-in for the supabase-py query builder used by the repositories."""

import copy
import itertools
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

EXPANSION = re.compile(r"(\w+):(\w+)\(\*\)")


@dataclass
class FakeResponse:
    data: List[Dict[str, Any]]


def _like(pattern: str, value: Any) -> bool:
    parts = [re.escape(part) for part in pattern.split("%")]
    return re.fullmatch(".*".join(parts), str(value or ""), re.IGNORECASE) is not None


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self.db = db
        self.table = table
        self.operation = "select"
        self.columns = "*"
        self.payload: Any = None
        self.on_conflict = "id"
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.order_by: Optional[tuple] = None
        self.max_rows: Optional[int] = None

    def select(self, columns: str = "*") -> "FakeQuery":
        self.columns = columns
        return self

    def insert(self, record: Dict[str, Any]) -> "FakeQuery":
        self.operation, self.payload = "insert", record
        return self

    def update(self, changes: Dict[str, Any]) -> "FakeQuery":
        self.operation, self.payload = "update", changes
        return self

    def upsert(self, record: Dict[str, Any], on_conflict: str = "id") -> "FakeQuery":
        self.operation, self.payload, self.on_conflict = "upsert", record, on_conflict
        return self

    def delete(self) -> "FakeQuery":
        self.operation = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def ilike(self, column: str, pattern: str) -> "FakeQuery":
        self.filters.append(lambda row: _like(pattern, row.get(column)))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.order_by = (column, desc)
        return self

    def limit(self, count: int) -> "FakeQuery":
        self.max_rows = count
        return self

    def _matches(self) -> List[Dict[str, Any]]:
        return [row for row in self.db.tables.setdefault(self.table, []) if all(f(row) for f in self.filters)]

    def _expand(self, row: Dict[str, Any]) -> Dict[str, Any]:
        result = copy.deepcopy(row)
        for alias, table in EXPANSION.findall(self.columns):
            foreign_key = f"{alias}_id"
            related = [r for r in self.db.tables.get(table, []) if r.get("id") == row.get(foreign_key)]
            result[alias] = copy.deepcopy(related[0]) if related else None
        return result

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table, self.operation))
        for hook in list(self.db.hooks):
            hook(self)
        failure = self.db.failures.get((self.table, self.operation))
        if failure is not None:
            raise failure

        rows = self.db.tables.setdefault(self.table, [])
        if self.operation == "select":
            found = self._matches()
            if self.order_by:
                column, desc = self.order_by
                found = sorted(found, key=lambda r: r.get(column) or "", reverse=desc)
            if self.max_rows is not None:
                found = found[: self.max_rows]
            return FakeResponse([self._expand(row) for row in found])
        if self.operation == "insert":
            return FakeResponse([copy.deepcopy(self.db.add(self.table, self.payload))])
        if self.operation == "update":
            found = self._matches()
            for row in found:
                row.update(copy.deepcopy(self.payload))
            return FakeResponse(copy.deepcopy(found))
        if self.operation == "upsert":
            key = self.payload.get(self.on_conflict)
            existing = [row for row in rows if row.get(self.on_conflict) == key]
            if existing:
                existing[0].update(copy.deepcopy(self.payload))
                return FakeResponse([copy.deepcopy(existing[0])])
            return FakeResponse([copy.deepcopy(self.db.add(self.table, self.payload))])
        found = self._matches()
        self.db.tables[self.table] = [row for row in rows if row not in found]
        return FakeResponse(copy.deepcopy(found))


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str) -> None:
        self.storage = storage
        self.name = name

    def upload(self, path: str, file: bytes, file_options: Optional[Dict[str, str]] = None):
        self.storage.objects[(self.name, path)] = file
        return {"path": path}

    def get_public_url(self, path: str) -> str:
        return f"https://example.supabase.co/storage/v1/object/public/{self.name}/{path}"

    def remove(self, paths: List[str]):
        if self.storage.fail_remove is not None:
            raise self.storage.fail_remove
        for path in paths:
            self.storage.objects.pop((self.name, path), None)
        return [{"name": path} for path in paths]


class FakeStorage:
    def __init__(self) -> None:
        self.objects: Dict[tuple, bytes] = {}
        self.fail_remove: Optional[Exception] = None

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self, bucket)


class FakeSupabase:
    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.failures: Dict[tuple, Exception] = {}
        self.hooks: List[Callable[[FakeQuery], None]] = []
        self.calls: List[tuple] = []
        self.storage = FakeStorage()
        self._ids = itertools.count(1)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def add(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        serial = next(self._ids)
        row = {"id": f"{table}-{serial}", "created_at": f"2024-01-01T00:00:{serial:02d}+00:00"}
        row.update(copy.deepcopy(record))
        self.tables.setdefault(table, []).append(row)
        return row

    def seed(self, table: str, rows: List[Dict[str, Any]]) -> None:
        for row in rows:
            self.add(table, row)

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.get(table, [])

    def find(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        for row in self.rows(table):
            if row.get("id") == row_id:
                return row
        return None
