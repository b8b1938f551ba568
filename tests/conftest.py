from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from estimate_dashboard.config import AppSettings  # noqa: E402
from estimate_dashboard.type_defs import EstimateId, JsonObject  # noqa: E402

ENV_VARS = (
    "SUPABASE_URL",
    "VITE_SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "VITE_SUPABASE_ANON_KEY",
)


class MemoryBlobStore:
    def __init__(self) -> None:
        self.items: dict[str, str] = {}
        self.writes = 0

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.writes += 1
        self.items[key] = value


class FakeRowStore:
    def __init__(self, rows: list[JsonObject] | None = None, fail_on: set[str] | None = None) -> None:
        self.rows = list(rows or [])
        self.fail_on = set(fail_on or ())
        self.calls: list[tuple[str, object]] = []
        self.closed = False

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise ConnectionError(f"{operation} unavailable")

    def select_all(self, order_by: str = "id") -> list[JsonObject]:
        self.calls.append(("select", order_by))
        self._maybe_fail("select")
        return sorted(self.rows, key=lambda row: row[order_by])

    def insert(self, rows: JsonObject | list[JsonObject]) -> None:
        self.calls.append(("insert", rows))
        self._maybe_fail("insert")
        self.rows.extend(rows if isinstance(rows, list) else [rows])

    def update(self, estimate_id: EstimateId, row: JsonObject) -> None:
        self.calls.append(("update", (estimate_id, row)))
        self._maybe_fail("update")
        self.rows = [row if existing["id"] == estimate_id else existing for existing in self.rows]

    def delete_by_id(self, estimate_id: EstimateId) -> None:
        self.calls.append(("delete", estimate_id))
        self._maybe_fail("delete")
        self.rows = [row for row in self.rows if row["id"] != estimate_id]

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setenv("ESTIMATE_DASHBOARD_CONFIG_FILE", str(tmp_path / "config" / "config.toml"))
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    AppSettings.reset_instance()
    yield
    AppSettings.reset_instance()


@pytest.fixture
def blob_store() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def row_store_factory():
    return FakeRowStore
