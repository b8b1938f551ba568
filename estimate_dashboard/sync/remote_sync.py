import asyncio
import logging
from typing import Callable, Protocol, Sequence, TypeVar

import requests

from estimate_dashboard.client import Client
from estimate_dashboard.config.sections import Remote
from estimate_dashboard.models import Estimate, normalize_for_remote
from estimate_dashboard.type_defs import EstimateId, JsonObject

logger = logging.getLogger(__name__)

ResultType = TypeVar("ResultType")

# Everything the row-store client raises for a failed call.
SYNC_ERRORS = (requests.RequestException, PermissionError, ValueError, OSError)


class RowStore(Protocol):
    def select_all(self, order_by: str = "id") -> list[JsonObject]:
        ...

    def insert(self, rows: JsonObject | list[JsonObject]) -> None:
        ...

    def update(self, estimate_id: EstimateId, row: JsonObject) -> None:
        ...

    def delete_by_id(self, estimate_id: EstimateId) -> None:
        ...

    def close(self) -> None:
        ...


class RemoteSync:
    """Best-effort mirror of the estimate list in a remote table.

    Built without a row store the sync is *unconfigured* and every operation
    returns immediately. With one, each call is a single attempt whose failure
    is logged and swallowed; callers never see remote errors.
    """

    def __init__(self, row_store: RowStore | None = None, seed_empty_remote: bool = False) -> None:
        self.row_store = row_store
        self.seed_empty_remote = seed_empty_remote

    @classmethod
    def from_settings(cls, remote: Remote) -> "RemoteSync":
        if not remote.configured:
            logger.info("Remote store credentials not set; running on local storage only")
            return cls(row_store=None)
        return cls(row_store=Client.from_settings(remote), seed_empty_remote=remote.seed_empty_remote)

    @property
    def configured(self) -> bool:
        return self.row_store is not None

    def close(self) -> None:
        if self.row_store is not None:
            self.row_store.close()

    async def _call(self, label: str, func: Callable[..., ResultType], *args: object) -> tuple[bool, ResultType | None]:
        try:
            return True, await asyncio.to_thread(func, *args)
        except SYNC_ERRORS as error:
            logger.warning("[EMD] %s error: %s", label, error)
            return False, None

    async def fetch_all(self) -> list[Estimate] | None:
        """Every remote row ordered by id, or ``None`` when unconfigured or the fetch failed."""
        if self.row_store is None:
            return None
        succeeded, rows = await self._call("Remote fetch", self.row_store.select_all)
        if not succeeded:
            return None
        return Estimate.from_list(rows or [])

    async def propagate_insert(self, estimate: Estimate) -> None:
        if self.row_store is None:
            return
        await self._call("insert", self.row_store.insert, normalize_for_remote(estimate.to_dict()))

    async def propagate_update(self, estimate: Estimate) -> None:
        if self.row_store is None:
            return
        await self._call("update", self.row_store.update, estimate.id, normalize_for_remote(estimate.to_dict()))

    async def propagate_delete(self, estimate_id: EstimateId) -> None:
        if self.row_store is None:
            return
        await self._call("delete", self.row_store.delete_by_id, estimate_id)

    async def seed(self, estimates: Sequence[Estimate]) -> None:
        if self.row_store is None or not estimates:
            return
        payload = [normalize_for_remote(estimate.to_dict()) for estimate in estimates]
        succeeded, _ = await self._call("seed insert", self.row_store.insert, payload)
        if succeeded:
            logger.info("Seeded remote store with %d local estimates", len(payload))
