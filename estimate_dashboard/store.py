import logging
from dataclasses import replace
from typing import Iterable

from estimate_dashboard.errors import BilledFlagError, DuplicateEstimateError, EstimateNotFoundError
from estimate_dashboard.models import Estimate
from estimate_dashboard.storage import LocalMirror
from estimate_dashboard.sync import RemoteSync
from estimate_dashboard.type_defs import EstimateId

logger = logging.getLogger(__name__)


class EstimateStore:
    """The in-memory estimate list with local and remote mirrors.

    Each mutation updates the list and rewrites the local mirror before its
    first ``await``, so the change is visible immediately whether the caller
    awaits the coroutine or schedules it as a task. The awaited part is only
    the best-effort remote propagation.
    """

    def __init__(self, mirror: LocalMirror, remote: RemoteSync | None = None) -> None:
        self.mirror = mirror
        self.remote = remote or RemoteSync()
        self._estimates: list[Estimate] = []
        self.hydrated = False

    @property
    def estimates(self) -> list[Estimate]:
        return list(self._estimates)

    def get(self, estimate_id: EstimateId) -> Estimate | None:
        return next((estimate for estimate in self._estimates if estimate.id == estimate_id), None)

    def _replace_all(self, estimates: Iterable[Estimate]) -> None:
        self._estimates = list(estimates)
        self.mirror.save(self._estimates)

    async def hydrate(self) -> None:
        local_estimates = self.mirror.load()
        self._estimates = list(local_estimates)
        self.hydrated = True
        logger.debug("Loaded %d estimates from local storage", len(local_estimates))

        remote_estimates = await self.remote.fetch_all()
        if remote_estimates:
            self._replace_all(remote_estimates)
            logger.debug("Replaced local estimates with %d remote rows", len(remote_estimates))
        elif remote_estimates is not None and local_estimates and self.remote.seed_empty_remote:
            await self.remote.seed(local_estimates)

    async def refresh(self) -> bool:
        """Overwrite local state with the remote list when it has rows; True if it did."""
        remote_estimates = await self.remote.fetch_all()
        if not remote_estimates:
            return False
        self._replace_all(remote_estimates)
        return True

    async def add(self, estimate: Estimate) -> None:
        if estimate.id is not None and self.get(estimate.id) is not None:
            raise DuplicateEstimateError(estimate.id)
        self._replace_all([*self._estimates, estimate])
        await self.remote.propagate_insert(estimate)

    async def update(self, estimate: Estimate) -> None:
        current = self.get(estimate.id)
        if current is not None and current.client_billed and not estimate.client_billed:
            raise BilledFlagError(estimate.id)
        self._replace_all(estimate if existing.id == estimate.id else existing for existing in self._estimates)
        await self.remote.propagate_update(estimate)

    async def delete(self, estimate_id: EstimateId) -> None:
        self._replace_all(estimate for estimate in self._estimates if estimate.id != estimate_id)
        await self.remote.propagate_delete(estimate_id)

    async def set_amount(self, estimate_id: EstimateId, amount: float | str | None) -> Estimate:
        current = self._require(estimate_id)
        updated = replace(current, estimate_amount=amount)
        await self.update(updated)
        return updated

    async def mark_billed(self, estimate_id: EstimateId) -> Estimate:
        updated = replace(self._require(estimate_id), client_billed=True)
        await self.update(updated)
        return updated

    def _require(self, estimate_id: EstimateId) -> Estimate:
        estimate = self.get(estimate_id)
        if estimate is None:
            raise EstimateNotFoundError(estimate_id)
        return estimate
