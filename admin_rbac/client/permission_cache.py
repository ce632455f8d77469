"""
Client-side permission cache — one principal's resolved codes, time-boxed.

State machine:

    EMPTY ─get─▶ FETCHING ─ok─▶ FRESH ─ttl elapses─▶ STALE ─get─▶ FETCHING ...
      ▲                                                     │
      └──────────────────── invalidate() ◀──────────────────┘ (from any state)

- A FRESH `get` is a local lookup, no I/O.
- At most one fetch is in flight per cache; concurrent callers share it.
- A failed fetch leaves the previous value (or EMPTY) in place and raises
  `PermissionFetchError` to every waiting caller.  An empty set is only
  ever stored when the server actually answered with one.
- A result is stored only if no `invalidate()` happened after its fetch
  started and it started no earlier than the value already stored.

Staleness window: a revoked permission stays visible until the TTL
expires or the session calls `invalidate()` (login/logout).
"""

import asyncio
import enum
import logging
import time
import uuid
from collections.abc import Awaitable, Callable, Iterable

from admin_rbac.client.fetcher import PermissionFetchError
from admin_rbac.core.config import settings
from admin_rbac.rbac.catalog import action_permissions, menu_permissions

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Iterable[str]]]


class CacheState(str, enum.Enum):
    EMPTY = "empty"
    FETCHING = "fetching"
    FRESH = "fresh"
    STALE = "stale"


def _consume_result(task: "asyncio.Task[frozenset[str]]") -> None:
    # Keeps asyncio from warning when every waiter has gone away.
    if not task.cancelled():
        task.exception()


class PermissionCache:
    def __init__(
        self,
        fetcher: Fetcher,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetcher = fetcher
        self.ttl_seconds = settings.PERMISSION_CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._clock = clock

        self._principal_id: uuid.UUID | None = None
        self._codes: frozenset[str] | None = None
        self._fetched_at: float | None = None  # start time of the fetch that produced _codes
        self._inflight: asyncio.Task[frozenset[str]] | None = None
        self._generation = 0

    # ── Introspection ────────────────────────────────────────────────
    @property
    def state(self) -> CacheState:
        if self._inflight is not None:
            return CacheState.FETCHING
        if self._codes is None:
            return CacheState.EMPTY
        return CacheState.FRESH if self._is_fresh() else CacheState.STALE

    @property
    def cached_codes(self) -> frozenset[str] | None:
        """Last stored value, fresh or stale, without any I/O."""
        return self._codes

    def _is_fresh(self) -> bool:
        return (
            self._codes is not None
            and self._fetched_at is not None
            and self._clock() - self._fetched_at < self.ttl_seconds
        )

    # ── Public API ───────────────────────────────────────────────────
    async def get(self, principal_id: uuid.UUID) -> frozenset[str]:
        if principal_id != self._principal_id:
            self.invalidate()
            self._principal_id = principal_id

        if self._is_fresh():
            return self._codes  # type: ignore[return-value]

        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._refresh(self._generation))
            self._inflight.add_done_callback(_consume_result)
        return await asyncio.shield(self._inflight)

    async def has_permission(self, principal_id: uuid.UUID, code: str) -> bool:
        return code in await self.get(principal_id)

    async def has_any_permission(self, principal_id: uuid.UUID, codes: Iterable[str]) -> bool:
        granted = await self.get(principal_id)
        return any(code in granted for code in codes)

    async def has_all_permissions(self, principal_id: uuid.UUID, codes: Iterable[str]) -> bool:
        granted = await self.get(principal_id)
        return all(code in granted for code in codes)

    async def menu_permissions(self, principal_id: uuid.UUID) -> set[str]:
        return menu_permissions(await self.get(principal_id))

    async def action_permissions(self, principal_id: uuid.UUID) -> set[str]:
        return action_permissions(await self.get(principal_id))

    def invalidate(self) -> None:
        """Forget everything (login/logout).  An in-flight fetch will not be stored."""
        self._generation += 1
        self._principal_id = None
        self._codes = None
        self._fetched_at = None
        self._inflight = None

    # ── Internals ────────────────────────────────────────────────────
    async def _refresh(self, generation: int) -> frozenset[str]:
        started_at = self._clock()
        try:
            codes = frozenset(await self._fetcher())
        except PermissionFetchError:
            logger.warning("Permission fetch failed; keeping %s state", self._stored_state_name())
            raise
        except Exception as exc:
            logger.warning("Permission fetch failed: %s", exc)
            raise PermissionFetchError(f"Permission fetch failed: {exc}") from exc
        finally:
            if generation == self._generation:
                self._inflight = None

        if generation != self._generation:
            logger.debug("Discarding permission fetch started before invalidate()")
        elif self._fetched_at is None or started_at >= self._fetched_at:
            self._codes = codes
            self._fetched_at = started_at
        return codes

    def _stored_state_name(self) -> str:
        if self._codes is None:
            return CacheState.EMPTY.value
        return CacheState.FRESH.value if self._is_fresh() else CacheState.STALE.value
