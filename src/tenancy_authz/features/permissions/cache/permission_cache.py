"""Permission cache.

In-process cache of permission grants keyed by (user_id, organization_id),
for single-instance deployments or instances that each receive their own
invalidation calls.

Entries never expire on their own; they live until ``invalidate``,
``invalidate_organization`` or ``clear`` removes them. Concurrent misses
on one key share a single resolution (single-flight).
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, List, Optional, Set, Tuple

from ..entities import PermissionGrant

if TYPE_CHECKING:
    from ..services.permission_resolver import PermissionResolver

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, str]


class PermissionCache:
    """Single-flight cache of resolved permission grants.

    Belongs to one event loop. Cache state is only mutated while holding
    ``_lock`` and no lock section awaits anything else, so a check and the
    registration of an in-flight resolution happen atomically. Hits are
    served without taking the lock.
    """

    def __init__(self, resolver: "PermissionResolver"):
        self._resolver = resolver
        self._entries: Dict[CacheKey, PermissionGrant] = {}
        self._in_flight: Dict[CacheKey, asyncio.Task] = {}
        # Strong references; the event loop only keeps weak ones
        self._tasks: Set[asyncio.Task] = set()
        self._lock = asyncio.Lock()
        self._stats = {
            "hits": 0,
            "misses": 0,
            "coalesced": 0,
            "invalidations": 0,
        }

    async def get_or_resolve(self, user_id: str, organization_id: str) -> FrozenSet[str]:
        """Get the permission set of a user in an organization."""
        grant = await self.get_grant(user_id, organization_id)
        return grant.permissions

    async def get_grant(self, user_id: str, organization_id: str) -> PermissionGrant:
        """
        Get the cached grant, resolving it on a miss.

        Cancelling the caller does not cancel a resolution other callers
        may be waiting on; its result is still cached.

        Raises:
            StoreUnavailableError: the resolution failed; nothing is cached
        """
        key = (user_id, organization_id)
        # Hits never suspend
        grant = self._entries.get(key)
        if grant is not None:
            self._stats["hits"] += 1
            return grant

        async with self._lock:
            grant = self._entries.get(key)
            if grant is not None:
                self._stats["hits"] += 1
                return grant

            task = self._in_flight.get(key)
            if task is None:
                self._stats["misses"] += 1
                logger.debug(f"Permission cache miss for user {user_id} in organization {organization_id}")
                task = asyncio.create_task(self._resolve(key))
                self._in_flight[key] = task
                self._tasks.add(task)
                task.add_done_callback(self._on_task_done)
            else:
                self._stats["coalesced"] += 1

        return await asyncio.shield(task)

    async def _resolve(self, key: CacheKey) -> PermissionGrant:
        current = asyncio.current_task()
        try:
            grant = await self._resolver.resolve_grant(*key)
        except BaseException:
            async with self._lock:
                if self._in_flight.get(key) is current:
                    del self._in_flight[key]
            raise

        async with self._lock:
            if self._in_flight.get(key) is current:
                del self._in_flight[key]
                self._entries[key] = grant
            else:
                # Invalidated while resolving
                logger.debug(f"Discarded resolution for {key} invalidated in flight")
        return grant

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled():
            # Mark the exception retrieved when every waiter has gone away
            task.exception()

    async def invalidate(self, user_id: str, organization_id: Optional[str] = None) -> int:
        """
        Drop cached grants of a user.

        Args:
            user_id: User whose grants are dropped
            organization_id: Restrict to one organization; all organizations when None

        Returns:
            Number of keys removed, counting in-flight resolutions
        """
        if organization_id is not None:
            return await self._remove(lambda key: key == (user_id, organization_id))
        return await self._remove(lambda key: key[0] == user_id)

    async def invalidate_organization(self, organization_id: str) -> int:
        """Drop every cached grant of an organization, e.g. after a role edit."""
        return await self._remove(lambda key: key[1] == organization_id)

    async def clear(self) -> int:
        """Drop everything."""
        return await self._remove(lambda key: True)

    async def _remove(self, predicate) -> int:
        async with self._lock:
            keys: List[CacheKey] = [k for k in self._entries if predicate(k)]
            keys.extend(k for k in self._in_flight if predicate(k) and k not in self._entries)
            for key in keys:
                self._entries.pop(key, None)
                self._in_flight.pop(key, None)
            if keys:
                self._stats["invalidations"] += len(keys)
                logger.debug(f"Invalidated {len(keys)} permission cache keys")
            return len(keys)

    def stats(self) -> Dict[str, Any]:
        """Counters plus the current number of cached and in-flight keys."""
        return {
            **self._stats,
            "size": len(self._entries),
            "in_flight": len(self._in_flight),
        }

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
