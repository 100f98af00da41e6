"""Per-workflow mutual exclusion: at most one in-flight attempt per deployment id.

A second attempt is rejected with AlreadyInProgressError, never queued.

- InMemoryWorkflowLock: in-flight key set, single process
- RedisWorkflowLock:    SET NX lease with TTL, shared across API workers.
                        The lease is renewed while held, so a confirmation
                        wait longer than the TTL never frees the key early.
"""

import asyncio
import contextlib
import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol

import redis.asyncio as aioredis

from src.lp_common.errors import AlreadyInProgressError

logger = logging.getLogger(__name__)

# Delete the lease only if this holder still owns it.
_RELEASE_LUA = """
if redis.call("GET", KEYS[1]) == ARGV[1] then
    return redis.call("DEL", KEYS[1])
end
return 0
"""

# Push the expiry out only if this holder still owns it.
_RENEW_LUA = """
if redis.call("GET", KEYS[1]) == ARGV[1] then
    return redis.call("EXPIRE", KEYS[1], ARGV[2])
end
return 0
"""


class WorkflowLockProtocol(Protocol):
    def hold(self, key: str) -> AbstractAsyncContextManager[None]: ...


class InMemoryWorkflowLock:
    def __init__(self) -> None:
        self._held: set[str] = set()

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        # check-and-add has no await in between, so it is atomic on the loop
        if key in self._held:
            raise AlreadyInProgressError(key)
        self._held.add(key)
        try:
            yield
        finally:
            self._held.discard(key)


class RedisWorkflowLock:
    def __init__(
        self, redis: aioredis.Redis, ttl_s: int, renew_every_s: float | None = None
    ) -> None:
        self._redis = redis
        self._ttl_s = ttl_s
        self._renew_every_s = renew_every_s if renew_every_s is not None else ttl_s / 3

    async def _keep_alive(self, name: str, token: str) -> None:
        while True:
            await asyncio.sleep(self._renew_every_s)
            try:
                renewed = await self._redis.eval(_RENEW_LUA, 1, name, token, self._ttl_s)
            except aioredis.RedisError as exc:
                logger.warning("Workflow lease renewal failed: key=%s err=%s", name, exc)
                continue
            if not renewed:
                logger.error("Workflow lease lost while held: key=%s", name)
                return

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        name = f"lock:deploy:{key}"
        token = uuid.uuid4().hex
        acquired = await self._redis.set(name, token, nx=True, ex=self._ttl_s)
        if not acquired:
            raise AlreadyInProgressError(key)
        renewer = asyncio.create_task(self._keep_alive(name, token))
        try:
            yield
        finally:
            renewer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await renewer
            released = await self._redis.eval(_RELEASE_LUA, 1, name, token)
            if not released:
                logger.warning("Workflow lease expired before release: key=%s", key)
