"""Single-flight renewal of the access credential.

One coordinator is owned per client. The first caller that needs a renewal
becomes the leader and issues the only refresh call; callers arriving while
it is in flight queue a future and share the leader's outcome. The queue is
drained, in arrival order, before the state drops back to ``IDLE``, and the
state only drops back once the renewal call itself has returned.
"""

from __future__ import annotations

import asyncio
import functools
from collections import deque
from enum import Enum
import logging
from typing import Any, Awaitable, Callable, TypeVar

from board_client.endpoints import AuthEndpoints
from board_client.http import Transport, TransportFailure
from board_client.models import INVALID_TAGS, RawResponse, RequestDescriptor
from board_client.session import SessionStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RefreshState(str, Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"


class RefreshFailure(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        tag: str | None = None,
        session_cleared: bool = False,
        is_leader: bool = True,
    ):
        super().__init__(message)
        self.status = status
        self.tag = tag
        self.session_cleared = session_cleared
        self.is_leader = is_leader

    def for_follower(self) -> "RefreshFailure":
        return RefreshFailure(
            str(self),
            status=self.status,
            tag=self.tag,
            session_cleared=self.session_cleared,
            is_leader=False,
        )


class RefreshCoordinator:
    def __init__(
        self,
        transport: Transport,
        session_store: SessionStore,
        refresh_path: str = AuthEndpoints.REFRESH,
        timeout_seconds: float = 15.0,
    ):
        self._transport = transport
        self._session_store = session_store
        self._refresh_path = refresh_path
        self._timeout_seconds = timeout_seconds
        self._state = RefreshState.IDLE
        self._waiters: deque[asyncio.Future[Any]] = deque()
        self.renewals = 0

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def pending(self) -> int:
        return len(self._waiters)

    async def refresh(self) -> RawResponse:
        """Renew the access credential, sharing an in-flight renewal if any.

        Raises :class:`RefreshFailure` when the renewal is rejected, cannot
        reach the server, or exceeds the configured timeout.
        """
        return await self.run_exclusively(self._renew)

    async def run_exclusively(self, operation: Callable[[], Awaitable[T]]) -> T:
        if self._state is RefreshState.REFRESHING:
            return await self._follow()
        return await self._lead(operation)

    async def _follow(self) -> Any:
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        logger.debug("Renewal in flight; %d caller(s) waiting", len(self._waiters))
        return await waiter

    async def _lead(self, operation: Callable[[], Awaitable[T]]) -> T:
        self._state = RefreshState.REFRESHING
        renewal = asyncio.ensure_future(operation())
        try:
            # shielded: a timed-out or cancelled leader must not orphan the call
            result = await asyncio.wait_for(asyncio.shield(renewal), self._timeout_seconds)
        except asyncio.CancelledError:
            self._abandon(renewal, RefreshFailure("Token renewal was cancelled"), discard_credentials=False)
            raise
        except asyncio.TimeoutError as error:
            failure = RefreshFailure(f"Token renewal timed out after {self._timeout_seconds:g}s")
            self._abandon(renewal, failure, discard_credentials=True)
            raise failure from error
        except RefreshFailure as failure:
            self._settle(failure=failure)
            raise
        except Exception as error:
            failure = RefreshFailure(f"Token renewal failed: {error}")
            self._settle(failure=failure)
            raise failure from error
        self._settle(result=result)
        return result

    def _abandon(self, renewal: asyncio.Future[Any], failure: RefreshFailure, discard_credentials: bool) -> None:
        """Fail current waiters now but stay REFRESHING until the call returns.

        Callers arriving in the meantime queue up and share the same failure
        once the abandoned call settles, so no second renewal goes out while
        the first is still on the wire.
        """
        self._drain(failure=failure)
        finish = functools.partial(self._finish_abandoned, failure=failure, discard_credentials=discard_credentials)
        if renewal.done():
            finish(renewal)
            return
        logger.warning("%s; holding further renewals until the call returns", failure)
        renewal.add_done_callback(finish)

    def _finish_abandoned(
        self,
        renewal: asyncio.Future[Any],
        failure: RefreshFailure,
        discard_credentials: bool,
    ) -> None:
        succeeded = not renewal.cancelled() and renewal.exception() is None
        if succeeded and discard_credentials:
            # the caller already ended the session; late Set-Cookie must not revive it
            self._session_store.discard_credentials()
            logger.info("Discarded credentials from a renewal that returned after its timeout")
        self._settle(failure=failure)

    def _drain(self, result: Any = None, failure: RefreshFailure | None = None) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if waiter.done():
                continue
            if failure is None:
                waiter.set_result(result)
            else:
                waiter.set_exception(failure.for_follower())

    def _settle(self, result: Any = None, failure: RefreshFailure | None = None) -> None:
        self._drain(result=result, failure=failure)
        self._state = RefreshState.IDLE

    async def _renew(self) -> RawResponse:
        self.renewals += 1
        logger.info("Access token expired; renewing via %s", self._refresh_path)
        descriptor = RequestDescriptor(
            self._refresh_path,
            "POST",
            requires_auth=True,
            timeout=self._timeout_seconds,
        )
        try:
            response = await self._transport.send(descriptor)
        except TransportFailure as error:
            raise RefreshFailure(f"Token renewal could not reach the server: {error}") from error

        if response.ok:
            logger.info("Access token renewed")
            return response

        tag = response.tag
        session_cleared = False
        if tag in INVALID_TAGS:
            await asyncio.to_thread(self._session_store.clear)
            session_cleared = True
        logger.info("Token renewal rejected: HTTP %s (%s)", response.status, tag or "no tag")
        raise RefreshFailure(
            f"Token renewal rejected with HTTP {response.status}",
            status=response.status,
            tag=tag,
            session_cleared=session_cleared,
        )
