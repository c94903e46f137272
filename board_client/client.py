from __future__ import annotations

import asyncio
import logging
from typing import Any

from board_client.http import Transport, TransportFailure
from board_client.models import (
    EXPIRED_TAGS,
    INVALID_TAGS,
    MESSAGE_BAD_CREDENTIALS,
    MESSAGE_REQUEST_FAILED,
    MESSAGE_SESSION_EXPIRED,
    ApiResult,
    AuthFailure,
    AuthFailureReason,
    ClientError,
    Outcome,
    RawResponse,
    RequestDescriptor,
    Success,
    TransportError,
)
from board_client.notify import SessionExpiryNotifier
from board_client.refresh import RefreshCoordinator, RefreshFailure
from board_client.session import SessionStore

logger = logging.getLogger(__name__)


class ApiClient:
    """Authenticated request pipeline.

    Every HTTP outcome comes back as data. A 401 on an authenticated call is
    either renewed once through the coordinator and replayed, or ends the
    session: artifacts are cleared and the expiry notifier runs before the
    caller gets its ``AuthFailure``.
    """

    def __init__(
        self,
        transport: Transport,
        session_store: SessionStore,
        coordinator: RefreshCoordinator,
        notifier: SessionExpiryNotifier,
    ):
        self._transport = transport
        self._session_store = session_store
        self._coordinator = coordinator
        self._notifier = notifier

    @property
    def coordinator(self) -> RefreshCoordinator:
        return self._coordinator

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
        requires_auth: bool = False,
        headers: dict[str, str] | None = None,
    ) -> ApiResult:
        descriptor = RequestDescriptor(
            path=path,
            method=method,
            body=body,
            headers=tuple((headers or {}).items()),
            requires_auth=requires_auth,
        )
        outcome = await self.fetch(descriptor)
        return outcome.to_result()

    async def get(self, path: str, **options: Any) -> ApiResult:
        return await self.request(path, method="GET", **options)

    async def post(self, path: str, body: Any = None, **options: Any) -> ApiResult:
        return await self.request(path, method="POST", body=body, **options)

    async def put(self, path: str, body: Any = None, **options: Any) -> ApiResult:
        return await self.request(path, method="PUT", body=body, **options)

    async def patch(self, path: str, body: Any = None, **options: Any) -> ApiResult:
        return await self.request(path, method="PATCH", body=body, **options)

    async def delete(self, path: str, **options: Any) -> ApiResult:
        return await self.request(path, method="DELETE", **options)

    async def fetch(self, descriptor: RequestDescriptor) -> Outcome:
        try:
            return await self._dispatch(descriptor, allow_refresh=True)
        except TransportFailure:
            logger.exception("%s %s could not reach the server", descriptor.method, descriptor.path)
            return TransportError()

    async def _dispatch(self, descriptor: RequestDescriptor, allow_refresh: bool) -> Outcome:
        response = await self._transport.send(descriptor)

        if response.status == 401:
            return await self._handle_unauthorized(descriptor, response, allow_refresh)

        return self._classify(response)

    @staticmethod
    def _classify(response: RawResponse) -> Outcome:
        if response.ok:
            return Success(response.data)

        message = MESSAGE_REQUEST_FAILED
        if isinstance(response.data, dict) and response.data.get("message"):
            message = str(response.data["message"])
        return ClientError(status=response.status, message=message, data=response.data)

    async def _handle_unauthorized(
        self,
        descriptor: RequestDescriptor,
        response: RawResponse,
        allow_refresh: bool,
    ) -> Outcome:
        if not descriptor.requires_auth:
            return AuthFailure(AuthFailureReason.CREDENTIALS_WRONG, message=MESSAGE_BAD_CREDENTIALS)

        tag = response.tag
        if tag in INVALID_TAGS:
            return await self._expire_session(AuthFailureReason.INVALID)
        if tag not in EXPIRED_TAGS or not allow_refresh:
            return await self._expire_session(AuthFailureReason.EXPIRED)

        try:
            await self._coordinator.refresh()
        except RefreshFailure as failure:
            if not failure.is_leader:
                return AuthFailure(AuthFailureReason.EXPIRED)
            return await self._expire_session(
                AuthFailureReason.EXPIRED,
                already_cleared=failure.session_cleared,
            )

        logger.debug("Replaying %s %s after renewal", descriptor.method, descriptor.path)
        return await self._dispatch(descriptor, allow_refresh=False)

    async def _expire_session(self, reason: AuthFailureReason, already_cleared: bool = False) -> AuthFailure:
        logger.warning("Authentication ended (%s); clearing session", reason.value)
        if not already_cleared:
            await asyncio.to_thread(self._session_store.clear)
        try:
            await self._notifier.notify_expired()
        except Exception:
            # the logout already happened; callers only ever see the AuthFailure
            logger.exception("Session-expiry notifier failed")
        return AuthFailure(reason, message=MESSAGE_SESSION_EXPIRED)
