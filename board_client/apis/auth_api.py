from __future__ import annotations

import asyncio
import logging
from typing import Any

from board_client.client import ApiClient
from board_client.endpoints import AuthEndpoints
from board_client.models import ApiResult
from board_client.refresh import RefreshFailure
from board_client.session import SessionStore

logger = logging.getLogger(__name__)


class AuthApi:
    def __init__(self, client: ApiClient, session_store: SessionStore):
        self._client = client
        self._session_store = session_store

    async def login(self, email: str, password: str) -> ApiResult:
        email = email.strip()
        if not email or not password:
            raise ValueError("Email and password are required")

        outcome = await self._client.post(
            AuthEndpoints.LOGIN,
            {"email": email, "password": password},
            requires_auth=False,
        )
        if outcome.ok:
            await asyncio.to_thread(self._record_identity, email, outcome.result)
            logger.info("Signed in as %s", email)
        return outcome

    async def logout(self) -> ApiResult:
        """Revoke the server-side session, then forget the local one either way."""
        outcome = await self._client.post(AuthEndpoints.LOGOUT)
        if not outcome.ok:
            logger.info("Server logout failed (%s); clearing local session anyway", outcome.error)
        await asyncio.to_thread(self._session_store.clear)
        return outcome

    async def refresh(self) -> bool:
        try:
            await self._client.coordinator.refresh()
        except RefreshFailure as failure:
            logger.info("Manual renewal failed: %s", failure)
            return False
        return True

    def _record_identity(self, email: str, result: Any) -> None:
        data = result.get("data") if isinstance(result, dict) else None
        if not isinstance(data, dict):
            data = {}
        self._session_store.set(
            userEmail=email,
            userNickname=data.get("nickname"),
            userId=data.get("userId", data.get("id")),
        )
