from __future__ import annotations

import asyncio
from typing import Any

from board_client.client import ApiClient
from board_client.endpoints import UserEndpoints
from board_client.models import ApiResult, FormBody
from board_client.session import USER_ID_KEY, SessionStore


class UsersApi:
    def __init__(self, client: ApiClient, session_store: SessionStore):
        self._client = client
        self._session_store = session_store

    async def register(self, email: str, password: str, nickname: str, profile_image: Any = None) -> ApiResult:
        fields = {"email": email, "password": password, "nickname": nickname}
        files = {"profileImage": profile_image} if profile_image is not None else {}
        return await self._client.post(UserEndpoints.REGISTER, FormBody(fields, files))

    async def check_email(self, email: str) -> ApiResult:
        return await self._client.get(UserEndpoints.check_email(email))

    async def check_nickname(self, nickname: str) -> ApiResult:
        return await self._client.get(UserEndpoints.check_nickname(nickname))

    async def get_user(self, user_id: int | str | None = None) -> ApiResult:
        return await self._client.get(UserEndpoints.user(self._resolve_user_id(user_id)), requires_auth=True)

    async def update_profile(self, nickname: str | None = None, profile_image: Any = None) -> ApiResult:
        if nickname is None and profile_image is None:
            raise ValueError("Nothing to update: provide a nickname or a profile image")

        fields = {"nickname": nickname} if nickname is not None else {}
        files = {"profileImage": profile_image} if profile_image is not None else {}
        outcome = await self._client.patch(
            UserEndpoints.user(self._resolve_user_id(None)),
            FormBody(fields, files),
            requires_auth=True,
        )
        if outcome.ok and nickname is not None:
            await asyncio.to_thread(self._session_store.set, userNickname=nickname)
        return outcome

    async def update_password(self, current_password: str, new_password: str) -> ApiResult:
        outcome = await self._client.patch(
            UserEndpoints.UPDATE_PASSWORD,
            {"currentPassword": current_password, "newPassword": new_password},
            requires_auth=True,
        )
        if outcome.ok:
            # the server revokes credentials on password change
            await asyncio.to_thread(self._session_store.clear)
        return outcome

    async def delete_account(self, password: str) -> ApiResult:
        outcome = await self._client.delete(
            UserEndpoints.user(self._resolve_user_id(None)),
            body={"password": password},
            requires_auth=True,
        )
        if outcome.ok:
            await asyncio.to_thread(self._session_store.clear)
        return outcome

    def _resolve_user_id(self, user_id: int | str | None) -> str:
        if user_id is not None:
            return str(user_id)
        stored = self._session_store.get(USER_ID_KEY)
        if not stored:
            raise ValueError("No signed-in user id is stored")
        return stored
