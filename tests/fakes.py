from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable

from requests.cookies import RequestsCookieJar

from board_client.models import RawResponse, RequestDescriptor
from board_client.session import SessionStore

REFRESH_PATH = "/auth/token/refresh"


def json_response(status: int, data: Any = None) -> RawResponse:
    return RawResponse(status=status, headers={"Content-Type": "application/json"}, data=data)


EXPIRED = json_response(401, {"message": "expiredAccessToken"})
INVALID = json_response(401, {"message": "invalidToken"})


class FakeTransport:
    """Routes descriptors by (method, path) to canned responses.

    A route is a RawResponse, an exception to raise, a list played in order
    (the last entry repeats), or a sync/async callable taking the descriptor.
    """

    def __init__(self):
        self.calls: list[RequestDescriptor] = []
        self.cookies = RequestsCookieJar()
        self._routes: dict[tuple[str, str], Any] = {}

    def route(self, method: str, path: str, handler: Any) -> None:
        self._routes[(method, path)] = list(handler) if isinstance(handler, list) else handler

    def calls_to(self, path: str) -> list[RequestDescriptor]:
        return [call for call in self.calls if call.path == path]

    async def send(self, descriptor: RequestDescriptor) -> RawResponse:
        self.calls.append(descriptor)
        handler = self._routes[(descriptor.method, descriptor.path)]
        if isinstance(handler, list):
            handler = handler.pop(0) if len(handler) > 1 else handler[0]
        if callable(handler):
            handler = handler(descriptor)
            if inspect.isawaitable(handler):
                handler = await handler
        # every exchange is a suspension point
        await asyncio.sleep(0)
        if isinstance(handler, BaseException):
            raise handler
        return handler


class CountingSessionStore(SessionStore):
    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.clear_count = 0

    def clear(self) -> None:
        self.clear_count += 1
        super().clear()


class RecordingNotifier:
    def __init__(self):
        self.count = 0

    async def notify_expired(self) -> None:
        self.count += 1


async def wait_until(predicate: Callable[[], bool], attempts: int = 200) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition was never met")
