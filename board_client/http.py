from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
import json
import logging
from typing import Any, Protocol

import requests

from board_client.config import AppSettings
from board_client.models import RawResponse, RequestDescriptor

logger = logging.getLogger(__name__)


class TransportFailure(RuntimeError):
    """The exchange never produced an HTTP response (DNS, refused, timeout)."""


class Transport(Protocol):
    async def send(self, descriptor: RequestDescriptor) -> RawResponse: ...


@dataclass(frozen=True)
class OutboundRequest:
    method: str
    path: str
    headers: dict[str, str]
    data: Any = None
    files: dict[str, Any] | None = None
    timeout: float | None = None


def prepare_request(descriptor: RequestDescriptor) -> OutboundRequest:
    headers: dict[str, str] = {"Accept": "application/json"}
    if descriptor.is_binary:
        headers["Content-Type"] = "application/octet-stream"
    elif not descriptor.is_form:
        headers["Content-Type"] = "application/json"
    headers.update(dict(descriptor.headers))
    if descriptor.is_form:
        # requests must write the multipart boundary itself
        headers = {key: value for key, value in headers.items() if key.lower() != "content-type"}

    outbound = OutboundRequest(
        method=descriptor.method,
        path=descriptor.path,
        headers=headers,
        timeout=descriptor.timeout,
    )
    if not descriptor.sends_body:
        return outbound

    if descriptor.is_form:
        # plain fields go in as (None, value) parts so the body is always multipart
        parts: dict[str, Any] = {name: (None, str(value)) for name, value in descriptor.body.fields.items()}
        parts.update(descriptor.body.files)
        return replace(outbound, files=parts)

    if descriptor.is_binary:
        return replace(outbound, data=bytes(descriptor.body))

    return replace(outbound, data=json.dumps(descriptor.body))


class RequestsTransport:
    """Sends descriptors through one ``requests.Session``.

    The session's cookie jar is the ambient credential store: cookies set by
    the backend (login, refresh) ride along on every later call. Blocking I/O
    runs in a worker thread so many logical requests can be in flight on one
    event loop.
    """

    def __init__(self, settings: AppSettings, session: requests.Session | None = None):
        self._settings = settings
        self._session = session or requests.Session()

    @property
    def cookies(self) -> requests.cookies.RequestsCookieJar:
        return self._session.cookies

    async def send(self, descriptor: RequestDescriptor) -> RawResponse:
        outbound = prepare_request(descriptor)
        return await asyncio.to_thread(self._send_blocking, outbound)

    def _send_blocking(self, outbound: OutboundRequest) -> RawResponse:
        url = f"{self._settings.base_url}{outbound.path}"
        try:
            response = self._session.request(
                outbound.method,
                url,
                headers=outbound.headers,
                data=outbound.data,
                files=outbound.files,
                timeout=outbound.timeout or self._settings.timeout_seconds,
            )
        except requests.RequestException as error:
            raise TransportFailure(f"{outbound.method} {url} failed: {error}") from error

        logger.debug("%s %s -> %s", outbound.method, outbound.path, response.status_code)
        return RawResponse(
            status=response.status_code,
            headers=dict(response.headers),
            data=self._parse_body(response),
        )

    @staticmethod
    def _parse_body(response: requests.Response) -> Any:
        content_type = response.headers.get("Content-Type", "")
        if "application/json" not in content_type or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            logger.warning("Response declared JSON but could not be parsed: %s", response.text[:200])
            return None

    def close(self) -> None:
        self._session.close()
