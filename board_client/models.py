from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import json
from typing import Any, Union

HTTP_METHODS = ("GET", "HEAD", "POST", "PUT", "PATCH", "DELETE")
BODYLESS_METHODS = ("GET", "HEAD")

EXPIRED_TAGS = frozenset({"expiredAccessToken"})
INVALID_TAGS = frozenset({"invalidToken", "invalidAccessToken"})

MESSAGE_SESSION_EXPIRED = "Your login has expired."
MESSAGE_BAD_CREDENTIALS = "The email or password is incorrect."
MESSAGE_REQUEST_FAILED = "The request failed."
MESSAGE_CONNECTION_FAILED = "Could not connect to the server. Please try again shortly."


@dataclass(frozen=True)
class FormBody:
    """Multipart form payload; the transport lets requests write the boundary."""

    fields: dict[str, Any] = field(default_factory=dict)
    files: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RequestDescriptor:
    path: str
    method: str = "GET"
    body: Any = None
    headers: tuple[tuple[str, str], ...] = ()
    requires_auth: bool = False
    timeout: float | None = None

    def __post_init__(self) -> None:
        method = self.method.upper()
        if method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {self.method}")
        object.__setattr__(self, "method", method)
        if isinstance(self.headers, dict):
            object.__setattr__(self, "headers", tuple(self.headers.items()))
        if self.body is not None and not (self.is_form or self.is_binary):
            try:
                json.dumps(self.body)
            except (TypeError, ValueError) as error:
                raise ValueError(f"Request body for {method} {self.path} is not JSON-encodable: {error}") from error

    @property
    def is_form(self) -> bool:
        return isinstance(self.body, FormBody)

    @property
    def is_binary(self) -> bool:
        return isinstance(self.body, (bytes, bytearray))

    @property
    def sends_body(self) -> bool:
        return self.body is not None and self.method not in BODYLESS_METHODS


@dataclass(frozen=True)
class RawResponse:
    status: int
    headers: dict[str, str] = field(default_factory=dict)
    data: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def tag(self) -> str | None:
        """Machine-readable failure tag carried in the JSON body's ``message``."""
        if isinstance(self.data, dict):
            message = self.data.get("message")
            if isinstance(message, str):
                return message
        return None


class AuthFailureReason(str, Enum):
    INVALID = "invalid"
    EXPIRED = "expired"
    CREDENTIALS_WRONG = "credentials-wrong"


@dataclass(frozen=True)
class ApiResult:
    error: dict[str, Any] | None = None
    result: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class Success:
    data: Any = None

    def to_result(self) -> ApiResult:
        return ApiResult(error=None, result=self.data)


@dataclass(frozen=True)
class AuthFailure:
    reason: AuthFailureReason
    status: int = 401
    message: str = MESSAGE_SESSION_EXPIRED

    def to_result(self) -> ApiResult:
        return ApiResult(
            error={"status": self.status, "message": self.message, "reason": self.reason.value},
            result=None,
        )


@dataclass(frozen=True)
class ClientError:
    status: int
    message: str = MESSAGE_REQUEST_FAILED
    data: Any = None

    def to_result(self) -> ApiResult:
        return ApiResult(
            error={"status": self.status, "message": self.message, "data": self.data},
            result=None,
        )


@dataclass(frozen=True)
class TransportError:
    message: str = MESSAGE_CONNECTION_FAILED

    def to_result(self) -> ApiResult:
        return ApiResult(error={"status": 0, "message": self.message}, result=None)


Outcome = Union[Success, AuthFailure, ClientError, TransportError]


@dataclass(frozen=True)
class SessionSnapshot:
    email: str | None = None
    nickname: str | None = None
    user_id: str | None = None
    has_access_token: bool = False
    has_refresh_token: bool = False

    @property
    def is_signed_in(self) -> bool:
        return self.has_access_token or self.has_refresh_token
