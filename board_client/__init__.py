from .client import ApiClient
from .config import AppSettings, ConfigurationError
from .models import (
    ApiResult,
    AuthFailure,
    AuthFailureReason,
    ClientError,
    FormBody,
    RequestDescriptor,
    Success,
    TransportError,
)
from .refresh import RefreshCoordinator, RefreshState
from .services import BoardService, build_client

__all__ = [
    "ApiClient",
    "ApiResult",
    "AppSettings",
    "AuthFailure",
    "AuthFailureReason",
    "BoardService",
    "ClientError",
    "ConfigurationError",
    "FormBody",
    "RefreshCoordinator",
    "RefreshState",
    "RequestDescriptor",
    "Success",
    "TransportError",
    "build_client",
]
