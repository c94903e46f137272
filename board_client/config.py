from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path

from board_client.endpoints import AuthEndpoints


class ConfigurationError(ValueError):
    pass


@dataclass(frozen=True)
class AppSettings:
    base_url: str
    refresh_path: str
    timeout_seconds: float
    refresh_timeout_seconds: float
    session_path: str
    log_level: str

    @staticmethod
    def from_env() -> "AppSettings":
        _load_dotenv_if_present()

        base_url = os.getenv("BOARD_BASE_URL", "http://localhost:8080").strip().rstrip("/")
        refresh_path = os.getenv("BOARD_REFRESH_PATH", AuthEndpoints.REFRESH).strip()

        timeout_seconds = _parse_float("BOARD_TIMEOUT_SECONDS", "10")
        refresh_timeout_seconds = _parse_float("BOARD_REFRESH_TIMEOUT_SECONDS", "15")

        default_session_path = os.path.join(
            os.getenv("LOCALAPPDATA", os.getcwd()),
            "BoardClient",
            "session.json",
        )
        session_path = os.getenv("BOARD_SESSION_PATH", default_session_path).strip()
        log_level = os.getenv("BOARD_LOG_LEVEL", "INFO").strip().upper()

        settings = AppSettings(
            base_url=base_url,
            refresh_path=refresh_path,
            timeout_seconds=timeout_seconds,
            refresh_timeout_seconds=refresh_timeout_seconds,
            session_path=session_path,
            log_level=log_level,
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigurationError("BOARD_BASE_URL must be an http(s) URL")

        if not self.refresh_path.startswith("/"):
            raise ConfigurationError("Endpoint paths must start with '/': BOARD_REFRESH_PATH")

        if self.timeout_seconds <= 0:
            raise ConfigurationError("BOARD_TIMEOUT_SECONDS must be greater than 0")

        if self.refresh_timeout_seconds <= 0:
            raise ConfigurationError("BOARD_REFRESH_TIMEOUT_SECONDS must be greater than 0")

        if not self.session_path:
            raise ConfigurationError("BOARD_SESSION_PATH must not be empty")

        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigurationError(
                "BOARD_LOG_LEVEL must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL"
            )


def _parse_float(name: str, default: str) -> float:
    raw = os.getenv(name, default).strip()
    try:
        return float(raw)
    except ValueError as error:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from error


def _load_dotenv_if_present() -> None:
    """Copy ``KEY=value`` pairs from the env file into ``os.environ``.

    ``BOARD_ENV_FILE`` names the file explicitly and must exist; otherwise
    ``.env`` in the working directory is read when there is one. Variables
    already set in the environment always win.
    """
    explicit = os.getenv("BOARD_ENV_FILE", "").strip()
    if explicit:
        path = Path(explicit).expanduser()
        if not path.is_file():
            raise ConfigurationError(f"BOARD_ENV_FILE points at a missing file: {path}")
    else:
        path = Path.cwd() / ".env"
        if not path.is_file():
            return

    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as error:
        raise ConfigurationError(f"Could not read {path}: {error}") from error

    for line in lines:
        pair = _parse_env_line(line)
        if pair is not None and pair[0] not in os.environ:
            os.environ[pair[0]] = pair[1]


def _parse_env_line(line: str) -> tuple[str, str] | None:
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    key, separator, value = line.removeprefix("export ").partition("=")
    key = key.strip()
    if not separator or not key.startswith("BOARD_"):
        return None
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return key, value
