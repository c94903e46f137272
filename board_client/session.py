from __future__ import annotations

import json
import logging
import os
from typing import Any

from msal_extensions import FilePersistence, FilePersistenceWithDataProtection
from msal_extensions.persistence import PersistenceNotFound
from requests.cookies import RequestsCookieJar

from board_client.models import SessionSnapshot

logger = logging.getLogger(__name__)

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"
CREDENTIAL_COOKIES = (ACCESS_COOKIE, REFRESH_COOKIE)

EMAIL_KEY = "userEmail"
NICKNAME_KEY = "userNickname"
USER_ID_KEY = "userId"
IDENTITY_KEYS = (EMAIL_KEY, NICKNAME_KEY, USER_ID_KEY)


class SessionStore:
    """Key-value facade over the identity file and the credential cookies.

    Identity fields persist across runs in a small JSON document; credentials
    live only in the transport's cookie jar, where the backend puts them.
    """

    def __init__(self, cookies: RequestsCookieJar, persistence: Any):
        self._cookies = cookies
        self._persistence = persistence

    @classmethod
    def from_path(cls, cookies: RequestsCookieJar, path: str) -> "SessionStore":
        return cls(cookies, cls._build_persistence(path))

    @staticmethod
    def _build_persistence(path: str):
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        try:
            return FilePersistenceWithDataProtection(path)
        except Exception:
            # data protection is Windows-only
            return FilePersistence(path)

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return None if value is None else str(value)

    def set(self, **fields: Any) -> None:
        unknown = set(fields) - set(IDENTITY_KEYS)
        if unknown:
            raise KeyError(f"Unknown session fields: {', '.join(sorted(unknown))}")

        document = self._load()
        for key, value in fields.items():
            if value is None:
                document.pop(key, None)
            else:
                document[key] = str(value)
        self._save(document)

    def snapshot(self) -> SessionSnapshot:
        document = self._load()
        return SessionSnapshot(
            email=document.get(EMAIL_KEY),
            nickname=document.get(NICKNAME_KEY),
            user_id=document.get(USER_ID_KEY),
            has_access_token=self._has_cookie(ACCESS_COOKIE),
            has_refresh_token=self._has_cookie(REFRESH_COOKIE),
        )

    def is_signed_in(self) -> bool:
        return self.snapshot().is_signed_in

    def clear(self) -> None:
        self._save({})
        self.discard_credentials()
        logger.info("Session cleared")

    def discard_credentials(self) -> None:
        """Drop the credential cookies only; in-memory, safe on the event loop."""
        for name in CREDENTIAL_COOKIES:
            self._drop_cookie(name)

    def _has_cookie(self, name: str) -> bool:
        return any(cookie.name == name for cookie in self._cookies)

    def _drop_cookie(self, name: str) -> None:
        # the same name may be set for several domains or paths
        for cookie in [cookie for cookie in self._cookies if cookie.name == name]:
            self._cookies.clear(cookie.domain, cookie.path, cookie.name)

    def _load(self) -> dict[str, Any]:
        try:
            raw = self._persistence.load()
        except PersistenceNotFound:
            return {}
        if not raw:
            return {}
        try:
            document = json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable session file at %s", self._persistence.get_location())
            return {}
        return document if isinstance(document, dict) else {}

    def _save(self, document: dict[str, Any]) -> None:
        self._persistence.save(json.dumps(document))
