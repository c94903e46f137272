from __future__ import annotations

import pytest
from msal_extensions import FilePersistence

from board_client.client import ApiClient
from board_client.refresh import RefreshCoordinator
from tests.fakes import REFRESH_PATH, CountingSessionStore, FakeTransport, RecordingNotifier


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def session_store(tmp_path, transport) -> CountingSessionStore:
    store = CountingSessionStore(transport.cookies, FilePersistence(str(tmp_path / "session.json")))
    store.set(userEmail="kim@example.com", userNickname="kim", userId="7")
    transport.cookies.set("accessToken", "access-1", path="/")
    transport.cookies.set("refreshToken", "refresh-1", path="/")
    store.clear_count = 0
    return store


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def coordinator(transport, session_store) -> RefreshCoordinator:
    return RefreshCoordinator(transport, session_store, refresh_path=REFRESH_PATH, timeout_seconds=2)


@pytest.fixture
def client(transport, session_store, coordinator, notifier) -> ApiClient:
    return ApiClient(transport, session_store, coordinator, notifier)
