from __future__ import annotations

from board_client.apis import AuthApi, UsersApi
from board_client.client import ApiClient
from board_client.config import AppSettings
from board_client.http import RequestsTransport, Transport
from board_client.notify import LoggingExpiryNotifier, SessionExpiryNotifier
from board_client.refresh import RefreshCoordinator
from board_client.session import SessionStore


class BoardService:
    def __init__(
        self,
        client: ApiClient,
        session: SessionStore,
        auth: AuthApi,
        users: UsersApi,
    ):
        self.client = client
        self.session = session
        self.auth = auth
        self.users = users

    def auth_state(self):
        return self.session.snapshot()


def build_client(
    settings: AppSettings | None = None,
    notifier: SessionExpiryNotifier | None = None,
    transport: Transport | None = None,
    session_store: SessionStore | None = None,
) -> BoardService:
    settings = settings or AppSettings.from_env()
    if transport is None:
        transport = RequestsTransport(settings)
    if session_store is None:
        if not isinstance(transport, RequestsTransport):
            raise ValueError("A session_store is required when a custom transport is supplied")
        session_store = SessionStore.from_path(transport.cookies, settings.session_path)

    coordinator = RefreshCoordinator(
        transport,
        session_store,
        refresh_path=settings.refresh_path,
        timeout_seconds=settings.refresh_timeout_seconds,
    )
    client = ApiClient(
        transport,
        session_store,
        coordinator,
        notifier or LoggingExpiryNotifier(),
    )
    return BoardService(
        client=client,
        session=session_store,
        auth=AuthApi(client, session_store),
        users=UsersApi(client, session_store),
    )
