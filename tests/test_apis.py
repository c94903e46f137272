from __future__ import annotations

import pytest

from board_client.apis import AuthApi, UsersApi
from board_client.endpoints import CommentEndpoints, PostEndpoints, UserEndpoints
from board_client.models import FormBody
from tests.fakes import EXPIRED, REFRESH_PATH, json_response


@pytest.fixture
def auth(client, session_store) -> AuthApi:
    return AuthApi(client, session_store)


@pytest.fixture
def users(client, session_store) -> UsersApi:
    return UsersApi(client, session_store)


@pytest.mark.asyncio
async def test_login_records_identity(auth, transport, session_store):
    session_store.clear()
    transport.route(
        "POST",
        "/auth",
        json_response(200, {"message": "loginSuccess", "data": {"userId": 12, "nickname": "lee"}}),
    )

    outcome = await auth.login(" lee@example.com ", "pw")

    assert outcome.ok
    snapshot = session_store.snapshot()
    assert (snapshot.email, snapshot.nickname, snapshot.user_id) == ("lee@example.com", "lee", "12")
    (call,) = transport.calls
    assert call.body == {"email": "lee@example.com", "password": "pw"}
    assert not call.requires_auth


@pytest.mark.asyncio
async def test_wrong_password_keeps_the_existing_session(auth, transport, session_store):
    transport.route("POST", "/auth", json_response(401, {"message": "invalidCredentials"}))

    outcome = await auth.login("kim@example.com", "nope")

    assert outcome.error["status"] == 401
    assert outcome.error["reason"] == "credentials-wrong"
    assert session_store.clear_count == 0
    assert session_store.get("userId") == "7"


@pytest.mark.asyncio
async def test_login_requires_both_fields(auth):
    with pytest.raises(ValueError):
        await auth.login("  ", "pw")


@pytest.mark.asyncio
async def test_logout_clears_locally_even_if_the_server_refuses(auth, transport, session_store):
    transport.route("POST", "/auth/token", json_response(500))

    outcome = await auth.logout()

    assert not outcome.ok
    assert session_store.clear_count == 1
    assert not session_store.is_signed_in()


@pytest.mark.asyncio
async def test_manual_refresh_reports_the_outcome(auth, transport):
    transport.route("POST", REFRESH_PATH, [json_response(200), json_response(403)])

    assert await auth.refresh() is True
    assert await auth.refresh() is False


@pytest.mark.asyncio
async def test_update_profile_sends_a_form_and_stores_the_nickname(users, transport, session_store):
    transport.route("PATCH", "/users/7", json_response(200, {"data": {"profileImage": "/img/1.png"}}))
    image = ("me.png", b"png", "image/png")

    outcome = await users.update_profile(nickname="kimchi", profile_image=image)

    assert outcome.ok
    (call,) = transport.calls
    assert call.body == FormBody({"nickname": "kimchi"}, {"profileImage": image})
    assert session_store.get("userNickname") == "kimchi"


@pytest.mark.asyncio
async def test_update_profile_survives_an_expired_token(users, transport, session_store):
    transport.route("PATCH", "/users/7", [EXPIRED, json_response(200, {"data": {}})])
    transport.route("POST", REFRESH_PATH, json_response(200))

    outcome = await users.update_profile(nickname="kimchi")

    assert outcome.ok
    assert len(transport.calls_to(REFRESH_PATH)) == 1
    assert session_store.get("userNickname") == "kimchi"


@pytest.mark.asyncio
async def test_update_profile_needs_something_to_change(users):
    with pytest.raises(ValueError):
        await users.update_profile()


@pytest.mark.asyncio
async def test_password_change_signs_out(users, transport, session_store):
    transport.route("PATCH", "/users/password", json_response(200, {"data": None}))

    outcome = await users.update_password("old", "new")

    assert outcome.ok
    assert session_store.clear_count == 1


@pytest.mark.asyncio
async def test_failed_account_deletion_keeps_the_session(users, transport, session_store):
    transport.route("DELETE", "/users/7", json_response(400, {"message": "passwordMismatch"}))

    outcome = await users.delete_account("wrong")

    assert outcome.error["message"] == "passwordMismatch"
    assert session_store.clear_count == 0


@pytest.mark.asyncio
async def test_account_deletion_clears_the_session(users, transport, session_store):
    transport.route("DELETE", "/users/7", json_response(204))

    outcome = await users.delete_account("pw")

    assert outcome.ok
    assert transport.calls[0].body == {"password": "pw"}
    assert session_store.clear_count == 1


@pytest.mark.asyncio
async def test_user_id_is_required_for_self_service_calls(users, session_store):
    session_store.clear()

    with pytest.raises(ValueError):
        await users.get_user()


def test_query_values_are_encoded():
    assert UserEndpoints.check_email("a+b@example.com") == "/users/email?email=a%2Bb%40example.com"
    assert PostEndpoints.list() == "/posts?size=10"
    assert PostEndpoints.list(cursor=41, size=5, period="week") == "/posts?size=5&cursor=41&period=week"
    assert CommentEndpoints.deactivate(3) == "/comments/3/deactivation"
