from __future__ import annotations

from urllib.parse import urlencode


class AuthEndpoints:
    LOGIN = "/auth"
    LOGOUT = "/auth/token"
    REFRESH = "/auth/token/refresh"


class UserEndpoints:
    REGISTER = "/users"
    UPDATE_PASSWORD = "/users/password"

    @staticmethod
    def check_email(email: str) -> str:
        return "/users/email?" + urlencode({"email": email})

    @staticmethod
    def check_nickname(nickname: str) -> str:
        return "/users/nickname?" + urlencode({"nickname": nickname})

    @staticmethod
    def user(user_id: int | str) -> str:
        return f"/users/{user_id}"


class PostEndpoints:
    TOP10 = "/posts/top10"
    CREATE = "/posts"
    STATUSES = "/posts/statuses"

    @staticmethod
    def list(cursor: str | int | None = None, size: int = 10, period: str | None = None) -> str:
        params: dict[str, object] = {"size": size}
        if cursor:
            params["cursor"] = cursor
        if period:
            params["period"] = period
        return "/posts?" + urlencode(params)

    @staticmethod
    def detail(post_id: int | str) -> str:
        return f"/posts/{post_id}"

    @staticmethod
    def deactivate(post_id: int | str) -> str:
        return f"/posts/{post_id}/deactivation"


class CommentEndpoints:
    @staticmethod
    def for_post(post_id: int | str) -> str:
        return f"/posts/{post_id}/comments"

    @staticmethod
    def comment(comment_id: int | str) -> str:
        return f"/comments/{comment_id}"

    @staticmethod
    def deactivate(comment_id: int | str) -> str:
        return f"/comments/{comment_id}/deactivation"


TERMS_OF_SERVICE = "/tos"
