from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from nicegui import app

from services.app_config import get_app_config


@dataclass(frozen=True)
class User:
    username: str
    display_name: str


@dataclass(frozen=True)
class ApiSession:
    """Bearer credential handed to the API client. Built once per page."""

    token: str = ""

    @property
    def has_token(self) -> bool:
        return bool(self.token and self.token.strip())


def _token_key() -> str:
    return get_app_config().auth.token_storage_key


def get_user() -> Optional[User]:
    data = app.storage.user.get("user")
    if not data:
        return None
    return User(
        username=str(data.get("username", "") or ""),
        display_name=str(data.get("display_name", "") or ""),
    )


def get_session() -> ApiSession:
    return ApiSession(token=str(app.storage.user.get(_token_key(), "") or ""))


def is_logged_in() -> bool:
    return get_session().has_token


def login(username: str, token: str, display_name: str = "") -> None:
    app.storage.user[_token_key()] = str(token or "")
    app.storage.user["user"] = {
        "username": str(username or ""),
        "display_name": str(display_name or ""),
    }


def logout() -> None:
    app.storage.user.pop(_token_key(), None)
    app.storage.user.pop("user", None)
