from __future__ import annotations

from typing import Optional

from gashub.config import get_config


class ConfigSession:
    """AuthSession backed by `current_user_id` from the app config.

    Sign-in itself belongs to the identity provider; this only reports who is
    signed in so new orders can be stamped with the right account.
    """

    def __init__(self, user_id: Optional[str] = None) -> None:
        self._user_id = user_id if user_id is not None else get_config().current_user_id

    def current_user_id(self) -> Optional[str]:
        return self._user_id or None

    def sign_in(self, user_id: str) -> None:
        self._user_id = user_id

    def sign_out(self) -> None:
        self._user_id = None
