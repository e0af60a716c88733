from typing import Optional


class SessionContext:
    """In-memory credentials for one client; the pipeline reads and rotates them."""

    def __init__(self, access_token: Optional[str] = None, refresh_token: Optional[str] = None):
        self._access_token = access_token
        self._refresh_token = refresh_token
        self.user: Optional[dict] = None

    def get_access_token(self) -> Optional[str]:
        return self._access_token

    def get_refresh_token(self) -> Optional[str]:
        return self._refresh_token

    def set_token_pair(self, access_token: str, refresh_token: str) -> None:
        self._access_token = access_token
        self._refresh_token = refresh_token

    def clear(self) -> None:
        self._access_token = None
        self._refresh_token = None
        self.user = None

    @property
    def is_authenticated(self) -> bool:
        return self._access_token is not None
