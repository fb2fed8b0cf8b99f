"""Identity providers.

The engine only needs the viewer's bearer token; signing in happens
elsewhere.
"""

import logfire

from discuss.config import AuthSettings
from discuss.domain.repository import IdentityProvider


class SettingsIdentityProvider(IdentityProvider):
    """Reads a fixed token from ``auth.token`` in the settings."""

    def __init__(self, settings: AuthSettings) -> None:
        self.settings = settings

    async def get_token(self) -> str | None:
        return self.settings.token or None


class StaticIdentityProvider(IdentityProvider):
    """Settable token holder for tests and embedding applications."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    async def get_token(self) -> str | None:
        return self._token

    def sign_in(self, token: str) -> None:
        self._token = token
        logfire.info("Identity token set")

    def sign_out(self) -> None:
        self._token = None
        logfire.info("Identity token cleared")
