"""Identity provider interface."""

from typing import Protocol


class IdentityProvider(Protocol):
    """Source of the viewer's bearer credential.

    The engine never authenticates anyone itself; it only asks for the
    current token and refuses to write without one.
    """

    async def get_token(self) -> str | None:
        """Return the current bearer token, or None when signed out."""
        ...
