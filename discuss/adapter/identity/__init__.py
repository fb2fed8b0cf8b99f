"""Identity adapters."""

from .provider import SettingsIdentityProvider, StaticIdentityProvider

__all__ = ["SettingsIdentityProvider", "StaticIdentityProvider"]
