"""Identity infrastructure providers."""

from dishka import Scope, provide

from discuss.adapter.identity import SettingsIdentityProvider
from discuss.config import AuthSettings
from discuss.domain.repository import IdentityProvider
from discuss.util.di.base import ProviderBase


class IdentityComponentProvider(ProviderBase):
    """Identity component base."""

    __mock_component__ = "identity"


class ProdIdentityProvider(IdentityComponentProvider):
    """Production identity provider reading the configured token."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_identity(self, settings: AuthSettings) -> IdentityProvider:
        """Provide identity provider."""
        return SettingsIdentityProvider(settings)
