"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from discuss.config import ApiSettings, AuthSettings, CommentSettings, Settings
from discuss.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file automatically.
    """

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()

    @provide(scope=Scope.APP)
    def provide_api_settings(self, settings: Settings) -> ApiSettings:
        """Provide comment store API settings."""
        return settings.api

    @provide(scope=Scope.APP)
    def provide_comment_settings(self, settings: Settings) -> CommentSettings:
        """Provide comment engine settings."""
        return settings.comments

    @provide(scope=Scope.APP)
    def provide_auth_settings(self, settings: Settings) -> AuthSettings:
        """Provide auth settings."""
        return settings.auth
