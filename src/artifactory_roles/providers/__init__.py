"""Provider integrations package."""

from artifactory_roles.config import Settings, get_settings
from artifactory_roles.providers.artifactory import ArtifactoryProvider
from artifactory_roles.providers.artifactory_v1 import ArtifactoryV1Provider
from artifactory_roles.providers.artifactory_v2 import ArtifactoryV2Provider
from artifactory_roles.providers.base import AuthorizationProvider

PROVIDERS: dict[str, type[ArtifactoryProvider]] = {
    "v1": ArtifactoryV1Provider,
    "v2": ArtifactoryV2Provider,
}


def create_provider(settings: Settings | None = None) -> ArtifactoryProvider:
    """Create the Artifactory provider for the configured API version.

    Args:
        settings: Application settings, the cached settings are used otherwise

    Returns:
        Provider implementation instance
    """
    settings = settings or get_settings()
    provider_class = PROVIDERS.get(settings.artifactory_api_version)
    if provider_class is None:
        raise ValueError(f"Unknown Artifactory API version: {settings.artifactory_api_version}")
    return provider_class.from_settings(settings)


__all__ = [
    "ArtifactoryProvider",
    "ArtifactoryV1Provider",
    "ArtifactoryV2Provider",
    "AuthorizationProvider",
    "create_provider",
]
