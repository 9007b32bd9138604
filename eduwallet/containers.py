from dependency_injector import containers, providers

from eduwallet.config import Settings
from eduwallet.providers.identity import SessionIdentityProvider
from eduwallet.providers.storage.factory import build_key_value_store
from eduwallet.repositories.wallet_repository import WalletRepository
from eduwallet.services.wallet_store import WalletStore


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(Settings)


class RepositoryModule(containers.DeclarativeContainer):
    """Storage and repositories."""

    config = providers.DependenciesContainer()

    storage = providers.Singleton(build_key_value_store, settings=config.config)
    wallet_repository = providers.Singleton(
        WalletRepository,
        storage=storage,
        key_prefix=config.config.provided.WALLET_KEY_PREFIX,
    )


class ServiceModule(containers.DeclarativeContainer):
    """Service layer dependencies."""

    config = providers.DependenciesContainer()
    repositories = providers.DependenciesContainer()

    identity_provider = providers.Singleton(SessionIdentityProvider)
    wallet_store = providers.Singleton(
        WalletStore,
        repository=repositories.wallet_repository,
        identity_provider=identity_provider,
        settings=config.config,
    )


class Container(containers.DeclarativeContainer):
    """Application container."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "eduwallet.routers.health_router",
            "eduwallet.routers.session_router",
            "eduwallet.routers.wallet_router",
        ],
    )

    config = providers.Container(ConfigModule)
    repositories = providers.Container(RepositoryModule, config=config)
    services = providers.Container(
        ServiceModule, config=config, repositories=repositories
    )
