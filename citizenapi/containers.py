from dependency_injector import containers, providers

from citizenapi.services.point_service import PointService
from citizenapi.services.notification_service import NotificationService
from citizenapi.services.preference_service import PreferenceService
from citizenapi.services.user_service import UserService
from citizenapi.services.reward_service import RewardService
from citizenapi.config import Settings
from citizenapi.utils.locks import user_locks


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(Settings)


class ServiceModule(containers.DeclarativeContainer):
    """Service layer factories.

    The DB session is not provided here: callers pass the request-scoped
    session as ``db=`` (see ``citizenapi.dependencies``).
    """

    config = providers.DependenciesContainer()

    locks = providers.Object(user_locks)

    point_service = providers.Factory(PointService, settings=config.config, locks=locks)
    notification_service = providers.Factory(NotificationService, settings=config.config)
    preference_service = providers.Factory(PreferenceService)
    user_service = providers.Factory(UserService, settings=config.config, locks=locks)
    reward_service = providers.Factory(RewardService, settings=config.config, locks=locks)


class Container(containers.DeclarativeContainer):
    """Application container."""

    wiring_config = containers.WiringConfiguration(
        modules=["citizenapi.dependencies"],
    )

    config = providers.Container(ConfigModule)
    services = providers.Container(ServiceModule, config=config)
