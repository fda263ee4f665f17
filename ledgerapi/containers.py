from dependency_injector import containers, providers

from ledgerapi.config import get_settings
from ledgerapi.database.connection import create_db_engine, create_session_factory


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(get_settings)


class DatabaseModule(containers.DeclarativeContainer):
    """Connection pool and session factory, created on first use."""

    config = providers.DependenciesContainer()

    engine = providers.Singleton(create_db_engine, settings=config.config)
    session_factory = providers.Singleton(create_session_factory, engine=engine)


class Container(containers.DeclarativeContainer):
    """Application container."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "ledgerapi.deps",
        ],
    )

    config = providers.Container(ConfigModule)
    database = providers.Container(DatabaseModule, config=config)
