from __future__ import annotations

import typing as t
from pathlib import Path

import alembic.config
import sqlalchemy
import sqlalchemy.event
import sqlalchemy.orm
import sqlalchemy.pool
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Container, Factory, Object, Provider, Resource, Singleton
from sqlalchemy.engine.url import URL as DSN

import tally.lib.json as json
from tally.lib import NotReady

from ..config.secrets import PostgresqlSecrets
from ..config.storage import PersistentSettings, StorageSettings
from ..provider import LoggingProvider


def create_dsn(config: PersistentSettings, secrets: PostgresqlSecrets, state_path: Path) -> DSN:
    if config.sqlite is not None:
        if config.sqlite.path is None:
            return DSN.create(config.sqlite.driver)
        # relative database paths live in the XDG state directory
        return DSN.create(config.sqlite.driver, database=str(state_path / config.sqlite.path))

    assert config.postgresql is not None
    return DSN.create(
        config.postgresql.driver,
        port=config.postgresql.port,
        host=str(config.postgresql.host) if config.postgresql.host else None,
        username=secrets.username.get_secret_value() if secrets.username else None,
        password=secrets.password.get_secret_value() if secrets.password else None,
        database=config.postgresql.database,
    )


def provide_alembic_conf(
    migration_path: Path,
    config: PersistentSettings,
    secrets: PostgresqlSecrets,
    state_path: Path,
    root: Path | NotReady,
) -> alembic.config.Config:
    if isinstance(root, NotReady):
        raise RuntimeError("root path is unavailable")

    dsn = create_dsn(config, secrets, state_path)
    escaped_str = dsn.render_as_string(hide_password=False).replace("%", "%%")

    ac = alembic.config.Config()
    ac.set_main_option("script_location", str(root / migration_path))
    ac.set_section_option("alembic", "sqlalchemy.url", escaped_str)
    ac.set_section_option("alembic", "file_template", "%%(year)d-%%(month).2d-%%(day).2d-%%(slug)s-%%(rev)s")
    return ac


def provide_engine(
    config: PersistentSettings, secrets: PostgresqlSecrets, state_path: Path, logging: LoggingProvider
) -> sqlalchemy.Engine:
    logger = logging.get_logger()
    dsn = create_dsn(config, secrets, state_path)

    if config.sqlite is not None:
        kwargs: dict[str, t.Any] = {"connect_args": {"check_same_thread": False}}
        if config.sqlite.path is None:
            # every session must see the same in-memory database
            kwargs["poolclass"] = sqlalchemy.pool.StaticPool
        engine = sqlalchemy.create_engine(dsn, json_serializer=json.dumps, json_deserializer=json.loads, **kwargs)
        sqlalchemy.event.listen(engine, "connect", configure_sqlite)
        sqlalchemy.event.listen(engine, "begin", begin_sqlite)
        logger.info(
            "initialized SQLAlchemy engine",
            extra={
                "driver": config.sqlite.driver,
                "database": dsn.database or ":memory:",
            },
        )
        return engine

    assert config.postgresql is not None
    engine = sqlalchemy.create_engine(dsn, json_serializer=json.dumps, json_deserializer=json.loads)
    sqlalchemy.event.listen(engine, "connect", register_timezone)
    logger.info(
        "initialized SQLAlchemy engine",
        extra={
            "driver": config.postgresql.driver,
            "database": config.postgresql.database,
            "host": config.postgresql.host,
            "port": config.postgresql.port,
        },
    )
    return engine


def provide_session(engine: sqlalchemy.Engine) -> sqlalchemy.orm.Session:
    """Create a new session. Caller is responsible for closing it (via di.Manage)."""
    maker = sqlalchemy.orm.sessionmaker(engine, expire_on_commit=False, autoflush=False)
    return maker(autobegin=False)


class PersistentContainer(DeclarativeContainer):
    config = Configuration()
    secrets = Configuration()
    logging: Provider[LoggingProvider] = Resource()
    root: Provider[Path | NotReady] = Object()
    state_path: Provider[Path] = Resource()

    settings: Provider[PersistentSettings] = Singleton(PersistentSettings, config)
    alembic_config: Provider[alembic.config.Config] = Singleton(
        provide_alembic_conf,
        migration_path=Path("migrations/"),
        config=settings,
        secrets=secrets.postgresql.as_(PostgresqlSecrets),
        state_path=state_path,
        root=root,
    )
    engine: Provider[sqlalchemy.Engine] = Singleton(
        provide_engine,
        config=settings,
        secrets=secrets.postgresql.as_(PostgresqlSecrets),
        state_path=state_path,
        logging=logging,
    )
    session: Provider[sqlalchemy.orm.Session] = Factory(provide_session, engine=engine)


class StorageContainer(DeclarativeContainer):
    config: Provider[StorageSettings] = Configuration(strict=True)
    secrets: Provider[StorageSettings] = Configuration(strict=True)
    logging: Provider[LoggingProvider] = Resource()
    root: Provider[Path | NotReady] = Object()
    state_path: Provider[Path] = Resource()

    persistent: Provider[PersistentContainer] = Container(
        PersistentContainer,
        config=config.persistent,
        secrets=secrets,
        logging=logging,
        state_path=state_path,
        root=root,
    )


def configure_sqlite(dbapi_conn: t.Any, _: t.Any) -> None:
    """Hand transaction control to SQLAlchemy so that SAVEPOINTs work under pysqlite."""
    dbapi_conn.isolation_level = None
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def begin_sqlite(conn: sqlalchemy.Connection) -> None:
    conn.exec_driver_sql("BEGIN")


def register_timezone(dbapi_conn: t.Any, _: t.Any) -> None:
    """Set connection timezone to UTC for consistent datetime handling.

    PostgreSQL TIMESTAMP WITH TIME ZONE stores timestamps in UTC but returns
    them converted to the connection's timezone. Setting UTC ensures consistent
    timezone-aware datetimes across all environments.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("SET TIMEZONE TO 'UTC'")
    cursor.close()
