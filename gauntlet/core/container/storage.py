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

import gauntlet.lib.json as json
from gauntlet.lib import NotReady

from ..config.secrets import DatabaseSecrets
from ..config.storage import DatabaseSettings, StorageSettings
from ..provider import LoggingProvider


def build_dsn(config: DatabaseSettings, secrets: DatabaseSecrets) -> DSN:
    if config.is_sqlite:
        return DSN.create(config.driver, database=config.database)
    return DSN.create(
        config.driver,
        database=config.database,
        username=secrets.username.get_secret_value() if secrets.username else None,
        password=secrets.password.get_secret_value() if secrets.password else None,
        port=config.port,
        host=str(config.host) if config.host else None,
    )


def provide_alembic_conf(
    migration_path: Path, config: DatabaseSettings, secrets: DatabaseSecrets, root: Path | NotReady
) -> alembic.config.Config:
    if isinstance(root, NotReady):
        raise RuntimeError("root path is unavailable")

    dsn = build_dsn(config, secrets)
    escaped_str = dsn.render_as_string(hide_password=False).replace("%", "%%")

    ac = alembic.config.Config()
    ac.set_main_option("script_location", str(root / migration_path))
    ac.set_section_option("alembic", "sqlalchemy.url", escaped_str)
    ac.set_section_option("alembic", "file_template", "%%(year)d-%%(month).2d-%%(day).2d-%%(slug)s-%%(rev)s")
    return ac


def provide_engine(config: DatabaseSettings, secrets: DatabaseSecrets, logging: LoggingProvider) -> sqlalchemy.Engine:
    logger = logging.get_logger()
    dsn = build_dsn(config, secrets)

    if config.is_sqlite:
        # one shared connection, so an in-memory database outlives each checkout
        engine = sqlalchemy.create_engine(
            dsn,
            json_serializer=json.dumps,
            json_deserializer=json.loads,
            connect_args={"check_same_thread": False},
            poolclass=sqlalchemy.pool.StaticPool,
        )
        sqlalchemy.event.listen(engine, "connect", disable_pysqlite_transactions)
        sqlalchemy.event.listen(engine, "begin", begin_sqlite_transaction)
    else:
        engine = sqlalchemy.create_engine(dsn, json_serializer=json.dumps, json_deserializer=json.loads)
        sqlalchemy.event.listen(engine, "connect", register_timezone)

    logger.info(
        "initialized SQLAlchemy engine",
        extra={
            "driver": config.driver,
            "database": config.database,
            "host": config.host,
            "port": config.port,
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

    alembic_config: Provider[alembic.config.Config] = Singleton(
        provide_alembic_conf,
        migration_path=Path("migrations/"),
        config=config.database.as_(DatabaseSettings),
        secrets=secrets.database.as_(DatabaseSecrets),
        root=root,
    )
    engine: Provider[sqlalchemy.Engine] = Singleton(
        provide_engine,
        config=config.database.as_(DatabaseSettings),
        secrets=secrets.database.as_(DatabaseSecrets),
        logging=logging,
    )
    session: Provider[sqlalchemy.orm.Session] = Factory(provide_session, engine=engine)


class StorageContainer(DeclarativeContainer):
    config: Provider[StorageSettings] = Configuration(strict=True)
    secrets = Configuration(strict=True)
    logging: Provider[LoggingProvider] = Resource()
    root: Provider[Path | NotReady] = Object()

    persistent: Provider[PersistentContainer] = Container(
        PersistentContainer, config=config.persistent, secrets=secrets, logging=logging, root=root
    )


def register_timezone(dbapi_conn: t.Any, _: t.Any) -> None:
    """Set connection timezone to UTC for consistent datetime handling.

    PostgreSQL TIMESTAMP WITH TIME ZONE stores timestamps in UTC but returns
    them converted to the connection's timezone. Setting UTC ensures consistent
    timezone-aware datetimes across all environments.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("SET TIMEZONE TO 'UTC'")
    cursor.close()


def disable_pysqlite_transactions(dbapi_conn: t.Any, _: t.Any) -> None:
    # pysqlite's implicit BEGIN breaks SAVEPOINT; SQLAlchemy emits BEGIN itself
    dbapi_conn.isolation_level = None


def begin_sqlite_transaction(conn: sqlalchemy.Connection) -> None:
    conn.exec_driver_sql("BEGIN")
