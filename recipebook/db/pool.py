import os

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool

from recipebook.config import DatabaseConfig
from recipebook.db.errors import StartupError
from recipebook.framework.logging import log_event


def init_connection(dbapi_connection, connection_record):
    """
    SQLite ships with foreign key enforcement off and the setting is per
    connection, so every new pooled connection has to turn it on. Without it
    the ON DELETE CASCADE clauses are silently ignored.

    The driver's own transaction handling is switched off as well: it never
    sends BEGIN before a SELECT, so reads would not share a snapshot.
    `begin_transaction` takes over.
    """
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def begin_transaction(conn):
    conn.exec_driver_sql("BEGIN")


def ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)


def create_db_engine(db_config: DatabaseConfig) -> Engine:
    """
    Build a bounded connection pool over the SQLite file in `db_config.path`.
    Checkout blocks for at most `pool_timeout` seconds.
    """
    try:
        ensure_parent_dir(db_config.path)
    except OSError as exc:
        raise StartupError(
            f"Unable to create database directory for {db_config.path}: {exc}"
        ) from exc

    try:
        engine = create_engine(
            f"sqlite:///{db_config.path}",
            poolclass=QueuePool,
            pool_size=db_config.pool_size,
            max_overflow=db_config.max_overflow,
            pool_timeout=db_config.pool_timeout,
            echo=db_config.echo,
            connect_args={"check_same_thread": False},
        )
    except (SQLAlchemyError, TypeError, ValueError) as exc:
        raise StartupError(f"Unable to create connection pool: {exc}") from exc

    event.listen(engine, "connect", init_connection)
    event.listen(engine, "begin", begin_transaction)

    log_event(
        "startup",
        action="pool_created",
        path=db_config.path,
        pool_size=db_config.pool_size,
        pool_timeout=db_config.pool_timeout,
    )
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autoflush=False, bind=engine)
