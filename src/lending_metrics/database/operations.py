import pathlib

from sqlalchemy import URL, Engine, create_engine, event, text
from sqlalchemy.orm import Session, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from lending_metrics.config import settings
from lending_metrics.database.models import Base
from lending_metrics.logging import logger


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]  # noqa: ANN001, ARG001
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.close()


def get_sqlite_engine(database_path: pathlib.Path) -> Engine:
    engine = create_engine(
        URL.create(
            drivername="sqlite",
            database=str(database_path.absolute()),
        )
    )
    event.listen(engine, "connect", _enable_foreign_keys)
    return engine


def get_in_memory_engine() -> Engine:
    """
    Build an engine for a private in-memory database, shared by all sessions bound to it.
    """

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", _enable_foreign_keys)
    Base.metadata.create_all(bind=engine)
    return engine


def create_new_sqlite_database(db_path: pathlib.Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = get_sqlite_engine(db_path)
    with engine.connect() as connection:
        assert (
            connection.execute(
                text("PRAGMA journal_mode=WAL;"),
            ).scalar()
            == "wal"
        )
        connection.execute(
            text("PRAGMA auto_vacuum=FULL;"),
        )

        Base.metadata.create_all(bind=engine)
        connection.execute(
            text("VACUUM;"),
        )

        logger.info(f"Initialized new SQLite database at {db_path}")


def compact_sqlite_database(db_path: pathlib.Path) -> None:
    engine = get_sqlite_engine(db_path)
    with engine.connect() as connection:
        connection.execute(
            text("VACUUM;"),
        )
        logger.info(f"Compacted SQLite database at {db_path}")


def get_scoped_sqlite_session(
    database_path: pathlib.Path | None = None,
) -> scoped_session[Session]:
    """
    Build a session factory for a SQLite database, creating the database first if the file does
    not exist. Uses the configured database path unless one is given.
    """

    if database_path is None:
        database_path = settings.database.path

    if not database_path.exists():
        create_new_sqlite_database(db_path=database_path)

    return scoped_session(
        session_factory=sessionmaker(
            bind=get_sqlite_engine(database_path),
        )
    )
