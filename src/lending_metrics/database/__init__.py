from lending_metrics.database.operations import (
    compact_sqlite_database,
    create_new_sqlite_database,
    get_in_memory_engine,
    get_scoped_sqlite_session,
    get_sqlite_engine,
)

__all__ = (
    "compact_sqlite_database",
    "create_new_sqlite_database",
    "get_in_memory_engine",
    "get_scoped_sqlite_session",
    "get_sqlite_engine",
)
