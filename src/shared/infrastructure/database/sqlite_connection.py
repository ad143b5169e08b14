import os
import logging
from peewee import DatabaseProxy, Model, SqliteDatabase
from config.database_config import DatabaseConfig

logger = logging.getLogger(__name__)

# Bound to a concrete SqliteDatabase by init_database()
database = DatabaseProxy()


def init_database(path: str = None) -> SqliteDatabase:
    """
    Create the SQLite connection and bind it to the shared proxy

    Args:
        path: Database file, or ':memory:'. Defaults to DATABASE_PATH.

    Returns:
        The bound SqliteDatabase
    """
    path = path or DatabaseConfig.get_connection_string()

    if path != ':memory:':
        # Ensure data directory exists
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

    db = SqliteDatabase(
        path,
        timeout=DatabaseConfig.TIMEOUT,
        pragmas={
            'foreign_keys': 1,  # Enable foreign key constraints
            'journal_mode': 'wal',  # Write-Ahead Logging for better concurrency
            'cache_size': -1 * 64000,  # 64MB cache
            'synchronous': 1  # NORMAL mode (balance between safety and speed)
        }
    )
    database.initialize(db)

    logger.info(f"SQLite database configured: {path}")
    return db


class BaseModel(Model):
    """
    Base model for all Peewee models

    Automatically connects to the configured database
    """

    class Meta:
        database = database
