import os
from dotenv import load_dotenv

load_dotenv()


class DatabaseConfig:
    """
    Configuration of the bin storage backend

    STORAGE_BACKEND selects the implementation:
    - memory: process-local maps, lost on restart
    - sqlite: persistent SQLite file through peewee
    """

    STORAGE_BACKEND = os.getenv('STORAGE_BACKEND', 'memory').lower()

    # Path to SQLite database file
    DATABASE_PATH = os.getenv('DATABASE_PATH', './data/dustbin_monitor.db')

    # Timeout for database connections in seconds
    TIMEOUT = 10

    @classmethod
    def get_connection_string(cls) -> str:
        """Get the SQLite connection string."""
        return cls.DATABASE_PATH

    @classmethod
    def use_sqlite(cls) -> bool:
        """Check if the persistent backend is selected"""
        return cls.STORAGE_BACKEND == 'sqlite'
