from .sqlite_connection import BaseModel, database, init_database

__all__ = ['BaseModel', 'database', 'init_database']
