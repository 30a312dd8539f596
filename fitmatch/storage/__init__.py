"""Storage module: collaborator interfaces and their SQL implementations."""

from fitmatch.storage.database import Database, init_db, make_engine
from fitmatch.storage.directory import SqlUserDirectory
from fitmatch.storage.interfaces import NearFilter, PersistenceStore, UserDirectory
from fitmatch.storage.locks import KeyedLock
from fitmatch.storage.store import SqlStore

__all__ = [
    "Database",
    "init_db",
    "make_engine",
    "SqlUserDirectory",
    "NearFilter",
    "PersistenceStore",
    "UserDirectory",
    "KeyedLock",
    "SqlStore",
]
