"""Database connection management and initialization."""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from fitmatch.errors import StorageError
from fitmatch.storage.models import Base

logger = logging.getLogger(__name__)


def make_engine(database_url: str) -> Engine:
    """Create the SQLAlchemy engine for a database URL.

    SQLite files get their parent directory created; in-memory SQLite is
    shared across threads through a single connection.
    """
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(database_url, echo=False, pool_pre_ping=True)

    if url.database in (None, "", ":memory:"):
        return create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(
        database_url,
        echo=False,
        connect_args={"check_same_thread": False},
    )


class Database:
    """Engine plus session factory for one database URL."""

    def __init__(self, database_url: str):
        self.url = database_url
        self.engine = make_engine(database_url)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def init(self) -> None:
        """Create all tables."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StorageError(f"Could not initialize database: {e}") from e
        logger.info(f"Initialized database at {self.engine.url!r}")

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Get a database session that commits on success.

        Yields:
            SQLAlchemy Session instance.

        Raises:
            StorageError: Wrapping any SQLAlchemy failure.
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error, rolled back: {e}")
            raise StorageError(str(e)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


def init_db(database_url: str) -> Database:
    """Open the database and create all tables."""
    database = Database(database_url)
    database.init()
    return database
