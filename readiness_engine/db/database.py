from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from readiness_engine.db.base import Base


class Database:
    """
    Engine and session factory for one database URL.

    Created at the application edge and passed to the stores explicitly;
    there is no module-level engine.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        connect_args = {}
        if database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(
            database_url,
            echo=echo,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        self._session_factory = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    @classmethod
    def from_settings(cls, settings) -> Database:
        """Build a Database from application Settings."""
        return cls(settings.database_url, echo=settings.log_level == "DEBUG")

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def init_db(self) -> None:
        """Initialize database tables."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables initialized")

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Provide a transactional scope around a series of operations."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:  # Intentionally broad - rollback on any error before re-raising
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()
