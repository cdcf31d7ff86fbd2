import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .database import Base, build_engine, make_session_factory

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base class for everything the store raises."""


class StoreConnectionError(StoreError):
    pass


class QueryError(StoreError):
    pass


class WriteError(StoreError):
    pass


class StoreClosedError(QueryError):
    pass


class UserNotFound(StoreError):
    def __init__(self, user_id: int):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class UserStore:
    """Persistence for :class:`models.User` rows.

    Every operation runs in its own short-lived session. Users handed back to
    callers are detached from that session, so they can be serialised after
    it is closed.

    Thread-safety and pooling are left to the SQLAlchemy engine.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = make_session_factory(engine)
        self._closed = False

    @classmethod
    def connect(cls, dsn: str, echo: bool = False) -> "UserStore":
        """Open the database behind ``dsn`` and make sure ``users`` exists.

        Raises:
            StoreConnectionError: if the DSN is empty or malformed, or the
                database cannot be reached.
        """
        if not dsn:
            raise StoreConnectionError("Database URL is empty")

        try:
            engine = build_engine(dsn, echo=echo)
        except (SQLAlchemyError, ValueError, ImportError) as exc:
            raise StoreConnectionError(f"Invalid database URL: {exc}") from exc

        logger.info(
            "Connecting to %s", engine.url.render_as_string(hide_password=True)
        )
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError as exc:
            engine.dispose()
            raise StoreConnectionError(f"Database connection failed: {exc}") from exc

        logger.info("Connected to %s", engine.dialect.name)
        return cls(engine)

    @property
    def closed(self) -> bool:
        return self._closed

    @contextmanager
    def session_scope(self, error_cls=WriteError) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations.

        SQLAlchemy failures are rolled back and re-raised as ``error_cls``.
        """
        if self._closed:
            raise StoreClosedError("Store is closed")

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Database operation failed")
            raise error_cls(str(exc)) from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def list_all(self) -> List[models.User]:
        with self.session_scope(QueryError) as session:
            stmt = select(models.User).order_by(models.User.id)
            return list(session.execute(stmt).scalars().all())

    def get_by_id(self, user_id: int) -> models.User:
        with self.session_scope(QueryError) as session:
            user = session.get(models.User, user_id)
            if user is None:
                raise UserNotFound(user_id)
            return user

    def insert(self, name: str, email: str) -> models.User:
        user = models.User(name=name, email=email)
        with self.session_scope(WriteError) as session:
            session.add(user)
            session.flush()
        return user

    def update(
        self,
        user_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> models.User:
        """Merge the non-empty fields into the stored row and save it."""
        with self.session_scope(WriteError) as session:
            user = session.get(models.User, user_id)
            if user is None:
                raise UserNotFound(user_id)

            if name:
                user.name = name
            if email:
                user.email = email
        return user

    def delete_by_id(self, user_id: int) -> None:
        with self.session_scope(WriteError) as session:
            user = session.get(models.User, user_id)
            if user is None:
                raise UserNotFound(user_id)
            session.delete(user)

    def close(self) -> None:
        """Release the engine's connections. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self.engine.dispose()
        logger.info("Database connection closed")
