"""Database engine, declarative base and unit of work.

``Database.unit_of_work`` hands out a SQLAlchemy session inside one
transaction. Aggregates in the session have their pending domain events
collected when it commits and published once the commit succeeds; nothing
is published when it rolls back.

``Database.run_in_transaction`` re-runs a unit of work when the storage layer
reports a transient conflict (locked database, stale version counter, unique
index collision), up to ``retries`` attempts, before giving up with
``ConcurrencyConflict``.
"""

import random
import time
from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import TypeVar

import structlog
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import StaticPool

from shared.domain import AggregateRoot, DomainEvent
from shared.errors import ConcurrencyConflict

logger = structlog.get_logger(__name__)

T = TypeVar("T")

SQLITE_BUSY_TIMEOUT = 5

_TRANSIENT_ERRORS = (OperationalError, StaleDataError)
_PENDING_EVENTS = "pending_domain_events"


class Base(DeclarativeBase):
    pass


def log_event(event_: DomainEvent) -> None:
    logger.info(
        "domain_event",
        domain_event=event_.event_name,
        event_version=event_.__version__,
        payload=event_.payload(),
    )


def _collect_events(session: Session) -> None:
    pending = session.info.setdefault(_PENDING_EVENTS, [])
    for instance in [*session.new, *session.identity_map.values()]:
        if isinstance(instance, AggregateRoot) and instance._events:
            pending.extend(instance._events)
            instance._events.clear()


def _discard_events(session: Session) -> None:
    session.info.pop(_PENDING_EVENTS, None)


class Database:
    def __init__(self, uri: str, echo: bool = False):
        self.uri = uri
        self.engine = self._create_engine(uri, echo)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        self.publishers: list[Callable[[DomainEvent], None]] = [log_event]

        event.listen(self._session_factory, "before_commit", _collect_events)
        event.listen(self._session_factory, "after_commit", self._publish_events)
        event.listen(self._session_factory, "after_rollback", _discard_events)

    @staticmethod
    def _create_engine(uri: str, echo: bool) -> Engine:
        if not uri.startswith("sqlite"):
            return create_engine(uri, echo=echo, pool_pre_ping=True)

        connect_args = {"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT}
        if uri in ("sqlite://", "sqlite:///:memory:"):
            engine = create_engine(uri, echo=echo, connect_args=connect_args, poolclass=StaticPool)
        else:
            engine = create_engine(uri, echo=echo, connect_args=connect_args)

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    def _publish_events(self, session: Session) -> None:
        # Runs after commit; subscriber failures are logged, never raised
        for event_ in session.info.pop(_PENDING_EVENTS, []):
            for publish in self.publishers:
                try:
                    publish(event_)
                except Exception:
                    logger.exception("event_publish_failed", domain_event=event_.event_name)

    def create_all(self) -> None:
        Base.metadata.create_all(self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()

    def unit_of_work(self) -> AbstractContextManager[Session]:
        """A session in a begun transaction: commits on exit, rolls back on error, then closes."""
        return self._session_factory.begin()

    def run_in_transaction(
        self,
        work: Callable[[Session], T],
        retries: int = 5,
        backoff: float = 0.02,
        retry_on_integrity_error: bool = False,
    ) -> T:
        """Run ``work`` in a fresh unit of work, retrying transient conflicts."""
        transient = _TRANSIENT_ERRORS + ((IntegrityError,) if retry_on_integrity_error else ())
        attempts = max(1, retries)
        for attempt in range(1, attempts + 1):
            try:
                with self.unit_of_work() as session:
                    return work(session)
            except transient as exc:
                logger.warning(
                    "transaction_conflict",
                    attempt=attempt,
                    max_attempts=attempts,
                    error=type(exc).__name__,
                )
                if attempt < attempts:
                    time.sleep(backoff * attempt + random.uniform(0, backoff))

        raise ConcurrencyConflict()
