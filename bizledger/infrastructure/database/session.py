"""Storage handle: one engine, one session factory, one process-wide lock"""

import logging
import threading
import time
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from bizledger.config import settings
from bizledger.domain.exceptions import DomainException, PersistenceError
from bizledger.infrastructure.observability.metrics import rollback_counter, unit_of_work_duration_histogram

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def storage_error_message(error: Exception) -> str:
    """Single-line description of a driver error, without SQL or parameters"""
    orig = getattr(error, "orig", None)
    message = str(orig) if orig is not None else str(error)
    return message.splitlines()[0] if message else error.__class__.__name__


class Database:
    """
    Exclusive owner of the embedded database.

    Every read and write goes through unit_of_work(), which serializes all
    access behind a single lock. Invoice number allocation reads and bumps
    a counter row, which is race-free only while this lock is held.
    """

    def __init__(self, database_url: str | None = None, echo: bool | None = None):
        self.database_url = database_url or settings.database_url
        connect_args = {}
        if self.database_url.startswith("sqlite"):
            # The lock below serializes access; the handle may cross threads
            connect_args["check_same_thread"] = False

        self.engine = create_engine(
            self.database_url,
            echo=settings.sql_echo if echo is None else echo,
            connect_args=connect_args,
        )
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self._session_factory = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)
        self._lock = threading.Lock()

    @contextmanager
    def unit_of_work(self, operation: str = "unit_of_work") -> Generator[Session, None, None]:
        """
        Run a group of statements as one all-or-nothing unit.

        Commits on normal exit. On any exception the session is rolled back;
        domain errors propagate unchanged; SQLAlchemy errors and driver
        integer overflows are raised as PersistenceError. The lock is held
        only for the duration of the block.

        Usage:
            with database.unit_of_work("create_invoice") as session:
                session.add(invoice)
        """
        with self._lock:
            start_time = time.perf_counter()
            session = self._session_factory()
            try:
                yield session
                session.commit()
            except DomainException:
                session.rollback()
                rollback_counter.labels(operation=operation, reason="domain").inc()
                logger.warning("Unit of work rolled back", extra={"operation": operation}, exc_info=True)
                raise
            except (SQLAlchemyError, OverflowError) as e:
                # the sqlite3 driver raises OverflowError for integers beyond 64 bits
                session.rollback()
                rollback_counter.labels(operation=operation, reason="storage").inc()
                logger.error(
                    "Unit of work failed in storage",
                    extra={"operation": operation, "error": storage_error_message(e)},
                )
                raise PersistenceError(f"{operation} failed: {storage_error_message(e)}") from e
            except Exception:
                session.rollback()
                rollback_counter.labels(operation=operation, reason="unexpected").inc()
                raise
            finally:
                session.close()
                unit_of_work_duration_histogram.labels(operation=operation).observe(time.perf_counter() - start_time)

    def dispose(self) -> None:
        self.engine.dispose()
