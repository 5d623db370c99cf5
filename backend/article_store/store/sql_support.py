"""
Session helpers shared by the relational stores and the legacy migrator.
"""
import threading
from contextlib import contextmanager
from typing import Iterable

from ..extensions import db
from ..utils.logger import get_logger

logger = get_logger('sql')


@contextmanager
def transaction():
    """Commit everything done inside the block, or nothing.

    Example:
        >>> with transaction():
        ...     Info.save_record(record)
        ...     Article.save_record(article)
    """
    session = db.session
    try:
        _begin_immediate(session)
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


def _begin_immediate(session) -> None:
    """Take the SQLite write lock before the block reads anything.

    pysqlite opens transactions only ahead of DML statements.
    """
    connection = session.connection()
    if connection.dialect.name != 'sqlite':
        return
    if connection.connection.dbapi_connection.in_transaction:
        return
    connection.exec_driver_sql('BEGIN IMMEDIATE')
    # rows cached by earlier reads may be stale
    session.expire_all()


def ensure_tables(models: Iterable) -> None:
    """Create the tables of ``models`` (and their indexes) if missing."""
    tables = [model.__table__ for model in models]
    db.metadata.create_all(bind=db.engine, tables=tables, checkfirst=True)


def has_rows(models: Iterable) -> bool:
    return any(model.query.limit(1).first() is not None for model in models)


class LazyInitializer:
    """Runs a setup callable once per process, on first use.

    The flag is set even when setup swallowed a migration error, so a failed
    import is only retried after a restart.
    """

    def __init__(self, name: str, setup):
        self.name = name
        self._setup = setup
        self._done = False
        self._lock = threading.Lock()

    def __call__(self) -> None:
        if self._done:
            return
        with self._lock:
            if self._done:
                return
            self._setup()
            self._done = True
            logger.debug(f"[{self.name}] Store initialized")
