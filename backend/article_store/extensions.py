"""
Flask Extensions Initialization

This module initializes Flask extensions that are shared across the application.
"""
import sqlite3

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from sqlalchemy import event

# Database instance
db = SQLAlchemy()

# Flask-Migrate instance
migrate = Migrate()


def _apply_sqlite_pragmas(dbapi_connection, _connection_record) -> None:
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode = WAL")
    cursor.execute("PRAGMA synchronous = NORMAL")
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.execute("PRAGMA busy_timeout = 30000")
    cursor.close()


def register_sqlite_pragmas(engine) -> None:
    """Apply the SQLite connection policy to every new DBAPI connection."""
    if not event.contains(engine, 'connect', _apply_sqlite_pragmas):
        event.listen(engine, 'connect', _apply_sqlite_pragmas)
