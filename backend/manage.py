#!/usr/bin/env python
"""
Store Management Script

This script provides CLI commands for store maintenance and, through
Flask-Migrate, schema migrations.

Usage:
    # Show backend, base directory and row counts
    python manage.py store-status

    # Import legacy article-info.json / content-db.json into an empty SQLite store
    python manage.py migrate-legacy

    # Schema migrations
    python manage.py db init
    python manage.py db migrate -m "Add new column"
    python manage.py db upgrade
"""
import os
import sys

# Add the backend directory to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from flask.cli import with_appcontext
import click

from article_store import create_app
from article_store.extensions import db
from article_store.models import ARTICLE_INFO_MODELS, CONTENT_MODELS
from article_store.store.legacy import LegacyMigrator
from article_store.store.registry import get_stores
from article_store.store.sql_support import ensure_tables

# Create app instance
app = create_app()


@app.cli.command('store-status')
@with_appcontext
def store_status():
    """Show the configured backend and per-table row counts."""
    stores = get_stores()
    click.echo(f'Backend:  {stores.backend}')
    click.echo(f'Base dir: {stores.base_dir}')

    if stores.backend != 'sqlite':
        infos = stores.article_info.get_all_infos()
        click.echo(f'\nAccounts in article-info.json: {len(infos)}')
        return

    try:
        ensure_tables(ARTICLE_INFO_MODELS + CONTENT_MODELS)
        click.echo(click.style('✓ Database connection OK', fg='green'))

        click.echo('\nTables in database:')
        for model in ARTICLE_INFO_MODELS + CONTENT_MODELS:
            click.echo(f'  - {model.__tablename__}: {model.query.count()} rows')
    except Exception as e:
        click.echo(click.style(f'✗ Database error: {e}', fg='red'))


@app.cli.command('migrate-legacy')
@with_appcontext
def migrate_legacy():
    """Import legacy JSON snapshots into empty SQLite tables."""
    stores = get_stores()
    migrator = stores.migrator or LegacyMigrator(stores.base_dir)

    ensure_tables(ARTICLE_INFO_MODELS + CONTENT_MODELS)
    for label, run in (('article-info', migrator.migrate_article_info), ('content', migrator.migrate_content)):
        counts = run()
        if counts:
            click.echo(click.style(f'✓ Imported {label}: {counts}', fg='green'))
        else:
            click.echo(f'No {label} import (tables not empty, snapshot missing, or import failed)')

    db.session.remove()


if __name__ == '__main__':
    # Support running with flask CLI
    import subprocess

    if len(sys.argv) > 1 and sys.argv[1] == 'db':
        # Use flask db commands
        os.environ['FLASK_APP'] = 'manage.py'
        subprocess.run(['flask'] + sys.argv[1:])
    else:
        # Run custom commands
        app.cli()
