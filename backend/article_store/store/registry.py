"""
Store construction and lookup.

``init_stores(app)`` builds the configured backend once and keeps it in
``app.extensions``; request handlers fetch it with ``get_stores()``.
"""
import os
from dataclasses import dataclass

from flask import current_app

from ..config import BLOB_DIR_NAME
from ..utils.logger import get_logger
from .base import ArticleInfoStore, BlobStore, ContentStore
from .blobs import LocalBlobStore
from .file_article_info import FileArticleInfoStore
from .file_content import FileContentStore
from .legacy import LegacyMigrator
from .sql_article_info import SqlArticleInfoStore
from .sql_content import SqlContentStore

logger = get_logger('stores')

EXTENSION_KEY = 'article_store'
BACKENDS = ('sqlite', 'file')


@dataclass
class StoreBundle:
    backend: str
    base_dir: str
    blobs: BlobStore
    article_info: ArticleInfoStore
    content: ContentStore
    migrator: LegacyMigrator = None


def build_stores(backend: str, base_dir: str) -> StoreBundle:
    """Build the stores of one backend rooted at ``base_dir``."""
    if backend not in BACKENDS:
        raise ValueError(f"Unknown STORE_BACKEND {backend!r}, expected one of {', '.join(BACKENDS)}")

    blobs = LocalBlobStore(os.path.join(base_dir, BLOB_DIR_NAME))
    if backend == 'file':
        return StoreBundle(
            backend=backend,
            base_dir=base_dir,
            blobs=blobs,
            article_info=FileArticleInfoStore(base_dir),
            content=FileContentStore(blobs, base_dir),
        )

    migrator = LegacyMigrator(base_dir)
    return StoreBundle(
        backend=backend,
        base_dir=base_dir,
        blobs=blobs,
        article_info=SqlArticleInfoStore(migrator),
        content=SqlContentStore(blobs, migrator),
        migrator=migrator,
    )


def init_stores(app) -> StoreBundle:
    backend = app.config.get('STORE_BACKEND', 'sqlite')
    base_dir = app.config['FILE_DB_BASE']
    bundle = build_stores(backend, base_dir)
    app.extensions[EXTENSION_KEY] = bundle
    logger.info(f"Using {backend} store at {base_dir}")
    return bundle


def get_stores() -> StoreBundle:
    """Stores of the current app."""
    return current_app.extensions[EXTENSION_KEY]
