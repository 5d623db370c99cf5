"""
Legacy Migration - import the flat JSON documents into SQLite

Before the relational backend existed the data lived in two JSON documents in
the base directory:

- ``article-info.json``: ``{"infos": {fakeid: info}, "articlesByKey": {"fakeid:aid": article}}``
- ``content-db.json``: ``{"html": {...}, "metadata": {...}, "comment": {...},
  "commentReply": {...}, "resource": {...}, "resourceMap": {...},
  "asset": {...}, "debug": {...}}``

The importer only runs against an empty store, so it can never duplicate rows
or overwrite data written after a previous import.
"""
import json
import os
from typing import Any, Callable, Dict, Iterable, Optional

from ..models import (
    ARTICLE_INFO_MODELS,
    CONTENT_MODELS,
    Article,
    AssetEntry,
    CommentEntry,
    CommentReplyEntry,
    DebugEntry,
    HtmlSnapshot,
    Info,
    MetadataEntry,
    ResourceEntry,
    ResourceMapEntry,
)
from ..utils.logger import get_logger, log_error
from .errors import MigrationFailure
from .records import ArticleRecord, BlobRef, InfoRecord, now_seconds, to_int
from .sql_support import has_rows, transaction

logger = get_logger('legacy')

ARTICLE_INFO_SNAPSHOT = 'article-info.json'
CONTENT_SNAPSHOT = 'content-db.json'


def snapshot_entries(snapshot: Dict[str, Any], section: str) -> Iterable[Dict[str, Any]]:
    """Entries of one keyed section; absent or malformed sections are empty."""
    value = snapshot.get(section) or {}
    if isinstance(value, dict):
        value = value.values()
    elif not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _has(item: Dict[str, Any], *fields: str) -> bool:
    return all(item.get(name) for name in fields)


def _blob(item: Dict[str, Any]) -> Optional[BlobRef]:
    raw = item.get('blob')
    if not isinstance(raw, dict):
        return None
    try:
        return BlobRef.from_dict(raw)
    except KeyError:
        return None


class LegacyMigrator:
    """Imports legacy snapshots found in ``base_dir``.

    Example:
        >>> migrator = LegacyMigrator('/srv/data')
        >>> migrator.migrate_article_info()   # inside an app context
        {'infos': 3, 'articles': 4}
    """

    def __init__(self, base_dir: str):
        self.base_dir = base_dir

    def snapshot_path(self, name: str) -> str:
        return os.path.join(self.base_dir, name)

    def migrate_article_info(self) -> Optional[Dict[str, int]]:
        """Import ``article-info.json`` if the info/article tables are empty.

        Returns:
            Imported row counts, or None if nothing was imported.
        """
        return self._migrate(ARTICLE_INFO_SNAPSHOT, ARTICLE_INFO_MODELS, self._import_article_info)

    def migrate_content(self) -> Optional[Dict[str, int]]:
        """Import ``content-db.json`` if all eight content tables are empty."""
        return self._migrate(CONTENT_SNAPSHOT, CONTENT_MODELS, self._import_content)

    def _migrate(self, name: str, models, importer: Callable[[Dict[str, Any]], Dict[str, int]]):
        try:
            if has_rows(models):
                return None

            snapshot = self._load_snapshot(name)
            if snapshot is None:
                return None

            with transaction():
                counts = importer(snapshot)
            logger.info(f"[LegacyMigration] Imported {name}: {counts}")
            return counts
        except Exception as e:
            # the store stays usable; the import is retried on next startup if still empty
            log_error(e, f"legacy {name} migration")
            return None

    def _load_snapshot(self, name: str) -> Optional[Dict[str, Any]]:
        path = self.snapshot_path(name)
        if not os.path.exists(path):
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                parsed = json.load(f)
        except (OSError, ValueError) as e:
            raise MigrationFailure(f'Cannot read {path}: {e}') from e
        if not isinstance(parsed, dict):
            raise MigrationFailure(f'{path} does not contain a JSON object')
        return parsed

    @staticmethod
    def _import_article_info(snapshot: Dict[str, Any]) -> Dict[str, int]:
        counts = {'infos': 0, 'articles': 0, 'skipped': 0}

        for item in snapshot_entries(snapshot, 'infos'):
            if not item.get('fakeid'):
                counts['skipped'] += 1
                continue
            ts = now_seconds()
            record = InfoRecord.from_dict(item)
            record.create_time = to_int(item.get('create_time'), ts)
            record.update_time = to_int(item.get('update_time'), ts)
            Info.save_record(record)
            counts['infos'] += 1

        for item in snapshot_entries(snapshot, 'articlesByKey'):
            record = ArticleRecord.from_dict(item)
            if not record.is_valid:
                counts['skipped'] += 1
                continue
            Article.save_record(record)
            counts['articles'] += 1

        return counts

    @staticmethod
    def _import_content(snapshot: Dict[str, Any]) -> Dict[str, int]:
        counts = {}

        def bump(section: str) -> None:
            counts[section] = counts.get(section, 0) + 1

        for item in snapshot_entries(snapshot, 'html'):
            ref = _blob(item)
            if not _has(item, 'url', 'fakeid', 'title') or ref is None:
                bump('skipped')
                continue
            HtmlSnapshot.upsert(
                {'url': item['url']},
                fakeid=item['fakeid'],
                title=item['title'],
                comment_id=item.get('commentID'),
                **HtmlSnapshot.blob_columns(ref),
            )
            bump('html')

        payload_sections = (
            ('metadata', MetadataEntry),
            ('comment', CommentEntry),
            ('resourceMap', ResourceMapEntry),
        )
        for section, model in payload_sections:
            for item in snapshot_entries(snapshot, section):
                if not _has(item, 'url', 'fakeid'):
                    bump('skipped')
                    continue
                model.upsert(
                    {'url': item['url']},
                    fakeid=item['fakeid'],
                    payload=model.dump_payload(item),
                )
                bump(section)

        for item in snapshot_entries(snapshot, 'commentReply'):
            if not _has(item, 'url', 'fakeid', 'contentID'):
                bump('skipped')
                continue
            CommentReplyEntry.upsert(
                {'url': item['url'], 'content_id': item['contentID']},
                fakeid=item['fakeid'],
                payload=CommentReplyEntry.dump_payload(item),
            )
            bump('commentReply')

        for section, model in (('resource', ResourceEntry), ('asset', AssetEntry)):
            for item in snapshot_entries(snapshot, section):
                ref = _blob(item)
                if not _has(item, 'url', 'fakeid') or ref is None:
                    bump('skipped')
                    continue
                model.upsert({'url': item['url']}, fakeid=item['fakeid'], **model.blob_columns(ref))
                bump(section)

        for item in snapshot_entries(snapshot, 'debug'):
            ref = _blob(item)
            if not _has(item, 'url', 'fakeid', 'title', 'type') or ref is None:
                bump('skipped')
                continue
            DebugEntry.upsert(
                {'url': item['url']},
                type=item['type'],
                title=item['title'],
                fakeid=item['fakeid'],
                **DebugEntry.blob_columns(ref),
            )
            bump('debug')

        return counts
