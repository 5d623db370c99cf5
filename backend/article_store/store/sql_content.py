"""
SQLite-backed content store.

Blob-bearing kinds keep only the BlobRef columns in their row; the bytes are
written to the blob store before the row and read back on every get.
Payload kinds keep the caller's object verbatim as JSON.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import literal_column

from ..extensions import db
from ..models import (
    CONTENT_MODELS,
    AssetEntry,
    CommentEntry,
    CommentReplyEntry,
    DebugEntry,
    HtmlSnapshot,
    MetadataEntry,
    ResourceEntry,
    ResourceMapEntry,
)
from ..utils.logger import get_logger
from .base import BlobStore, ContentStore
from .legacy import LegacyMigrator
from .sql_support import LazyInitializer, ensure_tables, transaction

logger = get_logger('sql_content')


class SqlContentStore(ContentStore):
    """The eight content kinds, one table each."""

    def __init__(self, blobs: BlobStore, migrator: LegacyMigrator):
        super().__init__(blobs)
        self.migrator = migrator
        self.ready = LazyInitializer('SqlContentStore', self._setup)

    def _setup(self) -> None:
        ensure_tables(CONTENT_MODELS)
        self.migrator.migrate_content()

    # ---- generic helpers -----------------------------------------------

    def _upsert_payload(self, model, payload: Dict[str, Any], keys: Dict[str, Any]) -> bool:
        self.ready()
        with transaction():
            model.upsert(keys, fakeid=payload['fakeid'], payload=model.dump_payload(payload))
        return True

    def _get_payload(self, model, *pk) -> Optional[Dict[str, Any]]:
        self.ready()
        row = db.session.get(model, pk if len(pk) > 1 else pk[0])
        return row.get_payload() if row else None

    def _upsert_blob(self, model, kind: str, payload: Dict[str, Any], **columns) -> bool:
        ref = self.store_body(kind, payload)
        self.ready()
        with transaction():
            model.upsert({'url': payload['url']}, fakeid=payload['fakeid'], **columns, **model.blob_columns(ref))
        return True

    # ---- html ----------------------------------------------------------

    def upsert_html(self, payload: Dict[str, Any]) -> bool:
        self.require(payload, 'url', 'fakeid', 'file_base64')
        return self._upsert_blob(
            HtmlSnapshot, 'html', payload,
            title=payload.get('title') or '',
            comment_id=payload.get('commentID'),
        )

    def get_html(self, url: str) -> Optional[Dict[str, Any]]:
        self.ready()
        row = db.session.get(HtmlSnapshot, url)
        if row is None:
            return None
        return self.with_body({
            'fakeid': row.fakeid,
            'url': row.url,
            'title': row.title,
            'commentID': row.comment_id,
        }, row.blob_ref)

    def delete_html(self, url: str) -> bool:
        self.ready()
        with transaction():
            removed = HtmlSnapshot.query.filter_by(url=url).delete()
        return removed > 0

    # ---- payload kinds -------------------------------------------------

    def upsert_metadata(self, payload: Dict[str, Any]) -> bool:
        self.require(payload, 'url', 'fakeid')
        return self._upsert_payload(MetadataEntry, payload, {'url': payload['url']})

    def get_metadata(self, url: str) -> Optional[Dict[str, Any]]:
        return self._get_payload(MetadataEntry, url)

    def upsert_comment(self, payload: Dict[str, Any]) -> bool:
        self.require(payload, 'url', 'fakeid')
        return self._upsert_payload(CommentEntry, payload, {'url': payload['url']})

    def get_comment(self, url: str) -> Optional[Dict[str, Any]]:
        return self._get_payload(CommentEntry, url)

    def upsert_comment_reply(self, payload: Dict[str, Any]) -> bool:
        self.require(payload, 'url', 'fakeid', 'contentID')
        keys = {'url': payload['url'], 'content_id': str(payload['contentID'])}
        return self._upsert_payload(CommentReplyEntry, payload, keys)

    def get_comment_reply(self, url: str, content_id: str) -> Optional[Dict[str, Any]]:
        return self._get_payload(CommentReplyEntry, url, str(content_id))

    def upsert_resource_map(self, payload: Dict[str, Any]) -> bool:
        self.require(payload, 'url', 'fakeid')
        return self._upsert_payload(ResourceMapEntry, payload, {'url': payload['url']})

    def get_resource_map(self, url: str) -> Optional[Dict[str, Any]]:
        return self._get_payload(ResourceMapEntry, url)

    # ---- blob kinds ----------------------------------------------------

    def upsert_resource(self, payload: Dict[str, Any]) -> bool:
        self.require(payload, 'url', 'fakeid', 'file_base64')
        return self._upsert_blob(ResourceEntry, 'resource', payload)

    def get_resource(self, url: str) -> Optional[Dict[str, Any]]:
        self.ready()
        row = db.session.get(ResourceEntry, url)
        if row is None:
            return None
        return self.with_body({'fakeid': row.fakeid, 'url': row.url}, row.blob_ref)

    def upsert_asset(self, payload: Dict[str, Any]) -> bool:
        self.require(payload, 'url', 'fakeid', 'file_base64')
        return self._upsert_blob(AssetEntry, 'asset', payload)

    def get_asset(self, url: str) -> Optional[Dict[str, Any]]:
        self.ready()
        row = db.session.get(AssetEntry, url)
        if row is None:
            return None
        return self.with_body({'fakeid': row.fakeid, 'url': row.url}, row.blob_ref)

    def upsert_debug(self, payload: Dict[str, Any]) -> bool:
        self.require(payload, 'url', 'fakeid', 'file_base64')
        return self._upsert_blob(
            DebugEntry, 'debug', payload,
            type=payload.get('type') or '',
            title=payload.get('title') or '',
        )

    @staticmethod
    def _debug_view(row: DebugEntry) -> Dict[str, Any]:
        return {'type': row.type, 'url': row.url, 'title': row.title, 'fakeid': row.fakeid}

    def get_debug(self, url: str) -> Optional[Dict[str, Any]]:
        self.ready()
        row = db.session.get(DebugEntry, url)
        if row is None:
            return None
        return self.with_body(self._debug_view(row), row.blob_ref)

    def get_all_debug(self) -> List[Dict[str, Any]]:
        self.ready()
        rows = DebugEntry.query.order_by(literal_column('rowid').asc()).all()
        return [self.with_body(self._debug_view(row), row.blob_ref) for row in rows]

    # ---- account cleanup -----------------------------------------------

    def delete_account_content(self, fakeids: List[str]) -> None:
        if not fakeids:
            return
        self.ready()
        with transaction():
            for model in CONTENT_MODELS:
                model.query.filter(model.fakeid.in_(fakeids)).delete(synchronize_session=False)
        logger.info(f"Deleted cached content for {len(fakeids)} accounts")
