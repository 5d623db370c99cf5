"""
JSON-file content store.

Records are kept in ``<base>/content-db.json`` in the same shape the legacy
importer reads, so switching a deployment from the file backend to SQLite
carries its data over on first start.
"""
import copy
import os
from typing import Any, Dict, List, Optional

from ..utils.logger import get_logger
from .base import BlobStore, ContentStore
from .file_document import JsonDocument
from .legacy import CONTENT_SNAPSHOT
from .records import BlobRef

logger = get_logger('file_content')

SECTIONS = ('html', 'metadata', 'comment', 'commentReply', 'resource', 'resourceMap', 'asset', 'debug')


def reply_key(url: str, content_id) -> str:
    return f'{url}:{content_id}'


class FileContentStore(ContentStore):
    """The eight content kinds, one section of the document each."""

    def __init__(self, blobs: BlobStore, base_dir: str, document: Optional[JsonDocument] = None):
        super().__init__(blobs)
        self.document = document or JsonDocument(
            os.path.join(base_dir, CONTENT_SNAPSHOT),
            sections=SECTIONS,
        )

    def _put(self, section: str, key: str, record: Dict[str, Any]) -> bool:
        def mutation(state):
            state[section][key] = record
        self.document.mutate(mutation)
        return True

    def _get(self, section: str, key: str) -> Optional[Dict[str, Any]]:
        raw = self.document.read(lambda state: state[section].get(key))
        return copy.deepcopy(raw) if isinstance(raw, dict) else None

    def _put_blob(self, section: str, payload: Dict[str, Any], fields: Dict[str, Any]) -> bool:
        ref = self.store_body(section, payload)
        record = dict(fields, blob=ref.to_dict())
        return self._put(section, payload['url'], record)

    def _get_blob(self, section: str, url: str, fields) -> Optional[Dict[str, Any]]:
        raw = self._get(section, url)
        if raw is None:
            return None
        view = {name: raw.get(name) for name in fields}
        return self.with_body(view, BlobRef.from_dict(raw['blob']))

    # ---- html ----------------------------------------------------------

    def upsert_html(self, payload: Dict[str, Any]) -> bool:
        self.require(payload, 'url', 'fakeid', 'file_base64')
        return self._put_blob('html', payload, {
            'fakeid': payload['fakeid'],
            'url': payload['url'],
            'title': payload.get('title') or '',
            'commentID': payload.get('commentID'),
        })

    def get_html(self, url: str) -> Optional[Dict[str, Any]]:
        return self._get_blob('html', url, ('fakeid', 'url', 'title', 'commentID'))

    def delete_html(self, url: str) -> bool:
        return self.document.mutate(lambda state: state['html'].pop(url, None) is not None)

    # ---- payload kinds -------------------------------------------------

    def upsert_metadata(self, payload: Dict[str, Any]) -> bool:
        self.require(payload, 'url', 'fakeid')
        return self._put('metadata', payload['url'], dict(payload))

    def get_metadata(self, url: str) -> Optional[Dict[str, Any]]:
        return self._get('metadata', url)

    def upsert_comment(self, payload: Dict[str, Any]) -> bool:
        self.require(payload, 'url', 'fakeid')
        return self._put('comment', payload['url'], dict(payload))

    def get_comment(self, url: str) -> Optional[Dict[str, Any]]:
        return self._get('comment', url)

    def upsert_comment_reply(self, payload: Dict[str, Any]) -> bool:
        self.require(payload, 'url', 'fakeid', 'contentID')
        return self._put('commentReply', reply_key(payload['url'], payload['contentID']), dict(payload))

    def get_comment_reply(self, url: str, content_id: str) -> Optional[Dict[str, Any]]:
        return self._get('commentReply', reply_key(url, content_id))

    def upsert_resource_map(self, payload: Dict[str, Any]) -> bool:
        self.require(payload, 'url', 'fakeid')
        return self._put('resourceMap', payload['url'], dict(payload))

    def get_resource_map(self, url: str) -> Optional[Dict[str, Any]]:
        return self._get('resourceMap', url)

    # ---- blob kinds ----------------------------------------------------

    def upsert_resource(self, payload: Dict[str, Any]) -> bool:
        self.require(payload, 'url', 'fakeid', 'file_base64')
        return self._put_blob('resource', payload, {'fakeid': payload['fakeid'], 'url': payload['url']})

    def get_resource(self, url: str) -> Optional[Dict[str, Any]]:
        return self._get_blob('resource', url, ('fakeid', 'url'))

    def upsert_asset(self, payload: Dict[str, Any]) -> bool:
        self.require(payload, 'url', 'fakeid', 'file_base64')
        return self._put_blob('asset', payload, {'fakeid': payload['fakeid'], 'url': payload['url']})

    def get_asset(self, url: str) -> Optional[Dict[str, Any]]:
        return self._get_blob('asset', url, ('fakeid', 'url'))

    DEBUG_FIELDS = ('type', 'url', 'title', 'fakeid')

    def upsert_debug(self, payload: Dict[str, Any]) -> bool:
        self.require(payload, 'url', 'fakeid', 'file_base64')
        return self._put_blob('debug', payload, {
            'type': payload.get('type') or '',
            'url': payload['url'],
            'title': payload.get('title') or '',
            'fakeid': payload['fakeid'],
        })

    def get_debug(self, url: str) -> Optional[Dict[str, Any]]:
        return self._get_blob('debug', url, self.DEBUG_FIELDS)

    def get_all_debug(self) -> List[Dict[str, Any]]:
        rows = self.document.read(lambda state: [dict(raw) for raw in state['debug'].values() if isinstance(raw, dict)])
        return [
            self.with_body({name: raw.get(name) for name in self.DEBUG_FIELDS}, BlobRef.from_dict(raw['blob']))
            for raw in rows
        ]

    # ---- account cleanup -----------------------------------------------

    def delete_account_content(self, fakeids: List[str]) -> None:
        if not fakeids:
            return
        targets = set(fakeids)

        def mutation(state):
            for section in SECTIONS:
                state[section] = {
                    key: raw for key, raw in state[section].items()
                    if not (isinstance(raw, dict) and raw.get('fakeid') in targets)
                }
        self.document.mutate(mutation)
        logger.info(f"Deleted cached content for {len(fakeids)} accounts")
