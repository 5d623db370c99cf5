"""
Storage interfaces.

Two backends implement these: the relational one (SQLite through
Flask-SQLAlchemy) and the JSON-file one. Callers only see these methods;
both backends guarantee that a multi-step write is either fully visible or
not at all.
"""
import base64
import binascii
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from .errors import ValidationError
from .records import ArticleRecord, BlobRef, InfoRecord


class BlobStore(ABC):
    """Content-addressed byte storage."""

    @abstractmethod
    def save(self, kind: str, data: bytes, file_type: Optional[str] = None) -> BlobRef:
        """Store ``data`` under ``kind/sha256`` unless it is already there."""

    @abstractmethod
    def read(self, ref: BlobRef) -> bytes:
        """Return the bytes behind ``ref``; raises ``BlobNotFoundError``."""

    def save_base64(self, kind: str, body: str, file_type: Optional[str] = None) -> BlobRef:
        return self.save(kind, decode_base64(body), file_type)

    def read_base64(self, ref: BlobRef) -> str:
        return base64.b64encode(self.read(ref)).decode('ascii')


def decode_base64(body: Any) -> bytes:
    if not isinstance(body, str):
        raise ValidationError('file_base64 must be a string')
    try:
        return base64.b64decode(body)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f'Invalid base64 body: {e}') from e


class ArticleInfoStore(ABC):
    """Per-account info rows and per-article rows."""

    @abstractmethod
    def get_info(self, fakeid: str) -> Optional[InfoRecord]:
        ...

    @abstractmethod
    def get_all_infos(self) -> List[InfoRecord]:
        ...

    @abstractmethod
    def update_info(self, info: InfoRecord) -> bool:
        """Merge ``info`` into the stored row (``count``/``articles`` are deltas)."""

    @abstractmethod
    def update_last_update_time(self, fakeid: str) -> bool:
        ...

    @abstractmethod
    def import_infos(self, infos: Iterable[InfoRecord]) -> None:
        """Upsert every info with its progress counters reset."""

    @abstractmethod
    def sync_article_cache(self, account: InfoRecord, publish_page: Dict[str, Any]) -> None:
        """Store one upstream publish page and fold the counts into the account info."""

    @abstractmethod
    def hit_cache(self, fakeid: str, create_time) -> bool:
        ...

    @abstractmethod
    def get_article_cache(self, fakeid: str, create_time) -> List[ArticleRecord]:
        ...

    @abstractmethod
    def get_article_by_link(self, url: str) -> Optional[ArticleRecord]:
        ...

    @abstractmethod
    def upsert_article(self, article: ArticleRecord) -> bool:
        ...

    @abstractmethod
    def delete_article(self, fakeid: str, aid: str, link: Optional[str] = None) -> bool:
        ...

    @abstractmethod
    def mark_article_deleted(self, url: str) -> None:
        ...

    @abstractmethod
    def delete_account_data(self, fakeids: List[str]) -> None:
        ...


class ContentStore(ABC):
    """Url-keyed auxiliary records.

    Blob-bearing kinds (html, resource, asset, debug) accept and return the
    body as ``file_base64``; only the BlobRef is kept in the record itself.
    """

    def __init__(self, blobs: BlobStore):
        self.blobs = blobs

    @abstractmethod
    def upsert_html(self, payload: Dict[str, Any]) -> bool:
        ...

    @abstractmethod
    def get_html(self, url: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def delete_html(self, url: str) -> bool:
        ...

    @abstractmethod
    def upsert_metadata(self, payload: Dict[str, Any]) -> bool:
        ...

    @abstractmethod
    def get_metadata(self, url: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def upsert_comment(self, payload: Dict[str, Any]) -> bool:
        ...

    @abstractmethod
    def get_comment(self, url: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def upsert_comment_reply(self, payload: Dict[str, Any]) -> bool:
        ...

    @abstractmethod
    def get_comment_reply(self, url: str, content_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def upsert_resource(self, payload: Dict[str, Any]) -> bool:
        ...

    @abstractmethod
    def get_resource(self, url: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def upsert_resource_map(self, payload: Dict[str, Any]) -> bool:
        ...

    @abstractmethod
    def get_resource_map(self, url: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def upsert_asset(self, payload: Dict[str, Any]) -> bool:
        ...

    @abstractmethod
    def get_asset(self, url: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def upsert_debug(self, payload: Dict[str, Any]) -> bool:
        ...

    @abstractmethod
    def get_debug(self, url: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def get_all_debug(self) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def delete_account_content(self, fakeids: List[str]) -> None:
        ...

    # ---- shared helpers -------------------------------------------------

    @staticmethod
    def require(payload: Dict[str, Any], *fields: str) -> None:
        """Reject writes that lack their identifying fields."""
        if not isinstance(payload, dict):
            raise ValidationError('Content payload must be an object')
        missing = [name for name in fields if not payload.get(name)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    def store_body(self, kind: str, payload: Dict[str, Any]) -> BlobRef:
        return self.blobs.save_base64(kind, payload['file_base64'], payload.get('file_type'))

    def with_body(self, fields: Dict[str, Any], ref: BlobRef) -> Dict[str, Any]:
        """Attach the blob bytes (base64) and file type to a record view."""
        view = dict(fields)
        view['file_base64'] = self.blobs.read_base64(ref)
        view['file_type'] = ref.file_type
        return view
