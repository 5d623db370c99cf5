"""
Local Blob Store - content-addressed files under the blob root

Bytes are stored at ``<root>/<kind>/<sha256>``. Identical bytes under the
same kind are written once; later saves only return the existing reference.
Orphaned blobs are never collected.
"""
import hashlib
import os
import re
import tempfile
from typing import Optional

from ..utils.logger import get_logger
from .base import BlobStore
from .errors import BlobNotFoundError, ValidationError
from .records import DEFAULT_FILE_TYPE, BlobRef

logger = get_logger('blobs')

_KIND_PATTERN = re.compile(r'^[a-zA-Z0-9_-]+$')


class LocalBlobStore(BlobStore):
    """Blob store backed by the local filesystem.

    Example:
        >>> blobs = LocalBlobStore('/srv/data/blobs')
        >>> ref = blobs.save('html', b'<html></html>', 'text/html')
        >>> ref.relative_path
        'html/4f1a...'
        >>> blobs.read(ref)
        b'<html></html>'
    """

    def __init__(self, root_dir: str):
        self.root_dir = os.path.abspath(root_dir)

    def save(self, kind: str, data: bytes, file_type: Optional[str] = None) -> BlobRef:
        if not kind or not _KIND_PATTERN.match(kind):
            raise ValidationError(f'Invalid blob kind: {kind!r}')

        sha256 = hashlib.sha256(data).hexdigest()
        relative_path = f'{kind}/{sha256}'
        abs_path = self._resolve(relative_path)

        os.makedirs(os.path.dirname(abs_path), exist_ok=True)
        if os.path.exists(abs_path):
            logger.debug(f"[BlobStore] Reusing {relative_path}")
        else:
            self._write_atomic(abs_path, data)
            logger.debug(f"[BlobStore] Wrote {relative_path} ({len(data)} bytes)")

        return BlobRef(
            kind=kind,
            sha256=sha256,
            file_type=file_type or DEFAULT_FILE_TYPE,
            size=len(data),
            relative_path=relative_path,
        )

    def read(self, ref: BlobRef) -> bytes:
        abs_path = self._resolve(ref.relative_path)
        try:
            with open(abs_path, 'rb') as f:
                return f.read()
        except FileNotFoundError:
            logger.error(f"[BlobStore] Missing bytes for indexed blob {ref.relative_path}")
            raise BlobNotFoundError(ref.relative_path)

    def _resolve(self, relative_path: str) -> str:
        abs_path = os.path.normpath(os.path.join(self.root_dir, *relative_path.split('/')))
        if os.path.commonpath([abs_path, self.root_dir]) != self.root_dir:
            raise BlobNotFoundError(relative_path)
        return abs_path

    @staticmethod
    def _write_atomic(abs_path: str, data: bytes) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=os.path.dirname(abs_path), prefix='.tmp-')
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            os.replace(tmp_path, abs_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
