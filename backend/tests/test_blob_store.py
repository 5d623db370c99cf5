"""
Blob Store Tests

Tests for content-addressed blob storage.
"""
import hashlib
import os
import pytest

from article_store.store.blobs import LocalBlobStore
from article_store.store.errors import BlobNotFoundError, ValidationError
from article_store.store.records import BlobRef

from conftest import b64


@pytest.fixture
def blobs(tmp_path):
    return LocalBlobStore(str(tmp_path / 'blobs'))


class TestLocalBlobStore:
    """Tests for LocalBlobStore."""

    def test_save_returns_full_ref(self, blobs):
        """Test save computes digest, size and relative path."""
        data = b'<html>hello</html>'
        ref = blobs.save('html', data, 'text/html')

        sha = hashlib.sha256(data).hexdigest()
        assert ref.kind == 'html'
        assert ref.sha256 == sha
        assert ref.size == len(data)
        assert ref.file_type == 'text/html'
        assert ref.relative_path == f'html/{sha}'

    def test_save_writes_under_kind_directory(self, blobs):
        """Test bytes land at <root>/<kind>/<sha256>."""
        ref = blobs.save('asset', b'\x89PNG')
        path = os.path.join(blobs.root_dir, 'asset', ref.sha256)

        assert os.path.isfile(path)
        with open(path, 'rb') as f:
            assert f.read() == b'\x89PNG'

    def test_default_file_type(self, blobs):
        """Test missing file type falls back to octet-stream."""
        ref = blobs.save('resource', b'abc')
        assert ref.file_type == 'application/octet-stream'

    def test_identical_bytes_are_stored_once(self, blobs):
        """Test dedup: saving the same bytes twice keeps one file."""
        first = blobs.save('html', b'same bytes', 'text/html')
        mtime = os.path.getmtime(os.path.join(blobs.root_dir, first.relative_path))

        second = blobs.save('html', b'same bytes', 'text/plain')

        assert second.relative_path == first.relative_path
        assert second.file_type == 'text/plain'
        assert os.listdir(os.path.join(blobs.root_dir, 'html')) == [first.sha256]
        assert os.path.getmtime(os.path.join(blobs.root_dir, first.relative_path)) == mtime

    def test_same_bytes_different_kind(self, blobs):
        """Test dedup is per kind."""
        html = blobs.save('html', b'payload')
        debug = blobs.save('debug', b'payload')

        assert html.sha256 == debug.sha256
        assert html.relative_path != debug.relative_path
        assert os.path.isfile(os.path.join(blobs.root_dir, html.relative_path))
        assert os.path.isfile(os.path.join(blobs.root_dir, debug.relative_path))

    def test_read_roundtrip(self, blobs):
        """Test read returns the saved bytes."""
        ref = blobs.save('html', b'roundtrip')
        assert blobs.read(ref) == b'roundtrip'

    def test_base64_helpers(self, blobs):
        """Test save_base64/read_base64 convenience wrappers."""
        ref = blobs.save_base64('asset', b64(b'binary\x00data'), 'image/png')

        assert blobs.read(ref) == b'binary\x00data'
        assert blobs.read_base64(ref) == b64(b'binary\x00data')

    def test_invalid_base64(self, blobs):
        """Test malformed base64 is a validation error."""
        with pytest.raises(ValidationError):
            blobs.save_base64('asset', 'abc')

    def test_invalid_kind(self, blobs):
        """Test kinds are restricted to safe directory names."""
        with pytest.raises(ValidationError):
            blobs.save('../escape', b'x')

    def test_read_missing_blob(self, blobs):
        """Test a dangling reference raises BlobNotFoundError."""
        ref = BlobRef(
            kind='html',
            sha256='0' * 64,
            file_type='text/html',
            size=1,
            relative_path='html/' + '0' * 64,
        )
        with pytest.raises(BlobNotFoundError) as exc_info:
            blobs.read(ref)
        assert exc_info.value.relative_path == ref.relative_path

    def test_read_rejects_path_traversal(self, blobs):
        """Test relative paths cannot leave the blob root."""
        ref = BlobRef(kind='html', sha256='x', file_type='text/html', size=0, relative_path='../../etc/passwd')
        with pytest.raises(BlobNotFoundError):
            blobs.read(ref)
