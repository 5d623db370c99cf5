"""
Content Store Tests

Every test runs against both the SQLite and the JSON-file backend.
"""
import os
import pytest

from article_store.store.errors import BlobNotFoundError, ValidationError

from conftest import b64

FAKEID = 'MzA5MDAwMDAwMA=='
URL = 'https://mp.example.com/s/100_1'


@pytest.fixture
def content(stores):
    return stores.content


class TestHtml:
    """Tests for html snapshots."""

    def test_upsert_and_get(self, content, sample_html_data):
        assert content.upsert_html(sample_html_data) is True

        html = content.get_html(URL)
        assert html == {
            'fakeid': FAKEID,
            'url': URL,
            'title': 'Article 100_1',
            'commentID': '2247483650',
            'file_base64': sample_html_data['file_base64'],
            'file_type': 'text/html',
        }

    def test_get_missing(self, content):
        assert content.get_html('https://mp.example.com/s/none') is None

    def test_overwrite(self, content, sample_html_data):
        content.upsert_html(sample_html_data)
        sample_html_data['file_base64'] = b64(b'<html>v2</html>')
        sample_html_data['commentID'] = None
        content.upsert_html(sample_html_data)

        html = content.get_html(URL)
        assert html['file_base64'] == b64(b'<html>v2</html>')
        assert html['commentID'] is None

    def test_delete(self, content, sample_html_data):
        content.upsert_html(sample_html_data)

        assert content.delete_html(URL) is True
        assert content.get_html(URL) is None
        assert content.delete_html(URL) is False

    def test_delete_keeps_blob(self, stores, sample_html_data):
        """Test deleting a record never deletes its bytes."""
        stores.content.upsert_html(sample_html_data)
        blob_dir = os.path.join(stores.blobs.root_dir, 'html')
        before = os.listdir(blob_dir)

        stores.content.delete_html(URL)

        assert os.listdir(blob_dir) == before

    def test_missing_fields(self, content, sample_html_data):
        del sample_html_data['fakeid']
        with pytest.raises(ValidationError):
            content.upsert_html(sample_html_data)

    def test_missing_body(self, content, sample_html_data):
        del sample_html_data['file_base64']
        with pytest.raises(ValidationError):
            content.upsert_html(sample_html_data)

    def test_invalid_body_writes_nothing(self, content, sample_html_data):
        sample_html_data['file_base64'] = 'abc'
        with pytest.raises(ValidationError):
            content.upsert_html(sample_html_data)
        assert content.get_html(URL) is None

    def test_dangling_blob_raises(self, stores, sample_html_data):
        """Test an indexed blob whose file vanished is reported, not hidden."""
        stores.content.upsert_html(sample_html_data)
        blob_dir = os.path.join(stores.blobs.root_dir, 'html')
        for name in os.listdir(blob_dir):
            os.remove(os.path.join(blob_dir, name))

        with pytest.raises(BlobNotFoundError):
            stores.content.get_html(URL)


class TestPayloadKinds:
    """Tests for metadata, comment, comment-reply and resource-map."""

    def test_metadata_keeps_open_fields(self, content):
        payload = {
            'fakeid': FAKEID,
            'url': URL,
            'title': 'Article',
            'readNum': 1024,
            'oldLikeNum': 7,
            'extra': {'nested': [1, 2, 3]},
        }
        assert content.upsert_metadata(payload) is True
        assert content.get_metadata(URL) == payload

    def test_comment(self, content):
        payload = {'fakeid': FAKEID, 'url': URL, 'title': 'Article', 'data': {'elected_comment': []}}
        content.upsert_comment(payload)
        assert content.get_comment(URL) == payload

    def test_comment_reply_keyed_by_content_id(self, content):
        first = {'fakeid': FAKEID, 'url': URL, 'title': 'A', 'data': {'n': 1}, 'contentID': '111'}
        second = {'fakeid': FAKEID, 'url': URL, 'title': 'A', 'data': {'n': 2}, 'contentID': '222'}
        content.upsert_comment_reply(first)
        content.upsert_comment_reply(second)

        assert content.get_comment_reply(URL, '111') == first
        assert content.get_comment_reply(URL, '222') == second
        assert content.get_comment_reply(URL, '333') is None

    def test_comment_reply_requires_content_id(self, content):
        with pytest.raises(ValidationError):
            content.upsert_comment_reply({'fakeid': FAKEID, 'url': URL, 'title': 'A', 'data': {}})

    def test_resource_map(self, content):
        payload = {'fakeid': FAKEID, 'url': URL, 'resources': ['https://a/1.png', 'https://a/2.css']}
        content.upsert_resource_map(payload)
        assert content.get_resource_map(URL) == payload

    def test_missing_url(self, content):
        with pytest.raises(ValidationError):
            content.upsert_metadata({'fakeid': FAKEID, 'title': 'x'})

    def test_absent_keys(self, content):
        assert content.get_metadata(URL) is None
        assert content.get_comment(URL) is None
        assert content.get_resource_map(URL) is None


class TestBlobKinds:
    """Tests for resource, asset and debug records."""

    def test_resource(self, content):
        payload = {'fakeid': FAKEID, 'url': 'https://a/1.png', 'file_base64': b64(b'png'), 'file_type': 'image/png'}
        content.upsert_resource(payload)

        assert content.get_resource('https://a/1.png') == {
            'fakeid': FAKEID,
            'url': 'https://a/1.png',
            'file_base64': b64(b'png'),
            'file_type': 'image/png',
        }

    def test_asset_default_file_type(self, content):
        content.upsert_asset({'fakeid': FAKEID, 'url': 'https://a/cover.jpg', 'file_base64': b64(b'jpg')})

        asset = content.get_asset('https://a/cover.jpg')
        assert asset['file_type'] == 'application/octet-stream'
        assert asset['file_base64'] == b64(b'jpg')

    def test_shared_bytes_deduplicated(self, stores):
        """Test two resources with identical bytes share one blob file."""
        body = b64(b'same image')
        stores.content.upsert_resource({'fakeid': FAKEID, 'url': 'https://a/1.png', 'file_base64': body})
        stores.content.upsert_resource({'fakeid': FAKEID, 'url': 'https://a/2.png', 'file_base64': body})

        assert len(os.listdir(os.path.join(stores.blobs.root_dir, 'resource'))) == 1
        assert stores.content.get_resource('https://a/2.png')['file_base64'] == body

    def test_debug_and_get_all(self, content):
        for index in range(3):
            content.upsert_debug({
                'type': 'appmsgpublish',
                'url': f'https://debug/{index}',
                'title': f'Debug {index}',
                'fakeid': FAKEID,
                'file_base64': b64(f'body {index}'.encode()),
                'file_type': 'application/json',
            })

        single = content.get_debug('https://debug/1')
        assert single['title'] == 'Debug 1'
        assert single['type'] == 'appmsgpublish'

        records = content.get_all_debug()
        assert [record['url'] for record in records] == ['https://debug/0', 'https://debug/1', 'https://debug/2']
        assert records[2]['file_base64'] == b64(b'body 2')

    def test_get_all_debug_empty(self, content):
        assert content.get_all_debug() == []


class TestDeleteAccountContent:
    """Tests for delete_account_content."""

    def test_removes_every_kind(self, content, sample_html_data):
        content.upsert_html(sample_html_data)
        content.upsert_metadata({'fakeid': FAKEID, 'url': URL, 'title': 'x'})
        content.upsert_comment({'fakeid': FAKEID, 'url': URL, 'title': 'x', 'data': {}})
        content.upsert_comment_reply({'fakeid': FAKEID, 'url': URL, 'title': 'x', 'data': {}, 'contentID': '1'})
        content.upsert_resource({'fakeid': FAKEID, 'url': 'https://a/1.png', 'file_base64': b64(b'r')})
        content.upsert_resource_map({'fakeid': FAKEID, 'url': URL, 'resources': []})
        content.upsert_asset({'fakeid': FAKEID, 'url': 'https://a/c.jpg', 'file_base64': b64(b'a')})
        content.upsert_debug({'type': 't', 'url': URL, 'title': 'x', 'fakeid': FAKEID, 'file_base64': b64(b'd')})
        content.upsert_metadata({'fakeid': 'other', 'url': 'https://mp.example.com/s/other', 'title': 'y'})

        content.delete_account_content([FAKEID])

        assert content.get_html(URL) is None
        assert content.get_metadata(URL) is None
        assert content.get_comment(URL) is None
        assert content.get_comment_reply(URL, '1') is None
        assert content.get_resource('https://a/1.png') is None
        assert content.get_resource_map(URL) is None
        assert content.get_asset('https://a/c.jpg') is None
        assert content.get_debug(URL) is None
        assert content.get_metadata('https://mp.example.com/s/other') is not None

    def test_empty_input_is_noop(self, content):
        content.upsert_metadata({'fakeid': FAKEID, 'url': URL, 'title': 'x'})
        content.delete_account_content([])
        assert content.get_metadata(URL) is not None
