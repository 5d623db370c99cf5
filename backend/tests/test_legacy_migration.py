"""
Legacy Migration Tests

Tests for importing article-info.json / content-db.json into SQLite.
"""
import json
import pytest

from article_store.store.registry import get_stores

from conftest import b64, make_article

FAKEID = 'MzA5MDAwMDAwMA=='


def write_json(path, data):
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False)


@pytest.fixture
def legacy_article_info(base_dir):
    """Three infos and six articles, one missing its link and one missing its aid."""
    infos = {
        fakeid: {'fakeid': fakeid, 'completed': True, 'count': 3, 'articles': 30, 'nickname': name,
                 'total_count': 30, 'create_time': 1600000000, 'update_time': 1600000100}
        for fakeid, name in (('a', 'Alpha'), ('b', 'Beta'), ('c', 'Gamma'))
    }
    articles = [make_article('a', str(index), 1600000000 + index) for index in range(4)]
    broken = make_article('b', '9', 1600000009)
    del broken['link']
    articles.append(broken)
    no_aid = make_article('b', '8', 1600000008)
    del no_aid['aid']

    by_key = {f"{article['fakeid']}:{article['aid']}": article for article in articles}
    by_key['b:'] = no_aid
    write_json(base_dir / 'article-info.json', {'infos': infos, 'articlesByKey': by_key})


@pytest.fixture
def legacy_content(base_dir):
    """One valid entry per section plus invalid ones, with blobs on disk."""
    stores_blob_dir = base_dir / 'blobs'

    def blob(kind, data, file_type):
        import hashlib
        sha = hashlib.sha256(data).hexdigest()
        (stores_blob_dir / kind).mkdir(parents=True, exist_ok=True)
        (stores_blob_dir / kind / sha).write_bytes(data)
        return {'kind': kind, 'sha256': sha, 'file_type': file_type, 'size': len(data),
                'relative_path': f'{kind}/{sha}'}

    url = 'https://mp.example.com/s/1'
    write_json(base_dir / 'content-db.json', {
        'html': {
            url: {'fakeid': FAKEID, 'url': url, 'title': 'One', 'commentID': '77',
                  'blob': blob('html', b'<html>1</html>', 'text/html')},
            'no-blob': {'fakeid': FAKEID, 'url': 'no-blob', 'title': 'Broken'},
        },
        'metadata': {url: {'fakeid': FAKEID, 'url': url, 'title': 'One', 'readNum': 5}},
        'comment': {url: {'fakeid': FAKEID, 'url': url, 'title': 'One', 'data': {'x': 1}}},
        'commentReply': {
            f'{url}:42': {'fakeid': FAKEID, 'url': url, 'title': 'One', 'data': {}, 'contentID': '42'},
            'no-content-id': {'fakeid': FAKEID, 'url': url, 'title': 'One', 'data': {}},
        },
        'resource': {'https://a/1.png': {'fakeid': FAKEID, 'url': 'https://a/1.png',
                                         'blob': blob('resource', b'png', 'image/png')}},
        'resourceMap': {url: {'fakeid': FAKEID, 'url': url, 'resources': ['https://a/1.png']}},
        'asset': {'https://a/c.jpg': {'url': 'https://a/c.jpg',
                                      'blob': blob('asset', b'jpg', 'image/jpeg')}},
        'debug': {url: {'type': 'html', 'url': url, 'title': 'One', 'fakeid': FAKEID,
                        'blob': blob('debug', b'{}', 'application/json')}},
    })
    return url


class TestArticleInfoMigration:
    """Tests for importing article-info.json."""

    def test_imports_valid_entries(self, app, legacy_article_info):
        store = get_stores().article_info

        infos = store.get_all_infos()
        assert sorted(info.fakeid for info in infos) == ['a', 'b', 'c']
        assert len(store.get_article_cache('a', 1700000000)) == 4
        assert store.get_article_cache('b', 1700000000) == []
        assert store.get_article_by_link('https://mp.example.com/s/8') is None

    def test_keeps_legacy_values(self, app, legacy_article_info):
        info = get_stores().article_info.get_info('a')
        assert info.nickname == 'Alpha'
        assert info.completed is True
        assert info.articles == 30
        assert info.create_time == 1600000000
        assert info.update_time == 1600000100

    def test_runs_once(self, make_app, base_dir, legacy_article_info):
        """Test a restart over a populated store imports nothing again."""
        app = make_app()
        with app.app_context():
            store = get_stores().article_info
            store.delete_account_data(['c'])
            assert len(store.get_all_infos()) == 2

        restarted = make_app()
        with restarted.app_context():
            assert len(get_stores().article_info.get_all_infos()) == 2

    def test_no_snapshot(self, app):
        assert get_stores().article_info.get_all_infos() == []

    def test_corrupt_snapshot_is_contained(self, app, base_dir):
        """Test an unreadable snapshot is logged and the store stays usable."""
        (base_dir / 'article-info.json').write_text('{not json', encoding='utf-8')

        from article_store.store.records import InfoRecord

        store = get_stores().article_info
        assert store.get_all_infos() == []

        store.update_info(InfoRecord(fakeid='a', count=1))
        assert store.get_info('a').count == 1

    def test_migrator_reports_counts(self, app, legacy_article_info):
        from article_store.models import ARTICLE_INFO_MODELS
        from article_store.store.sql_support import ensure_tables

        ensure_tables(ARTICLE_INFO_MODELS)
        counts = get_stores().migrator.migrate_article_info()
        assert counts == {'infos': 3, 'articles': 4, 'skipped': 2}

        assert get_stores().migrator.migrate_article_info() is None


class TestContentMigration:
    """Tests for importing content-db.json."""

    def test_imports_valid_entries(self, app, legacy_content):
        content = get_stores().content
        url = legacy_content

        html = content.get_html(url)
        assert html['commentID'] == '77'
        assert html['file_base64'] == b64(b'<html>1</html>')
        assert content.get_html('no-blob') is None

        assert content.get_metadata(url)['readNum'] == 5
        assert content.get_comment(url)['data'] == {'x': 1}
        assert content.get_comment_reply(url, '42') is not None
        assert content.get_resource('https://a/1.png')['file_type'] == 'image/png'
        assert content.get_resource_map(url)['resources'] == ['https://a/1.png']
        assert content.get_debug(url)['type'] == 'html'

    def test_skips_entries_without_identity(self, app, legacy_content):
        """Test the asset without fakeid is not imported."""
        assert get_stores().content.get_asset('https://a/c.jpg') is None

    def test_content_import_independent_of_article_info(self, app, legacy_content):
        assert get_stores().article_info.get_all_infos() == []
        assert len(get_stores().content.get_all_debug()) == 1
