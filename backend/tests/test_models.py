"""
Model Tests

Tests for database models and the record types they store.
"""
import pytest
from sqlalchemy import inspect

from article_store.extensions import db
from article_store.models import ARTICLE_INFO_MODELS, CONTENT_MODELS, Article, Info, MetadataEntry
from article_store.store.errors import MalformedUpstreamPayload, ValidationError
from article_store.store.publish import PublishPage, parse_publish_info
from article_store.store.records import ArticleRecord, InfoRecord, merge_info, reset_info, to_number
from article_store.store.sql_support import ensure_tables


@pytest.fixture
def tables(app):
    ensure_tables(ARTICLE_INFO_MODELS + CONTENT_MODELS)
    return inspect(db.engine)


class TestSchema:
    """Tests for the relational layout."""

    def test_tables_created(self, tables):
        names = set(tables.get_table_names())
        assert {'infos', 'articles', 'html', 'metadata', 'comment', 'comment_reply',
                'resource', 'resource_map', 'asset', 'debug'} <= names

    def test_article_indexes(self, tables):
        indexes = {index['name']: index['column_names'] for index in tables.get_indexes('articles')}
        assert indexes['idx_articles_link'] == ['link']
        assert indexes['idx_articles_fakeid_create_time'] == ['fakeid', 'create_time']

    def test_content_tables_indexed_on_fakeid(self, tables):
        for model in CONTENT_MODELS:
            indexes = {index['name'] for index in tables.get_indexes(model.__tablename__)}
            assert f'idx_{model.__tablename__}_fakeid' in indexes

    def test_comment_reply_primary_key(self, tables):
        assert tables.get_pk_constraint('comment_reply')['constrained_columns'] == ['url', 'content_id']

    def test_wal_enabled(self, tables):
        mode = db.session.execute(db.text('PRAGMA journal_mode')).scalar()
        assert mode.lower() == 'wal'


class TestUpsertMixin:
    """Tests for UpsertMixin."""

    def test_create_then_update(self, tables):
        row, created = MetadataEntry.upsert({'url': 'u'}, fakeid='f', payload='{}')
        db.session.commit()
        assert created is True

        row, created = MetadataEntry.upsert({'url': 'u'}, fakeid='g', payload='{"a": 1}')
        db.session.commit()
        assert created is False
        assert MetadataEntry.query.count() == 1
        assert row.get_payload() == {'a': 1}

    def test_article_save_record(self, tables):
        record = ArticleRecord.from_dict({'fakeid': 'f', 'aid': 1, 'link': 'l', 'create_time': '1700000000'})
        row, created = Article.save_record(record)
        db.session.commit()

        assert created is True
        assert row.aid == '1'
        assert row.create_time == 1700000000
        assert db.session.get(Article, ('f', '1')).to_record().link == 'l'

    def test_info_to_record(self, tables):
        Info.save_record(InfoRecord(fakeid='f', count=2, create_time=1, update_time=1))
        db.session.commit()

        record = db.session.get(Info, 'f').to_record()
        assert record.count == 2
        assert record.completed is False


class TestRecords:
    """Tests for record helpers."""

    def test_to_number(self):
        assert to_number('42') == 42
        assert to_number(1.5) == 1.5
        assert to_number(None) == 0
        assert to_number('abc', 7) == 7
        assert to_number(float('nan')) == 0

    def test_info_requires_fakeid(self):
        with pytest.raises(ValidationError):
            InfoRecord.from_dict({'nickname': 'x'})

    def test_info_to_dict_drops_unset_optionals(self):
        data = InfoRecord(fakeid='f').to_dict()
        assert 'nickname' not in data
        assert 'last_update_time' not in data
        assert data['count'] == 0

    def test_merge_info(self):
        existing = InfoRecord(fakeid='f', completed=True, count=1, articles=2, nickname='a',
                              create_time=10, update_time=10, last_update_time=5)
        merged = merge_info(existing, InfoRecord(fakeid='f', count=3, articles=4, last_update_time=99), 20)

        assert merged.completed is True
        assert (merged.count, merged.articles) == (4, 6)
        assert merged.nickname is None
        assert (merged.create_time, merged.update_time, merged.last_update_time) == (10, 20, 5)

    def test_reset_info(self):
        existing = InfoRecord(fakeid='f', completed=True, count=3, create_time=10, last_update_time=5)
        reset = reset_info(existing, InfoRecord(fakeid='f', nickname='n', count=8), 20)

        assert reset.completed is False
        assert reset.count == 0
        assert (reset.create_time, reset.update_time, reset.last_update_time) == (10, 20, 5)

    def test_article_extra_roundtrip(self):
        raw = {'fakeid': 'f', 'aid': 'a', 'link': 'l', 'create_time': 1, 'is_deleted': False, 'cover': 'c'}
        record = ArticleRecord.from_dict(raw)

        assert record.extra == {'cover': 'c'}
        assert record.to_dict() == raw
        assert record.key == 'f:a'


class TestPublishPage:
    """Tests for publish page parsing."""

    def test_parse_publish_info_string(self):
        assert parse_publish_info('{"appmsgex": []}') == {'appmsgex': []}

    def test_parse_publish_info_invalid(self):
        with pytest.raises(MalformedUpstreamPayload):
            parse_publish_info('[1, 2]')

    def test_page_counts(self):
        page = PublishPage.parse({
            'total_count': '9',
            'publish_list': [
                {'publish_info': '{"appmsgex": [{"aid": "1", "link": "l1"}]}'},
                {'publish_info': 'broken'},
                {'publish_info': None},
            ],
        }, 'f')

        assert page.total_count == 9
        assert page.batch_count == 2
        assert page.skipped_batches == 1
        assert page.completed is False
        assert page.batches[0][0].fakeid == 'f'

    def test_missing_publish_list(self):
        page = PublishPage.parse({'total_count': 3}, 'f')
        assert page.completed is True
        assert page.batches == []
