"""
SQLite-backed info/article store.

All multi-statement operations run inside ``transaction()`` so a failure
leaves no partial writes behind. The schema is created (and a legacy
``article-info.json`` imported) lazily on first use.
"""
from typing import Any, Dict, Iterable, List, Optional

from ..extensions import db
from ..models import ARTICLE_INFO_MODELS, Article, Info
from ..utils.logger import get_logger
from .base import ArticleInfoStore
from .legacy import LegacyMigrator
from .publish import PublishPage
from .records import ArticleRecord, InfoRecord, merge_info, now_seconds, reset_info, to_number
from .sql_support import LazyInitializer, ensure_tables, transaction

logger = get_logger('sql_article_info')


class SqlArticleInfoStore(ArticleInfoStore):
    """Info/article records in the ``infos`` and ``articles`` tables.

    Example:
        >>> store = SqlArticleInfoStore(LegacyMigrator(base_dir))
        >>> store.update_info(InfoRecord(fakeid='MzA', count=1, articles=5))
        True
        >>> store.get_info('MzA').articles
        5
    """

    def __init__(self, migrator: LegacyMigrator):
        self.migrator = migrator
        self.ready = LazyInitializer('SqlArticleInfoStore', self._setup)

    def _setup(self) -> None:
        ensure_tables(ARTICLE_INFO_MODELS)
        self.migrator.migrate_article_info()

    # ---- infos ---------------------------------------------------------

    def get_info(self, fakeid: str) -> Optional[InfoRecord]:
        self.ready()
        row = db.session.get(Info, fakeid)
        return row.to_record() if row else None

    def get_all_infos(self) -> List[InfoRecord]:
        self.ready()
        return [row.to_record() for row in Info.query.all()]

    def update_info(self, info: InfoRecord) -> bool:
        self.ready()
        with transaction():
            row = db.session.get(Info, info.fakeid)
            merged = merge_info(row.to_record() if row else None, info, now_seconds())
            Info.save_record(merged)
        return True

    def update_last_update_time(self, fakeid: str) -> bool:
        self.ready()
        with transaction():
            Info.query.filter_by(fakeid=fakeid).update({'last_update_time': now_seconds()})
        return True

    def import_infos(self, infos: Iterable[InfoRecord]) -> None:
        self.ready()
        infos = list(infos)
        with transaction():
            for info in infos:
                row = db.session.get(Info, info.fakeid)
                Info.save_record(reset_info(row.to_record() if row else None, info, now_seconds()))
        logger.info(f"Imported {len(infos)} account infos")

    # ---- articles ------------------------------------------------------

    def sync_article_cache(self, account: InfoRecord, publish_page: Dict[str, Any]) -> None:
        self.ready()
        fakeid = account.fakeid
        page = PublishPage.parse(publish_page, fakeid)

        msg_count = 0
        article_count = 0
        with transaction():
            for batch in page.batches:
                new_entries = 0
                for article in batch:
                    _, created = Article.save_record(article)
                    if created:
                        new_entries += 1
                article_count += new_entries
                if new_entries > 0:
                    msg_count += 1

            row = db.session.get(Info, fakeid)
            existing = row.to_record() if row else None
            update = InfoRecord(
                fakeid=fakeid,
                completed=page.completed,
                count=msg_count,
                articles=article_count,
                nickname=account.nickname,
                round_head_img=account.round_head_img,
                total_count=page.total_count,
            )
            Info.save_record(merge_info(existing, update, now_seconds()))

        logger.debug(
            f"Synced publish page for {fakeid}: "
            f"{article_count} new articles in {msg_count} batches, completed={page.completed}"
        )

    def _cached_before(self, fakeid: str, create_time):
        return Article.query.filter(
            Article.fakeid == fakeid,
            Article.create_time < to_number(create_time),
        )

    def hit_cache(self, fakeid: str, create_time) -> bool:
        self.ready()
        return self._cached_before(fakeid, create_time).limit(1).first() is not None

    def get_article_cache(self, fakeid: str, create_time) -> List[ArticleRecord]:
        self.ready()
        rows = self._cached_before(fakeid, create_time).order_by(Article.create_time.asc()).all()
        return [row.to_record() for row in rows]

    def get_article_by_link(self, url: str) -> Optional[ArticleRecord]:
        self.ready()
        row = Article.query.filter_by(link=url).first()
        return row.to_record() if row else None

    def upsert_article(self, article: ArticleRecord) -> bool:
        article.validate()
        self.ready()
        with transaction():
            Article.save_record(article)
        return True

    def delete_article(self, fakeid: str, aid: str, link: Optional[str] = None) -> bool:
        self.ready()
        with transaction():
            removed = Article.query.filter_by(fakeid=str(fakeid), aid=str(aid)).delete()
            if removed == 0 and link:
                target = Article.query.filter_by(link=link).first()
                if target is not None:
                    removed = Article.query.filter_by(fakeid=target.fakeid, aid=target.aid).delete()
        return removed > 0

    def mark_article_deleted(self, url: str) -> None:
        self.ready()
        with transaction():
            row = Article.query.filter_by(link=url).first()
            if row is None:
                return
            record = row.to_record()
            record.is_deleted = True
            row.is_deleted = True
            row.payload = record.to_payload()

    def delete_account_data(self, fakeids: List[str]) -> None:
        if not fakeids:
            return
        self.ready()
        with transaction():
            Info.query.filter(Info.fakeid.in_(fakeids)).delete(synchronize_session=False)
            Article.query.filter(Article.fakeid.in_(fakeids)).delete(synchronize_session=False)
        logger.info(f"Deleted info and articles for {len(fakeids)} accounts")
