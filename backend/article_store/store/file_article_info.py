"""
JSON-file info/article store.

The live format is the legacy ``article-info.json`` document::

    {"infos": {fakeid: info}, "articlesByKey": {"fakeid:aid": article}}

Each operation is one cycle on the exclusive queue, so the merge and
accumulator rules behave exactly as in the relational store.
"""
import os
from typing import Any, Dict, Iterable, List, Optional

from ..utils.logger import get_logger
from .base import ArticleInfoStore
from .file_document import JsonDocument
from .legacy import ARTICLE_INFO_SNAPSHOT
from .publish import PublishPage
from .records import ArticleRecord, InfoRecord, merge_info, now_seconds, reset_info, to_number

logger = get_logger('file_article_info')

INFOS = 'infos'
ARTICLES = 'articlesByKey'


def _info(state: Dict[str, Any], fakeid: str) -> Optional[InfoRecord]:
    raw = state[INFOS].get(fakeid)
    return InfoRecord.from_dict(raw) if isinstance(raw, dict) and raw.get('fakeid') else None


def _articles(state: Dict[str, Any]) -> List[ArticleRecord]:
    return [ArticleRecord.from_dict(raw) for raw in state[ARTICLES].values() if isinstance(raw, dict)]


class FileArticleInfoStore(ArticleInfoStore):
    """Info/article records kept in ``<base>/article-info.json``."""

    def __init__(self, base_dir: str, document: Optional[JsonDocument] = None):
        self.document = document or JsonDocument(
            os.path.join(base_dir, ARTICLE_INFO_SNAPSHOT),
            sections=(INFOS, ARTICLES),
        )

    # ---- infos ---------------------------------------------------------

    def get_info(self, fakeid: str) -> Optional[InfoRecord]:
        return self.document.read(lambda state: _info(state, fakeid))

    def get_all_infos(self) -> List[InfoRecord]:
        def reader(state):
            return [InfoRecord.from_dict(raw) for raw in state[INFOS].values()
                    if isinstance(raw, dict) and raw.get('fakeid')]
        return self.document.read(reader)

    def update_info(self, info: InfoRecord) -> bool:
        def mutation(state):
            merged = merge_info(_info(state, info.fakeid), info, now_seconds())
            state[INFOS][info.fakeid] = merged.to_dict()
        self.document.mutate(mutation)
        return True

    def update_last_update_time(self, fakeid: str) -> bool:
        def mutation(state):
            raw = state[INFOS].get(fakeid)
            if isinstance(raw, dict):
                raw['last_update_time'] = now_seconds()
        self.document.mutate(mutation)
        return True

    def import_infos(self, infos: Iterable[InfoRecord]) -> None:
        infos = list(infos)

        def mutation(state):
            for info in infos:
                record = reset_info(_info(state, info.fakeid), info, now_seconds())
                state[INFOS][info.fakeid] = record.to_dict()
        self.document.mutate(mutation)
        logger.info(f"Imported {len(infos)} account infos")

    # ---- articles ------------------------------------------------------

    def sync_article_cache(self, account: InfoRecord, publish_page: Dict[str, Any]) -> None:
        fakeid = account.fakeid
        page = PublishPage.parse(publish_page, fakeid)

        def mutation(state):
            msg_count = 0
            article_count = 0
            for batch in page.batches:
                new_entries = 0
                for article in batch:
                    if article.key not in state[ARTICLES]:
                        new_entries += 1
                    state[ARTICLES][article.key] = article.to_dict()
                article_count += new_entries
                if new_entries > 0:
                    msg_count += 1

            update = InfoRecord(
                fakeid=fakeid,
                completed=page.completed,
                count=msg_count,
                articles=article_count,
                nickname=account.nickname,
                round_head_img=account.round_head_img,
                total_count=page.total_count,
            )
            merged = merge_info(_info(state, fakeid), update, now_seconds())
            state[INFOS][fakeid] = merged.to_dict()
            return msg_count, article_count

        msg_count, article_count = self.document.mutate(mutation)
        logger.debug(
            f"Synced publish page for {fakeid}: "
            f"{article_count} new articles in {msg_count} batches, completed={page.completed}"
        )

    def _cached_before(self, state, fakeid: str, create_time) -> List[ArticleRecord]:
        threshold = to_number(create_time)
        return [
            article for article in _articles(state)
            if article.fakeid == fakeid and to_number(article.create_time) < threshold
        ]

    def hit_cache(self, fakeid: str, create_time) -> bool:
        return self.document.read(lambda state: bool(self._cached_before(state, fakeid, create_time)))

    def get_article_cache(self, fakeid: str, create_time) -> List[ArticleRecord]:
        def reader(state):
            articles = self._cached_before(state, fakeid, create_time)
            return sorted(articles, key=lambda article: to_number(article.create_time))
        return self.document.read(reader)

    def get_article_by_link(self, url: str) -> Optional[ArticleRecord]:
        def reader(state):
            return next((article for article in _articles(state) if article.link == url), None)
        return self.document.read(reader)

    def upsert_article(self, article: ArticleRecord) -> bool:
        article.validate()

        def mutation(state):
            state[ARTICLES][article.key] = article.to_dict()
        self.document.mutate(mutation)
        return True

    def delete_article(self, fakeid: str, aid: str, link: Optional[str] = None) -> bool:
        def mutation(state):
            articles = state[ARTICLES]
            if articles.pop(f'{fakeid}:{aid}', None) is not None:
                return True
            if not link:
                return False
            for key, raw in articles.items():
                if isinstance(raw, dict) and raw.get('link') == link:
                    del articles[key]
                    return True
            return False
        return self.document.mutate(mutation)

    def mark_article_deleted(self, url: str) -> None:
        def mutation(state):
            for raw in state[ARTICLES].values():
                if isinstance(raw, dict) and raw.get('link') == url:
                    raw['is_deleted'] = True
                    return
        self.document.mutate(mutation)

    def delete_account_data(self, fakeids: List[str]) -> None:
        if not fakeids:
            return
        targets = set(fakeids)

        def mutation(state):
            for fakeid in targets:
                state[INFOS].pop(fakeid, None)
            state[ARTICLES] = {
                key: raw for key, raw in state[ARTICLES].items()
                if not (isinstance(raw, dict) and raw.get('fakeid') in targets)
            }
        self.document.mutate(mutation)
        logger.info(f"Deleted info and articles for {len(fakeids)} accounts")
