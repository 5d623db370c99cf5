"""
Parsing of upstream "publish page" documents.

A publish page is what the platform returns for one page of an account's
history::

    {
        "total_count": 420,
        "publish_list": [
            {"publish_type": 101, "publish_info": "{\\"appmsgex\\": [...]}"},
            ...
        ]
    }

``publish_info`` is usually a JSON string embedded in the outer document.
"""
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..utils.logger import get_logger
from .errors import MalformedUpstreamPayload
from .records import ArticleRecord, to_int

logger = get_logger('publish')


def parse_publish_info(raw: Any) -> Dict[str, Any]:
    """Decode one embedded ``publish_info`` value.

    Raises:
        MalformedUpstreamPayload: the value is not a JSON object.
    """
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise MalformedUpstreamPayload(f'publish_info is not valid JSON: {e}') from e
    if not isinstance(raw, dict):
        raise MalformedUpstreamPayload(f'publish_info must be an object, got {type(raw).__name__}')
    return raw


@dataclass
class PublishPage:
    """Articles of one publish page, grouped by publish batch."""

    total_count: int = 0
    batch_count: int = 0
    batches: List[List[ArticleRecord]] = field(default_factory=list)
    skipped_batches: int = 0

    @property
    def completed(self) -> bool:
        """An empty publish list means the account's history is exhausted."""
        return self.batch_count == 0

    @classmethod
    def parse(cls, raw: Any, fakeid: str) -> 'PublishPage':
        """Build the page, forcing every article onto ``fakeid``.

        Batches whose ``publish_info`` cannot be decoded are skipped; articles
        without ``aid`` or ``link`` are dropped.
        """
        raw = raw if isinstance(raw, dict) else {}
        publish_list = raw.get('publish_list')
        if not isinstance(publish_list, list):
            publish_list = []
        items = [item for item in publish_list if isinstance(item, dict) and item.get('publish_info')]

        page = cls(total_count=to_int(raw.get('total_count')), batch_count=len(items))
        for index, item in enumerate(items):
            try:
                publish_info = parse_publish_info(item['publish_info'])
            except MalformedUpstreamPayload as e:
                page.skipped_batches += 1
                logger.warning(f"Skipping publish batch {index} for {fakeid}: {e}")
                continue

            appmsgex = publish_info.get('appmsgex')
            if not isinstance(appmsgex, list):
                appmsgex = []

            articles = []
            for article in appmsgex:
                if not isinstance(article, dict) or not article.get('aid') or not article.get('link'):
                    continue
                articles.append(ArticleRecord.from_dict({**article, 'fakeid': fakeid}))
            page.batches.append(articles)

        return page
