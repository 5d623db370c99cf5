"""
文章模型
"""
import json

from ..extensions import db
from ..store.records import ArticleRecord, to_number
from .base import UpsertMixin


class Article(UpsertMixin, db.Model):
    """文章缓存，主键 (fakeid, aid)，link 作为二级索引"""
    __tablename__ = 'articles'

    __table_args__ = (
        db.Index('idx_articles_fakeid_create_time', 'fakeid', 'create_time'),
        db.Index('idx_articles_link', 'link'),
    )

    fakeid = db.Column(db.Text, primary_key=True)
    aid = db.Column(db.Text, primary_key=True)
    link = db.Column(db.Text, nullable=False)
    create_time = db.Column(db.Integer, nullable=False, default=0)  # 发布时间
    is_deleted = db.Column(db.Boolean, nullable=False, default=False)  # 软删除标记
    payload = db.Column(db.Text, nullable=False)  # 上游原始字段 JSON

    def to_record(self) -> ArticleRecord:
        """还原文章对象，payload 损坏时退回到列值"""
        try:
            parsed = json.loads(self.payload)
        except (TypeError, ValueError):
            parsed = None

        if isinstance(parsed, dict):
            record = ArticleRecord.from_dict(parsed)
            record.fakeid = record.fakeid or self.fakeid
            record.aid = record.aid or self.aid
            record.link = record.link or self.link
            record.create_time = to_number(parsed.get('create_time'), self.create_time)
            if parsed.get('is_deleted') is None:
                record.is_deleted = bool(self.is_deleted)
            return record

        return ArticleRecord(
            fakeid=self.fakeid,
            aid=self.aid,
            link=self.link,
            create_time=self.create_time or 0,
            is_deleted=bool(self.is_deleted),
        )

    @classmethod
    def save_record(cls, record: ArticleRecord):
        """
        Returns:
            (row, created) - created 表示写入前该文章不存在
        """
        return cls.upsert(
            {'fakeid': str(record.fakeid), 'aid': str(record.aid)},
            link=str(record.link),
            create_time=int(to_number(record.create_time)),
            is_deleted=bool(record.is_deleted),
            payload=record.to_payload(),
        )

    def __repr__(self):
        return f'<Article {self.fakeid}:{self.aid}>'
