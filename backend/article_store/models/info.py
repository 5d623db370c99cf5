"""
公众号信息模型
"""
from ..extensions import db
from ..store.records import InfoRecord
from .base import UpsertMixin


class Info(UpsertMixin, db.Model):
    """公众号聚合信息（每个 fakeid 一行）"""
    __tablename__ = 'infos'

    fakeid = db.Column(db.Text, primary_key=True)

    # 同步进度
    completed = db.Column(db.Boolean, nullable=False, default=False)  # 历史文章已全部拉取
    count = db.Column(db.Integer, nullable=False, default=0)  # 贡献了新文章的批次数（累加）
    articles = db.Column(db.Integer, nullable=False, default=0)  # 新文章数（累加）

    # 展示信息
    nickname = db.Column(db.Text)
    round_head_img = db.Column(db.Text)
    total_count = db.Column(db.Integer, nullable=False, default=0)

    # Unix 秒
    create_time = db.Column(db.Integer, nullable=False)
    update_time = db.Column(db.Integer, nullable=False)
    last_update_time = db.Column(db.Integer)

    def to_record(self) -> InfoRecord:
        return InfoRecord(
            fakeid=self.fakeid,
            completed=bool(self.completed),
            count=self.count or 0,
            articles=self.articles or 0,
            nickname=self.nickname or None,
            round_head_img=self.round_head_img or None,
            total_count=self.total_count or 0,
            create_time=self.create_time,
            update_time=self.update_time,
            last_update_time=self.last_update_time,
        )

    @classmethod
    def save_record(cls, record: InfoRecord):
        return cls.upsert({'fakeid': record.fakeid}, **record.columns())

    def __repr__(self):
        return f'<Info {self.fakeid}>'
