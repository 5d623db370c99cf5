"""
内容缓存模型

八类以 url 为键的辅助记录。html / resource / asset / debug 只保存 blob 引用，
字节内容存放在 blob 目录中。
"""
import json

from ..extensions import db
from ..store.records import BlobRef
from .base import UpsertMixin


class BlobColumnsMixin:
    """blob 引用列"""
    blob_kind = db.Column(db.Text, nullable=False)
    blob_sha256 = db.Column(db.Text, nullable=False)
    blob_file_type = db.Column(db.Text, nullable=False)
    blob_size = db.Column(db.Integer, nullable=False)
    blob_relative_path = db.Column(db.Text, nullable=False)

    @property
    def blob_ref(self) -> BlobRef:
        return BlobRef(
            kind=self.blob_kind,
            sha256=self.blob_sha256,
            file_type=self.blob_file_type,
            size=self.blob_size or 0,
            relative_path=self.blob_relative_path,
        )

    @staticmethod
    def blob_columns(ref: BlobRef) -> dict:
        return {
            'blob_kind': ref.kind,
            'blob_sha256': ref.sha256,
            'blob_file_type': ref.file_type,
            'blob_size': ref.size,
            'blob_relative_path': ref.relative_path,
        }


class PayloadMixin:
    """JSON 载荷列"""
    payload = db.Column(db.Text, nullable=False)

    def get_payload(self):
        """解析载荷，损坏时返回 None"""
        try:
            return json.loads(self.payload)
        except (TypeError, ValueError):
            return None

    @staticmethod
    def dump_payload(data) -> str:
        return json.dumps(data, ensure_ascii=False)


class HtmlSnapshot(UpsertMixin, BlobColumnsMixin, db.Model):
    """文章 HTML 快照"""
    __tablename__ = 'html'
    __table_args__ = (db.Index('idx_html_fakeid', 'fakeid'),)

    url = db.Column(db.Text, primary_key=True)
    fakeid = db.Column(db.Text, nullable=False)
    title = db.Column(db.Text, nullable=False)
    comment_id = db.Column(db.Text)


class MetadataEntry(UpsertMixin, PayloadMixin, db.Model):
    """文章元数据（阅读数等），载荷字段不固定"""
    __tablename__ = 'metadata'
    __table_args__ = (db.Index('idx_metadata_fakeid', 'fakeid'),)

    url = db.Column(db.Text, primary_key=True)
    fakeid = db.Column(db.Text, nullable=False)


class CommentEntry(UpsertMixin, PayloadMixin, db.Model):
    """文章留言"""
    __tablename__ = 'comment'
    __table_args__ = (db.Index('idx_comment_fakeid', 'fakeid'),)

    url = db.Column(db.Text, primary_key=True)
    fakeid = db.Column(db.Text, nullable=False)


class CommentReplyEntry(UpsertMixin, PayloadMixin, db.Model):
    """留言回复，主键 (url, content_id)"""
    __tablename__ = 'comment_reply'
    __table_args__ = (db.Index('idx_comment_reply_fakeid', 'fakeid'),)

    url = db.Column(db.Text, primary_key=True)
    content_id = db.Column(db.Text, primary_key=True)
    fakeid = db.Column(db.Text, nullable=False)


class ResourceEntry(UpsertMixin, BlobColumnsMixin, db.Model):
    """文章内引用的资源文件（图片、样式等）"""
    __tablename__ = 'resource'
    __table_args__ = (db.Index('idx_resource_fakeid', 'fakeid'),)

    url = db.Column(db.Text, primary_key=True)
    fakeid = db.Column(db.Text, nullable=False)


class ResourceMapEntry(UpsertMixin, PayloadMixin, db.Model):
    """文章 -> 资源 url 列表"""
    __tablename__ = 'resource_map'
    __table_args__ = (db.Index('idx_resource_map_fakeid', 'fakeid'),)

    url = db.Column(db.Text, primary_key=True)
    fakeid = db.Column(db.Text, nullable=False)


class AssetEntry(UpsertMixin, BlobColumnsMixin, db.Model):
    """独立素材（封面、头像等）"""
    __tablename__ = 'asset'
    __table_args__ = (db.Index('idx_asset_fakeid', 'fakeid'),)

    url = db.Column(db.Text, primary_key=True)
    fakeid = db.Column(db.Text, nullable=False)


class DebugEntry(UpsertMixin, BlobColumnsMixin, db.Model):
    """调试用原始响应"""
    __tablename__ = 'debug'
    __table_args__ = (db.Index('idx_debug_fakeid', 'fakeid'),)

    url = db.Column(db.Text, primary_key=True)
    type = db.Column(db.Text, nullable=False)
    title = db.Column(db.Text, nullable=False)
    fakeid = db.Column(db.Text, nullable=False)


CONTENT_MODELS = (
    HtmlSnapshot,
    MetadataEntry,
    CommentEntry,
    CommentReplyEntry,
    ResourceEntry,
    ResourceMapEntry,
    AssetEntry,
    DebugEntry,
)
