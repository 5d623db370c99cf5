"""
数据库模型
"""
from .info import Info
from .article import Article
from .content import (
    CONTENT_MODELS,
    HtmlSnapshot,
    MetadataEntry,
    CommentEntry,
    CommentReplyEntry,
    ResourceEntry,
    ResourceMapEntry,
    AssetEntry,
    DebugEntry,
)

ARTICLE_INFO_MODELS = (Info, Article)

__all__ = [
    'Info',
    'Article',
    'HtmlSnapshot',
    'MetadataEntry',
    'CommentEntry',
    'CommentReplyEntry',
    'ResourceEntry',
    'ResourceMapEntry',
    'AssetEntry',
    'DebugEntry',
    'ARTICLE_INFO_MODELS',
    'CONTENT_MODELS',
]
