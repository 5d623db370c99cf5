"""
数据访问层

接口定义在 base.py；sqlite 与 file 两套实现由 registry.build_stores 按配置选择。
"""
from .errors import (
    StoreError,
    ValidationError,
    NotFoundError,
    BlobNotFoundError,
    MigrationFailure,
    MalformedUpstreamPayload,
)
from .records import BlobRef, InfoRecord, ArticleRecord
from .base import BlobStore, ArticleInfoStore, ContentStore

__all__ = [
    'StoreError',
    'ValidationError',
    'NotFoundError',
    'BlobNotFoundError',
    'MigrationFailure',
    'MalformedUpstreamPayload',
    'BlobRef',
    'InfoRecord',
    'ArticleRecord',
    'BlobStore',
    'ArticleInfoStore',
    'ContentStore',
]
