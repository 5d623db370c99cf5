"""
API 蓝图
"""
from .info import info_bp
from .article import article_bp
from .account import account_bp
from .content import content_bp

__all__ = ['info_bp', 'article_bp', 'account_bp', 'content_bp']
