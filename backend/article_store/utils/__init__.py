"""
工具模块
"""
from .responses import ApiResponse
from .validators import validate_required, validate_list_field
from .logger import setup_logger, get_logger

__all__ = [
    'ApiResponse',
    'validate_required',
    'validate_list_field',
    'setup_logger',
    'get_logger',
]
