"""
接口公共工具
"""
from functools import wraps
from flask import request

from ..store.errors import ValidationError
from ..utils.responses import ApiResponse
from ..utils.logger import get_logger, log_error

logger = get_logger('api')


def read_body() -> dict:
    """读取 JSON 请求体，非对象时返回空字典"""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def query_arg(name: str) -> str:
    return request.args.get(name, '', type=str)


def store_operation(action: str):
    """
    存储操作装饰器

    ValidationError -> 400，其余异常记录日志后返回 500
    """
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except ValidationError as e:
                logger.warning(f"{action} 参数无效: {e}")
                return ApiResponse.bad_request(str(e))
            except Exception as e:
                log_error(e, action)
                return ApiResponse.server_error(f'{action} failed')
        return decorated
    return decorator
