"""
输入验证工具

所有函数返回 (is_valid, error_message[, cleaned_value])，由接口层决定如何响应
"""
import math
from typing import Any, List, Optional, Tuple


def validate_required(data: Any, *fields: str) -> Tuple[bool, Optional[str]]:
    """
    检查必填字段（空字符串、None、0 视为缺失）

    Args:
        data: 请求体或查询参数
        fields: 必填字段名

    Returns:
        (is_valid, missing_field)
    """
    if not data or not hasattr(data, 'get'):
        return False, fields[0] if fields else None

    for field in fields:
        if not data.get(field):
            return False, field

    return True, None


def validate_list_field(data: Any, field: str) -> Tuple[bool, Optional[str], List]:
    """
    检查字段是否为数组

    Returns:
        (is_valid, error_message, value)
    """
    value = data.get(field) if data and hasattr(data, 'get') else None
    if not isinstance(value, list):
        return False, f'`{field}` must be an array', []
    return True, None, value


def parse_create_time(value: Any) -> Tuple[bool, Optional[str], float]:
    """
    解析查询参数中的 create_time（Unix 秒）

    缺失、非数字、0 均视为无效

    Returns:
        (is_valid, error_message, timestamp)
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return False, 'create_time 不能为空', 0

    try:
        number = float(value)
    except (TypeError, ValueError):
        return False, 'create_time 不是有效的数字', 0

    if not math.isfinite(number) or number == 0:
        return False, 'create_time 不是有效的时间戳', 0

    return True, None, number
