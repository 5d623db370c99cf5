"""
公众号信息 API
"""
from flask import Blueprint

from ..store.records import InfoRecord
from ..store.registry import get_stores
from ..utils.responses import ApiResponse
from ..utils.validators import validate_required, validate_list_field
from ..utils.logger import get_logger
from .common import read_body, query_arg, store_operation

info_bp = Blueprint('info', __name__)
logger = get_logger('api.info')


@info_bp.route('/info/get', methods=['GET'])
@store_operation('get info')
def get_info():
    """
    获取单个公众号信息

    Query:
        - fakeid: 公众号 ID (必填)

    Returns:
        信息对象，不存在时为 null
    """
    fakeid = query_arg('fakeid')
    if not fakeid:
        return ApiResponse.bad_request('`fakeid` is required')

    info = get_stores().article_info.get_info(fakeid)
    return ApiResponse.raw(info.to_dict() if info else None)


@info_bp.route('/info/all', methods=['GET'])
@store_operation('list infos')
def get_all_infos():
    """获取全部公众号信息"""
    infos = get_stores().article_info.get_all_infos()
    return ApiResponse.raw([info.to_dict() for info in infos])


@info_bp.route('/info/update', methods=['POST'])
@store_operation('update info')
def update_info():
    """
    合并更新公众号信息

    Request Body:
        - fakeid: 公众号 ID (必填)
        - completed / count / articles: 进度（count、articles 为增量）
        - nickname / round_head_img / total_count: 展示信息（覆盖）
    """
    data = read_body()
    is_valid, _ = validate_required(data, 'fakeid')
    if not is_valid:
        return ApiResponse.bad_request('Invalid payload')

    success = get_stores().article_info.update_info(InfoRecord.from_dict(data))
    return ApiResponse.result(success)


@info_bp.route('/info/last-update', methods=['POST'])
@store_operation('update last update time')
def update_last_update_time():
    data = read_body()
    is_valid, _ = validate_required(data, 'fakeid')
    if not is_valid:
        return ApiResponse.bad_request('`fakeid` is required')

    success = get_stores().article_info.update_last_update_time(str(data['fakeid']))
    return ApiResponse.result(success)


@info_bp.route('/info/import', methods=['POST'])
@store_operation('import infos')
def import_infos():
    """
    批量导入公众号（进度清零）

    Request Body:
        - infos: 信息对象数组 (必填)
    """
    data = read_body()
    is_valid, error_msg, infos = validate_list_field(data, 'infos')
    if not is_valid:
        return ApiResponse.bad_request(error_msg)

    records = [InfoRecord.from_dict(item if isinstance(item, dict) else {}) for item in infos]
    get_stores().article_info.import_infos(records)
    logger.info(f"导入公众号 {len(records)} 个")
    return ApiResponse.result(True)
