"""
内容缓存 API

html / resource / asset / debug 的正文以 file_base64 传输，
metadata / comment / comment-reply / resource-map 原样保存 JSON
"""
from flask import Blueprint

from ..store.registry import get_stores
from ..utils.responses import ApiResponse
from ..utils.validators import validate_required
from .common import read_body, query_arg, store_operation

content_bp = Blueprint('content', __name__)


def _pick(data: dict, *fields: str) -> dict:
    return {field: data.get(field) for field in fields}


def _get_by_url(getter):
    url = query_arg('url')
    if not url:
        return ApiResponse.bad_request('`url` is required')
    return ApiResponse.raw(getter(url))


# ==================== html ====================

@content_bp.route('/html/update', methods=['POST'])
@store_operation('update html')
def update_html():
    """
    保存文章 HTML

    Request Body:
        - fakeid / url / title / file_base64 (必填)
        - commentID: 留言 ID
        - file_type: MIME 类型
    """
    data = read_body()
    is_valid, _ = validate_required(data, 'fakeid', 'url', 'title', 'file_base64')
    if not is_valid:
        return ApiResponse.bad_request('Invalid payload for html update')

    payload = _pick(data, 'fakeid', 'url', 'title', 'file_base64', 'file_type')
    payload['commentID'] = data.get('commentID') or None
    return ApiResponse.result(get_stores().content.upsert_html(payload))


@content_bp.route('/html/get', methods=['GET'])
@store_operation('get html')
def get_html():
    return _get_by_url(get_stores().content.get_html)


@content_bp.route('/html/delete', methods=['POST'])
@store_operation('delete html')
def delete_html():
    data = read_body()
    is_valid, _ = validate_required(data, 'url')
    if not is_valid:
        return ApiResponse.bad_request('`url` is required')

    return ApiResponse.result(get_stores().content.delete_html(data['url']))


# ==================== metadata ====================

@content_bp.route('/metadata/update', methods=['POST'])
@store_operation('update metadata')
def update_metadata():
    """保存文章元数据，请求体整体保存"""
    data = read_body()
    is_valid, _ = validate_required(data, 'url', 'fakeid', 'title')
    if not is_valid:
        return ApiResponse.bad_request('Invalid payload for metadata update')

    return ApiResponse.result(get_stores().content.upsert_metadata(data))


@content_bp.route('/metadata/get', methods=['GET'])
@store_operation('get metadata')
def get_metadata():
    return _get_by_url(get_stores().content.get_metadata)


# ==================== comment ====================

@content_bp.route('/comment/update', methods=['POST'])
@store_operation('update comment')
def update_comment():
    data = read_body()
    is_valid, _ = validate_required(data, 'fakeid', 'url', 'title')
    if not is_valid:
        return ApiResponse.bad_request('Invalid payload for comment update')

    payload = _pick(data, 'fakeid', 'url', 'title', 'data')
    return ApiResponse.result(get_stores().content.upsert_comment(payload))


@content_bp.route('/comment/get', methods=['GET'])
@store_operation('get comment')
def get_comment():
    return _get_by_url(get_stores().content.get_comment)


@content_bp.route('/comment-reply/update', methods=['POST'])
@store_operation('update comment reply')
def update_comment_reply():
    data = read_body()
    is_valid, _ = validate_required(data, 'fakeid', 'url', 'title', 'contentID')
    if not is_valid:
        return ApiResponse.bad_request('Invalid payload for comment reply update')

    payload = _pick(data, 'fakeid', 'url', 'title', 'data', 'contentID')
    return ApiResponse.result(get_stores().content.upsert_comment_reply(payload))


@content_bp.route('/comment-reply/get', methods=['GET'])
@store_operation('get comment reply')
def get_comment_reply():
    url = query_arg('url')
    content_id = query_arg('contentID')
    if not url or not content_id:
        return ApiResponse.bad_request('`url` and `contentID` are required')

    return ApiResponse.raw(get_stores().content.get_comment_reply(url, content_id))


# ==================== resource ====================

@content_bp.route('/resource/update', methods=['POST'])
@store_operation('update resource')
def update_resource():
    data = read_body()
    is_valid, _ = validate_required(data, 'fakeid', 'url', 'file_base64')
    if not is_valid:
        return ApiResponse.bad_request('Invalid payload for resource update')

    payload = _pick(data, 'fakeid', 'url', 'file_base64', 'file_type')
    return ApiResponse.result(get_stores().content.upsert_resource(payload))


@content_bp.route('/resource/get', methods=['GET'])
@store_operation('get resource')
def get_resource():
    return _get_by_url(get_stores().content.get_resource)


@content_bp.route('/resource-map/update', methods=['POST'])
@store_operation('update resource map')
def update_resource_map():
    """
    保存文章引用的资源列表

    Request Body:
        - fakeid / url (必填)
        - resources: 资源 url 数组 (必填)
    """
    data = read_body()
    is_valid, _ = validate_required(data, 'fakeid', 'url')
    if not is_valid or not isinstance(data.get('resources'), list):
        return ApiResponse.bad_request('Invalid payload for resource-map update')

    payload = _pick(data, 'fakeid', 'url', 'resources')
    return ApiResponse.result(get_stores().content.upsert_resource_map(payload))


@content_bp.route('/resource-map/get', methods=['GET'])
@store_operation('get resource map')
def get_resource_map():
    return _get_by_url(get_stores().content.get_resource_map)


# ==================== asset ====================

@content_bp.route('/asset/update', methods=['POST'])
@store_operation('update asset')
def update_asset():
    data = read_body()
    is_valid, _ = validate_required(data, 'fakeid', 'url', 'file_base64')
    if not is_valid:
        return ApiResponse.bad_request('Invalid payload for asset update')

    payload = _pick(data, 'fakeid', 'url', 'file_base64', 'file_type')
    return ApiResponse.result(get_stores().content.upsert_asset(payload))


@content_bp.route('/asset/get', methods=['GET'])
@store_operation('get asset')
def get_asset():
    return _get_by_url(get_stores().content.get_asset)


# ==================== debug ====================

@content_bp.route('/debug/update', methods=['POST'])
@store_operation('update debug')
def update_debug():
    """保存调试用的原始响应"""
    data = read_body()
    is_valid, _ = validate_required(data, 'type', 'url', 'title', 'fakeid', 'file_base64')
    if not is_valid:
        return ApiResponse.bad_request('Invalid payload for debug update')

    payload = _pick(data, 'type', 'url', 'title', 'fakeid', 'file_base64', 'file_type')
    return ApiResponse.result(get_stores().content.upsert_debug(payload))


@content_bp.route('/debug/get', methods=['GET'])
@store_operation('get debug')
def get_debug():
    return _get_by_url(get_stores().content.get_debug)


@content_bp.route('/debug/all', methods=['GET'])
@store_operation('list debug')
def get_all_debug():
    return ApiResponse.raw(get_stores().content.get_all_debug())
