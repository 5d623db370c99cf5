"""
文章缓存 API
"""
from flask import Blueprint

from ..store.records import ArticleRecord, InfoRecord
from ..store.registry import get_stores
from ..utils.responses import ApiResponse
from ..utils.validators import validate_required, parse_create_time
from ..utils.logger import get_logger
from .common import read_body, query_arg, store_operation

article_bp = Blueprint('article', __name__)
logger = get_logger('api.article')


@article_bp.route('/article/sync', methods=['POST'])
@store_operation('sync article cache')
def sync_article_cache():
    """
    写入一页上游发布记录，并累加到公众号信息

    Request Body:
        - account: 公众号信息（至少包含 fakeid）
        - publish_page: 上游返回的发布页 {total_count, publish_list}
    """
    data = read_body()
    is_valid, _ = validate_required(data, 'account', 'publish_page')
    if not is_valid or not isinstance(data['account'], dict):
        return ApiResponse.bad_request('`account` and `publish_page` are required')

    account = InfoRecord.from_dict(data['account'])
    get_stores().article_info.sync_article_cache(account, data['publish_page'])
    return ApiResponse.result(True)


def _cache_query():
    fakeid = query_arg('fakeid')
    is_valid, _, create_time = parse_create_time(query_arg('create_time'))
    if not fakeid or not is_valid:
        return None, None
    return fakeid, create_time


@article_bp.route('/article/hit', methods=['GET'])
@store_operation('check article cache')
def hit_cache():
    """
    是否已缓存早于 create_time 的文章

    Query:
        - fakeid: 公众号 ID (必填)
        - create_time: Unix 秒 (必填)
    """
    fakeid, create_time = _cache_query()
    if not fakeid:
        return ApiResponse.bad_request('`fakeid` and `create_time` are required')

    return ApiResponse.hit(get_stores().article_info.hit_cache(fakeid, create_time))


@article_bp.route('/article/cache', methods=['GET'])
@store_operation('read article cache')
def get_article_cache():
    """早于 create_time 的已缓存文章，按发布时间升序"""
    fakeid, create_time = _cache_query()
    if not fakeid:
        return ApiResponse.bad_request('`fakeid` and `create_time` are required')

    articles = get_stores().article_info.get_article_cache(fakeid, create_time)
    return ApiResponse.raw([article.to_dict() for article in articles])


@article_bp.route('/article/by-link', methods=['GET'])
@store_operation('get article by link')
def get_article_by_link():
    url = query_arg('url')
    if not url:
        return ApiResponse.bad_request('`url` is required')

    article = get_stores().article_info.get_article_by_link(url)
    return ApiResponse.raw(article.to_dict() if article else None)


@article_bp.route('/article/upsert', methods=['POST'])
@store_operation('upsert article')
def upsert_article():
    """
    写入单篇文章

    Request Body:
        - fakeid / aid / link (必填)
        - 其余上游字段原样保存
    """
    data = read_body()
    is_valid, _ = validate_required(data, 'fakeid', 'aid', 'link')
    if not is_valid:
        return ApiResponse.bad_request('Invalid payload for article upsert')

    success = get_stores().article_info.upsert_article(ArticleRecord.from_dict(data))
    return ApiResponse.result(success)


@article_bp.route('/article/delete', methods=['POST'])
@store_operation('delete article')
def delete_article():
    """
    删除文章

    Request Body:
        - fakeid / aid (必填)
        - link: 按主键未找到时按链接删除
    """
    data = read_body()
    is_valid, _ = validate_required(data, 'fakeid', 'aid')
    if not is_valid:
        return ApiResponse.bad_request('`fakeid` and `aid` are required')

    removed = get_stores().article_info.delete_article(
        str(data['fakeid']), str(data['aid']), data.get('link') or None
    )
    return ApiResponse.result(removed)


@article_bp.route('/article/deleted', methods=['POST'])
@store_operation('mark article deleted')
def mark_article_deleted():
    """标记文章已被原作者删除（保留记录）"""
    data = read_body()
    is_valid, _ = validate_required(data, 'url')
    if not is_valid:
        return ApiResponse.bad_request('`url` is required')

    get_stores().article_info.mark_article_deleted(data['url'])
    logger.info(f"文章已标记删除: {data['url']}")
    return ApiResponse.result(True)
