"""
公众号数据清理 API
"""
from flask import Blueprint

from ..store.registry import get_stores
from ..utils.responses import ApiResponse
from ..utils.validators import validate_list_field
from ..utils.logger import get_logger
from .common import read_body, store_operation

account_bp = Blueprint('account', __name__)
logger = get_logger('api.account')


@account_bp.route('/account/delete', methods=['POST'])
@store_operation('delete account data')
def delete_accounts():
    """
    删除公众号的全部缓存（信息、文章、内容记录）

    blob 文件不会被删除

    Request Body:
        - ids: fakeid 数组 (必填)
    """
    data = read_body()
    is_valid, error_msg, ids = validate_list_field(data, 'ids')
    if not is_valid:
        return ApiResponse.bad_request(error_msg)

    fakeids = [str(fakeid) for fakeid in ids if fakeid]
    stores = get_stores()
    stores.article_info.delete_account_data(fakeids)
    stores.content.delete_account_content(fakeids)

    logger.info(f"删除公众号数据: {len(fakeids)} 个")
    return ApiResponse.result(True)
