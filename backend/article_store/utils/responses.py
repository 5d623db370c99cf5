"""
统一 API 响应格式

数据接口直接返回记录本身（或 null / 列表 / {"success": bool}），
错误统一为 {"success": false, "error": {"code": ..., "message": ...}}
"""
from flask import jsonify
from typing import Any, Optional, Dict


class ApiResponse:
    """API 响应构建器"""

    @staticmethod
    def raw(data: Any = None, code: int = 200) -> tuple:
        """
        原样返回数据

        Args:
            data: 记录、列表或 None（序列化为 null）
            code: HTTP 状态码
        """
        return jsonify(data), code

    @staticmethod
    def result(success: bool = True) -> tuple:
        """写操作结果 {"success": bool}"""
        return jsonify({'success': bool(success)}), 200

    @staticmethod
    def hit(hit: bool) -> tuple:
        return jsonify({'hit': bool(hit)}), 200

    @staticmethod
    def error(
        message: str,
        code: int = 400,
        error_code: str = 'BAD_REQUEST',
        details: Optional[Dict] = None
    ) -> tuple:
        """
        错误响应

        Args:
            message: 错误消息
            code: HTTP 状态码
            error_code: 错误代码
            details: 详细错误信息

        Returns:
            Flask Response 对象和状态码的元组
        """
        response = {
            'success': False,
            'error': {
                'code': error_code,
                'message': message,
            }
        }
        if details:
            response['error']['details'] = details
        return jsonify(response), code

    @staticmethod
    def bad_request(message: str) -> tuple:
        """400 响应"""
        return ApiResponse.error(message, 400, 'BAD_REQUEST')

    @staticmethod
    def not_found(message: str = 'Resource not found') -> tuple:
        """404 响应"""
        return ApiResponse.error(message, 404, 'NOT_FOUND')

    @staticmethod
    def server_error(message: str = 'Internal server error') -> tuple:
        """500 响应"""
        return ApiResponse.error(message, 500, 'INTERNAL_ERROR')
