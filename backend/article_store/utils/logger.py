"""
日志配置模块
使用 loguru 提供结构化日志，每条日志带上组件名（get_logger 绑定的 name）
"""
import os
import sys
from loguru import logger
from typing import Optional


def setup_logger(
    log_level: str = 'INFO',
    log_file: Optional[str] = None,
    rotation: str = '10 MB',
    retention: str = '7 days'
) -> None:
    """
    配置日志系统

    Args:
        log_level: 日志级别 (DEBUG, INFO, WARNING, ERROR)
        log_file: 日志文件路径（可选）
        rotation: 日志轮转大小
        retention: 日志保留时间
    """
    # 移除已有处理器，重复调用 create_app 时不会重复输出
    logger.remove()

    # 未绑定组件名的日志使用默认值
    logger.configure(extra={'name': 'app'})

    level = os.environ.get('LOG_LEVEL', log_level).upper()

    console_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<magenta>{extra[name]}</magenta> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    )

    logger.add(
        sys.stderr,
        format=console_format,
        level=level,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if log_file:
        file_format = (
            "{time:YYYY-MM-DD HH:mm:ss} | "
            "{level: <8} | "
            "{extra[name]} | "
            "{name}:{function}:{line} | "
            "{message}"
        )
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        logger.add(
            log_file,
            format=file_format,
            level=level,
            rotation=rotation,
            retention=retention,
            compression='zip',
            encoding='utf-8',
            enqueue=True,
        )

    logger.debug(f"Logger initialized with level: {level}")


def get_logger(name: str = None):
    """
    获取日志器实例

    Args:
        name: 组件名称（如 'sql_article_info'、'legacy'）

    Returns:
        logger 实例
    """
    if name:
        return logger.bind(name=name)
    return logger


def log_error(error: Exception, context: str = None):
    """记录异常及其堆栈"""
    if context:
        logger.opt(exception=error).error(f"Error in {context}: {error}")
    else:
        logger.opt(exception=error).error(f"Error: {error}")
