"""
应用配置
支持从环境变量读取配置
"""
import os

from dotenv import load_dotenv

load_dotenv()

DB_FILE_NAME = 'wechat-article.db'
BLOB_DIR_NAME = 'blobs'


def resolve_base_dir(base=None):
    """解析存储根目录，相对路径以当前工作目录为准"""
    base = base or os.environ.get('FILE_DB_BASE') or os.path.join('.data', 'filedb')
    return os.path.abspath(base)


def sqlite_uri_for(base_dir):
    return f'sqlite:///{os.path.join(base_dir, DB_FILE_NAME)}'


class Config:
    """基础配置"""

    # ==================== 存储配置 ====================
    # 数据库文件、旧版 JSON 快照与 blob 目录都位于该目录下
    FILE_DB_BASE = resolve_base_dir()

    # sqlite: 关系型存储（默认）; file: JSON 文件存储
    STORE_BACKEND = os.environ.get('STORE_BACKEND', 'sqlite').lower()

    # 支持从环境变量读取数据库 URL
    DATABASE_URL = os.environ.get('DATABASE_URL')
    if DATABASE_URL:
        SQLALCHEMY_DATABASE_URI = DATABASE_URL
    else:
        SQLALCHEMY_DATABASE_URI = sqlite_uri_for(FILE_DB_BASE)

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # ==================== CORS 配置 ====================
    # 允许的跨域来源（逗号分隔）
    CORS_ORIGINS = os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:3000,http://127.0.0.1:3000'
    ).split(',')

    # ==================== 日志配置 ====================
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FILE = os.environ.get('LOG_FILE')  # 可选的日志文件路径

    # 慢请求阈值（毫秒）
    SLOW_REQUEST_MS = float(os.environ.get('SLOW_REQUEST_MS', '1000'))

    @staticmethod
    def init_paths(base_dir=None):
        """初始化数据目录"""
        base_dir = base_dir or Config.FILE_DB_BASE
        for path in [base_dir, os.path.join(base_dir, BLOB_DIR_NAME)]:
            os.makedirs(path, exist_ok=True)

    @classmethod
    def get_cors_config(cls):
        """获取 CORS 配置"""
        return {
            "origins": cls.CORS_ORIGINS,
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type"],
        }


class DevelopmentConfig(Config):
    """开发环境配置"""
    DEBUG = True
    LOG_LEVEL = 'DEBUG'


class ProductionConfig(Config):
    """生产环境配置"""
    DEBUG = False
    LOG_LEVEL = 'WARNING'

    @classmethod
    def validate(cls):
        """验证生产环境必要配置"""
        errors = []

        if not os.environ.get('FILE_DB_BASE'):
            errors.append('FILE_DB_BASE 环境变量未设置（将使用工作目录下的 .data/filedb）')

        if cls.STORE_BACKEND not in ('sqlite', 'file'):
            errors.append(f'STORE_BACKEND 取值无效: {cls.STORE_BACKEND}')

        if errors:
            print("⚠️ 生产环境配置警告:")
            for error in errors:
                print(f"  - {error}")


class TestingConfig(Config):
    """测试环境配置"""
    TESTING = True
    LOG_LEVEL = 'WARNING'
    STORE_BACKEND = 'sqlite'


# 配置映射
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config():
    """根据环境变量获取配置类"""
    env = os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])
