"""
应用入口
公众号文章存档 - 数据存储服务

启动方式:
    python run.py

环境变量配置:
    - 在工作目录创建 .env（由 python-dotenv 加载）
    - FILE_DB_BASE: 数据目录（默认 .data/filedb）
    - STORE_BACKEND: sqlite（默认）或 file
"""
import sys
import os

# 添加 backend 目录到 Python 路径
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dotenv import load_dotenv

load_dotenv()

from article_store import create_app
from article_store.config import get_config

# 获取配置类
config_class = get_config()

# 创建应用实例
app = create_app(config_class)

if __name__ == '__main__':
    # 在生产环境验证配置
    env = os.environ.get('FLASK_ENV', 'development')
    if env == 'production':
        config_class.validate()

    port = int(os.environ.get('PORT', '8000'))

    print("=" * 60)
    print("📚 公众号文章存档 - 数据存储服务")
    print("=" * 60)
    print(f"📌 服务地址: http://localhost:{port}")
    print(f"📌 API 地址: http://localhost:{port}/api/data")
    print(f"📌 环境: {env}")
    print(f"📌 存储后端: {app.config['STORE_BACKEND']}")
    print(f"📌 数据目录: {app.config['FILE_DB_BASE']}")
    if app.config['STORE_BACKEND'] == 'sqlite':
        print(f"📌 数据库: {app.config['SQLALCHEMY_DATABASE_URI']}")
    print(f"📌 CORS 允许来源: {', '.join(config_class.CORS_ORIGINS)}")
    print("=" * 60)

    app.run(host='0.0.0.0', port=port, debug=(env == 'development'), use_reloader=False)
