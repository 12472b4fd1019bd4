import os
from dotenv import load_dotenv

# 读取项目根目录下的 .env
load_dotenv()
basedir = os.path.abspath(os.path.dirname(__file__))
instance_dir = os.path.join(basedir, 'instance')


def _database_url(filename):
    """DATABASE_URL 优先，否则使用 instance/ 下的 SQLite 文件"""
    url = os.environ.get('DATABASE_URL') or 'sqlite:///' + os.path.join(instance_dir, filename)
    # Railway 等平台给出的是 postgres://，SQLAlchemy 只认 postgresql://
    if url.startswith('postgres://'):
        url = url.replace('postgres://', 'postgresql://', 1)
    return url


class Config:
    """公共配置"""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'hard-to-guess-string'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # 订单引擎 (金额均为最小货币单位的整数)
    DEFAULT_CURRENCY = os.environ.get('DEFAULT_CURRENCY', 'usd')
    ORDER_NUMBER_PREFIX = os.environ.get('ORDER_NUMBER_PREFIX', 'ORD')
    ORDER_NUMBER_MAX_ATTEMPTS = 5  # 单号冲突时最多生成次数
    USER_ORDERS_DEFAULT_LIMIT = 20
    SELLER_ORDERS_DEFAULT_LIMIT = 50

    @staticmethod
    def init_app(app):
        # SQLite 文件所在目录
        os.makedirs(instance_dir, exist_ok=True)


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')
    SQLALCHEMY_DATABASE_URI = _database_url('marketplace.db')


class ProductionConfig(Config):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = _database_url('marketplace_prod.db')

    # 会话 Cookie (HTTPS 由平台负载均衡终结)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    @classmethod
    def init_app(cls, app):
        Config.init_app(app)


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    WTF_CSRF_ENABLED = False
    # 测试客户端直接写入会话登录，不校验来源指纹
    SESSION_PROTECTION = None
    LOG_LEVEL = 'WARNING'

    @staticmethod
    def init_app(app):
        # 内存数据库
        pass


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
