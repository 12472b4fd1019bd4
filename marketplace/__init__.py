import logging
import colorlog
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from config import config
from marketplace.extensions import db, migrate, login_manager, csrf
from marketplace.exceptions import MarketplaceException, InternalError

# 导入 commands 模块，用于注册 CLI 命令
from marketplace import commands


def create_app(config_name='default'):
    """市场订单引擎应用工厂函数"""
    app = Flask(__name__)

    # 1. 加载配置
    app.config.from_object(config[config_name])
    config[config_name].init_app(app)

    # 2. 初始化扩展
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)

    # 3. 配置日志
    configure_logging(app)

    # 4. 注册蓝图 (Blueprints)
    register_blueprints(app)

    # 5. 注册全局错误处理
    register_error_handlers(app)

    # 6. 注册 CLI 命令
    register_commands(app)

    return app


def register_blueprints(app):
    """注册所有业务模块蓝图"""
    # 订单蓝图
    from marketplace.blueprints.orders import orders_bp
    app.register_blueprint(orders_bp, url_prefix='/orders')


def register_error_handlers(app):
    @app.errorhandler(MarketplaceException)
    def handle_marketplace_exception(e):
        if e.code >= 500:
            app.logger.error(f'{e.error_code}: {e.message}')
        return jsonify(e.to_dict()), e.code

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        return jsonify({
            'message': e.description,
            'code': e.code,
            'error': e.name.upper().replace(' ', '_'),
            'success': False
        }), e.code

    @app.errorhandler(Exception)
    def internal_server_error(e):
        app.logger.exception(f'未处理的异常: {e}')
        err = InternalError()
        return jsonify(err.to_dict()), err.code


def register_commands(app):
    """注册 Flask CLI 命令"""
    app.cli.add_command(commands.forge)
    app.cli.add_command(commands.status)


def configure_logging(app):
    """彩色控制台日志，级别由 LOG_LEVEL 决定"""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)

    # 多次创建应用 (如测试) 时不重复挂载
    for existing in list(app.logger.handlers):
        if isinstance(existing.formatter, colorlog.ColoredFormatter):
            app.logger.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(colorlog.ColoredFormatter(
        "%(log_color)s[%(asctime)s] %(levelname)-8s%(reset)s %(cyan)s%(module)s%(reset)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        log_colors={
            'DEBUG': 'white',
            'INFO': 'green',
            'WARNING': 'yellow',
            'ERROR': 'red',
            'CRITICAL': 'bold_red',
        },
    ))
    app.logger.addHandler(handler)
    app.logger.setLevel(level)
