from contextlib import contextmanager

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect

# 初始化扩展对象 (暂不绑定 app)
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
csrf = CSRFProtect()

# 配置 LoginManager
login_manager.session_protection = 'strong'


@login_manager.user_loader
def load_user(user_id):
    """Flask-Login 用户加载回调"""
    from marketplace.models import User
    return db.session.get(User, int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    """API 场景下未登录直接抛出 401，由全局错误处理器输出 JSON"""
    from marketplace.exceptions import Unauthenticated
    raise Unauthenticated()


@contextmanager
def atomic():
    """
    原子执行上下文：块内所有读写要么一起提交，要么全部回滚。
    用法:
        with atomic():
            ...
    """
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
