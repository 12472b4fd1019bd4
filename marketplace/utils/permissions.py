"""
权限控制工具
角色解析 (每个请求只查询一次) 与入口装饰器
"""
from functools import wraps
from flask import g
from flask_login import current_user
from marketplace.exceptions import Unauthenticated, Forbidden
from marketplace.models.auth import UserProfile


def resolve_user_role(user_id):
    """
    从用户档案读取角色，没有档案时视为普通顾客
    """
    profile = UserProfile.query.filter_by(user_id=user_id).first()
    if profile and profile.default_role:
        return profile.default_role
    return UserProfile.ROLE_CUSTOMER


def current_role():
    """当前登录用户的角色，缓存在 g 上，同一请求内不重复查询"""
    if not current_user.is_authenticated:
        raise Unauthenticated()

    cache = g.setdefault('_role_cache', {})
    if current_user.id not in cache:
        cache[current_user.id] = resolve_user_role(current_user.id)
    return cache[current_user.id]


def role_required(*roles):
    """
    角色检查装饰器

    用法:
        @role_required('seller', 'admin')
        def seller_orders():
            ...
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if current_role() not in roles:
                raise Forbidden('Insufficient role for this operation')
            return f(*args, **kwargs)
        return decorated_function
    return decorator


seller_required = role_required(UserProfile.ROLE_SELLER, UserProfile.ROLE_ADMIN)
admin_required = role_required(UserProfile.ROLE_ADMIN)
