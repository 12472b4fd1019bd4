from flask_login import UserMixin
from marketplace.extensions import db
from .base import BaseModel


class User(UserMixin, BaseModel):
    """用户 (身份签发由外部认证服务负责，这里只保留会话所需字段)"""
    __tablename__ = 'auth_users'
    email = db.Column(db.String(128), unique=True, index=True)
    name = db.Column(db.String(128))

    is_active_user = db.Column(db.Boolean, default=True)  # 封号开关

    profile = db.relationship('UserProfile', backref='user', uselist=False)

    def __repr__(self):
        return f'<User {self.email}>'

    # Flask-Login 必须属性覆盖
    @property
    def is_active(self):
        return bool(self.is_active_user)


class UserProfile(BaseModel):
    """用户档案：保存默认角色"""
    __tablename__ = 'auth_user_profiles'

    ROLE_CUSTOMER = 'customer'
    ROLE_SELLER = 'seller'
    ROLE_ADMIN = 'admin'
    ROLE_MODERATOR = 'moderator'
    ROLES = (ROLE_CUSTOMER, ROLE_SELLER, ROLE_ADMIN, ROLE_MODERATOR)

    user_id = db.Column(db.Integer, db.ForeignKey('auth_users.id'), unique=True, index=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey('biz_tenants.id'), nullable=True)
    default_role = db.Column(db.String(20), default=ROLE_CUSTOMER)

    def __repr__(self):
        return f'<UserProfile {self.user_id}:{self.default_role}>'
