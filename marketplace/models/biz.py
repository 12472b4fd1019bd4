from marketplace.extensions import db
from .base import BaseModel


class Tenant(BaseModel):
    """租户：共享部署的独立市场实例"""
    __tablename__ = 'biz_tenants'
    name = db.Column(db.String(128))
    slug = db.Column(db.String(64), unique=True, index=True)


class Product(BaseModel):
    """
    产品主表 (目录 CRUD 由外部服务负责，订单引擎只读取并修补库存/销量)
    金额统一为最小货币单位的整数 (如美分)
    """
    __tablename__ = 'biz_products'

    STATUS_DRAFT = 'draft'
    STATUS_ACTIVE = 'active'
    STATUS_INACTIVE = 'inactive'
    STATUS_ARCHIVED = 'archived'

    tenant_id = db.Column(db.Integer, db.ForeignKey('biz_tenants.id'), nullable=True, index=True)
    seller_id = db.Column(db.Integer, db.ForeignKey('auth_users.id'), index=True)

    name = db.Column(db.String(200), index=True)
    slug = db.Column(db.String(200), index=True)
    sku = db.Column(db.String(64), index=True)
    description = db.Column(db.Text)

    price = db.Column(db.Integer, default=0)
    currency = db.Column(db.String(8), default='usd')

    # 库存设置：仅当 track_inventory 为真时 inventory 有意义
    track_inventory = db.Column(db.Boolean, default=False)
    inventory = db.Column(db.Integer, nullable=True)
    sales_count = db.Column(db.Integer, default=0)

    status = db.Column(db.String(20), default=STATUS_DRAFT, index=True)
    is_deleted = db.Column(db.Boolean, default=False, index=True)

    seller = db.relationship('User', foreign_keys=[seller_id])

    @property
    def is_available(self):
        """未删除且已上架"""
        return not self.is_deleted and self.status == self.STATUS_ACTIVE

    @property
    def tracks_stock(self):
        return bool(self.track_inventory) and self.inventory is not None

    def __repr__(self):
        return f'<Product {self.name}>'
