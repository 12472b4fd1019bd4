from marketplace.extensions import db
from .base import BaseModel


class Order(BaseModel):
    """销售订单头 (由购物车一次性原子生成，之后只修改状态/时间戳/物流/备注，永不删除)"""
    __tablename__ = 'trade_orders'

    STATUS_PENDING = 'pending'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_PROCESSING = 'processing'
    STATUS_SHIPPED = 'shipped'
    STATUS_DELIVERED = 'delivered'
    STATUS_CANCELLED = 'cancelled'
    STATUS_REFUNDED = 'refunded'
    STATUS_PARTIALLY_REFUNDED = 'partially_refunded'
    STATUS_DISPUTED = 'disputed'

    STATUSES = (
        STATUS_PENDING, STATUS_CONFIRMED, STATUS_PROCESSING, STATUS_SHIPPED,
        STATUS_DELIVERED, STATUS_CANCELLED, STATUS_REFUNDED,
        STATUS_PARTIALLY_REFUNDED, STATUS_DISPUTED,
    )

    tenant_id = db.Column(db.Integer, db.ForeignKey('biz_tenants.id'), nullable=True, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('auth_users.id'), index=True)
    order_number = db.Column(db.String(40), unique=True, index=True, nullable=False)
    status = db.Column(db.String(20), default=STATUS_PENDING, index=True)

    # 金额明细 (整数，最小货币单位)
    subtotal = db.Column(db.Integer, default=0)
    tax = db.Column(db.Integer, default=0)
    shipping = db.Column(db.Integer, default=0)
    discount = db.Column(db.Integer, default=0)
    total = db.Column(db.Integer, default=0)
    currency = db.Column(db.String(8), default='usd')

    shipping_address = db.Column(db.JSON)
    billing_address = db.Column(db.JSON)
    notes = db.Column(db.Text)

    # 物流信息
    tracking_number = db.Column(db.String(64))
    tracking_url = db.Column(db.String(256))

    # 生命周期时间戳 (每个只在对应状态迁移时写入一次)
    paid_at = db.Column(db.DateTime)
    shipped_at = db.Column(db.DateTime)
    delivered_at = db.Column(db.DateTime)
    cancelled_at = db.Column(db.DateTime)
    refunded_at = db.Column(db.DateTime)

    # 关系
    user = db.relationship('User', foreign_keys=[user_id])
    items = db.relationship('OrderItem', backref='order', order_by='OrderItem.id')

    def __repr__(self):
        return f'<Order {self.order_number} {self.status}>'


class OrderItem(BaseModel):
    """订单明细行：下单时的商品快照，除状态外不可变"""
    __tablename__ = 'trade_order_items'

    order_id = db.Column(db.Integer, db.ForeignKey('trade_orders.id'), index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('biz_products.id'), index=True)
    seller_id = db.Column(db.Integer, db.ForeignKey('auth_users.id'), index=True)

    name = db.Column(db.String(200))
    sku = db.Column(db.String(64))
    price = db.Column(db.Integer)  # 下单时的单价快照
    quantity = db.Column(db.Integer, default=1)
    subtotal = db.Column(db.Integer)

    status = db.Column(db.String(20), default=Order.STATUS_PENDING, index=True)

    product = db.relationship('Product')
