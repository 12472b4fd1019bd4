"""支付记录 (由外部支付服务写入，订单引擎只读)"""
from marketplace.extensions import db
from .base import BaseModel


class Payment(BaseModel):
    """与订单一对一关联的支付记录"""
    __tablename__ = 'pay_payments'

    STATUS_PENDING = 'pending'
    STATUS_PROCESSING = 'processing'
    STATUS_SUCCEEDED = 'succeeded'
    STATUS_FAILED = 'failed'
    STATUS_REFUNDED = 'refunded'
    STATUS_CANCELLED = 'cancelled'
    STATUS_REQUIRES_ACTION = 'requires_action'

    tenant_id = db.Column(db.Integer, db.ForeignKey('biz_tenants.id'), nullable=True)
    user_id = db.Column(db.Integer, db.ForeignKey('auth_users.id'), index=True)
    order_id = db.Column(db.Integer, db.ForeignKey('trade_orders.id'), unique=True, index=True)

    provider_reference = db.Column(db.String(128), index=True)  # 支付渠道流水号
    amount = db.Column(db.Integer)
    currency = db.Column(db.String(8), default='usd')
    status = db.Column(db.String(20), default=STATUS_PENDING, index=True)
    payment_method = db.Column(db.String(32))

    order = db.relationship('Order', backref=db.backref('payment', uselist=False))
