from datetime import datetime
from marketplace.extensions import db
from .base import BaseModel


class Cart(BaseModel):
    """购物车：每个 (租户, 用户) 或匿名会话一个"""
    __tablename__ = 'cart_carts'

    tenant_id = db.Column(db.Integer, db.ForeignKey('biz_tenants.id'), nullable=True, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('auth_users.id'), nullable=True, index=True)
    session_id = db.Column(db.String(64), nullable=True, index=True)

    currency = db.Column(db.String(8), default='usd')
    subtotal = db.Column(db.Integer, default=0)
    item_count = db.Column(db.Integer, default=0)
    expires_at = db.Column(db.DateTime, nullable=True)

    items = db.relationship('CartItem', backref='cart', lazy='dynamic')


class CartItem(BaseModel):
    """购物车明细行 (价格为加入购物车时的快照)"""
    __tablename__ = 'cart_items'

    cart_id = db.Column(db.Integer, db.ForeignKey('cart_carts.id'), index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('biz_products.id'), index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('auth_users.id'), nullable=True)

    quantity = db.Column(db.Integer, default=1)
    price = db.Column(db.Integer, default=0)
    subtotal = db.Column(db.Integer, default=0)
    added_at = db.Column(db.DateTime, default=datetime.utcnow)

    product = db.relationship('Product')
