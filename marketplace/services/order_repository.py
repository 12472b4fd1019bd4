"""
订单仓储层
订单、明细、购物车、支付的读写。只做数据访问，不含业务规则；
写方法不提交事务，由调用方的 atomic() 统一提交。
"""
import secrets
from datetime import datetime
from flask import current_app
from sqlalchemy import func
from marketplace.extensions import db
from marketplace.exceptions import AlreadyExists
from marketplace.models.auth import User
from marketplace.models.cart import Cart, CartItem
from marketplace.models.payment import Payment
from marketplace.models.trade import Order, OrderItem


class OrderRepository:

    # ------------------------------------------------------------------
    # 读取
    # ------------------------------------------------------------------

    @staticmethod
    def get_order(order_id):
        return db.session.get(Order, order_id)

    @staticmethod
    def get_order_by_number(order_number):
        return Order.query.filter_by(order_number=order_number).first()

    @staticmethod
    def get_order_items(order_id):
        return OrderItem.query.filter_by(order_id=order_id).order_by(OrderItem.id).all()

    @staticmethod
    def get_orders_by_user(user_id, status=None, limit=20):
        query = Order.query.filter_by(user_id=user_id)
        if status:
            query = query.filter_by(status=status)
        return query.order_by(Order.created_at.desc(), Order.id.desc()).limit(limit).all()

    @staticmethod
    def get_seller_order_ids(seller_id, status=None, limit=50):
        """含有该卖家明细的订单 id，最新在前；limit 按订单计数而不是按明细行"""
        query = db.session.query(OrderItem.order_id).filter(OrderItem.seller_id == seller_id)
        if status:
            query = query.filter(OrderItem.status == status)
        rows = query.group_by(OrderItem.order_id) \
            .order_by(func.max(OrderItem.id).desc()) \
            .limit(limit).all()
        return [row.order_id for row in rows]

    @staticmethod
    def get_seller_items_for_orders(seller_id, order_ids, status=None):
        if not order_ids:
            return []
        query = OrderItem.query.filter(
            OrderItem.seller_id == seller_id,
            OrderItem.order_id.in_(order_ids)
        )
        if status:
            query = query.filter(OrderItem.status == status)
        return query.order_by(OrderItem.id).all()

    @staticmethod
    def count_order_items(order_id):
        return OrderItem.query.filter_by(order_id=order_id).count()

    @staticmethod
    def get_payment_for_order(order_id):
        return Payment.query.filter_by(order_id=order_id).first()

    @staticmethod
    def get_user(user_id):
        return db.session.get(User, user_id)

    @staticmethod
    def get_user_cart(user_id, tenant_id=None):
        """获取用户购物车，可按租户限定"""
        query = Cart.query.filter_by(user_id=user_id)
        if tenant_id is not None:
            query = query.filter_by(tenant_id=tenant_id)
        return query.order_by(Cart.id).first()

    @staticmethod
    def get_cart_items(cart_id):
        return CartItem.query.filter_by(cart_id=cart_id).order_by(CartItem.id).all()

    # ------------------------------------------------------------------
    # 写入
    # ------------------------------------------------------------------

    @staticmethod
    def generate_order_number():
        """生成订单号 (ORD-YYYYMMDDHHMMSS-XXXXXXXX)"""
        prefix = current_app.config.get('ORDER_NUMBER_PREFIX', 'ORD')
        date_str = datetime.utcnow().strftime('%Y%m%d%H%M%S')
        random_str = secrets.token_hex(4).upper()
        return f"{prefix}-{date_str}-{random_str}"

    @staticmethod
    def reserve_order_number():
        """生成一个库中不存在的订单号，冲突时重新生成"""
        attempts = current_app.config.get('ORDER_NUMBER_MAX_ATTEMPTS', 5)
        for _ in range(attempts):
            order_number = OrderRepository.generate_order_number()
            if OrderRepository.get_order_by_number(order_number) is None:
                return order_number
            current_app.logger.warning(f'订单号冲突，重新生成: {order_number}')
        raise AlreadyExists('Could not allocate a unique order number')

    @staticmethod
    def create_order_record(user_id, totals, currency, shipping_address,
                            billing_address=None, notes=None, tenant_id=None):
        order = Order(
            tenant_id=tenant_id,
            user_id=user_id,
            order_number=OrderRepository.reserve_order_number(),
            status=Order.STATUS_PENDING,
            subtotal=totals.subtotal,
            tax=totals.tax,
            shipping=totals.shipping,
            discount=totals.discount,
            total=totals.total,
            currency=currency,
            shipping_address=shipping_address,
            billing_address=billing_address or shipping_address,
            notes=notes
        )
        db.session.add(order)
        db.session.flush()  # 获取 order.id
        return order

    @staticmethod
    def create_order_item(order, item):
        """:param item: ValidatedOrderItem"""
        order_item = OrderItem(
            order_id=order.id,
            product_id=item.product_id,
            seller_id=item.seller_id,
            name=item.name,
            sku=item.sku,
            price=item.price,
            quantity=item.quantity,
            subtotal=item.subtotal,
            status=Order.STATUS_PENDING
        )
        db.session.add(order_item)
        return order_item

    @staticmethod
    def update_order(order, **changes):
        for key, value in changes.items():
            setattr(order, key, value)
        order.updated_at = datetime.utcnow()

    @staticmethod
    def update_order_items_status(order_items, status):
        now = datetime.utcnow()
        for item in order_items:
            item.status = status
            item.updated_at = now

    @staticmethod
    def clear_cart(cart, cart_items):
        """删除购物车明细并清零汇总"""
        for cart_item in cart_items:
            db.session.delete(cart_item)
        cart.subtotal = 0
        cart.item_count = 0
        cart.updated_at = datetime.utcnow()
