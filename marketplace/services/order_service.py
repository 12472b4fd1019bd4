from datetime import datetime
from flask import current_app
from marketplace.extensions import atomic
from marketplace.exceptions import NotFound, ValidationFailed, OrderNotModifiable
from marketplace.models.payment import Payment
from marketplace.models.trade import Order
from marketplace.services.inventory_service import InventoryService
from marketplace.services.order_repository import OrderRepository
from marketplace.services.order_policy import (
    AggregateTransition, ScopedTransition, STATUS_TIMESTAMP_FIELDS,
    assert_can_view_order, assert_owner_or_admin, assert_transition,
    can_cancel, is_terminal, resolve_transition_authority,
)
from marketplace.services.order_mappers import (
    enrich_order_item, to_order_response, to_order_list_item, to_seller_order_view,
)
from marketplace.services.validation_service import (
    ORDER_LIMITS, validate_cart, calculate_order_totals,
)
from marketplace.utils.audit import log_action


class OrderService:
    """
    订单生命周期：下单、状态流转、取消
    每个写操作在一个 atomic() 事务内完成，任何异常整体回滚。
    调用者身份 (viewer_id) 与角色 (role) 由入口层解析后传入。
    """

    # ------------------------------------------------------------------
    # 下单
    # ------------------------------------------------------------------

    @staticmethod
    def create_order(user_id, shipping_address, billing_address=None, notes=None, tenant_id=None):
        """
        由购物车创建订单
        :return: {'order_id': ..., 'order_number': ...}
        """
        with atomic():
            cart = OrderRepository.get_user_cart(user_id, tenant_id)
            if not cart:
                raise NotFound('Cart not found')

            cart_items = OrderRepository.get_cart_items(cart.id)
            if not cart_items:
                raise ValidationFailed('Cart is empty')
            if len(cart_items) > ORDER_LIMITS['MAX_ITEMS_PER_ORDER']:
                raise ValidationFailed(
                    f"An order can contain at most {ORDER_LIMITS['MAX_ITEMS_PER_ORDER']} items"
                )

            # 校验并锁定商品，validated_products 复用于后面的库存扣减
            order_items, validated_products = validate_cart(cart_items)
            totals = calculate_order_totals(order_items)
            if totals.total < ORDER_LIMITS['MIN_ORDER_TOTAL_CENTS']:
                raise ValidationFailed(
                    f"Order total must be at least {ORDER_LIMITS['MIN_ORDER_TOTAL_CENTS']} cents"
                )

            order = OrderRepository.create_order_record(
                user_id=user_id,
                totals=totals,
                currency=cart.currency or current_app.config.get('DEFAULT_CURRENCY', 'usd'),
                shipping_address=shipping_address,
                billing_address=billing_address,
                notes=notes,
                tenant_id=tenant_id
            )

            for item in order_items:
                OrderRepository.create_order_item(order, item)
                InventoryService.deduct_for_sale(validated_products[item.product_id], item.quantity, order)

            OrderRepository.clear_cart(cart, cart_items)

            log_action('orders', 'create_order', user_id, {
                'order_number': order.order_number,
                'total': totals.total,
                'items': len(order_items),
            })
            result = {'order_id': order.id, 'order_number': order.order_number}

        current_app.logger.info(
            f"订单 {result['order_number']} 已创建: 用户 {user_id}, 金额 {totals.total} {order.currency}"
        )
        return result

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    @staticmethod
    def get_order(order_id, viewer_id, role):
        order = OrderRepository.get_order(order_id)
        if not order:
            return None

        items = OrderRepository.get_order_items(order.id)
        assert_can_view_order(viewer_id, role, order, items)

        items_with_products = [enrich_order_item(i, i.product) for i in items]
        payment = OrderRepository.get_payment_for_order(order.id)
        return to_order_response(order, items_with_products, payment)

    @staticmethod
    def get_order_by_number(order_number, viewer_id, role):
        order = OrderRepository.get_order_by_number(order_number)
        if not order:
            return None

        assert_owner_or_admin(viewer_id, role, order.user_id, 'Not authorized to view this order')
        return order.to_dict()

    @staticmethod
    def get_user_orders(user_id, status=None, limit=None):
        limit = limit or current_app.config.get('USER_ORDERS_DEFAULT_LIMIT', 20)
        orders = OrderRepository.get_orders_by_user(user_id, status, limit)
        return [to_order_list_item(o, OrderRepository.count_order_items(o.id)) for o in orders]

    @staticmethod
    def get_seller_orders(seller_id, status=None, limit=None):
        """卖家收到的订单，每个订单一条，只包含该卖家的明细"""
        limit = limit or current_app.config.get('SELLER_ORDERS_DEFAULT_LIMIT', 50)
        order_ids = OrderRepository.get_seller_order_ids(seller_id, status, limit)
        seller_items = OrderRepository.get_seller_items_for_orders(seller_id, order_ids, status)

        views = []
        for order_id in order_ids:
            order = OrderRepository.get_order(order_id)
            if not order:
                continue
            items = [i for i in seller_items if i.order_id == order_id]
            buyer = OrderRepository.get_user(order.user_id)
            views.append(to_seller_order_view(order, items, buyer))
        return views

    # ------------------------------------------------------------------
    # 状态流转
    # ------------------------------------------------------------------

    @staticmethod
    def update_order_status(order_id, status, viewer_id, role, tracking_number=None, tracking_url=None):
        """
        更新订单状态
        管理员整单流转；卖家只改自己的明细；顾客只能取消待处理订单
        """
        if status not in Order.STATUSES:
            raise ValidationFailed(f'Unknown order status: {status}')

        with atomic():
            order = OrderRepository.get_order(order_id)
            if not order:
                raise NotFound('Order not found')

            from_status = order.status
            items = OrderRepository.get_order_items(order.id)
            authority = resolve_transition_authority(viewer_id, role, order, status, items)

            if isinstance(authority, ScopedTransition):
                OrderService._apply_scoped(authority)
            else:
                extra = {}
                if tracking_number:
                    extra['tracking_number'] = tracking_number
                if tracking_url:
                    extra['tracking_url'] = tracking_url
                OrderService._apply_aggregate(authority, items, **extra)

            log_action('orders', 'update_order_status', viewer_id, {
                'order_number': order.order_number,
                'from': from_status,
                'to': status,
                'scope': 'seller' if isinstance(authority, ScopedTransition) else 'order',
            })

        current_app.logger.info(f'订单 {order.order_number} 状态变更: {from_status} -> {status} (操作人 {viewer_id})')
        return True

    @staticmethod
    def cancel_order(order_id, viewer_id, role, reason=None):
        """取消订单并回补库存 (下单人或管理员)"""
        with atomic():
            order = OrderRepository.get_order(order_id)
            if not order:
                raise NotFound('Order not found')

            assert_owner_or_admin(viewer_id, role, order.user_id, 'Not authorized to cancel this order')

            if not can_cancel(order.status):
                raise OrderNotModifiable('Order cannot be cancelled at this stage')

            notes = order.notes
            if reason:
                notes = '\n'.join(filter(None, [order.notes, f'Cancellation reason: {reason}']))

            items = OrderRepository.get_order_items(order.id)
            OrderService._apply_aggregate(
                AggregateTransition(order=order, target=Order.STATUS_CANCELLED), items, notes=notes
            )

            log_action('orders', 'cancel_order', viewer_id, {
                'order_number': order.order_number,
                'reason': reason,
            })

        current_app.logger.info(f'订单 {order.order_number} 已取消 (操作人 {viewer_id})')
        return True

    @staticmethod
    def confirm_payment(order_id, actor_id):
        """
        支付完成后的状态入口：关联支付成功时 pending -> confirmed，并写入 paid_at
        """
        with atomic():
            order = OrderRepository.get_order(order_id)
            if not order:
                raise NotFound('Order not found')

            payment = OrderRepository.get_payment_for_order(order.id)
            if not payment or payment.status != Payment.STATUS_SUCCEEDED:
                raise ValidationFailed('Payment has not succeeded for this order')

            assert_transition(order.status, Order.STATUS_CONFIRMED)

            items = OrderRepository.get_order_items(order.id)
            OrderService._apply_aggregate(
                AggregateTransition(order=order, target=Order.STATUS_CONFIRMED),
                items,
                paid_at=order.paid_at or datetime.utcnow()
            )

            log_action('orders', 'confirm_payment', actor_id, {
                'order_number': order.order_number,
                'amount': payment.amount,
            })

        current_app.logger.info(f'订单 {order.order_number} 支付已确认')
        return True

    # ------------------------------------------------------------------
    # 内部：两种迁移方式
    # ------------------------------------------------------------------

    @staticmethod
    def _apply_aggregate(authority, order_items, **extra):
        """整单迁移：订单状态 + 时间戳 + 级联所有未终结的明细；取消时回补库存"""
        order, target = authority.order, authority.target

        changes = dict(extra, status=target)
        ts_field = STATUS_TIMESTAMP_FIELDS.get(target)
        if ts_field and getattr(order, ts_field) is None:
            changes[ts_field] = datetime.utcnow()
        OrderRepository.update_order(order, **changes)

        # 已被卖家单独取消/退款的明细保持原状，避免重复回补
        affected = [i for i in order_items if not is_terminal(i.status)]
        OrderRepository.update_order_items_status(affected, target)

        if target == Order.STATUS_CANCELLED:
            InventoryService.restore_for_order_items(affected, order)
            current_app.logger.info(f'订单 {order.order_number} 已回补 {len(affected)} 个明细的库存')

    @staticmethod
    def _apply_scoped(authority):
        """卖家迁移：只改该卖家的明细，订单整体状态不变"""
        OrderRepository.update_order_items_status(authority.items, authority.target)

        if authority.target == Order.STATUS_CANCELLED:
            InventoryService.restore_for_order_items(authority.items, authority.order)
