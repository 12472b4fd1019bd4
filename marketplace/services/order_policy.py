"""
订单策略层
状态迁移规则与访问控制判断，纯函数，不访问数据库
"""
from dataclasses import dataclass, field
from typing import List

from marketplace.exceptions import Forbidden, OrderNotModifiable
from marketplace.models.auth import UserProfile
from marketplace.models.trade import Order

# 合法状态迁移：键为当前状态，值为可到达的状态
ALLOWED_TRANSITIONS = {
    Order.STATUS_PENDING: (Order.STATUS_CONFIRMED, Order.STATUS_PROCESSING, Order.STATUS_CANCELLED),
    Order.STATUS_CONFIRMED: (Order.STATUS_PROCESSING, Order.STATUS_SHIPPED, Order.STATUS_CANCELLED),
    Order.STATUS_PROCESSING: (Order.STATUS_SHIPPED, Order.STATUS_CANCELLED),
    Order.STATUS_SHIPPED: (Order.STATUS_DELIVERED, Order.STATUS_CANCELLED),
    Order.STATUS_DELIVERED: (Order.STATUS_REFUNDED, Order.STATUS_PARTIALLY_REFUNDED, Order.STATUS_DISPUTED),
    Order.STATUS_PARTIALLY_REFUNDED: (Order.STATUS_REFUNDED, Order.STATUS_DISPUTED),
    Order.STATUS_DISPUTED: (Order.STATUS_REFUNDED, Order.STATUS_CANCELLED),
    Order.STATUS_CANCELLED: (),
    Order.STATUS_REFUNDED: (),
}

# 状态 -> 需要写入的生命周期时间戳字段
STATUS_TIMESTAMP_FIELDS = {
    Order.STATUS_SHIPPED: 'shipped_at',
    Order.STATUS_DELIVERED: 'delivered_at',
    Order.STATUS_CANCELLED: 'cancelled_at',
    Order.STATUS_REFUNDED: 'refunded_at',
}


def can_transition(from_status, to_status):
    return to_status in ALLOWED_TRANSITIONS.get(from_status, ())


def is_terminal(status):
    return not ALLOWED_TRANSITIONS.get(status)


def can_cancel(status):
    """只有待处理/已确认的订单可以取消"""
    return status in (Order.STATUS_PENDING, Order.STATUS_CONFIRMED)


def assert_transition(from_status, to_status):
    if not can_transition(from_status, to_status):
        raise OrderNotModifiable(
            f'Cannot move order from {from_status} to {to_status}',
            payload={'from': from_status, 'to': to_status}
        )


def assert_can_view_order(viewer_id, role, order, order_items):
    """
    查看订单的权限
    - 下单人本人
    - 管理员
    - 订单中包含自己商品的卖家
    """
    if order.user_id == viewer_id or role == UserProfile.ROLE_ADMIN:
        return
    if role == UserProfile.ROLE_SELLER and any(i.seller_id == viewer_id for i in order_items):
        return
    raise Forbidden('Not authorized to view this order')


def assert_owner_or_admin(viewer_id, role, owner_id, message='Not authorized to access this order'):
    if owner_id == viewer_id or role == UserProfile.ROLE_ADMIN:
        return
    raise Forbidden(message)


@dataclass(frozen=True)
class AggregateTransition:
    """整单迁移：修改订单状态并级联到所有明细 (管理员 / 下单人取消)"""
    order: Order
    target: str


@dataclass(frozen=True)
class ScopedTransition:
    """卖家迁移：只修改该卖家自己的明细，订单整体状态不变"""
    order: Order
    target: str
    seller_id: int
    items: List = field(default_factory=list)


def resolve_transition_authority(viewer_id, role, order, target, order_items):
    """
    根据调用者身份决定迁移方式，并用迁移表校验合法性
    :return: AggregateTransition 或 ScopedTransition
    """
    if role == UserProfile.ROLE_ADMIN:
        assert_transition(order.status, target)
        return AggregateTransition(order=order, target=target)

    if role == UserProfile.ROLE_SELLER:
        seller_items = [i for i in order_items if i.seller_id == viewer_id]
        if not seller_items:
            raise Forbidden('Not authorized to update this order')
        for item in seller_items:
            assert_transition(item.status, target)
        return ScopedTransition(order=order, target=target, seller_id=viewer_id, items=seller_items)

    # 普通用户 (含版主) 只能取消自己待处理的订单
    if order.user_id != viewer_id:
        raise Forbidden('Not authorized to update this order')
    if target != Order.STATUS_CANCELLED or order.status != Order.STATUS_PENDING:
        raise OrderNotModifiable('Customers can only cancel pending orders')
    return AggregateTransition(order=order, target=target)
