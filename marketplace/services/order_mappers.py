"""
订单响应映射
把已读取的模型对象整理成返回给客户端的字典，不访问数据库
"""
from marketplace.models.payment import Payment


def _iso(value):
    return value.isoformat() if value else None


def enrich_order_item(item, product):
    """为订单明细附加当前商品的简要信息 (商品可能已被删除)"""
    data = item.to_dict()
    data['product'] = {
        'id': product.id,
        'name': product.name,
        'slug': product.slug,
    } if product else None
    return data


def to_payment_summary(payment):
    if not payment:
        return None
    return {
        'status': payment.status,
        'amount': payment.amount,
        'currency': payment.currency,
        'paid_at': _iso(payment.updated_at) if payment.status == Payment.STATUS_SUCCEEDED else None,
    }


def to_order_response(order, items_with_products, payment):
    """订单详情"""
    data = order.to_dict()
    data['items'] = items_with_products
    data['payment'] = to_payment_summary(payment)
    return data


def to_order_list_item(order, item_count):
    """订单列表中的精简表示 (不含地址)"""
    data = order.to_dict(exclude=('shipping_address', 'billing_address'))
    data['item_count'] = item_count
    return data


def to_seller_order_view(order, items, buyer):
    """卖家视角：订单 + 该卖家自己的明细 + 买家信息"""
    data = order.to_dict()
    data['items'] = [i.to_dict() for i in items]
    data['buyer'] = {
        'id': buyer.id,
        'name': buyer.name,
        'email': buyer.email,
    } if buyer else None
    return data
