"""
订单校验服务
纯函数：购物车校验、金额汇总、字符串/价格/slug 等业务规则检查
所有金额均为最小货币单位的整数
"""
import re
from collections import namedtuple
from marketplace.extensions import db
from marketplace.exceptions import NotFound, ValidationFailed, InsufficientInventory
from marketplace.models.biz import Product

PRODUCT_LIMITS = {
    'MIN_PRICE_CENTS': 100,          # $1.00
    'MAX_PRICE_CENTS': 100_000_00,   # $100,000.00
    'MAX_TITLE_LENGTH': 200,
    'MAX_DESCRIPTION_LENGTH': 10_000,
}

ORDER_LIMITS = {
    'MIN_ORDER_TOTAL_CENTS': 100,
    'MAX_ITEMS_PER_ORDER': 50,
}

# 小写字母数字，用单个连字符分隔: "my-product", "widget-2024"
SLUG_PATTERN = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')

# 已校验的订单行，准备写入 OrderItem
ValidatedOrderItem = namedtuple(
    'ValidatedOrderItem',
    ['product_id', 'seller_id', 'name', 'sku', 'price', 'quantity', 'subtotal']
)

OrderTotals = namedtuple('OrderTotals', ['subtotal', 'tax', 'shipping', 'discount', 'total'])


def validate_cart(cart_items):
    """
    校验购物车明细并定价
    :param cart_items: CartItem 列表
    :return: (order_items, validated_products)
             validated_products 为 {product_id: Product}，供扣减库存时复用同一次读取
    """
    if not cart_items:
        raise ValidationFailed('Cart is empty')

    validated_products = {}
    order_items = []

    for cart_item in cart_items:
        product = validated_products.get(cart_item.product_id)
        if product is None:
            # 行锁读取：并发下单同一商品时在此串行化
            product = db.session.get(
                Product, cart_item.product_id,
                with_for_update=True, populate_existing=True
            )

        if not product or not product.is_available:
            raise NotFound(
                f'Product {cart_item.product_id} is no longer available',
                payload={'product_id': cart_item.product_id}
            )

        quantity = validate_quantity(cart_item.quantity)

        if product.tracks_stock:
            # 同一商品出现在多行时按累计数量判断
            reserved = sum(i.quantity for i in order_items if i.product_id == product.id)
            if product.inventory < reserved + quantity:
                raise InsufficientInventory(
                    f'Insufficient inventory for {product.name}',
                    payload={
                        'product_id': product.id,
                        'requested': reserved + quantity,
                        'available': product.inventory,
                    }
                )

        validated_products[product.id] = product
        order_items.append(ValidatedOrderItem(
            product_id=product.id,
            seller_id=product.seller_id,
            name=product.name,
            sku=product.sku,
            price=product.price,
            quantity=quantity,
            subtotal=product.price * quantity,
        ))

    return order_items, validated_products


def calculate_order_totals(items):
    """
    汇总订单金额
    税费/运费/折扣暂固定为 0，后续按地区与优惠券计算
    """
    subtotal = sum(item.price * item.quantity for item in items)
    tax = 0
    shipping = 0
    discount = 0
    total = subtotal + tax + shipping - discount
    return OrderTotals(subtotal, tax, shipping, discount, total)


def validate_string(value, field_name, min_length=0, max_length=10_000, pattern=None, required=True):
    """校验并清理字符串输入，返回去除首尾空白后的值"""
    if value is None or value == '':
        if required:
            raise ValidationFailed(f'{field_name} is required')
        return ''

    if not isinstance(value, str):
        raise ValidationFailed(f'{field_name} must be a string')

    trimmed = value.strip()
    if len(trimmed) < min_length:
        raise ValidationFailed(f'{field_name} must be at least {min_length} characters')
    if len(trimmed) > max_length:
        raise ValidationFailed(f'{field_name} must be at most {max_length} characters')
    if pattern is not None and not re.match(pattern, trimmed):
        raise ValidationFailed(f'{field_name} has an invalid format')
    return trimmed


def validate_number(value, field_name, min_value=None, max_value=None, integer=False):
    """校验数值输入"""
    # bool 是 int 的子类，需要单独排除
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationFailed(f'{field_name} must be a number')
    if integer and not float(value).is_integer():
        raise ValidationFailed(f'{field_name} must be an integer')
    if min_value is not None and value < min_value:
        raise ValidationFailed(f'{field_name} must be at least {min_value}')
    if max_value is not None and value > max_value:
        raise ValidationFailed(f'{field_name} must be at most {max_value}')
    return int(value) if integer else value


def validate_slug(slug):
    return validate_string(
        slug, 'Slug',
        min_length=1,
        max_length=PRODUCT_LIMITS['MAX_TITLE_LENGTH'],
        pattern=SLUG_PATTERN,
    )


def validate_price(price):
    return validate_number(
        price, 'Price',
        min_value=PRODUCT_LIMITS['MIN_PRICE_CENTS'],
        max_value=PRODUCT_LIMITS['MAX_PRICE_CENTS'],
        integer=True,
    )


def validate_quantity(quantity):
    return validate_number(quantity, 'Quantity', min_value=1, integer=True)


def slugify(text):
    """由标题生成 slug"""
    slug = re.sub(r'[^a-z0-9]+', '-', (text or '').lower()).strip('-')
    return slug or 'item'
