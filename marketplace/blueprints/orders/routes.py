"""订单 JSON 接口：解析调用者身份与角色后委托给 OrderService"""
from flask import request, jsonify
from flask_login import login_required, current_user
from marketplace.blueprints.orders import orders_bp
from marketplace.blueprints.orders.forms import (
    OrderCreateForm, ShippingAddressForm, BillingAddressForm,
    OrderStatusForm, OrderCancelForm, OrderListForm,
)
from marketplace.exceptions import ValidationFailed, NotFound
from marketplace.services.order_service import OrderService
from marketplace.utils.permissions import current_role, seller_required, admin_required


def _validated(form):
    if not form.validate():
        raise ValidationFailed(form.first_error(), payload={'errors': form.errors})
    return form


def _address(form_cls, payload, field_name, required=True):
    """校验嵌套的地址对象，返回清理后的字典"""
    if payload is None:
        if required:
            raise ValidationFailed(f'{field_name} is required')
        return None
    if not isinstance(payload, dict):
        raise ValidationFailed(f'{field_name} must be an object')

    form = form_cls.from_json(payload)
    if not form.validate():
        raise ValidationFailed(f'{field_name}.{form.first_error()}', payload={'errors': form.errors})

    address = {k: v.strip() for k, v in form.data.items() if isinstance(v, str) and v.strip()}
    address['country'] = address['country'].upper()
    return address


@orders_bp.route('/', methods=['POST'])
@login_required
def create():
    """由当前用户的购物车下单"""
    payload = request.get_json(silent=True) or {}
    form = _validated(OrderCreateForm.from_json(payload))

    shipping_address = _address(ShippingAddressForm, payload.get('shipping_address'), 'shipping_address')
    billing_address = _address(BillingAddressForm, payload.get('billing_address'), 'billing_address',
                               required=False)

    result = OrderService.create_order(
        user_id=current_user.id,
        shipping_address=shipping_address,
        billing_address=billing_address,
        notes=form.notes.data or None,
        tenant_id=form.tenant_id.data
    )
    return jsonify(success=True, **result), 201


@orders_bp.route('/', methods=['GET'])
@login_required
def index():
    """我的订单"""
    form = _validated(OrderListForm.from_args(request.args))
    orders = OrderService.get_user_orders(
        current_user.id,
        status=form.status.data or None,
        limit=form.limit.data
    )
    return jsonify(success=True, orders=orders)


@orders_bp.route('/seller', methods=['GET'])
@login_required
@seller_required
def seller_orders():
    """卖家收到的订单"""
    form = _validated(OrderListForm.from_args(request.args))
    orders = OrderService.get_seller_orders(
        current_user.id,
        status=form.status.data or None,
        limit=form.limit.data
    )
    return jsonify(success=True, orders=orders)


@orders_bp.route('/<int:order_id>', methods=['GET'])
@login_required
def detail(order_id):
    order = OrderService.get_order(order_id, current_user.id, current_role())
    if order is None:
        raise NotFound('Order not found')
    return jsonify(success=True, order=order)


@orders_bp.route('/number/<order_number>', methods=['GET'])
@login_required
def by_number(order_number):
    order = OrderService.get_order_by_number(order_number, current_user.id, current_role())
    if order is None:
        raise NotFound('Order not found')
    return jsonify(success=True, order=order)


@orders_bp.route('/<int:order_id>/status', methods=['POST'])
@login_required
def update_status(order_id):
    form = _validated(OrderStatusForm.from_json(request.get_json(silent=True)))
    OrderService.update_order_status(
        order_id,
        form.status.data,
        current_user.id,
        current_role(),
        tracking_number=form.tracking_number.data or None,
        tracking_url=form.tracking_url.data or None
    )
    return jsonify(success=True)


@orders_bp.route('/<int:order_id>/cancel', methods=['POST'])
@login_required
def cancel(order_id):
    form = _validated(OrderCancelForm.from_json(request.get_json(silent=True)))
    OrderService.cancel_order(order_id, current_user.id, current_role(), reason=form.reason.data or None)
    return jsonify(success=True)


@orders_bp.route('/<int:order_id>/payment-confirmation', methods=['POST'])
@login_required
@admin_required
def confirm_payment(order_id):
    """支付回调确认后由管理员/内部任务调用"""
    OrderService.confirm_payment(order_id, current_user.id)
    return jsonify(success=True)
