"""Response shaping from already-loaded rows."""

from datetime import datetime

from marketplace.models.auth import User
from marketplace.models.biz import Product
from marketplace.models.payment import Payment
from marketplace.models.trade import Order, OrderItem
from marketplace.services.order_mappers import (
    enrich_order_item,
    to_order_list_item,
    to_order_response,
    to_payment_summary,
    to_seller_order_view,
)

PAID = datetime(2026, 3, 1, 12, 0, 0)


def make_payment(status):
    return Payment(order_id=1, amount=1500, currency='usd', status=status, updated_at=PAID)


class TestPaymentSummary:
    def test_no_payment(self):
        assert to_payment_summary(None) is None

    def test_succeeded_payment_has_paid_at(self):
        assert to_payment_summary(make_payment(Payment.STATUS_SUCCEEDED)) == {
            'status': 'succeeded',
            'amount': 1500,
            'currency': 'usd',
            'paid_at': '2026-03-01T12:00:00',
        }

    def test_unsettled_payment_has_no_paid_at(self):
        summary = to_payment_summary(make_payment(Payment.STATUS_PROCESSING))
        assert summary['status'] == 'processing'
        assert summary['paid_at'] is None


class TestOrderShapes:
    def test_enrich_with_product(self):
        item = OrderItem(id=7, product_id=3, seller_id=2, name='Lamp', price=500, quantity=1, subtotal=500)
        product = Product(id=3, name='Lamp v2', slug='lamp-v2')

        data = enrich_order_item(item, product)

        assert data['name'] == 'Lamp'
        assert data['product'] == {'id': 3, 'name': 'Lamp v2', 'slug': 'lamp-v2'}

    def test_enrich_with_deleted_product(self):
        item = OrderItem(id=7, product_id=3, name='Lamp')
        assert enrich_order_item(item, None)['product'] is None

    def test_order_response(self):
        order = Order(id=1, order_number='ORD-1', status=Order.STATUS_PENDING, total=1500,
                      shipped_at=datetime(2026, 3, 2))
        data = to_order_response(order, [{'id': 7}], make_payment(Payment.STATUS_SUCCEEDED))

        assert data['order_number'] == 'ORD-1'
        assert data['shipped_at'] == '2026-03-02T00:00:00'
        assert data['items'] == [{'id': 7}]
        assert data['payment']['paid_at'] == '2026-03-01T12:00:00'

    def test_list_item_counts_lines(self):
        data = to_order_list_item(Order(id=1, order_number='ORD-1'), 3)
        assert data['item_count'] == 3
        assert 'items' not in data
        assert 'shipping_address' not in data

    def test_seller_view(self):
        order = Order(id=1, order_number='ORD-1', user_id=9)
        items = [OrderItem(id=7, seller_id=2, name='Lamp')]
        buyer = User(id=9, name='Grace', email='grace@market.test')

        data = to_seller_order_view(order, items, buyer)

        assert [i['id'] for i in data['items']] == [7]
        assert data['buyer'] == {'id': 9, 'name': 'Grace', 'email': 'grace@market.test'}

    def test_seller_view_without_buyer(self):
        data = to_seller_order_view(Order(id=1, order_number='ORD-1'), [], None)
        assert data['buyer'] is None
