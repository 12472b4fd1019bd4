"""Pytest fixtures for marketplace order tests."""

import pytest

from marketplace import create_app
from marketplace.extensions import db
from marketplace.models import (
    User, UserProfile, Tenant, Product, Cart, CartItem, Order, OrderItem, Payment,
)

SHIPPING_ADDRESS = {
    'name': 'Ada Lovelace',
    'street': '12 Analytical Way',
    'city': 'London',
    'postal_code': 'N1 9GU',
    'country': 'GB',
}


class Factory:
    """Creates committed rows in whatever app context is active."""

    def __init__(self):
        self._seq = 0

    def _next(self):
        self._seq += 1
        return self._seq

    def tenant(self, name='Demo'):
        n = self._next()
        tenant = Tenant(name=name, slug=f'tenant-{n}')
        db.session.add(tenant)
        db.session.commit()
        return tenant

    def user(self, role=None, name=None):
        n = self._next()
        user = User(email=f'user{n}@market.test', name=name or f'User {n}')
        db.session.add(user)
        db.session.flush()
        if role:
            db.session.add(UserProfile(user_id=user.id, default_role=role))
        db.session.commit()
        return user

    def product(self, seller, price=500, inventory=10, track_inventory=True,
                status=Product.STATUS_ACTIVE, is_deleted=False, sales_count=0, name=None):
        n = self._next()
        product = Product(
            seller_id=seller.id,
            name=name or f'Product {n}',
            slug=f'product-{n}',
            sku=f'SKU-{n:05d}',
            price=price,
            currency='usd',
            track_inventory=track_inventory,
            inventory=inventory if track_inventory else None,
            sales_count=sales_count,
            status=status,
            is_deleted=is_deleted,
        )
        db.session.add(product)
        db.session.commit()
        return product

    def cart(self, user, lines=(), tenant=None, currency='usd'):
        """:param lines: iterable of (product, quantity)"""
        cart = Cart(
            user_id=user.id,
            tenant_id=tenant.id if tenant else None,
            currency=currency,
        )
        db.session.add(cart)
        db.session.flush()

        subtotal = 0
        count = 0
        for product, quantity in lines:
            db.session.add(CartItem(
                cart_id=cart.id,
                product_id=product.id,
                user_id=user.id,
                quantity=quantity,
                price=product.price,
                subtotal=product.price * quantity,
            ))
            subtotal += product.price * quantity
            count += quantity
        cart.subtotal = subtotal
        cart.item_count = count
        db.session.commit()
        return cart

    def order(self, buyer, lines, status=Order.STATUS_PENDING):
        """Insert an order directly (no cart, no inventory movement)."""
        n = self._next()
        subtotal = sum(p.price * q for p, q in lines)
        order = Order(
            user_id=buyer.id,
            order_number=f'ORD-TEST-{n:06d}',
            status=status,
            subtotal=subtotal, tax=0, shipping=0, discount=0, total=subtotal,
            currency='usd',
            shipping_address=dict(SHIPPING_ADDRESS),
            billing_address=dict(SHIPPING_ADDRESS),
        )
        db.session.add(order)
        db.session.flush()
        for product, quantity in lines:
            db.session.add(OrderItem(
                order_id=order.id,
                product_id=product.id,
                seller_id=product.seller_id,
                name=product.name,
                sku=product.sku,
                price=product.price,
                quantity=quantity,
                subtotal=product.price * quantity,
                status=status,
            ))
        db.session.commit()
        return order

    def payment(self, order, status=Payment.STATUS_SUCCEEDED):
        payment = Payment(
            user_id=order.user_id,
            order_id=order.id,
            provider_reference=f'pi_{order.id}',
            amount=order.total,
            currency=order.currency,
            status=status,
        )
        db.session.add(payment)
        db.session.commit()
        return payment


@pytest.fixture
def app():
    """Application on a fresh in-memory database."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """Run the test body inside an application context (service-level tests)."""
    with app.app_context():
        yield app
        db.session.remove()


@pytest.fixture
def factory():
    return Factory()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    """Log a user id into the test client's session."""
    def _login(user_id):
        with client.session_transaction() as sess:
            sess['_user_id'] = str(user_id)
            sess['_fresh'] = True
    return _login


@pytest.fixture
def shipping_address():
    return dict(SHIPPING_ADDRESS)
