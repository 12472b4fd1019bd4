"""Transition table and access rules (no database needed)."""

from dataclasses import FrozenInstanceError

import pytest

from marketplace.exceptions import Forbidden, OrderNotModifiable
from marketplace.models.auth import UserProfile
from marketplace.models.trade import Order, OrderItem
from marketplace.services.order_policy import (
    ALLOWED_TRANSITIONS,
    AggregateTransition,
    ScopedTransition,
    assert_can_view_order,
    assert_owner_or_admin,
    assert_transition,
    can_cancel,
    can_transition,
    is_terminal,
    resolve_transition_authority,
)

BUYER = 1
SELLER_A = 2
SELLER_B = 3
ADMIN = 4
STRANGER = 5

ALL_PAIRS = [(a, b) for a in Order.STATUSES for b in Order.STATUSES]
LEGAL_PAIRS = [(a, b) for a, b in ALL_PAIRS if b in ALLOWED_TRANSITIONS[a]]
ILLEGAL_PAIRS = [(a, b) for a, b in ALL_PAIRS if b not in ALLOWED_TRANSITIONS[a]]


def make_order(status=Order.STATUS_PENDING):
    order = Order(user_id=BUYER, order_number='ORD-X', status=status)
    items = [
        OrderItem(order_id=1, product_id=10, seller_id=SELLER_A, quantity=1, status=status),
        OrderItem(order_id=1, product_id=11, seller_id=SELLER_B, quantity=2, status=status),
    ]
    return order, items


class TestTransitionTable:
    def test_every_status_has_an_entry(self):
        assert set(ALLOWED_TRANSITIONS) == set(Order.STATUSES)

    @pytest.mark.parametrize('from_status,to_status', LEGAL_PAIRS)
    def test_listed_pairs_are_legal(self, from_status, to_status):
        assert can_transition(from_status, to_status)
        assert_transition(from_status, to_status)

    @pytest.mark.parametrize('from_status,to_status', ILLEGAL_PAIRS)
    def test_unlisted_pairs_are_rejected(self, from_status, to_status):
        assert not can_transition(from_status, to_status)
        with pytest.raises(OrderNotModifiable):
            assert_transition(from_status, to_status)

    def test_no_self_transitions(self):
        for status in Order.STATUSES:
            assert not can_transition(status, status)

    def test_terminal_states(self):
        assert is_terminal(Order.STATUS_CANCELLED)
        assert is_terminal(Order.STATUS_REFUNDED)
        assert not is_terminal(Order.STATUS_PENDING)
        assert not is_terminal(Order.STATUS_DISPUTED)

    def test_unknown_status_has_no_transitions(self):
        assert not can_transition('archived', Order.STATUS_PENDING)

    def test_can_cancel_only_early_states(self):
        cancellable = [s for s in Order.STATUSES if can_cancel(s)]
        assert cancellable == [Order.STATUS_PENDING, Order.STATUS_CONFIRMED]


class TestViewAccess:
    def test_owner_can_view(self):
        order, items = make_order()
        assert_can_view_order(BUYER, UserProfile.ROLE_CUSTOMER, order, items)

    def test_admin_can_view_any_order(self):
        order, items = make_order()
        assert_can_view_order(ADMIN, UserProfile.ROLE_ADMIN, order, items)

    def test_seller_with_item_can_view(self):
        order, items = make_order()
        assert_can_view_order(SELLER_A, UserProfile.ROLE_SELLER, order, items)

    def test_seller_without_item_is_forbidden(self):
        order, items = make_order()
        with pytest.raises(Forbidden):
            assert_can_view_order(STRANGER, UserProfile.ROLE_SELLER, order, items)

    @pytest.mark.parametrize('role', [UserProfile.ROLE_CUSTOMER, UserProfile.ROLE_MODERATOR])
    def test_other_users_are_forbidden(self, role):
        order, items = make_order()
        with pytest.raises(Forbidden):
            assert_can_view_order(STRANGER, role, order, items)

    def test_owner_or_admin(self):
        assert_owner_or_admin(BUYER, UserProfile.ROLE_CUSTOMER, BUYER)
        assert_owner_or_admin(ADMIN, UserProfile.ROLE_ADMIN, BUYER)
        with pytest.raises(Forbidden) as exc:
            assert_owner_or_admin(SELLER_A, UserProfile.ROLE_SELLER, BUYER, 'nope')
        assert exc.value.message == 'nope'


class TestTransitionAuthority:
    def test_admin_gets_aggregate_transition(self):
        order, items = make_order(Order.STATUS_CONFIRMED)
        authority = resolve_transition_authority(ADMIN, UserProfile.ROLE_ADMIN, order,
                                                 Order.STATUS_SHIPPED, items)
        assert isinstance(authority, AggregateTransition)
        assert authority.target == Order.STATUS_SHIPPED
        assert authority.order is order

    def test_admin_illegal_transition(self):
        order, items = make_order(Order.STATUS_PENDING)
        with pytest.raises(OrderNotModifiable):
            resolve_transition_authority(ADMIN, UserProfile.ROLE_ADMIN, order,
                                         Order.STATUS_DELIVERED, items)

    def test_seller_gets_scoped_transition_over_own_items(self):
        order, items = make_order(Order.STATUS_SHIPPED)
        authority = resolve_transition_authority(SELLER_A, UserProfile.ROLE_SELLER, order,
                                                 Order.STATUS_DELIVERED, items)
        assert isinstance(authority, ScopedTransition)
        assert authority.seller_id == SELLER_A
        assert [i.seller_id for i in authority.items] == [SELLER_A]

    def test_seller_checks_item_status_not_order_status(self):
        order, items = make_order(Order.STATUS_SHIPPED)
        items[0].status = Order.STATUS_DELIVERED
        with pytest.raises(OrderNotModifiable):
            resolve_transition_authority(SELLER_A, UserProfile.ROLE_SELLER, order,
                                         Order.STATUS_DELIVERED, items)

    def test_seller_without_items_is_forbidden(self):
        order, items = make_order()
        with pytest.raises(Forbidden):
            resolve_transition_authority(STRANGER, UserProfile.ROLE_SELLER, order,
                                         Order.STATUS_CONFIRMED, items)

    def test_owner_may_cancel_pending_order(self):
        order, items = make_order(Order.STATUS_PENDING)
        authority = resolve_transition_authority(BUYER, UserProfile.ROLE_CUSTOMER, order,
                                                 Order.STATUS_CANCELLED, items)
        assert isinstance(authority, AggregateTransition)

    def test_owner_cannot_confirm(self):
        order, items = make_order(Order.STATUS_PENDING)
        with pytest.raises(OrderNotModifiable):
            resolve_transition_authority(BUYER, UserProfile.ROLE_CUSTOMER, order,
                                         Order.STATUS_CONFIRMED, items)

    def test_owner_cannot_cancel_after_pending(self):
        order, items = make_order(Order.STATUS_CONFIRMED)
        with pytest.raises(OrderNotModifiable):
            resolve_transition_authority(BUYER, UserProfile.ROLE_CUSTOMER, order,
                                         Order.STATUS_CANCELLED, items)

    @pytest.mark.parametrize('role', [UserProfile.ROLE_CUSTOMER, UserProfile.ROLE_MODERATOR])
    def test_non_owner_is_forbidden(self, role):
        order, items = make_order()
        with pytest.raises(Forbidden):
            resolve_transition_authority(STRANGER, role, order, Order.STATUS_CANCELLED, items)

    def test_authorities_are_immutable(self):
        order, items = make_order()
        authority = AggregateTransition(order=order, target=Order.STATUS_CANCELLED)
        with pytest.raises(FrozenInstanceError):
            authority.target = Order.STATUS_REFUNDED
