import re
from decimal import Decimal
from unittest import mock

import pytest
from django.db import DatabaseError
from rest_framework.exceptions import ValidationError

from inventory.models import Product
from orders.cart import Cart
from orders.models import Order, OrderItem, RestaurantTable
from orders.services import (
    InvalidStatusTransition, advance_status, create_order, generate_order_number, set_table_status
)

FORWARD = ['preparing', 'ready', 'served', 'paid']


class TestCart:
    def make_product(self, pk, price):
        return Product(pk=pk, name=f'P{pk}', price=Decimal(price))

    def test_add_increments_existing_line(self):
        cart = Cart()
        product = self.make_product(1, '4.50')
        cart.add_product(product)
        cart.add_product(product)

        assert len(cart) == 1
        assert cart.lines[0].quantity == 2
        assert cart.total == Decimal('9.00')

    def test_price_is_captured_on_add(self):
        cart = Cart()
        product = self.make_product(1, '4.50')
        cart.add_product(product)
        product.price = Decimal('99.00')
        cart.add_product(product)

        assert cart.lines[0].unit_price == Decimal('4.50')
        assert cart.total == Decimal('9.00')

    def test_update_quantity_to_zero_removes_line(self):
        cart = Cart()
        cart.add_product(self.make_product(1, '2.00'))
        cart.add_product(self.make_product(2, '3.00'))
        cart.update_quantity(1, 0)

        assert [line.product.pk for line in cart.lines] == [2]

    def test_update_and_remove(self):
        cart = Cart()
        cart.add_product(self.make_product(1, '2.00'))
        cart.update_quantity(1, 5)
        assert cart.total == Decimal('10.00')

        cart.remove(1)
        assert not cart
        assert cart.total == Decimal('0.00')


def test_generated_order_number_format():
    assert re.fullmatch(r'CMD-\d{13}', generate_order_number())


@pytest.mark.django_db
class TestCreateOrder:
    def test_total_uses_cart_prices(self, burger, fries):
        cart = Cart()
        cart.add_product(burger)
        cart.add_product(burger)
        cart.add_product(fries)
        Product.objects.filter(pk=burger.pk).update(price=Decimal('20.00'))

        order = create_order(cart.lines)

        assert order.total_amount == Decimal('28.00')
        assert order.status == Order.PENDING
        items = list(order.items.order_by('id'))
        assert [(item.product_id, item.quantity, item.unit_price) for item in items] == [
            (burger.id, 2, Decimal('12.50')),
            (fries.id, 1, Decimal('3.00')),
        ]

    def test_total_from_tuples(self, burger, fries):
        order = create_order([(burger, 3, Decimal('10.00')), (fries, 2)])
        assert order.total_amount == Decimal('36.00')

    def test_table_becomes_occupied(self, burger, table):
        order = create_order([(burger, 1)], table=table)

        table.refresh_from_db()
        assert table.status == RestaurantTable.OCCUPIED
        assert order.table == table

    def test_order_number_default_and_override(self, burger):
        assert create_order([(burger, 1)]).order_number.startswith('CMD-')
        assert create_order([(burger, 1)], order_number='CMD123456').order_number == 'CMD123456'

    def test_empty_cart_writes_nothing(self, table):
        with pytest.raises(ValidationError):
            create_order([], table=table)

        assert Order.objects.count() == 0
        table.refresh_from_db()
        assert table.status == RestaurantTable.AVAILABLE

    def test_item_failure_rolls_back_order(self, burger, table):
        with mock.patch.object(OrderItem.objects, 'create', side_effect=DatabaseError('disk full')):
            with pytest.raises(DatabaseError):
                create_order([(burger, 1)], table=table)

        assert Order.objects.count() == 0
        table.refresh_from_db()
        assert table.status == RestaurantTable.AVAILABLE

    def test_busy_table_rejected(self, burger, table):
        set_table_status(table, RestaurantTable.RESERVED)

        with pytest.raises(ValidationError):
            create_order([(burger, 1)], table=table)
        assert Order.objects.count() == 0

    def test_unavailable_product_rejected(self, burger):
        burger.is_available = False
        burger.save()

        with pytest.raises(ValidationError):
            create_order([(burger, 1)])
        assert Order.objects.count() == 0


@pytest.mark.django_db
class TestAdvanceStatus:
    def test_paying_frees_table_for_cleaning(self, burger, table):
        order = create_order([(burger, 1)], table=table)

        for new_status in FORWARD[:-1]:
            advance_status(order, new_status)
            table.refresh_from_db()
            assert table.status == RestaurantTable.OCCUPIED

        advance_status(order, Order.PAID)

        table.refresh_from_db()
        assert table.status == RestaurantTable.CLEANING
        assert Order.objects.get(pk=order.pk).status == Order.PAID

    def test_paying_without_table(self, burger):
        order = create_order([(burger, 1)])
        for new_status in FORWARD:
            advance_status(order, new_status)
        assert Order.objects.get(pk=order.pk).status == Order.PAID

    def test_skipping_steps_is_rejected(self, burger, table):
        order = create_order([(burger, 1)], table=table)

        with pytest.raises(InvalidStatusTransition):
            advance_status(order, Order.PAID)

        assert Order.objects.get(pk=order.pk).status == Order.PENDING
        table.refresh_from_db()
        assert table.status == RestaurantTable.OCCUPIED

    def test_paid_is_terminal(self, burger):
        order = create_order([(burger, 1)])
        for new_status in FORWARD:
            advance_status(order, new_status)

        for new_status in ['pending', 'served', 'cancelled']:
            with pytest.raises(InvalidStatusTransition):
                advance_status(order, new_status)
        assert Order.objects.get(pk=order.pk).status == Order.PAID

    def test_cancel_leaves_table_alone(self, burger, table):
        order = create_order([(burger, 1)], table=table)
        advance_status(order, Order.PREPARING)
        advance_status(order, Order.CANCELLED)

        table.refresh_from_db()
        assert table.status == RestaurantTable.OCCUPIED
        with pytest.raises(InvalidStatusTransition):
            advance_status(order, Order.PREPARING)

    def test_unknown_status(self, burger):
        order = create_order([(burger, 1)])
        with pytest.raises(InvalidStatusTransition) as excinfo:
            advance_status(order, 'delivered')
        assert 'Unknown order status' in str(excinfo.value.detail)


@pytest.mark.django_db
class TestOrderApi:
    def test_create_order(self, api_client, burger, fries, table, staff_member):
        response = api_client.post('/api/orders/', {
            'table': table.id,
            'staff': staff_member.id,
            'notes': 'Sans oignons',
            'items': [
                {'product': burger.id, 'quantity': 2, 'unit_price': '11.00'},
                {'product': fries.id, 'quantity': 1},
            ],
        }, format='json')

        assert response.status_code == 201
        assert Decimal(response.data['total_amount']) == Decimal('25.00')
        assert response.data['staff_name'] == 'Marie Dupont'
        assert len(response.data['items']) == 2
        assert response.data['table']['status'] == RestaurantTable.OCCUPIED

    def test_empty_items_is_400(self, api_client):
        response = api_client.post('/api/orders/', {'items': []}, format='json')

        assert response.status_code == 400
        assert 'items' in response.data['details']
        assert Order.objects.count() == 0

    def test_occupied_table_is_400(self, api_client, burger, table):
        create_order([(burger, 1)], table=table)

        response = api_client.post('/api/orders/', {
            'table': table.id, 'items': [{'product': burger.id, 'quantity': 1}]
        }, format='json')

        assert response.status_code == 400
        assert Order.objects.count() == 1

    def test_status_endpoint(self, waiter_client, burger, table):
        order = create_order([(burger, 1)], table=table)

        response = waiter_client.post(f'/api/orders/{order.id}/status/', {'status': 'preparing'}, format='json')
        assert response.status_code == 200
        assert response.data['status'] == 'preparing'

        response = waiter_client.post(f'/api/orders/{order.id}/status/', {'status': 'paid'}, format='json')
        assert response.status_code == 400
        assert response.data['error'] is True
        assert 'status' in response.data['details']

    def test_list_filters(self, api_client, burger):
        create_order([(burger, 1)], order_number='CMD-111')
        second = create_order([(burger, 1)], order_number='CMD-222')
        advance_status(second, Order.CANCELLED)

        response = api_client.get('/api/orders/', {'search': 'cmd-2'})
        assert [order['order_number'] for order in response.data] == ['CMD-222']

        response = api_client.get('/api/orders/', {'status': 'pending'})
        assert [order['order_number'] for order in response.data] == ['CMD-111']

    def test_list_is_newest_first(self, api_client, burger):
        create_order([(burger, 1)], order_number='first')
        create_order([(burger, 1)], order_number='second')

        response = api_client.get('/api/orders/')
        assert [order['order_number'] for order in response.data] == ['second', 'first']

    def test_patch_notes(self, api_client, burger):
        order = create_order([(burger, 1)])

        response = api_client.patch(f'/api/orders/{order.id}/', {'notes': 'Table près de la fenêtre'}, format='json')

        assert response.status_code == 200
        assert Order.objects.get(pk=order.pk).notes == 'Table près de la fenêtre'

    def test_product_in_order_history_cannot_be_deleted(self, api_client, burger):
        create_order([(burger, 1)])

        response = api_client.delete(f'/api/menu/products/{burger.id}/')

        assert response.status_code == 400
        assert Product.objects.filter(pk=burger.pk).exists()
