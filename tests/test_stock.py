import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.exceptions import ValidationError

from inventory.models import Product, Stock, StockMovement
from inventory.services import compute_movement, record_movement


@pytest.fixture
def stocked_burger(burger):
    Stock.objects.create(product=burger, quantity_available=10, minimum_threshold=3)
    return burger


class TestComputeMovement:
    def test_restock_adds(self):
        assert compute_movement(10, 'restock', 5) == (15, 5)

    def test_sale_floors_quantity_but_not_delta(self):
        assert compute_movement(10, 'sale', 20) == (0, -20)

    def test_adjustment_sets_target(self):
        assert compute_movement(10, 'adjustment', 7) == (7, -3)

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            compute_movement(10, 'theft', 1)


@pytest.mark.django_db
class TestRecordMovement:
    def test_restock(self, stocked_burger):
        movement = record_movement(stocked_burger, 'restock', 5)

        assert movement.previous_quantity == 10
        assert movement.new_quantity == 15
        assert movement.quantity == 5
        stock = Stock.objects.get(product=stocked_burger)
        assert stock.quantity_available == 15
        assert stock.last_restocked is not None

    def test_sale_below_zero_records_full_delta(self, stocked_burger):
        movement = record_movement(stocked_burger, 'sale', 20)

        assert movement.previous_quantity == 10
        assert movement.new_quantity == 0
        assert movement.quantity == -20
        assert Stock.objects.get(product=stocked_burger).quantity_available == 0

    def test_adjustment(self, stocked_burger):
        movement = record_movement(stocked_burger, 'adjustment', 7)

        assert movement.new_quantity == 7
        assert movement.quantity == -3
        assert Stock.objects.get(product=stocked_burger).quantity_available == 7

    def test_sale_does_not_touch_last_restocked(self, stocked_burger):
        record_movement(stocked_burger, 'sale', 1)
        assert Stock.objects.get(product=stocked_burger).last_restocked is None

    def test_first_movement_creates_stock_row(self, fries):
        movement = record_movement(fries, 'restock', 5, notes='Livraison')

        assert movement.previous_quantity == 0
        assert movement.notes == 'Livraison'
        stock = Stock.objects.get(product=fries)
        assert stock.quantity_available == 5

    def test_first_movements_share_one_stock_row(self, fries):
        record_movement(fries, 'restock', 5)
        second = record_movement(fries, 'sale', 2)

        assert second.previous_quantity == 5
        assert Stock.objects.filter(product=fries).count() == 1
        assert Stock.objects.get(product=fries).quantity_available == 3

    def test_negative_amount_rejected(self, stocked_burger):
        with pytest.raises(ValidationError):
            record_movement(stocked_burger, 'restock', -5)
        assert StockMovement.objects.count() == 0
        assert Stock.objects.get(product=stocked_burger).quantity_available == 10

    def test_adjustment_may_go_negative(self, stocked_burger):
        movement = record_movement(stocked_burger, 'adjustment', -2)

        assert movement.quantity == -12
        stock = Stock.objects.get(product=stocked_burger)
        assert stock.quantity_available == -2
        assert stock.level == 'out'

    def test_unknown_type_rejected(self, stocked_burger):
        with pytest.raises(ValidationError):
            record_movement(stocked_burger, 'theft', 1)
        assert StockMovement.objects.count() == 0

    def test_movements_are_append_only(self, stocked_burger):
        movement = record_movement(stocked_burger, 'restock', 1)

        movement.notes = 'edited'
        with pytest.raises(DjangoValidationError):
            movement.save()
        with pytest.raises(DjangoValidationError):
            movement.delete()
        assert StockMovement.objects.get(pk=movement.pk).notes == ''


@pytest.mark.django_db
class TestStockLevel:
    @pytest.mark.parametrize('quantity, level', [(-2, 'out'), (0, 'out'), (3, 'low'), (4, 'ok')])
    def test_level(self, burger, quantity, level):
        stock = Stock.objects.create(product=burger, quantity_available=quantity, minimum_threshold=3)
        assert stock.level == level

    def test_unknown_without_stock_row(self, fries):
        assert fries.stock_level == 'unknown'


@pytest.mark.django_db
class TestStockApi:
    def test_record_movement(self, api_client, stocked_burger):
        response = api_client.post('/api/menu/stock/movements/', {
            'product': stocked_burger.id, 'movement_type': 'restock', 'amount': 5
        }, format='json')

        assert response.status_code == 201
        assert response.data['new_quantity'] == 15
        assert response.data['quantity'] == 5

    def test_waiter_cannot_record_movement(self, waiter_client, stocked_burger):
        response = waiter_client.post('/api/menu/stock/movements/', {
            'product': stocked_burger.id, 'movement_type': 'restock', 'amount': 5
        }, format='json')

        assert response.status_code == 403
        assert StockMovement.objects.count() == 0

    def test_negative_amount_is_400(self, api_client, stocked_burger):
        response = api_client.post('/api/menu/stock/movements/', {
            'product': stocked_burger.id, 'movement_type': 'sale', 'amount': -1
        }, format='json')

        assert response.status_code == 400
        assert response.data['error'] is True

    def test_latest_twenty_movements_newest_first(self, api_client, stocked_burger):
        for _ in range(25):
            record_movement(stocked_burger, 'restock', 1)

        response = api_client.get('/api/menu/stock/movements/')

        assert response.status_code == 200
        assert len(response.data) == 20
        assert response.data[0]['new_quantity'] == 35

    def test_low_stock(self, api_client, stocked_burger, fries):
        Stock.objects.create(product=fries, quantity_available=50, minimum_threshold=10)
        record_movement(stocked_burger, 'sale', 8)

        response = api_client.get('/api/menu/stock/low/')

        assert [row['product_name'] for row in response.data] == ['Burger']
        assert response.data[0]['level'] == 'low'

    def test_stock_list_includes_products_without_stock(self, api_client, stocked_burger, fries):
        response = api_client.get('/api/menu/stock/', {'search': 'frit'})

        assert len(response.data) == 1
        assert response.data[0]['stock'] is None
        assert response.data[0]['level'] == 'unknown'

    def test_update_threshold(self, api_client, stocked_burger):
        response = api_client.patch(
            f'/api/menu/stock/{stocked_burger.id}/', {'minimum_threshold': 12}, format='json'
        )

        assert response.status_code == 200
        stock = Stock.objects.get(product=stocked_burger)
        assert stock.minimum_threshold == 12
        assert stock.quantity_available == 10

    def test_product_with_ledger_history_cannot_be_deleted(self, api_client, fries):
        record_movement(fries, 'restock', 5)
        record_movement(fries, 'sale', 2)

        response = api_client.delete(f'/api/menu/products/{fries.id}/')

        assert response.status_code == 400
        assert response.data['error'] is True
        assert Product.objects.filter(pk=fries.pk).exists()
        assert StockMovement.objects.filter(product=fries).count() == 2

    def test_product_without_history_can_be_deleted(self, api_client, fries):
        response = api_client.delete(f'/api/menu/products/{fries.id}/')

        assert response.status_code == 204
        assert not Product.objects.filter(pk=fries.pk).exists()
