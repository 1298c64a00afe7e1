from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError

from inventory.models import Menu, MenuProduct
from inventory.services import delete_menu, save_menu

MENU_DATA = {'name': 'Menu Midi', 'price': Decimal('15.00')}


@pytest.mark.django_db
class TestSaveMenu:
    def test_resave_replaces_products(self, burger, fries):
        menu = save_menu(MENU_DATA, [(burger, 2)])
        save_menu({'name': 'Menu Midi'}, [(fries, 1)], menu=menu)

        rows = list(MenuProduct.objects.filter(menu=menu).values_list('product_id', 'quantity'))
        assert rows == [(fries.id, 1)]

    def test_update_changes_fields(self, burger):
        menu = save_menu(MENU_DATA, [(burger, 1)])
        save_menu({'price': Decimal('13.90'), 'is_available': False}, [(burger, 1)], menu=menu)

        menu.refresh_from_db()
        assert menu.price == Decimal('13.90')
        assert menu.is_available is False

    def test_duplicates_are_merged(self, burger, fries):
        menu = save_menu(MENU_DATA, [(burger, 1), (fries, 1), (burger, 2)])

        quantities = dict(menu.menu_products.values_list('product__name', 'quantity'))
        assert quantities == {'Burger': 3, 'Frites': 1}

    def test_menu_needs_a_product(self):
        with pytest.raises(ValidationError):
            save_menu(MENU_DATA, [])
        assert Menu.objects.count() == 0

    def test_update_needs_a_product(self, burger):
        menu = save_menu(MENU_DATA, [(burger, 1)])

        with pytest.raises(ValidationError):
            save_menu({'name': 'Renamed'}, [], menu=menu)

        menu.refresh_from_db()
        assert menu.name == 'Menu Midi'
        assert menu.menu_products.count() == 1

    def test_zero_quantity_rejected(self, burger):
        with pytest.raises(ValidationError):
            save_menu(MENU_DATA, [(burger, 0)])
        assert Menu.objects.count() == 0

    def test_delete_removes_links(self, burger, fries):
        menu = save_menu(MENU_DATA, [(burger, 1), (fries, 2)])
        menu_id = menu.id

        delete_menu(menu)

        assert not MenuProduct.objects.filter(menu_id=menu_id).exists()
        with pytest.raises(Menu.DoesNotExist):
            Menu.objects.get(pk=menu_id)


@pytest.mark.django_db
class TestMenuApi:
    def test_create(self, api_client, burger, fries):
        response = api_client.post('/api/menu/menus/', {
            'name': 'Menu Enfant',
            'price': '8.50',
            'products': [{'product': burger.id, 'quantity': 1}, {'product': fries.id}],
        }, format='json')

        assert response.status_code == 201
        assert len(response.data['menu_products']) == 2
        assert 'products' not in response.data

    def test_create_without_products_is_400(self, api_client):
        response = api_client.post('/api/menu/menus/', {'name': 'Vide', 'price': '5.00', 'products': []}, format='json')

        assert response.status_code == 400
        assert Menu.objects.count() == 0

    def test_unavailable_product_is_400(self, api_client, burger):
        burger.is_available = False
        burger.save()

        response = api_client.post('/api/menu/menus/', {
            'name': 'Menu Soir', 'price': '14.00', 'products': [{'product': burger.id, 'quantity': 1}],
        }, format='json')

        assert response.status_code == 400
        assert Menu.objects.count() == 0

    def test_patch_must_resubmit_products(self, api_client, burger):
        menu = save_menu(MENU_DATA, [(burger, 1)])

        response = api_client.patch(f'/api/menu/menus/{menu.id}/', {'price': '9.00'}, format='json')

        assert response.status_code == 400
        menu.refresh_from_db()
        assert menu.price == Decimal('15.00')

    def test_put_replaces_products(self, api_client, burger, fries):
        menu = save_menu(MENU_DATA, [(burger, 2)])

        response = api_client.put(f'/api/menu/menus/{menu.id}/', {
            'name': 'Menu Midi', 'price': '15.00', 'products': [{'product': fries.id, 'quantity': 1}],
        }, format='json')

        assert response.status_code == 200
        assert [(row['product'], row['quantity']) for row in response.data['menu_products']] == [(fries.id, 1)]

    def test_delete(self, api_client, burger):
        menu = save_menu(MENU_DATA, [(burger, 1)])

        response = api_client.delete(f'/api/menu/menus/{menu.id}/')

        assert response.status_code == 204
        assert MenuProduct.objects.count() == 0
        assert api_client.get(f'/api/menu/menus/{menu.id}/').status_code == 404

    def test_waiter_cannot_create(self, waiter_client, burger):
        response = waiter_client.post('/api/menu/menus/', {
            'name': 'Menu', 'price': '8.50', 'products': [{'product': burger.id, 'quantity': 1}],
        }, format='json')

        assert response.status_code == 403
