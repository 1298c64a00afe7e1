from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from authentication.models import CustomUser, Staff, ROLE_MANAGER, ROLE_WAITER
from inventory.models import Category, Product
from orders.models import RestaurantTable

PASSWORD = 'S3cure-Passw0rd!'


@pytest.fixture
def manager(db):
    return CustomUser.objects.create_user(username='gerant', password=PASSWORD, role=ROLE_MANAGER)


@pytest.fixture
def waiter(db):
    return CustomUser.objects.create_user(username='serveur', password=PASSWORD, role=ROLE_WAITER)


@pytest.fixture
def api_client(manager):
    client = APIClient()
    client.force_authenticate(user=manager)
    return client


@pytest.fixture
def waiter_client(waiter):
    client = APIClient()
    client.force_authenticate(user=waiter)
    return client


@pytest.fixture
def category(db):
    return Category.objects.create(name='Plats', color='#ff7300')


@pytest.fixture
def burger(category):
    return Product.objects.create(name='Burger', price=Decimal('12.50'), category=category)


@pytest.fixture
def fries(category):
    return Product.objects.create(name='Frites', price=Decimal('3.00'), category=category)


@pytest.fixture
def table(db):
    return RestaurantTable.objects.create(table_number=1, capacity=4)


@pytest.fixture
def staff_member(db):
    return Staff.objects.create(first_name='Marie', last_name='Dupont', role=ROLE_WAITER)


@pytest.fixture
def password():
    return PASSWORD
