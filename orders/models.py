from decimal import Decimal
import random

from django.core.validators import MinValueValidator
from django.db import models

from authentication.models import Staff
from customers.models import Customer
from inventory.models import Product


def random_position_x():
    return random.randint(50, 450)


def random_position_y():
    return random.randint(50, 350)


class RestaurantTable(models.Model):
    AVAILABLE = 'available'
    OCCUPIED = 'occupied'
    RESERVED = 'reserved'
    CLEANING = 'cleaning'

    STATUS_CHOICES = (
        (AVAILABLE, 'Available'),
        (OCCUPIED, 'Occupied'),
        (RESERVED, 'Reserved'),
        (CLEANING, 'Cleaning'),
    )

    table_number = models.PositiveIntegerField(unique=True, validators=[MinValueValidator(1)])
    capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=AVAILABLE)
    # Floor plan coordinates
    position_x = models.IntegerField(default=random_position_x)
    position_y = models.IntegerField(default=random_position_y)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Table: {self.table_number}"

    class Meta:
        db_table = 'restaurant_tables'
        ordering = ['table_number']


class Order(models.Model):
    PENDING = 'pending'
    PREPARING = 'preparing'
    READY = 'ready'
    SERVED = 'served'
    PAID = 'paid'
    CANCELLED = 'cancelled'

    status_options = (
        (PENDING, 'Pending'),
        (PREPARING, 'Preparing'),
        (READY, 'Ready'),
        (SERVED, 'Served'),
        (PAID, 'Paid'),
        (CANCELLED, 'Cancelled'),
    )

    # Forward edges; cancellation is allowed from every non-terminal state
    ALLOWED_TRANSITIONS = {
        PENDING: (PREPARING, CANCELLED),
        PREPARING: (READY, CANCELLED),
        READY: (SERVED, CANCELLED),
        SERVED: (PAID, CANCELLED),
        PAID: (),
        CANCELLED: (),
    }

    order_number = models.CharField(max_length=50, db_index=True)
    table = models.ForeignKey(
        RestaurantTable, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders'
    )
    customer = models.ForeignKey(
        Customer, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders'
    )
    staff = models.ForeignKey(
        Staff, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders'
    )
    status = models.CharField(max_length=20, choices=status_options, default=PENDING)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def can_transition_to(self, new_status):
        return new_status in self.ALLOWED_TRANSITIONS.get(self.status, ())

    def __str__(self):
        return f"{self.order_number} - {self.table if self.table else 'No table'}"

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at', '-id']


class OrderItem(models.Model):
    order = models.ForeignKey(Order, related_name='items', on_delete=models.CASCADE)
    # Order history must keep pointing at the product it sold
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='order_items')
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    # Price when the line was added to the cart
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    notes = models.CharField(max_length=500, blank=True)

    @property
    def line_total(self):
        return self.unit_price * self.quantity

    def __str__(self):
        return f"{self.quantity} x {self.product.name}"

    class Meta:
        db_table = 'order_items'
        ordering = ['id']
