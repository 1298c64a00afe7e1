import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone
from rest_framework import serializers

from .cart import CartLine
from .models import Order, OrderItem, RestaurantTable

logger = logging.getLogger(__name__)

ORDER_STATUSES = [choice for choice, _ in Order.status_options]
TABLE_STATUSES = [choice for choice, _ in RestaurantTable.STATUS_CHOICES]


class InvalidStatusTransition(serializers.ValidationError):
    """Raised for an unknown order status or a move the state machine does not allow"""

    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        if requested not in ORDER_STATUSES:
            detail = f"Unknown order status: {requested}"
        else:
            detail = f"Cannot move order from {current} to {requested}"
        super().__init__({'status': [detail]})


def generate_order_number():
    """Time-derived order number, not guaranteed unique"""
    return f"CMD-{int(timezone.now().timestamp() * 1000)}"


def _as_cart_line(entry):
    if isinstance(entry, CartLine):
        return entry
    product, quantity, *rest = entry
    unit_price = rest[0] if rest else None
    return CartLine(product, quantity, unit_price)


def create_order(items, table=None, customer=None, staff=None, notes='', order_number=None):
    """
    Persist an order from cart lines.

    `items` holds CartLine objects or (product, quantity[, unit_price]) tuples.
    The order, its items and the table's move to occupied are written in one
    transaction, so a failure leaves nothing behind.
    """
    lines = [_as_cart_line(entry) for entry in items]
    if not lines:
        raise serializers.ValidationError({'items': "An order needs at least one item."})
    for line in lines:
        if line.quantity < 1:
            raise serializers.ValidationError({'items': "Item quantity must be at least 1."})
        if line.unit_price < 0:
            raise serializers.ValidationError({'items': "Unit price cannot be negative."})
        if not line.product.is_available:
            raise serializers.ValidationError({'items': f"{line.product.name} is not available."})

    total = sum((line.line_total for line in lines), Decimal('0.00'))

    with transaction.atomic():
        if table is not None:
            table = RestaurantTable.objects.select_for_update().get(pk=table.pk)
            if table.status != RestaurantTable.AVAILABLE:
                raise serializers.ValidationError({'table': f"Table {table.table_number} is not available."})

        order = Order.objects.create(
            order_number=order_number or generate_order_number(),
            table=table,
            customer=customer,
            staff=staff,
            notes=notes or '',
            total_amount=total,
        )

        for line in lines:
            OrderItem.objects.create(
                order=order,
                product=line.product,
                quantity=line.quantity,
                unit_price=line.unit_price,
                notes=line.notes or '',
            )

        if table is not None:
            table.status = RestaurantTable.OCCUPIED
            table.save(update_fields=['status'])

    logger.info(
        "Order %s created: %d items, total %s, table %s",
        order.order_number, len(lines), total, table.table_number if table else '-'
    )
    return order


def advance_status(order, new_status):
    """
    Move an order along its lifecycle.

    Paying an order that sits at a table sends the table to cleaning in the
    same transaction.
    """
    if new_status not in ORDER_STATUSES:
        raise InvalidStatusTransition(order.status, new_status)

    with transaction.atomic():
        locked = Order.objects.select_for_update().get(pk=order.pk)
        if not locked.can_transition_to(new_status):
            raise InvalidStatusTransition(locked.status, new_status)

        previous = locked.status
        locked.status = new_status
        locked.save(update_fields=['status', 'updated_at'])

        if new_status == Order.PAID and locked.table_id:
            RestaurantTable.objects.filter(pk=locked.table_id).update(status=RestaurantTable.CLEANING)

    order.status = new_status
    logger.info("Order %s: %s -> %s", order.order_number, previous, new_status)
    return order


def set_table_status(table, new_status):
    """Direct staff action on a table"""
    if new_status not in TABLE_STATUSES:
        raise serializers.ValidationError({'status': [f"Unknown table status: {new_status}"]})
    previous = table.status
    table.status = new_status
    table.save(update_fields=['status'])
    logger.info("Table %s: %s -> %s", table.table_number, previous, new_status)
    return table
