import logging

from django.db import transaction
from django.utils import timezone
from rest_framework import serializers

from .models import Menu, MenuProduct, Stock, StockMovement

logger = logging.getLogger(__name__)

MOVEMENT_TYPES = [choice for choice, _ in StockMovement.MOVEMENT_TYPE_CHOICES]


# =============== STOCK LEDGER ===============

def compute_movement(current, movement_type, amount):
    """
    Return (new_quantity, delta) for a movement on a product holding `current` units.

    restock adds, sale removes without going below zero, adjustment sets the
    absolute quantity. A sale records the full requested amount as its delta
    even when fewer units were on hand.
    """
    if movement_type == StockMovement.RESTOCK:
        return current + amount, amount
    if movement_type == StockMovement.SALE:
        return max(0, current - amount), -amount
    if movement_type == StockMovement.ADJUSTMENT:
        return amount, amount - current
    raise ValueError(f"Unknown movement type: {movement_type}")


def record_movement(product, movement_type, amount, notes=''):
    """Apply a stock movement and append it to the ledger in one transaction"""
    if movement_type not in MOVEMENT_TYPES:
        raise serializers.ValidationError({'movement_type': f"Unknown movement type: {movement_type}"})
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise serializers.ValidationError({'amount': "Amount must be an integer."})
    # Only an adjustment target may be negative
    if amount < 0 and movement_type != StockMovement.ADJUSTMENT:
        raise serializers.ValidationError({'amount': "Amount cannot be negative."})

    with transaction.atomic():
        # Creating the row under the lock serializes a product's first movements too
        stock, _ = Stock.objects.select_for_update().get_or_create(product=product)
        current = stock.quantity_available
        new_quantity, delta = compute_movement(current, movement_type, amount)

        movement = StockMovement.objects.create(
            product=product,
            movement_type=movement_type,
            quantity=delta,
            previous_quantity=current,
            new_quantity=new_quantity,
            notes=notes or '',
        )

        stock.quantity_available = new_quantity
        if movement_type == StockMovement.RESTOCK:
            stock.last_restocked = timezone.now()
        stock.save()

    logger.info(
        "Stock %s on %s: %s -> %s (%+d)",
        movement_type, product.name, current, new_quantity, delta
    )
    return movement


# =============== MENUS ===============

def merge_menu_products(products):
    """Collapse [(product, quantity), ...] so each product appears once"""
    merged = {}
    for product, quantity in products:
        if quantity is None or quantity < 1:
            raise serializers.ValidationError({'products': "Each product quantity must be at least 1."})
        if product.pk in merged:
            merged[product.pk] = (product, merged[product.pk][1] + quantity)
        else:
            merged[product.pk] = (product, quantity)
    return list(merged.values())


@transaction.atomic
def save_menu(data, products, menu=None):
    """
    Create or update a menu and replace its product list wholesale.

    `products` is a list of (product, quantity) pairs and must not be empty.
    """
    entries = merge_menu_products(products)
    if not entries:
        raise serializers.ValidationError({'products': "A menu must contain at least one product."})

    if menu is None:
        menu = Menu.objects.create(**data)
    else:
        for attr, value in data.items():
            setattr(menu, attr, value)
        menu.save()

    menu.menu_products.all().delete()
    MenuProduct.objects.bulk_create([
        MenuProduct(menu=menu, product=product, quantity=quantity)
        for product, quantity in entries
    ])

    logger.info("Menu %s saved with %d products", menu.name, len(entries))
    return menu


@transaction.atomic
def delete_menu(menu):
    name = menu.name
    menu.menu_products.all().delete()
    menu.delete()
    logger.info("Menu %s deleted", name)
