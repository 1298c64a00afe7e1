"""
Read-side aggregations for the dashboard and reports screens.

Every function here takes plain row dicts, the shape returned by
``QuerySet.values()``, and returns new dicts. Nothing is stored.
"""
from collections import OrderedDict
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

PAID = 'paid'
UNCATEGORIZED = 'Uncategorized'
DEFAULT_COLOR = '#8884d8'
TWO_PLACES = Decimal('0.01')


def _money(value):
    return Decimal(str(value or 0)).quantize(TWO_PLACES)


def _local_date(value):
    if timezone.is_aware(value):
        return timezone.localtime(value).date()
    return value.date()


def daily_sales(orders, end_date, days=7):
    """
    Revenue and paid order count per day over the `days` days ending on `end_date`.

    Buckets come back oldest first. Orders that are not paid or fall outside
    the window are ignored.
    """
    buckets = OrderedDict()
    for offset in range(days - 1, -1, -1):
        day = end_date - timedelta(days=offset)
        buckets[day] = {
            'date': day.isoformat(),
            'day': day.strftime('%a'),
            'label': day.strftime('%m-%d'),
            'sales': Decimal('0.00'),
            'orders': 0,
        }

    for order in orders:
        if order['status'] != PAID:
            continue
        bucket = buckets.get(_local_date(order['created_at']))
        if bucket is None:
            continue
        bucket['sales'] += _money(order['total_amount'])
        bucket['orders'] += 1

    return list(buckets.values())


def sales_summary(buckets):
    total_sales = sum((bucket['sales'] for bucket in buckets), Decimal('0.00'))
    total_orders = sum(bucket['orders'] for bucket in buckets)
    average = (total_sales / total_orders).quantize(TWO_PLACES) if total_orders else Decimal('0.00')
    return {
        'total_sales': total_sales,
        'total_orders': total_orders,
        'average_basket': average,
    }


def category_revenue(rows):
    """
    Revenue per category, largest first.

    Rows carry a summed ``revenue`` per category name and color. Items without
    a category go to Uncategorized.
    """
    stats = {}
    for row in rows:
        name = row.get('product__category__name') or UNCATEGORIZED
        color = row.get('product__category__color') or DEFAULT_COLOR
        entry = stats.setdefault(name, {'name': name, 'value': Decimal('0.00'), 'color': color})
        entry['value'] += _money(row['revenue'])
    return sorted(stats.values(), key=lambda entry: (-entry['value'], entry['name']))


def top_products(rows, limit=5):
    """Best sellers by ``total_quantity``, ties broken by product name"""
    quantities = {}
    for row in rows:
        name = row['product__name']
        quantities[name] = quantities.get(name, 0) + (row['total_quantity'] or 0)
    ranked = sorted(quantities.items(), key=lambda pair: (-pair[1], pair[0]))
    return [{'name': name, 'quantity': quantity} for name, quantity in ranked[:limit]]


def dashboard_stats(tables, orders, customers_count, products_count, today):
    occupied = sum(1 for table in tables if table['status'] == 'occupied')
    today_orders = sum(1 for order in orders if _local_date(order['created_at']) == today)
    revenue = sum((_money(order['total_amount']) for order in orders), Decimal('0.00'))
    return {
        'total_tables': len(tables),
        'occupied_tables': occupied,
        'available_tables': len(tables) - occupied,
        'today_orders': today_orders,
        'total_customers': customers_count,
        'total_products': products_count,
        'total_revenue': revenue,
    }


def staff_stats(orders):
    """Paid order count, sales total and average order value for one staff member"""
    paid = [order for order in orders if order['status'] == PAID]
    total = sum((_money(order['total_amount']) for order in paid), Decimal('0.00'))
    average = (total / len(paid)).quantize(TWO_PLACES) if paid else Decimal('0.00')
    return {
        'total_orders': len(paid),
        'total_sales': total,
        'average_order_value': average,
    }
