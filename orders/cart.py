from decimal import Decimal


class CartLine:
    """One product in the cart, priced when it was first added"""

    def __init__(self, product, quantity=1, unit_price=None, notes=''):
        self.product = product
        self.quantity = quantity
        self.unit_price = Decimal(str(product.price if unit_price is None else unit_price))
        self.notes = notes

    @property
    def line_total(self):
        return self.unit_price * self.quantity

    def __repr__(self):
        return f"CartLine({self.product.pk}, {self.quantity} x {self.unit_price})"


class Cart:
    """
    Order being composed before it is saved.

    Prices are captured on add_product, so a later price change on the
    product does not reach lines already in the cart.
    """

    def __init__(self):
        self._lines = {}

    def add_product(self, product):
        line = self._lines.get(product.pk)
        if line:
            line.quantity += 1
        else:
            self._lines[product.pk] = CartLine(product)
        return self._lines[product.pk]

    def update_quantity(self, product_id, quantity):
        if quantity <= 0:
            self.remove(product_id)
            return
        if product_id in self._lines:
            self._lines[product_id].quantity = quantity

    def remove(self, product_id):
        self._lines.pop(product_id, None)

    @property
    def lines(self):
        return list(self._lines.values())

    @property
    def total(self):
        return sum((line.line_total for line in self._lines.values()), Decimal('0.00'))

    def __len__(self):
        return len(self._lines)

    def __bool__(self):
        return bool(self._lines)
