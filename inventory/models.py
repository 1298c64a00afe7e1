from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


DEFAULT_CATEGORY_COLOR = '#8884d8'


class Category(models.Model):
    name = models.CharField(max_length=100, unique=True)
    color = models.CharField(max_length=20, default=DEFAULT_CATEGORY_COLOR)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'categories'
        ordering = ['name']
        verbose_name_plural = "Categories"

    def __str__(self):
        return str(self.name)


class Product(models.Model):
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    category = models.ForeignKey(
        Category, on_delete=models.SET_NULL, null=True, blank=True, related_name='products'
    )
    is_available = models.BooleanField(default=True)
    # Minutes
    preparation_time = models.PositiveIntegerField(null=True, blank=True)
    image_url = models.URLField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'products'
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def stock_level(self):
        try:
            return self.stock.level
        except Stock.DoesNotExist:
            return Stock.LEVEL_UNKNOWN


class Menu(models.Model):
    """A bundle of products sold at one fixed price"""
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    image_url = models.URLField(blank=True)
    is_available = models.BooleanField(default=True)
    products = models.ManyToManyField(Product, through='MenuProduct', related_name='menus')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'menus'
        ordering = ['name']

    def __str__(self):
        return self.name


class MenuProduct(models.Model):
    menu = models.ForeignKey(Menu, on_delete=models.CASCADE, related_name='menu_products')
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='menu_entries')
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])

    class Meta:
        db_table = 'menu_products'
        unique_together = ['menu', 'product']
        ordering = ['id']

    def __str__(self):
        return f"{self.menu.name} - {self.quantity} x {self.product.name}"


# =============== STOCK ===============

class Stock(models.Model):
    LEVEL_OUT = 'out'
    LEVEL_LOW = 'low'
    LEVEL_OK = 'ok'
    LEVEL_UNKNOWN = 'unknown'

    product = models.OneToOneField(Product, on_delete=models.CASCADE, related_name='stock')
    # Manual adjustments may leave this negative
    quantity_available = models.IntegerField(default=0)
    minimum_threshold = models.PositiveIntegerField(default=0)
    last_restocked = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'stock'
        verbose_name_plural = "Stock"

    def __str__(self):
        return f"{self.product.name}: {self.quantity_available}"

    @property
    def level(self):
        if self.quantity_available <= 0:
            return self.LEVEL_OUT
        if self.quantity_available <= self.minimum_threshold:
            return self.LEVEL_LOW
        return self.LEVEL_OK


class StockMovement(models.Model):
    """Append-only ledger entry. Rows are never edited or deleted."""
    RESTOCK = 'restock'
    SALE = 'sale'
    ADJUSTMENT = 'adjustment'

    MOVEMENT_TYPE_CHOICES = [
        (RESTOCK, 'Restock'),
        (SALE, 'Sale'),
        (ADJUSTMENT, 'Adjustment'),
    ]

    # A product with ledger history cannot be deleted
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='stock_movements')
    movement_type = models.CharField(max_length=20, choices=MOVEMENT_TYPE_CHOICES)
    # Signed delta
    quantity = models.IntegerField()
    previous_quantity = models.IntegerField()
    new_quantity = models.IntegerField()
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'stock_movements'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.movement_type} {self.quantity:+d} {self.product.name}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Stock movements cannot be modified once recorded.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Stock movements cannot be deleted.")
