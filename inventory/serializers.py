from rest_framework import serializers

from authentication.serializers import require_text
from .models import Category, Product, Menu, MenuProduct, Stock, StockMovement
from .services import MOVEMENT_TYPES, save_menu


class CategorySerializer(serializers.ModelSerializer):
    products_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ['id', 'name', 'color', 'description', 'created_at', 'products_count']
        read_only_fields = ['created_at', 'products_count']

    def get_products_count(self, obj):
        return obj.products.count()

    def validate_name(self, value):
        return require_text(value, 'Category name')


class ProductSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    category_color = serializers.CharField(source='category.color', read_only=True, default=None)
    stock_level = serializers.CharField(read_only=True)
    quantity_available = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'description', 'price', 'category', 'category_name',
            'category_color', 'is_available', 'preparation_time', 'image_url',
            'stock_level', 'quantity_available', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def get_quantity_available(self, obj):
        try:
            return obj.stock.quantity_available
        except Stock.DoesNotExist:
            return None

    def validate_name(self, value):
        return require_text(value, 'Product name')

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price cannot be negative.")
        return value


class MenuProductSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_price = serializers.DecimalField(
        source='product.price', max_digits=10, decimal_places=2, read_only=True
    )

    class Meta:
        model = MenuProduct
        fields = ['id', 'product', 'product_name', 'product_price', 'quantity']


class MenuProductWriteSerializer(serializers.Serializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    quantity = serializers.IntegerField(min_value=1, default=1)

    def validate_product(self, value):
        if not value.is_available:
            raise serializers.ValidationError(f"{value.name} is not available.")
        return value


class MenuSerializer(serializers.ModelSerializer):
    menu_products = MenuProductSerializer(many=True, read_only=True)
    products = MenuProductWriteSerializer(many=True, write_only=True)

    class Meta:
        model = Menu
        fields = [
            'id', 'name', 'description', 'price', 'image_url', 'is_available',
            'menu_products', 'products', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_name(self, value):
        return require_text(value, 'Menu name')

    def validate_products(self, value):
        if not value:
            raise serializers.ValidationError("A menu must contain at least one product.")
        return value

    def validate(self, attrs):
        # Partial updates still have to resubmit the product list
        if 'products' not in attrs:
            raise serializers.ValidationError({'products': "A menu must contain at least one product."})
        return attrs

    def create(self, validated_data):
        entries = validated_data.pop('products')
        return save_menu(
            validated_data, [(entry['product'], entry['quantity']) for entry in entries]
        )

    def update(self, instance, validated_data):
        entries = validated_data.pop('products')
        return save_menu(
            validated_data, [(entry['product'], entry['quantity']) for entry in entries], menu=instance
        )


# =============== STOCK ===============

class StockSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    level = serializers.CharField(read_only=True)

    class Meta:
        model = Stock
        fields = [
            'id', 'product', 'product_name', 'quantity_available',
            'minimum_threshold', 'level', 'last_restocked', 'updated_at'
        ]
        read_only_fields = ['product', 'quantity_available', 'last_restocked', 'updated_at']


class ProductStockSerializer(serializers.ModelSerializer):
    """Product row as shown on the stock screen, with or without a stock record"""
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    stock = serializers.SerializerMethodField()
    level = serializers.CharField(source='stock_level', read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'category_name', 'price', 'is_available', 'stock', 'level']

    def get_stock(self, obj):
        try:
            return StockSerializer(obj.stock).data
        except Stock.DoesNotExist:
            return None


class StockMovementSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            'id', 'product', 'product_name', 'movement_type', 'quantity',
            'previous_quantity', 'new_quantity', 'notes', 'created_at'
        ]
        read_only_fields = fields


class StockMovementCreateSerializer(serializers.Serializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    movement_type = serializers.ChoiceField(choices=MOVEMENT_TYPES)
    amount = serializers.IntegerField()
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if attrs['amount'] < 0 and attrs['movement_type'] != StockMovement.ADJUSTMENT:
            raise serializers.ValidationError({'amount': "Amount cannot be negative."})
        return attrs
