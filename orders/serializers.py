from rest_framework import serializers

from authentication.models import Staff
from customers.models import Customer
from inventory.models import Product
from .cart import CartLine
from .models import Order, OrderItem, RestaurantTable
from .services import TABLE_STATUSES, create_order


class TableSerializer(serializers.ModelSerializer):
    current_order = serializers.SerializerMethodField()

    class Meta:
        model = RestaurantTable
        fields = [
            'id', 'table_number', 'capacity', 'status', 'position_x',
            'position_y', 'current_order', 'created_at'
        ]
        read_only_fields = ['id', 'created_at']

    def get_current_order(self, obj):
        if obj.status != RestaurantTable.OCCUPIED:
            return None
        order = obj.orders.exclude(status__in=[Order.PAID, Order.CANCELLED]).first()
        return order.order_number if order else None


class TableStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TABLE_STATUSES)


class OrderItemReadSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = ['id', 'product', 'product_name', 'quantity', 'unit_price', 'notes', 'line_total']


class OrderItemCreateSerializer(serializers.Serializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    quantity = serializers.IntegerField(min_value=1, default=1)
    # Price shown in the cart; falls back to the product's current price
    unit_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')

    def validate_product(self, value):
        if not value.is_available:
            raise serializers.ValidationError(f"{value.name} is not available.")
        return value


class OrderReadSerializer(serializers.ModelSerializer):
    table = TableSerializer(read_only=True)
    customer_name = serializers.CharField(source='customer.full_name', read_only=True, default=None)
    staff_name = serializers.CharField(source='staff.full_name', read_only=True, default=None)
    items = OrderItemReadSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'table', 'customer', 'customer_name', 'staff',
            'staff_name', 'status', 'total_amount', 'notes', 'items',
            'created_at', 'updated_at'
        ]


class OrderCreateSerializer(serializers.Serializer):
    items = OrderItemCreateSerializer(many=True)
    table = serializers.PrimaryKeyRelatedField(
        queryset=RestaurantTable.objects.all(), required=False, allow_null=True
    )
    customer = serializers.PrimaryKeyRelatedField(
        queryset=Customer.objects.all(), required=False, allow_null=True
    )
    staff = serializers.PrimaryKeyRelatedField(
        queryset=Staff.objects.all(), required=False, allow_null=True
    )
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    order_number = serializers.CharField(max_length=50, required=False, allow_blank=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("An order needs at least one item.")
        return value

    def validate_table(self, value):
        if value is not None and value.status != RestaurantTable.AVAILABLE:
            raise serializers.ValidationError(f"Table {value.table_number} is not available.")
        return value

    def create(self, validated_data):
        lines = [
            CartLine(item['product'], item['quantity'], item.get('unit_price'), item.get('notes', ''))
            for item in validated_data['items']
        ]
        return create_order(
            lines,
            table=validated_data.get('table'),
            customer=validated_data.get('customer'),
            staff=validated_data.get('staff'),
            notes=validated_data.get('notes', ''),
            order_number=validated_data.get('order_number') or None,
        )


class OrderUpdateSerializer(serializers.ModelSerializer):
    """Plain field edits. Status goes through the status endpoint."""

    class Meta:
        model = Order
        fields = ['customer', 'staff', 'notes']


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.CharField()

    def validate_status(self, value):
        return value.strip().lower()
