from rest_framework import serializers

from authentication.serializers import require_text
from .models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    orders_count = serializers.SerializerMethodField()

    class Meta:
        model = Customer
        fields = [
            'id', 'first_name', 'last_name', 'full_name', 'email', 'phone',
            'loyalty_points', 'orders_count', 'created_at'
        ]
        read_only_fields = ['created_at']

    def get_orders_count(self, obj):
        return obj.orders.count()

    def validate_first_name(self, value):
        return require_text(value, 'First name')

    def validate_last_name(self, value):
        return require_text(value, 'Last name')

    def validate_loyalty_points(self, value):
        if value < 0:
            raise serializers.ValidationError("Loyalty points cannot be negative.")
        return value
