from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.exceptions import TokenError

from .models import CustomUser, Staff, RestaurantSettings


def require_text(value, label):
    """Reject blank or whitespace-only form values"""
    if value is None or not str(value).strip():
        raise serializers.ValidationError(f"{label} is required.")
    return str(value).strip()


class UserSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password], required=False)
    confirm_password = serializers.CharField(write_only=True, required=False)
    full_name = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = CustomUser
        fields = [
            'id', 'username', 'email', 'first_name', 'last_name', 'full_name',
            'phone', 'role', 'password', 'confirm_password', 'is_active', 'last_login'
        ]
        extra_kwargs = {
            'last_login': {'read_only': True},
        }

    def get_full_name(self, obj):
        return f"{obj.first_name} {obj.last_name}".strip()

    def validate(self, attrs):
        if 'password' in attrs and attrs['password'] != attrs.get('confirm_password'):
            raise serializers.ValidationError("Passwords don't match")
        return attrs

    def create(self, validated_data):
        validated_data.pop('confirm_password', None)
        password = validated_data.pop('password', None)
        if not password:
            raise serializers.ValidationError({'password': 'A password is required.'})
        user = CustomUser(**validated_data)
        user.set_password(password)
        user.save()
        return user

    def update(self, instance, validated_data):
        validated_data.pop('confirm_password', None)
        password = validated_data.pop('password', None)

        for attr, value in validated_data.items():
            setattr(instance, attr, value)

        if password:
            instance.set_password(password)

        instance.save()
        return instance


class LoginSerializer(TokenObtainPairSerializer):
    """Username/password login returning a JWT pair and the user profile"""

    default_error_messages = {
        'no_active_account': 'Invalid username or password',
    }

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['role'] = user.role
        token['username'] = user.username
        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        data['user'] = UserSerializer(self.user).data
        return data


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField()

    def save(self, **kwargs):
        try:
            RefreshToken(self.validated_data['refresh']).blacklist()
        except TokenError as exc:
            raise serializers.ValidationError({'refresh': str(exc)})


class StaffSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Staff
        fields = [
            'id', 'first_name', 'last_name', 'full_name', 'email', 'phone',
            'role', 'is_active', 'hire_date', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_first_name(self, value):
        return require_text(value, 'First name')

    def validate_last_name(self, value):
        return require_text(value, 'Last name')


class StaffStatsSerializer(serializers.Serializer):
    total_orders = serializers.IntegerField()
    total_sales = serializers.DecimalField(max_digits=12, decimal_places=2)
    average_order_value = serializers.DecimalField(max_digits=12, decimal_places=2)


class RestaurantSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = RestaurantSettings
        fields = [
            'restaurant_name', 'currency', 'currency_symbol',
            'address', 'phone', 'email', 'updated_at'
        ]
        read_only_fields = ['updated_at']

    def validate_restaurant_name(self, value):
        return require_text(value, 'Restaurant name')

    def validate_currency(self, value):
        return require_text(value, 'Currency').upper()

    def validate_currency_symbol(self, value):
        return require_text(value, 'Currency symbol')
