import logging

from rest_framework import generics, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework import filters
from django.db.models import F
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema

from authentication.permissions import IsManager, ManagerWriteMixin
from .models import Category, Product, Menu, Stock, StockMovement
from .serializers import (
    CategorySerializer, ProductSerializer, MenuSerializer, StockSerializer,
    ProductStockSerializer, StockMovementSerializer, StockMovementCreateSerializer
)
from .services import record_movement, delete_menu

logger = logging.getLogger(__name__)

RECENT_MOVEMENTS_LIMIT = 20


# Category Views
class CategoryListCreateView(ManagerWriteMixin, generics.ListCreateAPIView):
    """
    get: List all categories
    post: Create a new category (managers only)
    """
    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name']
    ordering_fields = ['name', 'created_at']
    ordering = ['name']


class CategoryRetrieveUpdateDestroyView(ManagerWriteMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    get: Get category details
    put/patch: Update category (managers only)
    delete: Delete category, its products become uncategorized (managers only)
    """
    queryset = Category.objects.all()
    serializer_class = CategorySerializer


# Product Views
class ProductListCreateView(ManagerWriteMixin, generics.ListCreateAPIView):
    """
    get: List products with their category and stock level
    post: Create a new product (managers only)
    """
    queryset = Product.objects.select_related('category', 'stock')
    serializer_class = ProductSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['category', 'is_available']
    search_fields = ['name', 'description']
    ordering_fields = ['name', 'price', 'created_at']
    ordering = ['name']


class ProductRetrieveUpdateDestroyView(ManagerWriteMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    get: Get product details
    put/patch: Update product (managers only)
    delete: Delete product (managers only, refused while orders or stock movements reference it)
    """
    queryset = Product.objects.select_related('category', 'stock')
    serializer_class = ProductSerializer

    def perform_destroy(self, instance):
        logger.info("Deleting product %s", instance.name)
        instance.delete()


# Menu Views
class MenuListCreateView(ManagerWriteMixin, generics.ListCreateAPIView):
    """
    get: List composite menus with their products
    post: Create a menu with at least one product (managers only)
    """
    queryset = Menu.objects.prefetch_related('menu_products__product')
    serializer_class = MenuSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['is_available']
    search_fields = ['name', 'description']
    ordering_fields = ['name', 'price', 'created_at']
    ordering = ['name']


class MenuRetrieveUpdateDestroyView(ManagerWriteMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    get: Get menu details
    put/patch: Update menu and replace its products (managers only)
    delete: Delete menu and its product links (managers only)
    """
    queryset = Menu.objects.prefetch_related('menu_products__product')
    serializer_class = MenuSerializer

    def perform_destroy(self, instance):
        delete_menu(instance)


# Stock Views
class ProductStockListView(generics.ListAPIView):
    """
    get: Products with their stock record and level, searchable by name
    """
    queryset = Product.objects.select_related('category', 'stock')
    serializer_class = ProductStockSerializer
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name']
    ordering = ['name']


class StockUpdateView(ManagerWriteMixin, generics.RetrieveUpdateAPIView):
    """
    get: Stock record of one product
    put/patch: Change the minimum threshold (managers only). Quantities move through movements.
    """
    queryset = Stock.objects.select_related('product')
    serializer_class = StockSerializer
    lookup_field = 'product'
    lookup_url_kwarg = 'product_id'


@extend_schema(
    summary="Low Stock Products",
    description="Products whose stock is at or below the minimum threshold",
    responses={200: StockSerializer(many=True)},
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def low_stock(request):
    stocks = Stock.objects.select_related('product').filter(
        quantity_available__lte=F('minimum_threshold')
    ).order_by('quantity_available', 'product__name')
    return Response(StockSerializer(stocks, many=True).data)


class StockMovementListCreateView(generics.ListCreateAPIView):
    """
    get: Latest stock movements, newest first
    post: Record a restock, sale or adjustment (managers only)
    """
    serializer_class = StockMovementSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['product', 'movement_type']
    pagination_class = None

    def get_queryset(self):
        return StockMovement.objects.select_related('product')

    def filter_queryset(self, queryset):
        return super().filter_queryset(queryset)[:RECENT_MOVEMENTS_LIMIT]

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsManager()]
        return [IsAuthenticated()]

    @extend_schema(request=StockMovementCreateSerializer, responses={201: StockMovementSerializer})
    def post(self, request, *args, **kwargs):
        serializer = StockMovementCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        movement = record_movement(
            serializer.validated_data['product'],
            serializer.validated_data['movement_type'],
            serializer.validated_data['amount'],
            notes=serializer.validated_data['notes'],
        )
        return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)
