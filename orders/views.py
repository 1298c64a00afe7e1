from rest_framework import status, generics, filters
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from authentication.permissions import ManagerWriteMixin
from .models import Order, RestaurantTable
from .serializers import (
    TableSerializer, TableStatusSerializer, OrderCreateSerializer,
    OrderReadSerializer, OrderUpdateSerializer, OrderStatusSerializer
)
from .services import advance_status, set_table_status


ORDER_QUERYSET = Order.objects.select_related('table', 'customer', 'staff').prefetch_related('items__product')


# =============== TABLES ===============

class TableListCreateView(ManagerWriteMixin, generics.ListCreateAPIView):
    """
    get: Floor plan, ordered by table number
    post: Add a table (managers only). Position is random when omitted.
    """
    queryset = RestaurantTable.objects.all()
    serializer_class = TableSerializer
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_fields = ['status']
    ordering = ['table_number']


class TableDetailView(ManagerWriteMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    get: Table details
    put/patch: Edit number, capacity, status or position (managers only)
    delete: Remove table, its orders keep no table reference (managers only)
    """
    queryset = RestaurantTable.objects.all()
    serializer_class = TableSerializer


@swagger_auto_schema(
    method='post',
    operation_description="Set a table's status (available, occupied, reserved, cleaning)",
    request_body=TableStatusSerializer,
    responses={200: TableSerializer, 400: 'Unknown status'}
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def update_table_status(request, pk):
    table = get_object_or_404(RestaurantTable, pk=pk)
    serializer = TableStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    set_table_status(table, serializer.validated_data['status'])
    return Response(TableSerializer(table).data)


class TableOrdersView(generics.ListAPIView):
    """Order history of one table, newest first"""
    serializer_class = OrderReadSerializer
    filter_backends = []

    def get_queryset(self):
        table = get_object_or_404(RestaurantTable, pk=self.kwargs['pk'])
        return ORDER_QUERYSET.filter(table=table).order_by('-created_at', '-id')


# =============== ORDERS ===============

class OrderListCreateView(generics.ListCreateAPIView):
    """
    get: Orders newest first, with table, customer and items
    post: Create an order from cart lines
    """
    serializer_class = OrderReadSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ['status', 'table', 'customer', 'staff']
    search_fields = ['order_number']

    def get_queryset(self):
        return ORDER_QUERYSET.order_by('-created_at', '-id')

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return OrderCreateSerializer
        return OrderReadSerializer

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter('status', openapi.IN_QUERY, description="Filter by order status", type=openapi.TYPE_STRING),
            openapi.Parameter('search', openapi.IN_QUERY, description="Order number contains (case-insensitive)", type=openapi.TYPE_STRING),
        ]
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @swagger_auto_schema(
        operation_description="Create a new order with items",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            required=['items'],
            properties={
                'table': openapi.Schema(type=openapi.TYPE_INTEGER, description='Must be available; becomes occupied'),
                'customer': openapi.Schema(type=openapi.TYPE_INTEGER),
                'staff': openapi.Schema(type=openapi.TYPE_INTEGER),
                'notes': openapi.Schema(type=openapi.TYPE_STRING),
                'order_number': openapi.Schema(type=openapi.TYPE_STRING, description='Defaults to CMD-<epoch ms>'),
                'items': openapi.Schema(
                    type=openapi.TYPE_ARRAY,
                    items=openapi.Schema(
                        type=openapi.TYPE_OBJECT,
                        required=['product', 'quantity'],
                        properties={
                            'product': openapi.Schema(type=openapi.TYPE_INTEGER),
                            'quantity': openapi.Schema(type=openapi.TYPE_INTEGER, minimum=1),
                            'unit_price': openapi.Schema(type=openapi.TYPE_STRING, description='Price captured in the cart'),
                            'notes': openapi.Schema(type=openapi.TYPE_STRING),
                        }
                    )
                )
            }
        ),
        responses={
            201: OrderReadSerializer,
            400: 'Bad Request'
        }
    )
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = serializer.save()

        order = ORDER_QUERYSET.get(pk=order.pk)
        return Response(OrderReadSerializer(order).data, status=status.HTTP_201_CREATED)


class OrderDetailView(generics.RetrieveUpdateAPIView):
    """Retrieve an order or edit its customer, staff and notes"""
    queryset = ORDER_QUERYSET

    def get_serializer_class(self):
        if self.request.method in ['PUT', 'PATCH']:
            return OrderUpdateSerializer
        return OrderReadSerializer

    @swagger_auto_schema(
        operation_description="Update order details",
        request_body=OrderUpdateSerializer,
        responses={200: OrderReadSerializer}
    )
    def patch(self, request, *args, **kwargs):
        order = self.get_object()
        serializer = OrderUpdateSerializer(order, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(OrderReadSerializer(order).data)


@swagger_auto_schema(
    method='post',
    operation_description=(
        "Advance an order: pending > preparing > ready > served > paid, "
        "or cancelled from any open state. Paying frees the table for cleaning."
    ),
    request_body=OrderStatusSerializer,
    responses={200: OrderReadSerializer, 400: 'Unknown status or transition not allowed'}
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def update_order_status(request, pk):
    order = get_object_or_404(Order, pk=pk)
    serializer = OrderStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    advance_status(order, serializer.validated_data['status'])

    order = ORDER_QUERYSET.get(pk=order.pk)
    return Response(OrderReadSerializer(order).data)
