import logging

from rest_framework import generics, status, permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView
from django.db import connection, DatabaseError
from django.shortcuts import get_object_or_404
from django.utils import timezone
from drf_spectacular.utils import extend_schema, OpenApiExample

from dashboard.reports import staff_stats
from orders.models import Order
from .models import CustomUser, Staff, RestaurantSettings
from .permissions import IsManager, ManagerWriteMixin
from .serializers import (
    UserSerializer, LoginSerializer, LogoutSerializer, StaffSerializer,
    StaffStatsSerializer, RestaurantSettingsSerializer
)

logger = logging.getLogger(__name__)


# =============== AUTHENTICATION VIEWS ===============

class CustomTokenObtainPairView(TokenObtainPairView):
    """
    JWT login endpoint.

    The access token is the session: it carries the user id and role and
    expires after ACCESS_TOKEN_LIFETIME. The refresh token can be revoked
    through the logout endpoint.
    """
    serializer_class = LoginSerializer
    permission_classes = [permissions.AllowAny]

    @extend_schema(
        summary="User Login with JWT Token",
        request=LoginSerializer,
        responses={
            200: {
                'type': 'object',
                'properties': {
                    'refresh': {'type': 'string', 'description': 'JWT refresh token'},
                    'access': {'type': 'string', 'description': 'JWT access token'},
                    'user': {'type': 'object', 'description': 'User information'},
                }
            },
            401: {'description': 'Invalid credentials'},
        },
        examples=[
            OpenApiExample(
                'Manager Login',
                value={"username": "gerant", "password": "SecurePassword123!"}
            )
        ]
    )
    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        logger.info("User %s logged in", request.data.get('username'))
        return response


@extend_schema(
    summary="Logout",
    description="Revoke the given refresh token. The access token expires on its own.",
    request=LogoutSerializer,
    responses={205: None, 400: {'description': 'Invalid or already revoked token'}},
)
@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def logout(request):
    serializer = LogoutSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    logger.info("User %s logged out", request.user.username)
    return Response(status=status.HTTP_205_RESET_CONTENT)


class MyProfileView(generics.RetrieveUpdateAPIView):
    """
    get: Current user profile
    put/patch: Update own profile
    """
    serializer_class = UserSerializer

    def get_object(self):
        return self.request.user

    def perform_update(self, serializer):
        # Role changes go through user management, not the profile
        serializer.validated_data.pop('role', None)
        serializer.save()


class UserListCreateView(generics.ListCreateAPIView):
    """
    get: List back-office accounts (managers only)
    post: Create a back-office account (managers only)
    """
    serializer_class = UserSerializer
    permission_classes = [IsManager]
    search_fields = ['username', 'first_name', 'last_name', 'email']

    def get_queryset(self):
        return CustomUser.objects.order_by('username')


# =============== STAFF ===============

class StaffListCreateView(ManagerWriteMixin, generics.ListCreateAPIView):
    """
    get: List staff members, newest first
    post: Add a staff member (managers only)
    """
    queryset = Staff.objects.all()
    serializer_class = StaffSerializer
    filterset_fields = ['role', 'is_active']
    search_fields = ['first_name', 'last_name', 'email']
    ordering_fields = ['first_name', 'last_name', 'hire_date', 'created_at']
    ordering = ['-created_at']


class StaffDetailView(ManagerWriteMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    get: Staff member details
    put/patch: Update staff member (managers only)
    delete: Remove staff member (managers only)
    """
    queryset = Staff.objects.all()
    serializer_class = StaffSerializer


@extend_schema(
    summary="Staff Sales Statistics",
    description="Paid orders handled by one staff member: count, total and average value.",
    responses={200: StaffStatsSerializer},
)
@api_view(['GET'])
def staff_statistics(request, pk):
    staff = get_object_or_404(Staff, pk=pk)
    rows = Order.objects.filter(staff=staff).values('status', 'total_amount')
    stats = staff_stats(rows)
    return Response({
        'staff_id': staff.id,
        'staff_name': staff.full_name,
        **StaffStatsSerializer(stats).data,
    })


# =============== SETTINGS ===============

class RestaurantSettingsView(ManagerWriteMixin, generics.RetrieveUpdateAPIView):
    """
    get: Restaurant settings
    put/patch: Update restaurant settings (managers only)
    """
    serializer_class = RestaurantSettingsSerializer

    def get_object(self):
        return RestaurantSettings.load()


# =============== SYSTEM ===============

@extend_schema(
    summary="System Health Check",
    description="Check system health and database connectivity",
)
@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def health_check(request):
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError as exc:
        logger.error("Health check failed: %s", exc)
        return Response({
            'status': 'unhealthy',
            'timestamp': timezone.now().isoformat(),
            'database': 'disconnected',
        }, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    return Response({
        'status': 'healthy',
        'timestamp': timezone.now().isoformat(),
        'database': 'connected',
        'version': '1.0.0'
    })
