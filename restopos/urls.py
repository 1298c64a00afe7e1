from django.contrib import admin
from django.urls import path, include
from drf_yasg.views import get_schema_view
from drf_yasg import openapi
from rest_framework import permissions

# Setup Swagger schema view
schema_view = get_schema_view(
    openapi.Info(
        title='API Documentation RESTOPOS',
        default_version='v1',
        description="API for managing the restaurant back-office",
    ),
    public=True,
    permission_classes=(permissions.AllowAny,),
)

urlpatterns = [
    path('admin/', admin.site.urls),
    path("api/", include("authentication.urls")),
    path("api/customers/", include("customers.urls")),
    path("api/menu/", include("inventory.urls")),
    path("api/orders/", include("orders.urls")),
    path("api/dashboard/", include("dashboard.urls")),
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
]
