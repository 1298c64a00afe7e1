from django.urls import path
from . import views


urlpatterns = [
    path('stats/', views.dashboard_stats, name='dashboard-stats'),
    path('recent-orders/', views.recent_orders, name='dashboard-recent-orders'),
    path('charts/<str:chart_type>/', views.dashboard_chart_data, name='dashboard-chart-data'),
    path('export/', views.export_sales_report, name='dashboard-export'),
]
