from django.urls import path
from . import views


urlpatterns = [
    # Category URLs
    path('categories/', views.CategoryListCreateView.as_view(), name='category-list-create'),
    path('categories/<int:pk>/', views.CategoryRetrieveUpdateDestroyView.as_view(), name='category-detail'),

    # Product URLs
    path('products/', views.ProductListCreateView.as_view(), name='product-list-create'),
    path('products/<int:pk>/', views.ProductRetrieveUpdateDestroyView.as_view(), name='product-detail'),

    # Menu URLs
    path('menus/', views.MenuListCreateView.as_view(), name='menu-list-create'),
    path('menus/<int:pk>/', views.MenuRetrieveUpdateDestroyView.as_view(), name='menu-detail'),

    # Stock URLs
    path('stock/', views.ProductStockListView.as_view(), name='stock-list'),
    path('stock/low/', views.low_stock, name='stock-low'),
    path('stock/movements/', views.StockMovementListCreateView.as_view(), name='stock-movements'),
    path('stock/<int:product_id>/', views.StockUpdateView.as_view(), name='stock-detail'),
]
