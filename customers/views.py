from rest_framework import generics
from rest_framework import filters

from .models import Customer
from .serializers import CustomerSerializer


class CustomerListCreateView(generics.ListCreateAPIView):
    """
    get: List customers, newest first. ?search= matches first name, last name or email
    post: Register a customer
    """
    queryset = Customer.objects.all()
    serializer_class = CustomerSerializer
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['first_name', 'last_name', 'email']
    ordering_fields = ['last_name', 'loyalty_points', 'created_at']
    ordering = ['-created_at']


class CustomerDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    get: Customer details
    put/patch: Update customer, including loyalty points
    delete: Remove customer, past orders keep no customer reference
    """
    queryset = Customer.objects.all()
    serializer_class = CustomerSerializer
