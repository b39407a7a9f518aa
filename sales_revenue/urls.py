from django.urls import path

from .views import SaleListCreateView, SaleDetailView

app_name = 'sales'

urlpatterns = [
    path('', SaleListCreateView.as_view(), name='sale-list'),
    path('<uuid:pk>/', SaleDetailView.as_view(), name='sale-detail'),
]
