"""
URL configuration for core project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""
from django.contrib import admin
from django.urls import path, include
from django.views.generic import RedirectView

urlpatterns = [
    path('', RedirectView.as_view(url='/admin/', permanent=False)),
    path('admin/', admin.site.urls),
    path('api/auth/', include('accounts.urls')),
    path('api/crops/', include('crops.urls')),  # Crop tracking
    path('api/sales/', include('sales_revenue.urls')),  # Produce sales
    path('api/expenditures/', include('expenses.urls')),  # Expenditures and crop allocations
    path('api/diagnoses/', include('diagnosis.urls')),  # Diagnosis history (read-only)
    path('api/analytics/', include('dashboards.farm_analytics_urls')),  # Farm analytics reports
]
