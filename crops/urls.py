from django.urls import path

from .views import (
    CropListCreateView,
    CropDetailView,
    DueForHarvestView,
    HarvestCalendarView,
)

app_name = 'crops'

urlpatterns = [
    path('', CropListCreateView.as_view(), name='crop-list'),
    path('due-for-harvest/', DueForHarvestView.as_view(), name='due-for-harvest'),
    path('harvest-calendar/', HarvestCalendarView.as_view(), name='harvest-calendar'),
    path('<uuid:pk>/', CropDetailView.as_view(), name='crop-detail'),
]
