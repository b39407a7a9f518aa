from django.urls import path

from .views import DiagnosisListView, DiagnosisDetailView

app_name = 'diagnosis'

urlpatterns = [
    path('', DiagnosisListView.as_view(), name='diagnosis-list'),
    path('<uuid:pk>/', DiagnosisDetailView.as_view(), name='diagnosis-detail'),
]
