"""
Views for diagnosis history.

API Endpoints:
- /api/diagnoses/ - Owner's past diagnoses, newest first
- /api/diagnoses/{id}/ - One diagnosis
"""

from rest_framework import generics

from core.scoping import OwnerScopedMixin
from .models import Diagnosis
from .serializers import DiagnosisSerializer


class DiagnosisListView(OwnerScopedMixin, generics.ListAPIView):
    """
    GET /api/diagnoses/

    Query Parameters:
        session_id (str): diagnoses from one chat session
        crop (str): crop name, case-insensitive
        status (str): Resolved, Treated or In Progress
    """
    queryset = Diagnosis.objects.all()
    serializer_class = DiagnosisSerializer
    filterset_fields = ['session_id', 'status']

    def get_queryset(self):
        queryset = super().get_queryset()

        crop = self.request.query_params.get('crop')
        if crop:
            queryset = queryset.filter(crop__iexact=crop)

        return queryset.order_by('-created_at')


class DiagnosisDetailView(OwnerScopedMixin, generics.RetrieveAPIView):
    """GET /api/diagnoses/{id}/"""
    queryset = Diagnosis.objects.all()
    serializer_class = DiagnosisSerializer
