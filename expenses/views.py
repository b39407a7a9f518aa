"""
Views for Expenditure Tracking.

All views are owner-scoped: farmers only see and manage their own
expenditures.

API Endpoints:
- /api/expenditures/ - List/create expenditures
- /api/expenditures/{id}/ - Retrieve/update/delete an expenditure
- /api/expenditures/categories/ - Categories the farmer has used
"""

import logging

from rest_framework import generics, permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from core.scoping import OwnerScopedMixin
from .models import Expenditure
from .serializers import ExpenditureSerializer

logger = logging.getLogger(__name__)


class ExpenditureListCreateView(OwnerScopedMixin, generics.ListCreateAPIView):
    """
    GET /api/expenditures/
    POST /api/expenditures/

    Query Parameters:
        category (str): exact category
        frequency (str): Monthly, Seasonal, Yearly or One-Time
    """
    queryset = Expenditure.objects.all()
    serializer_class = ExpenditureSerializer
    owner_field = 'recorded_by'
    filterset_fields = ['category', 'frequency']

    def get_queryset(self):
        return (
            super().get_queryset()
            .prefetch_related('crops_involved', 'allocations__crop')
            .order_by('-created_at')
        )

    def perform_create(self, serializer):
        super().perform_create(serializer)
        expenditure = serializer.instance
        logger.info(
            "Expenditure %s recorded by user %s: %s %s (%s)",
            expenditure.id, self.request.user.pk, expenditure.category,
            expenditure.amount, expenditure.allocation_method
        )


class ExpenditureDetailView(OwnerScopedMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    GET/PUT/PATCH/DELETE /api/expenditures/{id}/

    Allocations are re-resolved on every update.
    """
    queryset = Expenditure.objects.prefetch_related('crops_involved', 'allocations__crop')
    serializer_class = ExpenditureSerializer
    owner_field = 'recorded_by'


class ExpenditureCategoryListView(APIView):
    """
    GET /api/expenditures/categories/

    Distinct categories the farmer has recorded, alphabetically.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        categories = (
            Expenditure.objects
            .filter(recorded_by=request.user)
            .order_by('category')
            .values_list('category', flat=True)
            .distinct()
        )
        return Response({'categories': list(categories)})
