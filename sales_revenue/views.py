"""
Views for produce sales.

API Endpoints:
- /api/sales/ - List/create sales
- /api/sales/{id}/ - Retrieve/update/delete a sale
"""

import logging
import uuid
from datetime import timedelta

from django.utils import timezone
from rest_framework import generics
from rest_framework.exceptions import ValidationError

from core.scoping import OwnerScopedMixin
from .models import Sale
from .serializers import SaleSerializer

logger = logging.getLogger(__name__)

MONTH_FILTERS = ('all', 'current', 'last')


class SaleListCreateView(OwnerScopedMixin, generics.ListCreateAPIView):
    """
    GET /api/sales/
    POST /api/sales/

    Query Parameters:
        month (str): all (default), current or last - filters on sale_date
        crop (uuid): only sales of this crop
        payment_status (str): Paid or Pending
    """
    queryset = Sale.objects.all()
    serializer_class = SaleSerializer
    filterset_fields = ['payment_status']

    def get_queryset(self):
        queryset = super().get_queryset()

        month = self.request.query_params.get('month', 'all')
        if month not in MONTH_FILTERS:
            raise ValidationError({'month': f"Must be one of: {', '.join(MONTH_FILTERS)}"})
        if month != 'all':
            first_of_month = timezone.localdate().replace(day=1)
            if month == 'last':
                first_of_month = (first_of_month - timedelta(days=1)).replace(day=1)
            queryset = queryset.filter(
                sale_date__year=first_of_month.year,
                sale_date__month=first_of_month.month
            )

        crop_id = self.request.query_params.get('crop')
        if crop_id:
            try:
                queryset = queryset.filter(crop_id=uuid.UUID(crop_id))
            except ValueError:
                raise ValidationError({'crop': "Not a valid crop id"})

        return queryset.select_related('crop').order_by('-created_at')

    def perform_create(self, serializer):
        super().perform_create(serializer)
        sale = serializer.instance
        logger.info(
            "Sale %s recorded by user %s: %s x %s = %s",
            sale.id, self.request.user.pk, sale.quantity, sale.selling_price, sale.total_amount
        )


class SaleDetailView(OwnerScopedMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    GET/PUT/PATCH/DELETE /api/sales/{id}/

    The total is recalculated whenever the sale is saved.
    """
    queryset = Sale.objects.select_related('crop')
    serializer_class = SaleSerializer
