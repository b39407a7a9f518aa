"""
Serializers for produce sales.
"""

from decimal import InvalidOperation

from rest_framework import serializers

from crops.models import Crop
from .models import MAX_TOTAL_AMOUNT, Sale, calculate_total_amount


class SaleSerializer(serializers.ModelSerializer):
    """Sale with its auto-calculated total (never accepted as input)"""
    crop = serializers.PrimaryKeyRelatedField(
        queryset=Crop.objects.all(),
        required=False,
        allow_null=True
    )
    crop_name = serializers.CharField(source='crop.name', read_only=True, allow_null=True)
    quantity_value = serializers.FloatField(read_only=True)

    class Meta:
        model = Sale
        fields = [
            'id', 'crop', 'crop_name', 'sale_date', 'quantity', 'quantity_value',
            'selling_price', 'total_amount', 'buyer_name', 'payment_status',
            'notes', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'total_amount', 'created_at', 'updated_at']

    def validate_crop(self, value):
        """Ensure the crop belongs to the requesting farmer"""
        if value is not None:
            request = self.context.get('request')
            if request and value.owner_id != request.user.pk:
                raise serializers.ValidationError("Crop does not belong to you")
        return value

    def validate(self, attrs):
        """Ensure quantity x selling price fits in total_amount"""
        quantity = attrs.get('quantity', getattr(self.instance, 'quantity', None))
        selling_price = attrs.get('selling_price', getattr(self.instance, 'selling_price', None))
        try:
            total = calculate_total_amount(quantity, selling_price)
        except InvalidOperation:
            total = None
        if total is None or abs(total) > MAX_TOTAL_AMOUNT:
            raise serializers.ValidationError({
                'quantity': f"Quantity x selling price exceeds the largest recordable total ({MAX_TOTAL_AMOUNT})"
            })
        return attrs
