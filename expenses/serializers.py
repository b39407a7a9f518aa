"""
Serializers for Expenditure Tracking.

Allocation rows are never written directly: the expenditure serializer
resolves them on every create/update through ``ExpenditureAllocator``.
"""

from decimal import Decimal

from django.db import transaction
from rest_framework import serializers

from crops.models import Crop
from .models import AllocationMethod, Expenditure, ExpenditureAllocation
from .services import AllocationError, ExpenditureAllocator


def _owned_by_request_user(serializer, crop):
    request = serializer.context.get('request')
    return request is None or crop.owner_id == request.user.pk


class ExpenditureAllocationSerializer(serializers.ModelSerializer):
    """Read-only view of one crop's share"""
    crop_name = serializers.CharField(source='crop.name', read_only=True)

    class Meta:
        model = ExpenditureAllocation
        fields = ['crop', 'crop_name', 'allocated_amount']
        read_only_fields = fields


class ManualAllocationSerializer(serializers.Serializer):
    """One crop's share when allocating manually"""
    crop = serializers.PrimaryKeyRelatedField(queryset=Crop.objects.all())
    allocated_amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal('0')
    )

    def validate_crop(self, value):
        if not _owned_by_request_user(self, value):
            raise serializers.ValidationError("Crop does not belong to you")
        return value


class ExpenditureSerializer(serializers.ModelSerializer):
    """
    Expenditure with its allocation rows.

    Write-only ``manual_allocations`` supplies the shares for the manual
    method; for ``fieldSize`` the shares are derived from ``crops_involved``.
    """
    crops_involved = serializers.PrimaryKeyRelatedField(
        many=True,
        queryset=Crop.objects.all(),
        required=False
    )
    manual_allocations = ManualAllocationSerializer(many=True, required=False, write_only=True)
    allocations = ExpenditureAllocationSerializer(many=True, read_only=True)
    allocated_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = Expenditure
        fields = [
            'id', 'category', 'sub_category', 'amount', 'frequency',
            'payment_mode', 'expense_date', 'paid_to', 'invoice_number',
            'farm_section', 'notes', 'allocation_method', 'crops_involved',
            'manual_allocations', 'allocations', 'allocated_total',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_crops_involved(self, value):
        """Ensure every involved crop belongs to the requesting farmer"""
        for crop in value:
            if not _owned_by_request_user(self, crop):
                raise serializers.ValidationError(f"Crop {crop.pk} does not belong to you")
        return value

    def validate_manual_allocations(self, value):
        crop_ids = [entry['crop'].pk for entry in value]
        if len(crop_ids) != len(set(crop_ids)):
            raise serializers.ValidationError("Each crop can only be allocated once")
        return value

    def validate(self, attrs):
        method = attrs.get(
            'allocation_method',
            getattr(self.instance, 'allocation_method', AllocationMethod.MANUAL)
        )
        if attrs.get('manual_allocations') and method != AllocationMethod.MANUAL:
            raise serializers.ValidationError({
                'manual_allocations': "Only used with the manual allocation method"
            })
        return attrs

    def _allocate(self, expenditure, crops, manual_allocations):
        if crops is not None:
            expenditure.crops_involved.set(crops)
        if manual_allocations:
            # Manually allocated crops are always part of the expenditure
            expenditure.crops_involved.add(*[entry['crop'] for entry in manual_allocations])
        try:
            ExpenditureAllocator(expenditure).apply(manual_allocations)
        except AllocationError as exc:
            raise serializers.ValidationError(
                {'allocation_method': [exc.message]}, code='allocation_error'
            )

    @transaction.atomic
    def create(self, validated_data):
        crops = validated_data.pop('crops_involved', None)
        manual_allocations = validated_data.pop('manual_allocations', None)
        expenditure = Expenditure.objects.create(**validated_data)
        self._allocate(expenditure, crops, manual_allocations)
        return expenditure

    @transaction.atomic
    def update(self, instance, validated_data):
        crops = validated_data.pop('crops_involved', None)
        manual_allocations = validated_data.pop('manual_allocations', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        self._allocate(instance, crops, manual_allocations)
        return instance
