"""
Service listing serializers
"""
from rest_framework import serializers

from apps.core.utils.constants import (
    AVAILABILITY_EXCLUSIVE,
    AVAILABILITY_QUANTITY_BASED,
    PRICING_FIXED_PACKAGE,
    PRICING_TIME_BASED,
    VENDOR_CATEGORY_VENUE,
)
from apps.core.validators import validate_cancellation_fee_tiers
from .models import DesignElement, ServiceListing, ServiceComponent, ServiceAvailability


class DesignElementSerializer(serializers.ModelSerializer):
    """Serializer for DesignElement model"""

    class Meta:
        model = DesignElement
        fields = [
            'id', 'vendor', 'name', 'element_type', 'model_file',
            'dimensions', 'is_stackable', 'created_at'
        ]
        read_only_fields = ['id', 'vendor', 'created_at']

    def validate_dimensions(self, value):
        if value in (None, ''):
            return {}
        if not isinstance(value, dict):
            raise serializers.ValidationError("Dimensions must be an object")
        for key in ('width', 'height', 'depth'):
            dim = value.get(key)
            if dim is not None and (not isinstance(dim, (int, float)) or dim < 0):
                raise serializers.ValidationError(f"{key} must be a non-negative number")
        return value


class ServiceComponentSerializer(serializers.ModelSerializer):
    design_element_name = serializers.CharField(source='design_element.name', read_only=True)

    class Meta:
        model = ServiceComponent
        fields = ['id', 'design_element', 'design_element_name', 'quantity_per_unit', 'role']
        read_only_fields = ['id']


class ServiceListingSerializer(serializers.ModelSerializer):
    """Detailed listing serializer for output"""
    vendor_name = serializers.CharField(source='vendor.display_name', read_only=True)
    design_element = DesignElementSerializer(read_only=True)
    components = ServiceComponentSerializer(many=True, read_only=True)
    has_3d_model = serializers.SerializerMethodField()

    class Meta:
        model = ServiceListing
        fields = [
            'id', 'vendor', 'vendor_name', 'name', 'description', 'category',
            'availability_type', 'max_quantity', 'pricing_policy', 'price',
            'hourly_rate', 'cancellation_policy', 'cancellation_fee_tiers',
            'design_element', 'components', 'has_3d_model', 'is_active',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_has_3d_model(self, obj) -> bool:
        if obj.design_element_id:
            return True
        return len(obj.components.all()) > 0


class ServiceListingCreateUpdateSerializer(serializers.ModelSerializer):
    """Input serializer for creating/updating listings"""
    design_element_id = serializers.PrimaryKeyRelatedField(
        queryset=DesignElement.objects.all(),
        source='design_element',
        required=False,
        allow_null=True
    )
    components = ServiceComponentSerializer(many=True, required=False)
    cancellation_fee_tiers = serializers.JSONField(required=False, allow_null=True)

    class Meta:
        model = ServiceListing
        fields = [
            'name', 'description', 'category', 'availability_type',
            'max_quantity', 'pricing_policy', 'price', 'hourly_rate',
            'cancellation_policy', 'cancellation_fee_tiers',
            'design_element_id', 'components', 'is_active'
        ]

    def validate_cancellation_fee_tiers(self, value):
        from django.core.exceptions import ValidationError as DjangoValidationError

        try:
            validate_cancellation_fee_tiers(value)
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.messages)
        return value

    def validate(self, data):
        instance = self.instance

        def current(field):
            if field in data:
                return data[field]
            return getattr(instance, field, None) if instance else None

        category = current('category')
        if category == VENDOR_CATEGORY_VENUE:
            # Venues are booked whole, for the whole day
            data['availability_type'] = AVAILABILITY_EXCLUSIVE
            data['pricing_policy'] = PRICING_FIXED_PACKAGE

        availability_type = data.get('availability_type') or current('availability_type') or AVAILABILITY_EXCLUSIVE
        max_quantity = current('max_quantity')
        if availability_type == AVAILABILITY_QUANTITY_BASED:
            if not max_quantity or max_quantity <= 0:
                raise serializers.ValidationError(
                    {'max_quantity': 'Max quantity is required and must be greater than 0 for quantity-based listings'}
                )
        else:
            data['max_quantity'] = None

        pricing_policy = data.get('pricing_policy') or current('pricing_policy')
        if pricing_policy == PRICING_TIME_BASED and not current('hourly_rate'):
            raise serializers.ValidationError(
                {'hourly_rate': 'Hourly rate is required for time-based pricing'}
            )

        element = data.get('design_element')
        vendor = self.context.get('vendor')
        if element is not None and vendor is not None and element.vendor_id not in (None, vendor.id):
            raise serializers.ValidationError(
                {'design_element_id': 'Design element belongs to another vendor'}
            )

        return data

    def _write_components(self, listing, components):
        listing.components.all().delete()
        ServiceComponent.objects.bulk_create([
            ServiceComponent(
                service_listing=listing,
                design_element=component['design_element'],
                quantity_per_unit=component.get('quantity_per_unit', 1),
                role=component.get('role', ''),
            )
            for component in components
        ])

    def create(self, validated_data):
        components = validated_data.pop('components', None)
        listing = super().create(validated_data)
        if components:
            self._write_components(listing, components)
        return listing

    def update(self, instance, validated_data):
        components = validated_data.pop('components', None)
        listing = super().update(instance, validated_data)
        if components is not None:
            self._write_components(listing, components)
        return listing


class ServiceAvailabilitySerializer(serializers.ModelSerializer):
    """Per-date capacity override"""

    class Meta:
        model = ServiceAvailability
        fields = ['id', 'service_listing', 'date', 'max_quantity', 'created_at']
        read_only_fields = ['id', 'service_listing', 'created_at']

    def validate_max_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Max quantity must be greater than 0")
        return value
