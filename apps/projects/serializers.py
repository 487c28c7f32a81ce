"""
Wedding project serializers
"""
from rest_framework import serializers

from apps.core.utils.constants import VENDOR_CATEGORY_VENUE
from apps.listings.models import ServiceListing
from .models import WeddingProject, ProjectService


class ProjectServiceSerializer(serializers.ModelSerializer):
    service_listing_id = serializers.UUIDField(source='service_listing.id', read_only=True)
    service_listing_name = serializers.CharField(source='service_listing.name', read_only=True)
    pricing_policy = serializers.CharField(source='service_listing.pricing_policy', read_only=True)
    booking_id = serializers.UUIDField(source='booking.id', read_only=True, allow_null=True)

    class Meta:
        model = ProjectService
        fields = [
            'id', 'service_listing_id', 'service_listing_name', 'pricing_policy',
            'quantity', 'is_booked', 'booking_id'
        ]
        read_only_fields = fields


class WeddingProjectSerializer(serializers.ModelSerializer):
    """Project output serializer"""
    venue_service_listing_id = serializers.UUIDField(
        source='venue_service_listing.id', read_only=True, allow_null=True
    )
    venue_name = serializers.CharField(source='venue_service_listing.name', read_only=True, allow_null=True)
    is_locked = serializers.BooleanField(read_only=True)
    total_budget = serializers.SerializerMethodField()

    class Meta:
        model = WeddingProject
        fields = [
            'id', 'project_name', 'wedding_date', 'event_start_time', 'event_end_time',
            'venue_service_listing_id', 'venue_name', 'status', 'is_locked',
            'total_budget', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_total_budget(self, obj):
        budget = getattr(obj, 'budget', None)
        return str(budget.total_budget) if budget is not None else None


class WeddingProjectCreateUpdateSerializer(serializers.ModelSerializer):
    """Input serializer for creating/updating projects"""
    venue_service_listing_id = serializers.PrimaryKeyRelatedField(
        queryset=ServiceListing.objects.all(),
        source='venue_service_listing',
        required=False,
        allow_null=True
    )
    total_budget = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, write_only=True
    )

    class Meta:
        model = WeddingProject
        fields = [
            'project_name', 'wedding_date', 'event_start_time', 'event_end_time',
            'venue_service_listing_id', 'total_budget'
        ]

    def validate_venue_service_listing_id(self, value):
        if value is None:
            return value
        if value.category != VENDOR_CATEGORY_VENUE:
            raise serializers.ValidationError("Selected service is not a venue")
        if not value.is_active:
            raise serializers.ValidationError("Selected venue is not active")
        return value

    def validate(self, data):
        instance = self.instance
        start = data.get('event_start_time', getattr(instance, 'event_start_time', None))
        end = data.get('event_end_time', getattr(instance, 'event_end_time', None))
        if start and end and end <= start:
            raise serializers.ValidationError(
                {'event_end_time': 'Event end time must be after the start time'}
            )
        return data
