"""
Time slot and availability serializers
"""
from rest_framework import serializers

from apps.core.utils.helpers import today
from .models import TimeSlot


class TimeSlotSerializer(serializers.ModelSerializer):
    """Serializer for vendor time slots"""
    booking_ids = serializers.SerializerMethodField()

    class Meta:
        model = TimeSlot
        fields = ['id', 'vendor', 'date', 'status', 'reason', 'booking_ids', 'created_at']
        read_only_fields = fields

    def get_booking_ids(self, obj) -> list:
        if obj.status != 'booked':
            return []
        from apps.bookings.models import Booking
        from apps.core.utils.constants import ACTIVE_BOOKING_STATUSES

        return [
            str(pk) for pk in Booking.objects.filter(
                vendor_id=obj.vendor_id,
                reserved_date=obj.date,
                status__in=ACTIVE_BOOKING_STATUSES,
            ).values_list('id', flat=True)
        ]


class TimeOffCreateSerializer(serializers.Serializer):
    """Input serializer for blocking a date as personal time off"""
    date = serializers.DateField()
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate_date(self, value):
        if value < today():
            raise serializers.ValidationError("Cannot block a date in the past")
        return value


class DateRangeQuerySerializer(serializers.Serializer):
    """Query parameters for date-range lookups"""
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, data):
        if data['end_date'] < data['start_date']:
            raise serializers.ValidationError("end_date must be on or after start_date")
        if (data['end_date'] - data['start_date']).days > 366:
            raise serializers.ValidationError("Date range cannot exceed 366 days")
        return data


class AvailabilityCheckQuerySerializer(serializers.Serializer):
    """Query parameters for a single availability check"""
    service_listing_id = serializers.UUIDField()
    date = serializers.DateField()


class BatchAvailabilityRequestSerializer(serializers.Serializer):
    """Input serializer for checking several listings on one date"""
    date = serializers.DateField()
    service_listing_ids = serializers.ListField(
        child=serializers.UUIDField(),
        min_length=1,
        max_length=100
    )


class AvailabilityResultSerializer(serializers.Serializer):
    """Output of an availability check"""
    service_listing_id = serializers.UUIDField()
    date = serializers.DateField()
    available = serializers.BooleanField()
    reason = serializers.CharField(required=False)
    availability_type = serializers.CharField(required=False)
    available_quantity = serializers.IntegerField(required=False)
    max_quantity = serializers.IntegerField(required=False)
    booked_quantity = serializers.IntegerField(required=False)
