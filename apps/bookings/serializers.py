"""
Booking serializers
"""
from rest_framework import serializers

from apps.core.utils.constants import (
    BOOKING_STATUSES,
    PAYMENT_TYPES,
    PAYMENT_METHODS,
)
from apps.core.utils.helpers import parse_calendar_date
from apps.payments.models import Payment
from .models import Booking, SelectedService, Cancellation


class SelectedServiceSerializer(serializers.ModelSerializer):
    service_listing_id = serializers.UUIDField(source='service_listing.id', read_only=True)
    service_listing_name = serializers.CharField(source='service_listing.name', read_only=True)
    pricing_policy = serializers.CharField(source='service_listing.pricing_policy', read_only=True)

    class Meta:
        model = SelectedService
        fields = ['id', 'service_listing_id', 'service_listing_name', 'pricing_policy', 'quantity', 'total_price']


class PaymentSerializer(serializers.ModelSerializer):
    """Payment output serializer"""
    booking_id = serializers.UUIDField(source='booking.id', read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id', 'booking_id', 'payment_type', 'amount', 'payment_method',
            'payment_date', 'receipt', 'released_to_vendor', 'released_at'
        ]
        read_only_fields = fields


class VendorPaymentSerializer(PaymentSerializer):
    """Payment with the booking context a vendor needs"""
    couple_name = serializers.CharField(source='booking.couple.user.full_name', read_only=True)
    reserved_date = serializers.DateField(source='booking.reserved_date', read_only=True)
    booking_status = serializers.CharField(source='booking.status', read_only=True)

    class Meta(PaymentSerializer.Meta):
        fields = PaymentSerializer.Meta.fields + ['couple_name', 'reserved_date', 'booking_status']
        read_only_fields = fields


class CancellationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Cancellation
        fields = [
            'id', 'cancelled_at', 'cancelled_by', 'cancellation_reason',
            'cancellation_fee', 'fee_outstanding', 'fee_payment'
        ]
        read_only_fields = fields


class BookingSerializer(serializers.ModelSerializer):
    """Detailed booking serializer for output"""
    couple_name = serializers.CharField(source='couple.user.full_name', read_only=True)
    couple_email = serializers.EmailField(source='couple.user.email', read_only=True)
    vendor_name = serializers.CharField(source='vendor.display_name', read_only=True)
    project_id = serializers.UUIDField(source='project.id', read_only=True, allow_null=True)
    selected_services = SelectedServiceSerializer(many=True, read_only=True)
    payments = PaymentSerializer(many=True, read_only=True)
    cancellation = serializers.SerializerMethodField()
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    amount_paid = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Booking
        fields = [
            'id', 'couple', 'couple_name', 'couple_email', 'vendor', 'vendor_name',
            'project_id', 'booking_date', 'reserved_date', 'status',
            'deposit_due_date', 'final_due_date', 'notes',
            'selected_services', 'payments', 'cancellation',
            'total_amount', 'amount_paid', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_cancellation(self, obj):
        try:
            return CancellationSerializer(obj.cancellation).data
        except Cancellation.DoesNotExist:
            return None


class BookingListSerializer(serializers.ModelSerializer):
    """Simplified booking serializer for lists"""
    couple_name = serializers.CharField(source='couple.user.full_name', read_only=True)
    vendor_name = serializers.CharField(source='vendor.display_name', read_only=True)
    project_id = serializers.UUIDField(source='project.id', read_only=True, allow_null=True)

    class Meta:
        model = Booking
        fields = [
            'id', 'couple_name', 'vendor_name', 'project_id', 'reserved_date',
            'status', 'deposit_due_date', 'final_due_date', 'booking_date'
        ]


class SelectedServiceInputSerializer(serializers.Serializer):
    service_listing_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)


class BookingCreateSerializer(serializers.Serializer):
    """Input serializer for creating bookings"""
    project_id = serializers.UUIDField(required=False, allow_null=True)
    vendor_id = serializers.UUIDField()
    reserved_date = serializers.CharField()
    selected_services = SelectedServiceInputSerializer(many=True)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=1000)

    def validate_reserved_date(self, value):
        try:
            return parse_calendar_date(value)
        except ValueError:
            raise serializers.ValidationError("Invalid date. Use YYYY-MM-DD.")

    def validate_selected_services(self, value):
        if not value:
            raise serializers.ValidationError("At least one service must be selected")
        return value


class BookingStatusUpdateSerializer(serializers.Serializer):
    """Input serializer for vendor status updates"""
    status = serializers.ChoiceField(choices=[choice for choice, _ in BOOKING_STATUSES] + ['cancelled'])
    deposit_due_date = serializers.DateField(required=False, allow_null=True)
    final_due_date = serializers.DateField(required=False, allow_null=True)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500)


class PaymentCreateSerializer(serializers.Serializer):
    """Input serializer for recording a payment"""
    payment_type = serializers.ChoiceField(choices=PAYMENT_TYPES)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_method = serializers.ChoiceField(choices=PAYMENT_METHODS)
    receipt = serializers.CharField(required=False, allow_blank=True, max_length=500)

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be greater than zero")
        return value


class BookingCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500)


class CancellationQuoteSerializer(serializers.Serializer):
    """Output serializer for a cancellation fee preview"""
    days_until_wedding = serializers.IntegerField()
    tier = serializers.CharField()
    fee_percentage = serializers.DecimalField(max_digits=5, decimal_places=2)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    amount_paid = serializers.DecimalField(max_digits=12, decimal_places=2)
    fee_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    fee_outstanding = serializers.DecimalField(max_digits=12, decimal_places=2)
    requires_payment = serializers.BooleanField()


class VendorPaymentSummarySerializer(serializers.Serializer):
    total_received = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_released = serializers.DecimalField(max_digits=12, decimal_places=2)
    pending_release = serializers.DecimalField(max_digits=12, decimal_places=2)
    payments = VendorPaymentSerializer(many=True)
