"""
Booking views
"""
from rest_framework import viewsets, status, mixins
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse, OpenApiExample
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework.filters import OrderingFilter

from apps.core.permissions import IsCouple, IsVendor, IsBookingParticipant
from apps.core.utils.constants import (
    BOOKING_STATUS_CANCELLED_BY_COUPLE,
    BOOKING_STATUS_CANCELLED_BY_VENDOR,
    BOOKING_STATUS_PENDING_FINAL_PAYMENT,
    CANCELLED_BY_COUPLE,
    CANCELLED_BY_VENDOR,
)
from apps.payments.services.booking_payment_service import booking_payment_service
from .models import Booking
from .serializers import (
    BookingSerializer,
    BookingListSerializer,
    BookingCreateSerializer,
    BookingStatusUpdateSerializer,
    BookingCancelSerializer,
    CancellationQuoteSerializer,
    CancellationSerializer,
    PaymentCreateSerializer,
    PaymentSerializer,
    VendorPaymentSummarySerializer,
)
from .services.booking_service import booking_service
from .services.cancellation import cancel_booking, quote_cancellation
from .services.state_machine import finalize_due_date, normalize_status, transition_booking


def _couple_for(user):
    couple = getattr(user, 'couple_profile', None)
    if couple is None:
        raise PermissionDenied('Couple profile not found')
    return couple


def _vendor_for(user):
    vendor = getattr(user, 'vendor_profile', None)
    if vendor is None:
        raise PermissionDenied('Vendor profile not found')
    return vendor


class BookingViewSet(viewsets.GenericViewSet,
                     mixins.ListModelMixin,
                     mixins.RetrieveModelMixin):
    """
    ViewSet for managing bookings.

    Couples create bookings, pay and cancel. Vendors move bookings through
    their lifecycle with the status endpoint.
    """
    permission_classes = [IsAuthenticated, IsBookingParticipant]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_fields = ['status', 'vendor', 'project']
    ordering_fields = ['reserved_date', 'booking_date']
    ordering = ['-booking_date']

    def get_serializer_class(self):
        if self.action == 'list':
            return BookingListSerializer
        if self.action == 'create':
            return BookingCreateSerializer
        if self.action == 'update_status':
            return BookingStatusUpdateSerializer
        if self.action == 'payments':
            return PaymentCreateSerializer
        if self.action == 'cancel':
            return BookingCancelSerializer
        if self.action == 'cancellation_fee':
            return CancellationQuoteSerializer
        if self.action == 'vendor_payments':
            return VendorPaymentSummarySerializer
        return BookingSerializer

    def get_queryset(self):
        # Handle schema generation
        if getattr(self, 'swagger_fake_view', False):
            return Booking.objects.none()

        user = self.request.user
        if not user.is_authenticated:
            return Booking.objects.none()

        queryset = Booking.objects.select_related(
            'couple__user', 'vendor__user', 'project'
        ).prefetch_related('selected_services__service_listing', 'payments')

        # Couples see their own bookings
        if user.role == 'couple':
            return queryset.filter(couple__user=user)

        # Vendors see bookings made with them
        if user.role == 'vendor':
            return queryset.filter(vendor__user=user)

        if user.role == 'admin':
            return queryset
        return queryset.none()

    def get_permissions(self):
        if self.action in ['create', 'payments', 'cancel', 'cancellation_fee']:
            return [IsCouple(), IsBookingParticipant()]
        if self.action in ['update_status', 'vendor_payments']:
            return [IsVendor(), IsBookingParticipant()]
        return super().get_permissions()

    @extend_schema(
        summary="List bookings",
        description="Couples see their bookings, vendors see bookings made with them.",
        parameters=[
            OpenApiParameter('status', str, description='Filter by status'),
            OpenApiParameter('vendor', str, description='Filter by vendor UUID'),
            OpenApiParameter('project', str, description='Filter by project UUID'),
        ],
        responses={200: BookingListSerializer(many=True)},
        tags=['Bookings']
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(
        summary="Get booking details",
        responses={
            200: BookingSerializer,
            404: OpenApiResponse(description="Booking not found")
        },
        tags=['Bookings']
    )
    def retrieve(self, request, *args, **kwargs):
        return super().retrieve(request, *args, **kwargs)

    @extend_schema(
        summary="Request a booking",
        description="""
        Request a booking with one vendor for one date.

        The booking starts in pending_vendor_confirmation. Exclusive listings
        already booked for the date and quantity requests above what is left
        are refused with 409.
        """,
        request=BookingCreateSerializer,
        examples=[
            OpenApiExample(
                'Booking request',
                value={
                    'project_id': '3f1b1f1e-4c61-4d7e-8a8e-2b9b6d1f0a11',
                    'vendor_id': 'a8f0b3a2-2a57-4df6-9d0c-2f1d9e3c7b55',
                    'reserved_date': '2025-06-01',
                    'selected_services': [
                        {'service_listing_id': '0e9a7c51-6a0e-4d51-9f77-0f7b8f1f2c33', 'quantity': 2, 'total_price': '400.00'}
                    ],
                },
                request_only=True
            )
        ],
        responses={
            201: BookingSerializer,
            400: OpenApiResponse(description="Invalid data or vendor unavailable"),
            409: OpenApiResponse(description="Listing already booked or not enough quantity left"),
        },
        tags=['Bookings']
    )
    def create(self, request):
        couple = _couple_for(request.user)
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        booking = booking_service.create_booking(
            couple=couple,
            vendor_id=data['vendor_id'],
            reserved_date=data['reserved_date'],
            selected_services=data['selected_services'],
            project_id=data.get('project_id'),
            notes=data.get('notes', ''),
        )
        booking = self.get_queryset().get(pk=booking.pk)
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Update booking status",
        description="Vendor moves a booking along its lifecycle. 'cancelled' is accepted as cancelled_by_vendor.",
        request=BookingStatusUpdateSerializer,
        responses={
            200: BookingSerializer,
            400: OpenApiResponse(description="Invalid status transition"),
        },
        tags=['Bookings - Vendor']
    )
    @action(detail=True, methods=['patch'], url_path='status')
    def update_status(self, request, pk=None):
        booking = self.get_object()
        serializer = BookingStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        target = normalize_status(data['status'])
        if target == BOOKING_STATUS_CANCELLED_BY_COUPLE:
            return Response(
                {'error': 'Only the couple can cancel on their own behalf'},
                status=status.HTTP_403_FORBIDDEN
            )

        if target == BOOKING_STATUS_CANCELLED_BY_VENDOR and booking.status != target:
            cancel_booking(booking, CANCELLED_BY_VENDOR, reason=data.get('reason', ''), actor=request.user)
        else:
            final_due_date = data.get('final_due_date')
            if (target == BOOKING_STATUS_PENDING_FINAL_PAYMENT
                    and booking.status != target and final_due_date is None):
                final_due_date = finalize_due_date(booking)
            transition_booking(
                booking,
                target,
                actor=request.user,
                deposit_due_date=data.get('deposit_due_date'),
                final_due_date=final_due_date,
            )

        booking = self.get_queryset().get(pk=booking.pk)
        return Response(BookingSerializer(booking).data)

    @extend_schema(
        summary="Record a payment",
        description="""
        Couple records a payment for their booking.

        deposit is only accepted in pending_deposit_payment and confirms the
        booking. final is only accepted in pending_final_payment and completes
        it. cancellation_fee settles an outstanding cancellation fee.
        """,
        request=PaymentCreateSerializer,
        responses={
            201: PaymentSerializer,
            400: OpenApiResponse(description="Payment type does not match the booking status"),
            409: OpenApiResponse(description="Payment of this type already exists"),
        },
        tags=['Bookings - Payments']
    )
    @action(detail=True, methods=['post'])
    def payments(self, request, pk=None):
        booking = self.get_object()
        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        payment = booking_payment_service.record_payment(
            booking,
            payment_type=data['payment_type'],
            amount=data['amount'],
            payment_method=data['payment_method'],
            receipt=data.get('receipt'),
            actor=request.user,
        )
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Cancel booking",
        description="Couple cancels their booking. A cancellation fee applies depending on how close the date is.",
        request=BookingCancelSerializer,
        responses={
            200: CancellationSerializer,
            400: OpenApiResponse(description="Booking cannot be cancelled in its current status"),
        },
        tags=['Bookings']
    )
    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        booking = self.get_object()
        serializer = BookingCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cancellation = cancel_booking(
            booking,
            CANCELLED_BY_COUPLE,
            reason=serializer.validated_data.get('reason', ''),
            actor=request.user,
        )
        return Response(CancellationSerializer(cancellation).data)

    @extend_schema(
        summary="Preview cancellation fee",
        responses={200: CancellationQuoteSerializer},
        tags=['Bookings']
    )
    @action(detail=True, methods=['get'], url_path='cancellation-fee')
    def cancellation_fee(self, request, pk=None):
        booking = self.get_object()
        quote = quote_cancellation(booking)
        return Response(CancellationQuoteSerializer(quote).data)

    @extend_schema(
        summary="Vendor payments",
        description="Payments received across the vendor's bookings",
        responses={200: VendorPaymentSummarySerializer},
        tags=['Bookings - Vendor']
    )
    @action(detail=False, methods=['get'], url_path='vendor/payments')
    def vendor_payments(self, request):
        vendor = _vendor_for(request.user)
        summary = booking_payment_service.vendor_payment_totals(vendor)
        summary['payments'] = booking_payment_service.vendor_payments(vendor)
        return Response(VendorPaymentSummarySerializer(summary).data)
