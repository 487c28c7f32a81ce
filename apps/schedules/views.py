"""
Vendor time slot and availability views
"""
from datetime import timedelta

from django.db import IntegrityError
from rest_framework import viewsets, status, mixins
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse, OpenApiTypes

from apps.core.exceptions import ResourceConflict
from apps.core.permissions import IsVendor
from apps.core.utils.constants import SLOT_STATUS_BOOKED, SLOT_STATUS_PERSONAL_TIME_OFF
from apps.core.utils.helpers import parse_calendar_date
from apps.listings.models import ServiceListing
from .models import TimeSlot
from .serializers import (
    TimeSlotSerializer,
    TimeOffCreateSerializer,
    DateRangeQuerySerializer,
    AvailabilityCheckQuerySerializer,
    BatchAvailabilityRequestSerializer,
    AvailabilityResultSerializer,
)
from .services.availability import check_availability, check_many


class TimeSlotViewSet(viewsets.GenericViewSet,
                      mixins.ListModelMixin,
                      mixins.DestroyModelMixin):
    """
    Vendor calendar.

    Booked slots are created when the vendor accepts a booking; personal
    time off is created and removed here.
    """
    serializer_class = TimeSlotSerializer
    permission_classes = [IsAuthenticated, IsVendor]

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return TimeSlot.objects.none()
        return TimeSlot.objects.filter(vendor__user=self.request.user)

    @extend_schema(
        summary="List my time slots",
        description="All booked and time-off days for the current vendor",
        responses={200: TimeSlotSerializer(many=True)},
        tags=['Schedules - Vendor']
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(
        summary="List time slots in range",
        parameters=[
            OpenApiParameter('start_date', OpenApiTypes.DATE, required=True),
            OpenApiParameter('end_date', OpenApiTypes.DATE, required=True),
        ],
        responses={200: TimeSlotSerializer(many=True)},
        tags=['Schedules - Vendor']
    )
    @action(detail=False, methods=['get'], url_path='range')
    def date_range(self, request):
        query = DateRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        slots = self.get_queryset().filter(
            date__gte=query.validated_data['start_date'],
            date__lte=query.validated_data['end_date'],
        )
        return Response(TimeSlotSerializer(slots, many=True).data)

    @extend_schema(
        summary="Block a date",
        description="Mark a date as personal time off. Listings from this vendor become unavailable that day.",
        request=TimeOffCreateSerializer,
        responses={
            201: TimeSlotSerializer,
            400: OpenApiResponse(description="Date in the past"),
            409: OpenApiResponse(description="A slot already exists for this date")
        },
        tags=['Schedules - Vendor']
    )
    def create(self, request):
        serializer = TimeOffCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        vendor = getattr(request.user, 'vendor_profile', None)
        if vendor is None:
            raise PermissionDenied('Vendor profile not found')

        target_date = serializer.validated_data['date']
        existing = TimeSlot.objects.filter(vendor=vendor, date=target_date).first()
        if existing:
            raise ResourceConflict(f"Date {target_date} is already marked as {existing.status}")

        try:
            slot = TimeSlot.objects.create(
                vendor=vendor,
                date=target_date,
                status=SLOT_STATUS_PERSONAL_TIME_OFF,
                reason=serializer.validated_data.get('reason', ''),
            )
        except IntegrityError:
            raise ResourceConflict(f"Date {target_date} already has a time slot")

        return Response(TimeSlotSerializer(slot).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Remove time off",
        responses={
            204: OpenApiResponse(description="Removed"),
            400: OpenApiResponse(description="Booked slots cannot be removed manually")
        },
        tags=['Schedules - Vendor']
    )
    def destroy(self, request, *args, **kwargs):
        slot = self.get_object()
        if slot.status == SLOT_STATUS_BOOKED:
            return Response(
                {'error': 'Cannot delete a booked time slot. Cancel the booking instead.'},
                status=status.HTTP_400_BAD_REQUEST
            )
        slot.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        summary="Remove time off by date",
        responses={
            204: OpenApiResponse(description="Removed"),
            400: OpenApiResponse(description="Invalid date or booked slot"),
            404: OpenApiResponse(description="No slot on this date")
        },
        tags=['Schedules - Vendor']
    )
    @action(detail=False, methods=['delete'], url_path=r'date/(?P<slot_date>[0-9-]+)')
    def delete_by_date(self, request, slot_date=None):
        try:
            target_date = parse_calendar_date(slot_date)
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        slot = self.get_queryset().filter(date=target_date).first()
        if slot is None:
            raise NotFound('No time slot on this date')
        if slot.status == SLOT_STATUS_BOOKED:
            return Response(
                {'error': 'Cannot delete a booked time slot. Cancel the booking instead.'},
                status=status.HTTP_400_BAD_REQUEST
            )
        slot.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(
    summary="Check listing availability",
    description="Whether a service listing can be booked on a date. Public.",
    parameters=[
        OpenApiParameter('service_listing_id', OpenApiTypes.UUID, required=True),
        OpenApiParameter('date', OpenApiTypes.DATE, required=True),
    ],
    responses={200: AvailabilityResultSerializer},
    tags=['Availability']
)
@api_view(['GET'])
@permission_classes([AllowAny])
def check_listing_availability(request):
    query = AvailabilityCheckQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    result = check_availability(
        query.validated_data['service_listing_id'],
        query.validated_data['date'],
    )
    return Response(result.to_dict())


@extend_schema(
    summary="Batch availability check",
    description="Check several listings on one date. Failed checks are reported as unavailable.",
    request=BatchAvailabilityRequestSerializer,
    responses={200: OpenApiResponse(description="{date, results: {listing_id: result}}")},
    tags=['Availability']
)
@api_view(['POST'])
@permission_classes([AllowAny])
def batch_check_availability(request):
    serializer = BatchAvailabilityRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    target_date = serializer.validated_data['date']
    results = check_many(serializer.validated_data['service_listing_ids'], target_date)
    return Response({
        'date': target_date.isoformat(),
        'results': {key: result.to_dict() for key, result in results.items()},
    })


@extend_schema(
    summary="Listing availability calendar",
    description="Per-date availability of one of the vendor's own listings over a date range.",
    parameters=[
        OpenApiParameter('start_date', OpenApiTypes.DATE, required=True),
        OpenApiParameter('end_date', OpenApiTypes.DATE, required=True),
    ],
    responses={200: AvailabilityResultSerializer(many=True)},
    tags=['Availability']
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsVendor])
def listing_availability_calendar(request, service_listing_id):
    listing = ServiceListing.objects.filter(
        id=service_listing_id, vendor__user=request.user
    ).first()
    if listing is None:
        raise NotFound('Service listing not found')

    query = DateRangeQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)

    current = query.validated_data['start_date']
    end = query.validated_data['end_date']
    days = []
    while current <= end:
        days.append(check_availability(listing.id, current).to_dict())
        current += timedelta(days=1)

    return Response({
        'service_listing_id': str(listing.id),
        'availability_type': listing.availability_type,
        'days': days,
    })
