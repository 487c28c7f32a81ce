"""
Service listing views
"""
from django.db.models import Q
from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse, OpenApiTypes
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework.filters import SearchFilter, OrderingFilter

from apps.core.permissions import IsVendor, IsVendorOrReadOnly, IsListingOwner
from apps.core.utils.helpers import parse_calendar_date
from .models import DesignElement, ServiceListing, ServiceAvailability
from .serializers import (
    DesignElementSerializer,
    ServiceListingSerializer,
    ServiceListingCreateUpdateSerializer,
    ServiceAvailabilitySerializer,
)


def _vendor_for(user):
    vendor = getattr(user, 'vendor_profile', None)
    if vendor is None:
        raise PermissionDenied('Vendor profile not found')
    return vendor


class ServiceListingViewSet(viewsets.ModelViewSet):
    """
    Service listings. Anyone can browse active listings; vendors manage
    their own. Deleting a listing deactivates it.
    """
    permission_classes = [IsVendorOrReadOnly, IsListingOwner]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_fields = ['category', 'vendor', 'availability_type', 'pricing_policy', 'is_active']
    search_fields = ['name', 'description']
    ordering_fields = ['name', 'price', 'created_at']
    ordering = ['name']

    def get_permissions(self):
        if self.action in ['list', 'retrieve']:
            return [AllowAny()]
        return super().get_permissions()

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return ServiceListingCreateUpdateSerializer
        if self.action == 'availability_overrides':
            return ServiceAvailabilitySerializer
        return ServiceListingSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        user = self.request.user
        if user.is_authenticated and user.role == 'vendor':
            context['vendor'] = getattr(user, 'vendor_profile', None)
        return context

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return ServiceListing.objects.none()

        queryset = ServiceListing.objects.select_related(
            'vendor__user', 'design_element'
        ).prefetch_related('components__design_element')

        user = self.request.user
        if user.is_authenticated and user.role == 'vendor':
            # Vendors see their own listings (active or not) plus active ones
            return queryset.filter(Q(vendor__user=user) | Q(is_active=True))
        return queryset.filter(is_active=True)

    @extend_schema(
        summary="List service listings",
        description="Browse active service listings. Vendors also see their own inactive listings.",
        parameters=[
            OpenApiParameter('category', str, description='Filter by category'),
            OpenApiParameter('vendor', OpenApiTypes.UUID, description='Filter by vendor'),
            OpenApiParameter('search', str, description='Search in name and description'),
        ],
        responses={200: ServiceListingSerializer(many=True)},
        tags=['Listings - Public']
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(
        summary="Get listing details",
        responses={
            200: ServiceListingSerializer,
            404: OpenApiResponse(description="Listing not found")
        },
        tags=['Listings - Public']
    )
    def retrieve(self, request, *args, **kwargs):
        return super().retrieve(request, *args, **kwargs)

    @extend_schema(
        summary="Create listing",
        description="Create a service listing (vendors only). Venue listings are always exclusive fixed packages.",
        request=ServiceListingCreateUpdateSerializer,
        responses={
            201: ServiceListingSerializer,
            400: OpenApiResponse(description="Bad Request"),
            403: OpenApiResponse(description="Forbidden - Only vendors can create listings")
        },
        tags=['Listings - Vendor']
    )
    def create(self, request, *args, **kwargs):
        vendor = _vendor_for(request.user)
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        listing = serializer.save(vendor=vendor)
        return Response(ServiceListingSerializer(listing).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Update listing",
        request=ServiceListingCreateUpdateSerializer,
        responses={200: ServiceListingSerializer},
        tags=['Listings - Vendor']
    )
    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        listing = self.get_object()
        serializer = self.get_serializer(listing, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        listing = serializer.save()
        return Response(ServiceListingSerializer(listing).data)

    @extend_schema(
        summary="Partial update listing",
        request=ServiceListingCreateUpdateSerializer,
        responses={200: ServiceListingSerializer},
        tags=['Listings - Vendor']
    )
    def partial_update(self, request, *args, **kwargs):
        kwargs['partial'] = True
        return self.update(request, *args, **kwargs)

    @extend_schema(
        summary="Deactivate listing",
        description="Listings are never hard-deleted because bookings and designs reference them.",
        responses={204: OpenApiResponse(description="Listing deactivated")},
        tags=['Listings - Vendor']
    )
    def destroy(self, request, *args, **kwargs):
        listing = self.get_object()
        listing.is_active = False
        listing.save(update_fields=['is_active', 'updated_at'])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        summary="Manage per-date capacity",
        description="""
        GET lists the per-date max quantity overrides, POST creates or replaces the
        override for a date, DELETE removes the override for ?date=YYYY-MM-DD.
        Only quantity-based listings accept overrides.
        """,
        request=ServiceAvailabilitySerializer,
        responses={
            200: ServiceAvailabilitySerializer(many=True),
            201: ServiceAvailabilitySerializer,
            400: OpenApiResponse(description="Listing is not quantity based"),
        },
        tags=['Listings - Vendor']
    )
    @action(detail=True, methods=['get', 'post', 'delete'], url_path='availability',
            permission_classes=[IsVendor, IsListingOwner])
    def availability_overrides(self, request, pk=None):
        listing = self.get_object()
        if listing.vendor.user_id != request.user.id:
            raise PermissionDenied('You do not own this service listing')

        if request.method == 'GET':
            overrides = listing.availability_overrides.all()
            return Response(ServiceAvailabilitySerializer(overrides, many=True).data)

        if request.method == 'DELETE':
            try:
                target_date = parse_calendar_date(request.query_params.get('date'))
            except ValueError as e:
                return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
            deleted, _ = listing.availability_overrides.filter(date=target_date).delete()
            if not deleted:
                raise NotFound('No availability override for this date')
            return Response(status=status.HTTP_204_NO_CONTENT)

        if listing.availability_type != 'quantity_based':
            return Response(
                {'error': 'Availability overrides only apply to quantity-based listings'},
                status=status.HTTP_400_BAD_REQUEST
            )

        serializer = ServiceAvailabilitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        override, created = ServiceAvailability.objects.update_or_create(
            service_listing=listing,
            date=serializer.validated_data['date'],
            defaults={'max_quantity': serializer.validated_data['max_quantity']},
        )
        return Response(
            ServiceAvailabilitySerializer(override).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )


class DesignElementViewSet(mixins.ListModelMixin,
                           mixins.CreateModelMixin,
                           mixins.RetrieveModelMixin,
                           viewsets.GenericViewSet):
    """Vendors upload-register and list their 3D design elements"""
    serializer_class = DesignElementSerializer
    permission_classes = [IsAuthenticated, IsVendor]

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return DesignElement.objects.none()
        return DesignElement.objects.filter(vendor__user=self.request.user)

    @extend_schema(
        summary="Register design element",
        request=DesignElementSerializer,
        responses={201: DesignElementSerializer},
        tags=['Listings - Vendor']
    )
    def create(self, request, *args, **kwargs):
        return super().create(request, *args, **kwargs)

    def perform_create(self, serializer):
        serializer.save(vendor=_vendor_for(self.request.user))
