"""
Venue design views

All routes are scoped to one of the couple's projects.
"""
import logging

from rest_framework import viewsets, status
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse, OpenApiTypes

from apps.budgets.models import Budget
from apps.budgets.serializers import BudgetSnapshotSerializer
from apps.budgets.services.reconciliation import recompute_planned_spend, sync_per_table_expenses
from apps.core.exceptions import InvalidOperation
from apps.core.pagination import CatalogPagination
from apps.core.permissions import IsCouple
from apps.projects.models import ProjectService
from apps.projects.serializers import ProjectServiceSerializer
from .models import PlacedElement
from .serializers import (
    PlacedElementSerializer,
    VenueDesignSerializer,
    ElementCreateSerializer,
    ElementUpdateSerializer,
    ElementDeleteQuerySerializer,
    CameraUpdateSerializer,
    LayoutSaveSerializer,
    CatalogQuerySerializer,
    CatalogItemSerializer,
    TableTagSerializer,
    TableQuerySerializer,
)
from .services.design_service import venue_design_service
from .services.table_count import (
    TableTaggingError,
    get_table_count,
    get_tables,
    tag_tables,
    untag_tables,
)

logger = logging.getLogger(__name__)


def _couple_for(user):
    couple = getattr(user, 'couple_profile', None)
    if couple is None:
        raise PermissionDenied('Couple profile not found')
    return couple


def _placements(design):
    return PlacedElement.objects.filter(venue_design=design).select_related(
        'design_element', 'meta__service_listing', 'parent_element', 'booking'
    )


def _budget_snapshot(project):
    budget = Budget.objects.filter(project=project).first()
    return BudgetSnapshotSerializer(budget).data if budget is not None else None


class VenueDesignViewSet(viewsets.ViewSet):
    """
    The 3D design of a couple's project: placements, camera, layout,
    catalog, per-table tags and the checkout summary.
    """
    permission_classes = [IsAuthenticated, IsCouple]

    def _project(self, request, project_id, modify=False):
        project = venue_design_service.get_project_for_couple(project_id, _couple_for(request.user))
        if modify:
            venue_design_service.check_project_can_be_modified(project)
        return project

    def _design(self, request, project_id, modify=False):
        project = self._project(request, project_id, modify=modify)
        return project, venue_design_service.get_or_create_design(project)

    @extend_schema(
        summary="Get venue design",
        description="""
        Get the project's design, creating it on first access around the
        venue's 3D model. Includes placements with their service metadata,
        project services without a 3D model and the budget snapshot.
        """,
        responses={
            200: OpenApiResponse(description="Design, placements, project services and budget"),
            400: OpenApiResponse(description="Project has no venue, or the venue has no 3D model"),
            404: OpenApiResponse(description="Project not found"),
        },
        tags=['Venue Designs']
    )
    def retrieve(self, request, project_id=None):
        project, design = self._design(request, project_id)
        project_services = ProjectService.objects.filter(project=project).select_related(
            'service_listing', 'booking'
        )
        return Response({
            'design': VenueDesignSerializer(design).data,
            'placed_elements': PlacedElementSerializer(_placements(design), many=True).data,
            'project_services': ProjectServiceSerializer(project_services, many=True).data,
            'budget': _budget_snapshot(project),
        })

    @extend_schema(
        summary="Add element",
        description="""
        Place a service listing in the design. The listing's primary element
        and components are placed as one bundle, each moved clear of existing
        placements. Listings without a 3D model are added as project services.
        """,
        request=ElementCreateSerializer,
        responses={
            201: OpenApiResponse(description="Placements, project service and budget"),
            400: OpenApiResponse(description="Venue listing, unavailable on the wedding date, or exclusive already placed"),
            404: OpenApiResponse(description="Service listing not found or inactive"),
        },
        tags=['Venue Designs - Elements']
    )
    def create_element(self, request, project_id=None):
        project, design = self._design(request, project_id, modify=True)
        serializer = ElementCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = venue_design_service.add_element(
            project,
            design,
            data['service_listing_id'],
            position=data.get('position'),
            rotation=data.get('rotation', 0),
        )
        recompute_planned_spend(project.id)

        project_service = result['project_service']
        placements = _placements(design).filter(id__in=[placement.id for placement in result['placements']])
        return Response({
            'placed_elements': PlacedElementSerializer(placements, many=True).data,
            'project_service': ProjectServiceSerializer(project_service).data if project_service else None,
            'is_per_table': result['is_per_table'],
            'budget': _budget_snapshot(project),
        }, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Update element",
        request=ElementUpdateSerializer,
        responses={
            200: PlacedElementSerializer,
            400: OpenApiResponse(description="Nothing to update, invalid parent, or booked element moved"),
        },
        tags=['Venue Designs - Elements']
    )
    def update_element(self, request, project_id=None, element_id=None):
        project, design = self._design(request, project_id, modify=True)
        serializer = ElementUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        placement = venue_design_service.update_element(design, element_id, serializer.validated_data)
        placement = _placements(design).get(id=placement.id)
        return Response(PlacedElementSerializer(placement).data)

    @extend_schema(
        summary="Delete element",
        description="Remove one placement, or its whole bundle with scope=bundle. Booked placements and the venue cannot be removed.",
        parameters=[
            OpenApiParameter('scope', OpenApiTypes.STR, enum=['single', 'bundle'], description='What to remove'),
        ],
        responses={
            200: OpenApiResponse(description="Removed placement ids and the budget"),
            400: OpenApiResponse(description="Placement is booked or is the venue"),
        },
        tags=['Venue Designs - Elements']
    )
    def destroy_element(self, request, project_id=None, element_id=None):
        project, design = self._design(request, project_id, modify=True)
        query = ElementDeleteQuerySerializer(data=request.query_params.dict())
        query.is_valid(raise_exception=True)

        result = venue_design_service.delete_element(design, element_id, query.validated_data['scope'])
        recompute_planned_spend(project.id)
        result['budget'] = _budget_snapshot(project)
        return Response(result)

    @extend_schema(
        summary="Duplicate element",
        description="Copy the element's whole bundle next to the original.",
        request=None,
        responses={
            201: PlacedElementSerializer(many=True),
            400: OpenApiResponse(description="Exclusive or maximum quantity reached, or unavailable"),
        },
        tags=['Venue Designs - Elements']
    )
    def duplicate_element(self, request, project_id=None, element_id=None):
        project, design = self._design(request, project_id, modify=True)
        created = venue_design_service.duplicate_element(project, design, element_id)
        recompute_planned_spend(project.id)

        placements = _placements(design).filter(id__in=[placement.id for placement in created])
        return Response(PlacedElementSerializer(placements, many=True).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Update camera",
        request=CameraUpdateSerializer,
        responses={200: VenueDesignSerializer},
        tags=['Venue Designs']
    )
    def update_camera(self, request, project_id=None):
        _, design = self._design(request, project_id, modify=True)
        serializer = CameraUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        design = venue_design_service.update_camera(
            design, position=data.get('position'), zoom_level=data.get('zoom_level')
        )
        return Response(VenueDesignSerializer(design).data)

    @extend_schema(
        summary="Save layout",
        description="Merge client layout settings into the design. placementsMeta is managed by the server.",
        request=LayoutSaveSerializer,
        responses={200: VenueDesignSerializer},
        tags=['Venue Designs']
    )
    def save_layout(self, request, project_id=None):
        _, design = self._design(request, project_id, modify=True)
        serializer = LayoutSaveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        venue_design_service.save_layout(design, serializer.validated_data.get('layout_data'))
        return Response(VenueDesignSerializer(design).data)

    @extend_schema(
        summary="Browse catalog",
        description="Active non-venue listings, each with its availability on the wedding date.",
        parameters=[
            OpenApiParameter('search', OpenApiTypes.STR),
            OpenApiParameter('category', OpenApiTypes.STR),
            OpenApiParameter('include_unavailable', OpenApiTypes.BOOL),
            OpenApiParameter('has_3d_model', OpenApiTypes.BOOL),
            OpenApiParameter('page', OpenApiTypes.INT),
            OpenApiParameter('page_size', OpenApiTypes.INT, description='Clamped to 5-50'),
        ],
        responses={200: CatalogItemSerializer(many=True)},
        tags=['Venue Designs - Catalog']
    )
    def catalog(self, request, project_id=None):
        project = self._project(request, project_id)
        query = CatalogQuerySerializer(data=request.query_params.dict())
        query.is_valid(raise_exception=True)
        params = query.validated_data

        listings = list(venue_design_service.catalog_queryset(
            search=params.get('search'),
            category=params.get('category'),
            has_3d_model=params.get('has_3d_model'),
        ))
        availability = venue_design_service.availability_for(project, [listing.id for listing in listings])
        if not params['include_unavailable']:
            listings = [
                listing for listing in listings
                if availability.get(str(listing.id)) is not None and availability[str(listing.id)].available
            ]

        paginator = CatalogPagination()
        page = paginator.paginate_queryset(listings, request, view=self)
        serializer = CatalogItemSerializer(page, many=True, context={'availability': availability})
        return paginator.get_paginated_response(serializer.data)

    @extend_schema(
        summary="Check availability on the wedding date",
        parameters=[
            OpenApiParameter('service_listing_ids', OpenApiTypes.STR, required=True, description='Comma-separated ids'),
        ],
        responses={
            200: OpenApiResponse(description="Availability keyed by service listing id"),
            400: OpenApiResponse(description="Missing ids or wedding date"),
        },
        tags=['Venue Designs - Catalog']
    )
    def availability(self, request, project_id=None):
        project = self._project(request, project_id)
        raw = request.query_params.get('service_listing_ids', '')
        ids = [value.strip() for value in raw.split(',') if value.strip()]
        if not ids:
            raise InvalidOperation('service_listing_ids is required')

        results = venue_design_service.availability_for(project, ids)
        return Response({
            'wedding_date': project.wedding_date.isoformat(),
            'availability': {key: result.to_dict() for key, result in results.items()},
        })

    @extend_schema(
        summary="Count tables",
        description="Tables in the design, optionally only those tagged with a service listing.",
        parameters=[OpenApiParameter('service_listing_id', OpenApiTypes.UUID)],
        request=TableQuerySerializer,
        responses={200: OpenApiResponse(description="Table count and table placements")},
        tags=['Venue Designs - Tables']
    )
    def tables(self, request, project_id=None):
        _, design = self._design(request, project_id)
        source = request.data if request.method == 'POST' else request.query_params.dict()
        query = TableQuerySerializer(data=source)
        query.is_valid(raise_exception=True)
        listing_id = query.validated_data.get('service_listing_id')

        tables = get_tables(design)
        if listing_id is not None:
            tables = [table for table in tables if str(listing_id) in (table.service_listing_ids or [])]
        return Response({
            'table_count': get_table_count(design, listing_id),
            'tables': PlacedElementSerializer(tables, many=True).data,
        })

    def _retag(self, request, project_id, operation):
        project, design = self._design(request, project_id, modify=True)
        serializer = TableTagSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        previous = set()
        for table in PlacedElement.objects.filter(
            venue_design=design, id__in=data['placed_element_ids']
        ).only('service_listing_ids'):
            previous.update(table.service_listing_ids or [])

        try:
            updated = operation(design, data['placed_element_ids'], data['service_listing_ids'])
        except TableTaggingError as e:
            raise InvalidOperation(str(e))

        affected = previous | {str(listing_id) for listing_id in data['service_listing_ids']}
        sync_per_table_expenses(design, affected)
        recompute_planned_spend(project.id)
        return Response({
            'updated_count': updated,
            'budget': _budget_snapshot(project),
        })

    @extend_schema(
        summary="Tag tables",
        description="Replace the per-table service tags of the given tables.",
        request=TableTagSerializer,
        responses={
            200: OpenApiResponse(description="Number of tables updated and the budget"),
            400: OpenApiResponse(description="Unknown placements, non-table placements or unknown listings"),
        },
        tags=['Venue Designs - Tables']
    )
    def tag_tables(self, request, project_id=None):
        return self._retag(request, project_id, tag_tables)

    @extend_schema(
        summary="Untag tables",
        request=TableTagSerializer,
        responses={200: OpenApiResponse(description="Number of tables updated and the budget")},
        tags=['Venue Designs - Tables']
    )
    def untag_tables(self, request, project_id=None):
        return self._retag(request, project_id, untag_tables)

    @extend_schema(
        summary="Checkout summary",
        description="What is left to book, grouped by vendor, with prices and availability on the wedding date.",
        responses={
            200: OpenApiResponse(description="Items grouped by vendor"),
            400: OpenApiResponse(description="Wedding date is not set"),
        },
        tags=['Venue Designs - Checkout']
    )
    def checkout_summary(self, request, project_id=None):
        project, design = self._design(request, project_id)
        return Response(venue_design_service.checkout_summary(project, design))

    @extend_schema(
        summary="Remove project service",
        responses={
            204: None,
            400: OpenApiResponse(description="Service is booked"),
            404: OpenApiResponse(description="Project service not found"),
        },
        tags=['Venue Designs']
    )
    def destroy_project_service(self, request, project_id=None, service_listing_id=None):
        project = self._project(request, project_id, modify=True)
        venue_design_service.remove_project_service(project, service_listing_id)
        recompute_planned_spend(project.id)
        return Response(status=status.HTTP_204_NO_CONTENT)
