"""
Wedding project views
"""
from rest_framework import viewsets, mixins, status
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiResponse

from apps.core.permissions import IsCouple
from .models import WeddingProject
from .serializers import WeddingProjectSerializer, WeddingProjectCreateUpdateSerializer
from .services import wedding_project_service


def _couple_for(user):
    couple = getattr(user, 'couple_profile', None)
    if couple is None:
        raise PermissionDenied('Couple profile not found')
    return couple


class WeddingProjectViewSet(viewsets.GenericViewSet,
                            mixins.ListModelMixin,
                            mixins.RetrieveModelMixin):
    """
    A couple's wedding projects.
    """
    permission_classes = [IsAuthenticated, IsCouple]

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return WeddingProjectCreateUpdateSerializer
        return WeddingProjectSerializer

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return WeddingProject.objects.none()
        return WeddingProject.objects.select_related(
            'venue_service_listing', 'budget'
        ).filter(couple__user=self.request.user)

    @extend_schema(
        summary="List my projects",
        responses={200: WeddingProjectSerializer(many=True)},
        tags=['Projects']
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(
        summary="Get project details",
        responses={
            200: WeddingProjectSerializer,
            404: OpenApiResponse(description="Project not found")
        },
        tags=['Projects']
    )
    def retrieve(self, request, *args, **kwargs):
        return super().retrieve(request, *args, **kwargs)

    @extend_schema(
        summary="Create project",
        description="Create a wedding project. A budget is created with it when total_budget is given.",
        request=WeddingProjectCreateUpdateSerializer,
        responses={
            201: WeddingProjectSerializer,
            400: OpenApiResponse(description="Invalid data or venue")
        },
        tags=['Projects']
    )
    def create(self, request):
        couple = _couple_for(request.user)
        serializer = WeddingProjectCreateUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        project = wedding_project_service.create_project(couple, serializer.validated_data)
        project = self.get_queryset().get(pk=project.pk)
        return Response(WeddingProjectSerializer(project).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Update project",
        description="Change the name, date, event times, venue or total budget. The venue cannot change while it is booked.",
        request=WeddingProjectCreateUpdateSerializer,
        responses={
            200: WeddingProjectSerializer,
            400: OpenApiResponse(description="Invalid data, or the venue is booked")
        },
        tags=['Projects']
    )
    def partial_update(self, request, pk=None):
        project = self.get_object()
        serializer = WeddingProjectCreateUpdateSerializer(project, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        project = wedding_project_service.update_project(project, serializer.validated_data)
        project = self.get_queryset().get(pk=project.pk)
        return Response(WeddingProjectSerializer(project).data)

    @extend_schema(
        summary="Replace project fields",
        request=WeddingProjectCreateUpdateSerializer,
        responses={200: WeddingProjectSerializer},
        tags=['Projects']
    )
    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)
