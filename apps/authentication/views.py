"""
Authentication views
"""
from django.core.cache import cache
from django.db import connection
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from drf_spectacular.utils import extend_schema, OpenApiResponse, OpenApiExample

from .serializers import (
    UserSerializer,
    UserProfileUpdateSerializer,
    HealthCheckSerializer
)


@extend_schema(
    summary="Get current user",
    description="The authenticated user with their vendor or couple profile",
    responses={
        200: UserSerializer,
        401: OpenApiResponse(description="Unauthorized")
    },
    tags=['Authentication']
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    return Response(UserSerializer(request.user).data)


@extend_schema(
    summary="Update profile",
    description="""
    Update the current user's name and role profile.

    Vendors can change business_name, category, phone, location and
    description. Couples can change partner_name and phone.
    """,
    request=UserProfileUpdateSerializer,
    examples=[
        OpenApiExample(
            'Vendor profile',
            value={'business_name': 'Bloom & Co', 'category': 'Florist', 'location': 'Kuala Lumpur'},
            request_only=True
        ),
        OpenApiExample(
            'Couple profile',
            value={'first_name': 'Aisha', 'partner_name': 'Daniel'},
            request_only=True
        ),
    ],
    responses={
        200: UserSerializer,
        400: OpenApiResponse(description="Bad Request"),
        401: OpenApiResponse(description="Unauthorized")
    },
    tags=['Authentication']
)
@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def update_profile(request):
    serializer = UserProfileUpdateSerializer(request.user, data=request.data)
    serializer.is_valid(raise_exception=True)
    user = serializer.save()
    return Response(UserSerializer(user).data, status=status.HTTP_200_OK)


@extend_schema(
    summary="Health check",
    description="API health including database and cache connectivity",
    responses={200: HealthCheckSerializer},
    tags=['System']
)
@api_view(['GET'])
@permission_classes([AllowAny])
def health_check(request):
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        db_status = "healthy"
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"

    try:
        cache.set('health_check', 'ok', 10)
        cache_status = "healthy" if cache.get('health_check') == 'ok' else "unhealthy"
    except Exception as e:
        cache_status = f"unhealthy: {str(e)}"

    overall = 'healthy' if db_status == cache_status == 'healthy' else 'degraded'
    return Response({
        'status': overall,
        'timestamp': timezone.now().isoformat(),
        'database': db_status,
        'cache': cache_status
    })
