from django.urls import path
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'schedules'

router = DefaultRouter()
router.register(r'time-slots', views.TimeSlotViewSet, basename='time-slot')

urlpatterns = [
    path('availability/check/', views.check_listing_availability, name='availability-check'),
    path('availability/batch-check/', views.batch_check_availability, name='availability-batch-check'),
    path(
        'availability/service/<uuid:service_listing_id>/',
        views.listing_availability_calendar,
        name='availability-calendar'
    ),
] + router.urls
