from rest_framework.routers import SimpleRouter
from . import views

app_name = 'bookings'

# SimpleRouter: an empty prefix would collide with DefaultRouter's API root
router = SimpleRouter()
router.register(r'', views.BookingViewSet, basename='booking')

urlpatterns = router.urls
