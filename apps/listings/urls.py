from rest_framework.routers import DefaultRouter
from . import views

app_name = 'listings'

router = DefaultRouter()
router.register(r'design-elements', views.DesignElementViewSet, basename='design-element')
router.register(r'listings', views.ServiceListingViewSet, basename='service-listing')

urlpatterns = router.urls
