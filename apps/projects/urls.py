from rest_framework.routers import SimpleRouter
from . import views

app_name = 'projects'

router = SimpleRouter()
router.register(r'', views.WeddingProjectViewSet, basename='project')

urlpatterns = router.urls
