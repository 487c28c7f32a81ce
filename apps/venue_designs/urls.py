from django.urls import path
from . import views

app_name = 'venue_designs'

design = views.VenueDesignViewSet.as_view({'get': 'retrieve'})
elements = views.VenueDesignViewSet.as_view({'post': 'create_element'})
element_detail = views.VenueDesignViewSet.as_view({'patch': 'update_element', 'delete': 'destroy_element'})
element_duplicate = views.VenueDesignViewSet.as_view({'post': 'duplicate_element'})
camera = views.VenueDesignViewSet.as_view({'patch': 'update_camera'})
save = views.VenueDesignViewSet.as_view({'post': 'save_layout'})
catalog = views.VenueDesignViewSet.as_view({'get': 'catalog'})
availability = views.VenueDesignViewSet.as_view({'get': 'availability'})
tables = views.VenueDesignViewSet.as_view({'get': 'tables', 'post': 'tables'})
tables_tag = views.VenueDesignViewSet.as_view({'post': 'tag_tables'})
tables_untag = views.VenueDesignViewSet.as_view({'post': 'untag_tables'})
checkout_summary = views.VenueDesignViewSet.as_view({'get': 'checkout_summary'})
project_service = views.VenueDesignViewSet.as_view({'delete': 'destroy_project_service'})

urlpatterns = [
    path('<uuid:project_id>/', design, name='design'),
    path('<uuid:project_id>/elements/', elements, name='elements'),
    path('<uuid:project_id>/elements/<uuid:element_id>/', element_detail, name='element-detail'),
    path('<uuid:project_id>/elements/<uuid:element_id>/duplicate/', element_duplicate, name='element-duplicate'),
    path('<uuid:project_id>/camera/', camera, name='camera'),
    path('<uuid:project_id>/save/', save, name='save'),
    path('<uuid:project_id>/catalog/', catalog, name='catalog'),
    path('<uuid:project_id>/availability/', availability, name='availability'),
    path('<uuid:project_id>/tables/', tables, name='tables'),
    path('<uuid:project_id>/tables/tag/', tables_tag, name='tables-tag'),
    path('<uuid:project_id>/tables/untag/', tables_untag, name='tables-untag'),
    path('<uuid:project_id>/checkout-summary/', checkout_summary, name='checkout-summary'),
    path(
        '<uuid:project_id>/project-services/<uuid:service_listing_id>/',
        project_service,
        name='project-service'
    ),
]
