"""
Venue design serializers
"""
from rest_framework import serializers

from apps.listings.serializers import ServiceListingSerializer
from .models import VenueDesign, PlacedElement, PlacementMeta


class PositionSerializer(serializers.Serializer):
    x = serializers.FloatField()
    y = serializers.FloatField()
    z = serializers.FloatField()


class PlacementMetaSerializer(serializers.ModelSerializer):
    service_listing_id = serializers.UUIDField(source='service_listing.id', read_only=True)

    class Meta:
        model = PlacementMeta
        fields = ['service_listing_id', 'bundle_id', 'role', 'quantity_index', 'unit_price']
        read_only_fields = fields


class PlacedElementSerializer(serializers.ModelSerializer):
    """Placed element with its design element and service metadata"""
    position = PositionSerializer(read_only=True)
    design_element_id = serializers.UUIDField(source='design_element.id', read_only=True)
    design_element_name = serializers.CharField(source='design_element.name', read_only=True)
    model_file = serializers.CharField(source='design_element.model_file', read_only=True)
    parent_element_id = serializers.UUIDField(source='parent_element.id', read_only=True, allow_null=True)
    booking_id = serializers.UUIDField(source='booking.id', read_only=True, allow_null=True)
    metadata = serializers.SerializerMethodField()

    class Meta:
        model = PlacedElement
        fields = [
            'id', 'design_element_id', 'design_element_name', 'model_file', 'element_type',
            'position', 'rotation', 'is_locked', 'parent_element_id',
            'service_listing_ids', 'is_booked', 'booking_id', 'metadata'
        ]
        read_only_fields = fields

    def get_metadata(self, obj):
        try:
            return PlacementMetaSerializer(obj.meta).data
        except PlacementMeta.DoesNotExist:
            return None


class VenueDesignSerializer(serializers.ModelSerializer):
    project_id = serializers.UUIDField(source='project.id', read_only=True)
    camera_position = PositionSerializer(read_only=True)

    class Meta:
        model = VenueDesign
        fields = [
            'id', 'project_id', 'venue_name', 'layout_data', 'camera_position',
            'zoom_level', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class ElementCreateSerializer(serializers.Serializer):
    service_listing_id = serializers.UUIDField()
    position = PositionSerializer(required=False)
    rotation = serializers.FloatField(required=False, default=0)


class ElementMetadataSerializer(serializers.Serializer):
    role = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=50)
    quantity_index = serializers.IntegerField(required=False, allow_null=True, min_value=1)


class ElementUpdateSerializer(serializers.Serializer):
    position = PositionSerializer(required=False)
    rotation = serializers.FloatField(required=False)
    is_locked = serializers.BooleanField(required=False)
    parent_element_id = serializers.UUIDField(required=False, allow_null=True)
    metadata = ElementMetadataSerializer(required=False)


class ElementDeleteQuerySerializer(serializers.Serializer):
    scope = serializers.ChoiceField(choices=['single', 'bundle'], default='single')


class CameraUpdateSerializer(serializers.Serializer):
    position = PositionSerializer(required=False)
    zoom_level = serializers.FloatField(required=False, min_value=0.1, max_value=10)

    def validate(self, data):
        if 'position' not in data and 'zoom_level' not in data:
            raise serializers.ValidationError("Camera position or zoom level is required")
        return data


class LayoutSaveSerializer(serializers.Serializer):
    layout_data = serializers.DictField(required=False)


class CatalogQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True)
    category = serializers.CharField(required=False, allow_blank=True)
    include_unavailable = serializers.BooleanField(required=False, default=False)
    has_3d_model = serializers.BooleanField(required=False, allow_null=True, default=None)


class CatalogItemSerializer(ServiceListingSerializer):
    """Listing annotated with its availability on the wedding date"""
    availability = serializers.SerializerMethodField()

    class Meta(ServiceListingSerializer.Meta):
        fields = ServiceListingSerializer.Meta.fields + ['availability']
        read_only_fields = fields

    def get_availability(self, obj):
        result = self.context.get('availability', {}).get(str(obj.id))
        return result.to_dict() if result is not None else None


class TableTagSerializer(serializers.Serializer):
    placed_element_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    service_listing_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)


class TableQuerySerializer(serializers.Serializer):
    service_listing_id = serializers.UUIDField(required=False, allow_null=True)
