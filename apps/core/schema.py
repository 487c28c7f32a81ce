"""
Custom AutoSchema for automatic tag assignment
"""
from drf_spectacular.openapi import AutoSchema


class CustomAutoSchema(AutoSchema):
    """
    Custom schema that automatically assigns tags based on ViewSet and action
    """

    def get_tags(self):
        """Auto-assign tags based on ViewSet class and action"""
        tags = super().get_tags()

        if tags:
            return tags

        view = self.view
        view_name = view.__class__.__name__
        action = getattr(view, 'action', None)

        tag_mapping = {
            'ServiceListingViewSet': self._get_listing_tag(action),
            'DesignElementViewSet': ['Listings - Vendor'],
            'TimeSlotViewSet': ['Schedules - Vendor'],
            'BookingViewSet': self._get_booking_tag(action),
            'VenueDesignViewSet': ['Venue Designs'],
            'WeddingProjectViewSet': ['Projects'],
            'BudgetViewSet': ['Budgets'],
        }

        return tag_mapping.get(view_name, ['api'])

    def _get_listing_tag(self, action):
        """Get tag for listing endpoints"""
        vendor_actions = ['create', 'update', 'partial_update', 'destroy', 'availability_overrides']
        if action in vendor_actions:
            return ['Listings - Vendor']
        return ['Listings - Public']

    def _get_booking_tag(self, action):
        """Get tag for booking endpoints"""
        couple_actions = ['create', 'cancel', 'cancellation_fee', 'payments']
        vendor_actions = ['update_status', 'vendor_payments']

        if action in couple_actions:
            return ['Bookings']
        elif action in vendor_actions:
            return ['Bookings - Vendor']
        return ['Bookings']
