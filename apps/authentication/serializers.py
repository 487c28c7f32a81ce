"""
Authentication serializers
"""
from rest_framework import serializers

from apps.core.utils.constants import VENDOR_CATEGORIES
from apps.core.validators import validate_phone_number
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """User serializer for API responses"""
    full_name = serializers.CharField(read_only=True)
    vendor_id = serializers.SerializerMethodField()
    couple_id = serializers.SerializerMethodField()
    profile = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'first_name',
            'last_name',
            'full_name',
            'role',
            'vendor_id',
            'couple_id',
            'profile',
            'is_active',
            'email_verified',
            'created_at',
        ]
        read_only_fields = fields

    def get_vendor_id(self, obj) -> str:
        profile = getattr(obj, 'vendor_profile', None)
        return str(profile.id) if profile else None

    def get_couple_id(self, obj) -> str:
        profile = getattr(obj, 'couple_profile', None)
        return str(profile.id) if profile else None

    def get_profile(self, obj) -> dict:
        vendor = getattr(obj, 'vendor_profile', None)
        if vendor is not None:
            return {
                'business_name': vendor.business_name,
                'display_name': vendor.display_name,
                'category': vendor.category,
                'phone': vendor.phone,
                'location': vendor.location,
                'description': vendor.description,
            }
        couple = getattr(obj, 'couple_profile', None)
        if couple is not None:
            return {'partner_name': couple.partner_name, 'phone': couple.phone}
        return None


class UserProfileUpdateSerializer(serializers.Serializer):
    """
    Update the user's name and the fields of their role profile.

    Vendor-only and couple-only fields are ignored for the other role.
    """
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    phone = serializers.CharField(
        max_length=20, required=False, allow_blank=True, validators=[validate_phone_number]
    )

    # Couple
    partner_name = serializers.CharField(max_length=255, required=False, allow_blank=True)

    # Vendor
    business_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    category = serializers.ChoiceField(choices=VENDOR_CATEGORIES, required=False)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)

    USER_FIELDS = ('first_name', 'last_name')
    VENDOR_FIELDS = ('business_name', 'category', 'phone', 'location', 'description')
    COUPLE_FIELDS = ('partner_name', 'phone')

    def _apply(self, target, fields):
        changed = [field for field in fields if field in self.validated_data]
        for field in changed:
            setattr(target, field, self.validated_data[field])
        if changed:
            target.save()

    def save(self, **kwargs):
        user = self.instance
        self._apply(user, self.USER_FIELDS)

        vendor = getattr(user, 'vendor_profile', None)
        if vendor is not None:
            self._apply(vendor, self.VENDOR_FIELDS)

        couple = getattr(user, 'couple_profile', None)
        if couple is not None:
            self._apply(couple, self.COUPLE_FIELDS)
        return user


class HealthCheckSerializer(serializers.Serializer):
    """Serializer for health check response"""
    status = serializers.CharField()
    timestamp = serializers.DateTimeField()
    database = serializers.CharField()
    cache = serializers.CharField()
