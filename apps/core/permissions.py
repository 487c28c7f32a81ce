"""
Custom permissions for the wedding planner API
"""
from rest_framework import permissions


class IsCouple(permissions.BasePermission):
    """Permission check for couples planning a wedding"""
    message = "Only couples can perform this action"

    def has_permission(self, request, view):
        return (
            request.user and
            request.user.is_authenticated and
            request.user.role == 'couple'
        )


class IsVendor(permissions.BasePermission):
    """Permission check for vendors"""
    message = "Only vendors can perform this action"

    def has_permission(self, request, view):
        return (
            request.user and
            request.user.is_authenticated and
            request.user.role == 'vendor'
        )


class IsVendorOrReadOnly(permissions.BasePermission):
    """Allow vendors to edit, everyone else to read"""

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return request.user and request.user.is_authenticated and request.user.role == 'vendor'


class IsListingOwner(permissions.BasePermission):
    """Permission check for listing ownership"""
    message = "You do not own this service listing"

    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        if not request.user.is_authenticated or request.user.role != 'vendor':
            return False
        return obj.vendor.user_id == request.user.id


class IsBookingParticipant(permissions.BasePermission):
    """Permission check for booking ownership (the couple or the vendor)"""
    message = "You do not have permission to access this booking"

    def has_object_permission(self, request, view, obj):
        if not request.user.is_authenticated:
            return False

        if request.user.role == 'couple':
            return obj.couple.user_id == request.user.id

        if request.user.role == 'vendor':
            return obj.vendor.user_id == request.user.id

        return request.user.role == 'admin'
