from rest_framework import permissions


class IsOwner(permissions.BasePermission):
    """
    Custom permission to only allow owners of an object to access it.
    Ensures users can only access their own data.
    """

    def has_object_permission(self, request, view, obj):
        if hasattr(obj, 'user'):
            return obj.user == request.user

        # Filing records belong to the business owner
        if hasattr(obj, 'business'):
            return obj.business.user == request.user

        return False


class IsBusinessOwner(permissions.BasePermission):
    """
    Permission to ensure user can only access their own business
    """

    def has_object_permission(self, request, view, obj):
        return obj.user == request.user
