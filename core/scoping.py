"""
Owner scoping for API views.

Every record in the system belongs to exactly one user. Views that expose
those records inherit from ``OwnerScopedMixin`` so a farmer can only ever see
or change their own data.
"""

from rest_framework import permissions


class OwnerScopedMixin:
    """
    Mixin that filters querysets to only include records owned by the caller.

    SECURITY: This is the core mechanism that keeps tenants apart. Objects
    belonging to another user are simply not found (404).
    """
    permission_classes = [permissions.IsAuthenticated]
    owner_field = 'owner'

    def get_queryset(self):
        """Filter queryset to only include records owned by the request user."""
        queryset = super().get_queryset()
        return queryset.filter(**{self.owner_field: self.request.user})

    def perform_create(self, serializer):
        serializer.save(**{self.owner_field: self.request.user})
