"""Administrator views over marketplace accounts."""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import mixins, viewsets  # type: ignore

from .permissions import IsAdmin
from .serializers import UserSerializer, VendorUpdateSerializer

User = get_user_model()

logger = logging.getLogger(__name__)


class RenterAdminViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Renter accounts (role ``user``), read only."""

    serializer_class = UserSerializer
    permission_classes = [IsAdmin]
    queryset = User.objects.filter(role=User.RoleChoices.USER)


class VendorAdminViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """Vendor accounts. Admins may correct username, email and phone."""

    permission_classes = [IsAdmin]
    queryset = User.objects.filter(role=User.RoleChoices.VENDOR)

    def get_serializer_class(self):  # type: ignore
        if self.action in {"update", "partial_update"}:
            return VendorUpdateSerializer
        return UserSerializer

    def perform_update(self, serializer):  # type: ignore
        vendor = serializer.save()
        logger.info("Vendor %s updated by %s", vendor.pk, self.request.user.pk)
