from __future__ import annotations

import logging

from rest_framework import status, viewsets
from rest_framework.response import Response

from apps.analysis.services.gateway import GenerationError

from .serializers import CollateralRequestSerializer
from .services.collateral import COLLATERAL_KINDS, CollateralService, UnknownCollateralKind, get_kind

logger = logging.getLogger(__name__)

COLLATERAL_ERROR_DETAIL = "Internal server error: the marketing content could not be generated."


class CollateralViewSet(viewsets.ViewSet):
    def get_service(self) -> CollateralService:
        return CollateralService()

    def list(self, request):
        return Response({"kinds": sorted(COLLATERAL_KINDS)})

    def create(self, request, kind=None):
        try:
            selected = get_kind(kind)
        except UnknownCollateralKind as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)

        serializer = CollateralRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            payload = self.get_service().generate(selected.name, serializer.validated_data["data"])
        except GenerationError:
            logger.error("Collateral generation failed for kind %s", selected.name, exc_info=True)
            return Response({"detail": COLLATERAL_ERROR_DETAIL}, status=status.HTTP_502_BAD_GATEWAY)
        return Response(payload)
