# tm_core/audit/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from tm_core.audit.api.serializers import AuditEventSerializer
from tm_core.audit.models import AuditEvent
from tm_core.audit.selectors import list_audit_events
from tm_core.common.api.pagination import limit_from_query
from tm_core.common.permissions import IsAdminRole


def _uuid_param(request, name: str) -> UUID | None:
    raw = request.query_params.get(name) or None
    if raw is None:
        return None
    try:
        return UUID(str(raw))
    except ValueError:
        raise ValidationError({name: "Invalid UUID"})


class AuditEventViewSet(viewsets.GenericViewSet):
    """
    List audit events (admin only).
    """
    permission_classes = [IsAdminRole]

    serializer_class = AuditEventSerializer
    queryset = AuditEvent.objects.none()

    @extend_schema(
        tags=["Audit"],
        responses={200: AuditEventSerializer(many=True)},
        parameters=[
            OpenApiParameter(
                name="entity_type",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by entity type (e.g. Appointment, Payment, Subscription).",
            ),
            OpenApiParameter(
                name="entity_id",
                type=OpenApiTypes.UUID,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by entity UUID.",
            ),
            OpenApiParameter(
                name="event_code",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by event code (e.g. appointment.booked, payment.verified).",
            ),
            OpenApiParameter(
                name="actor_profile_id",
                type=OpenApiTypes.UUID,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by actor profile UUID.",
            ),
            OpenApiParameter(
                name="limit",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Max records to return (default 200, max 500).",
            ),
        ],
    )
    def list(self, request):
        qs = list_audit_events(
            entity_type=request.query_params.get("entity_type") or None,
            entity_id=_uuid_param(request, "entity_id"),
            event_code=request.query_params.get("event_code") or None,
            actor_profile_id=_uuid_param(request, "actor_profile_id"),
        )

        # timeline endpoints can get huge
        limit_n = limit_from_query(request, default=200, maximum=500)

        return Response(AuditEventSerializer(qs[:limit_n], many=True).data, status=status.HTTP_200_OK)
