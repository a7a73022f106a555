# tm_core/iam/api/webhooks.py

from __future__ import annotations

import json
import logging

from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from tm_core.iam.api.serializers import WebhookAckSerializer
from tm_core.iam.services import ProfileService
from tm_core.iam.webhooks import verify_webhook

logger = logging.getLogger(__name__)


def _primary_email(data: dict) -> str:
    addresses = data.get("email_addresses") or []
    primary_id = data.get("primary_email_address_id")
    for entry in addresses:
        if entry.get("id") == primary_id:
            return entry.get("email_address") or ""
    return (addresses[0].get("email_address") or "") if addresses else ""


def _primary_phone(data: dict) -> str:
    numbers = data.get("phone_numbers") or []
    primary_id = data.get("primary_phone_number_id")
    for entry in numbers:
        if entry.get("id") == primary_id:
            return entry.get("phone_number") or ""
    return (numbers[0].get("phone_number") or "") if numbers else ""


class IdentityWebhookView(APIView):
    """
    Identity provider user lifecycle events: user.created, user.updated, user.deleted.
    Only path that creates profiles; signature checked against IDP_WEBHOOK_SECRET.
    """
    authentication_classes: list = []
    permission_classes = [AllowAny]

    @extend_schema(tags=["IAM"], request=None, responses={200: WebhookAckSerializer})
    def post(self, request):
        # Raw body must be read before DRF parses it.
        body = request.body
        verify_webhook(secret=settings.IDP_WEBHOOK_SECRET, headers=request.headers, body=body)

        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise ValidationError("Webhook body is not valid JSON.")

        event_type = payload.get("type") or ""
        data = payload.get("data") or {}
        external_id = data.get("id") or ""

        if event_type in ("user.created", "user.updated"):
            ProfileService.sync_from_identity(
                external_id=external_id,
                email=_primary_email(data),
                first_name=data.get("first_name") or "",
                last_name=data.get("last_name") or "",
                image_url=data.get("image_url") or "",
                phone=_primary_phone(data),
            )
        elif event_type == "user.deleted":
            ProfileService.remove_identity(external_id=external_id)
        else:
            logger.info("Ignoring identity webhook type=%s", event_type)

        return Response({"received": True, "event_type": event_type}, status=status.HTTP_200_OK)
