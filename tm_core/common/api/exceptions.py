# tm_core/common/api/exceptions.py

from __future__ import annotations

import logging
import uuid
from typing import Any

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    AuthenticationFailed,
    NotAuthenticated,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


def ensure_request_id(request) -> str:
    """
    Ensures request has a stable request_id attribute and returns it.
    Safe to call from middleware and DRF exception handler.
    """
    rid = getattr(request, "request_id", None) if request is not None else None
    if not rid:
        rid = uuid.uuid4().hex
        if request is not None:
            setattr(request, "request_id", rid)
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    """
    Canonical error envelope.
    Reusable from Django middleware (JsonResponse) and DRF (Response).
    """
    rid = ensure_request_id(request)
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": rid,
        }
    }


class ConflictError(APIException):
    """
    409 Conflict that still flows through the global exception handler.
    Use when business rules block an action.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)


# -------------------------------------------------------------------
# Domain errors (raised by services, rendered by api_exception_handler)
# -------------------------------------------------------------------

class NotFoundError(APIException):
    """
    Referenced row does not exist or does not belong to the caller.
    Both cases look the same to the client.
    """
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class PatientNotFound(NotFoundError):
    default_detail = "Patient not found."
    default_code = "patient_not_found"


class DoctorNotFound(NotFoundError):
    default_detail = "Doctor not found."
    default_code = "doctor_not_found"


class PlanNotFound(NotFoundError):
    default_detail = "Subscription plan not found."
    default_code = "plan_not_found"


class PaymentRecordNotFound(NotFoundError):
    default_detail = "Payment record not found."
    default_code = "payment_not_found"


class SubscriptionNotFound(NotFoundError):
    default_detail = "Subscription not found."
    default_code = "subscription_not_found"


class AppointmentNotFound(NotFoundError):
    default_detail = "Appointment not found."
    default_code = "appointment_not_found"


class ChatRoomNotFound(NotFoundError):
    default_detail = "Chat room not found or access denied."
    default_code = "chat_room_not_found"


class EntitlementExhausted(APIException):
    """
    No usable subscription or payment credit.
    `reason` lets the client route to the payment flow:
      - no_payment: the patient never completed a payment
      - credits_used: completed payments exist but every credit is spent
    """
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_code = "entitlement_exhausted"

    NO_PAYMENT = "no_payment"
    CREDITS_USED = "credits_used"

    MESSAGES = {
        NO_PAYMENT: "You need to make a payment to book an appointment.",
        CREDITS_USED: "No remaining appointments. Purchase a new appointment or a subscription.",
    }

    def __init__(self, reason: str = NO_PAYMENT):
        self.reason = reason
        super().__init__(
            detail={"detail": self.MESSAGES.get(reason, self.MESSAGES[self.NO_PAYMENT]), "reason": reason},
            code=self.default_code,
        )


class ConcurrentDecrementConflict(ConflictError):
    """
    Guarded decrement affected zero rows: another request spent the credit
    between evaluation and decrement.
    """
    default_detail = "Appointment credit was consumed by a concurrent request."
    default_code = "concurrent_conflict"


class InvalidStatusTransition(ConflictError):
    default_detail = "Appointment status transition is not allowed."
    default_code = "invalid_status_transition"


class InvalidSignature(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid payment signature."
    default_code = "invalid_signature"


class InvalidWebhookSignature(InvalidSignature):
    default_detail = "Invalid webhook signature."
    default_code = "invalid_webhook_signature"


class GatewayUnavailable(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Failed to create payment order."
    default_code = "gateway_unavailable"


class ProviderUnavailable(APIException):
    """
    Realtime bus / video provider / object storage call failed or timed out.
    """
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "External provider is unavailable."
    default_code = "provider_unavailable"


def _code_for(exc: Exception, http_status: int) -> str:
    if isinstance(exc, ValidationError):
        return "validation_error"
    if isinstance(exc, (NotAuthenticated, AuthenticationFailed)):
        return "not_authenticated"
    if isinstance(exc, PermissionDenied):
        return "permission_denied"
    if isinstance(exc, Http404):
        return "not_found"
    if isinstance(exc, APIException):
        return getattr(exc, "default_code", "api_error") or "api_error"
    if http_status >= 500:
        return "server_error"
    return "error"


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")
    response = drf_exception_handler(exc, context)

    # Truly unhandled error
    if response is None:
        logger.exception("Unhandled error request_id=%s", ensure_request_id(request), exc_info=exc)
        return Response(
            build_error_envelope(
                request=request,
                code="server_error",
                message="Unexpected server error.",
                details=None,
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    http_status = response.status_code
    code = _code_for(exc, http_status)

    # Message + details rules:
    # 1) If {"detail": "..."} only -> message=detail, details=None
    # 2) If {"detail": "...", ...} -> message=detail, details={...without detail}
    # 3) Otherwise -> message="Request failed.", details=data
    data = response.data
    message = "Request failed."
    details = data

    if isinstance(data, dict) and "detail" in data:
        message = str(data.get("detail"))
        rest = {k: v for k, v in data.items() if k != "detail"}
        details = rest or None

    if http_status >= 500:
        logger.error("Request failed request_id=%s code=%s message=%s", ensure_request_id(request), code, message)

    return Response(
        build_error_envelope(
            request=request,
            code=code,
            message=message,
            details=details,
        ),
        status=http_status,
        headers=response.headers,
    )
