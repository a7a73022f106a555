# tm_core/billing/api/views.py
from __future__ import annotations

from uuid import UUID

from django.conf import settings
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from tm_core.billing.api.serializers import (
    CanBookSerializer,
    OrderResponseSerializer,
    PaymentSerializer,
    PaymentStatusSerializer,
    PaymentVerifySerializer,
    SingleOrderCreateSerializer,
    SubscriptionCancelSerializer,
    SubscriptionOrderCreateSerializer,
    SubscriptionPlanSerializer,
    SubscriptionSerializer,
    VerificationResponseSerializer,
)
from tm_core.billing.entitlements import EntitlementEvaluator, EntitlementKind
from tm_core.billing.models import Payment, Subscription, SubscriptionPlan
from tm_core.billing.selectors import (
    get_active_subscription,
    get_payment,
    list_active_plans,
    list_credit_payments,
    list_payments,
    list_subscriptions,
)
from tm_core.billing.services import OrderService, PaymentVerificationService, SubscriptionService
from tm_core.common.api.lookups import UUID_LOOKUP_REGEX
from tm_core.common.api.pagination import paginate
from tm_core.common.permissions import IsPatient
from tm_core.iam.auth import request_profile


def _order_response(payment: Payment, **extra) -> dict:
    return {
        "payment_id": payment.id,
        "gateway_order_id": payment.gateway_order_id,
        "amount": payment.amount,
        "currency": payment.currency,
        "key_id": settings.PAYMENT_GATEWAY.get("KEY_ID", ""),
        **extra,
    }


class SubscriptionPlanViewSet(viewsets.GenericViewSet):
    """
    Active plans (catalog).
    """
    permission_classes = [IsAuthenticated]
    serializer_class = SubscriptionPlanSerializer
    queryset = SubscriptionPlan.objects.none()
    pagination_class = None

    @extend_schema(tags=["Billing"], responses={200: SubscriptionPlanSerializer(many=True)})
    def list(self, request):
        return Response(SubscriptionPlanSerializer(list_active_plans(), many=True).data, status=status.HTTP_200_OK)


class SubscriptionViewSet(viewsets.GenericViewSet):
    """
    Caller's subscriptions:
    - list (history)
    - current (active, with plan) or null
    - cancel
    """
    permission_classes = [IsPatient]
    serializer_class = SubscriptionSerializer
    queryset = Subscription.objects.none()
    lookup_value_regex = UUID_LOOKUP_REGEX

    @extend_schema(tags=["Billing"], responses={200: SubscriptionSerializer(many=True)})
    def list(self, request):
        profile = request_profile(request)
        return paginate(request, list_subscriptions(patient_id=profile.id), SubscriptionSerializer)

    @extend_schema(tags=["Billing"], responses={200: SubscriptionSerializer})
    @action(detail=False, methods=["get"], url_path="current")
    def current(self, request):
        profile = request_profile(request)
        sub = get_active_subscription(patient_id=profile.id)
        data = SubscriptionSerializer(sub).data if sub else None
        return Response(data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Billing"], request=SubscriptionCancelSerializer, responses={200: SubscriptionSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        profile = request_profile(request)

        ser = SubscriptionCancelSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        sub = SubscriptionService.cancel(
            patient_id=profile.id,
            subscription_id=UUID(str(pk)),
            reason=ser.validated_data.get("reason", ""),
        )
        return Response(SubscriptionSerializer(sub).data, status=status.HTTP_200_OK)


class PaymentViewSet(viewsets.GenericViewSet):
    """
    Patient payments:
    - list/retrieve
    - orders/single, orders/subscription (gateway orders)
    - verify (signed checkout confirmation)
    - status, can-book (entitlement reads)
    """
    permission_classes = [IsPatient]
    serializer_class = PaymentSerializer
    queryset = Payment.objects.none()
    lookup_value_regex = UUID_LOOKUP_REGEX

    @extend_schema(
        tags=["Billing"],
        responses={200: PaymentSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="status", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        profile = request_profile(request)
        qs = list_payments(patient_id=profile.id, status=request.query_params.get("status") or None)
        return paginate(request, qs, PaymentSerializer)

    @extend_schema(tags=["Billing"], responses={200: PaymentSerializer})
    def retrieve(self, request, pk=None):
        profile = request_profile(request)
        payment = get_payment(patient_id=profile.id, payment_id=UUID(str(pk)))
        return Response(PaymentSerializer(payment).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Billing"], request=SingleOrderCreateSerializer, responses={201: OrderResponseSerializer})
    @action(detail=False, methods=["post"], url_path="orders/single")
    def single_order(self, request):
        profile = request_profile(request)

        ser = SingleOrderCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        payment = OrderService.create_single_order(
            patient_id=profile.id,
            amount=ser.validated_data["amount"],
            notes=ser.validated_data.get("notes", ""),
        )
        return Response(_order_response(payment), status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Billing"], request=SubscriptionOrderCreateSerializer, responses={201: OrderResponseSerializer})
    @action(detail=False, methods=["post"], url_path="orders/subscription")
    def subscription_order(self, request):
        profile = request_profile(request)

        ser = SubscriptionOrderCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        payment = OrderService.create_subscription_order(
            patient_id=profile.id,
            plan_id=ser.validated_data["plan_id"],
            notes=ser.validated_data.get("notes", ""),
        )
        return Response(
            _order_response(payment, plan_name=payment.subscription_plan.name),
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(tags=["Billing"], request=PaymentVerifySerializer, responses={200: VerificationResponseSerializer})
    @action(detail=False, methods=["post"], url_path="verify")
    def verify(self, request):
        profile = request_profile(request)

        ser = PaymentVerifySerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        v = ser.validated_data

        result = PaymentVerificationService.verify(
            patient_id=profile.id,
            payment_id=v["payment_id"],
            gateway_order_id=v["gateway_order_id"],
            gateway_payment_id=v["gateway_payment_id"],
            gateway_signature=v["gateway_signature"],
        )

        body = {
            "success": True,
            "payment_type": result.payment_type,
            "already_verified": result.already_verified,
        }
        if result.subscription is not None:
            body["subscription"] = SubscriptionSerializer(result.subscription).data
        else:
            body["remaining_appointments"] = result.remaining_appointments
        return Response(body, status=status.HTTP_200_OK)

    @extend_schema(tags=["Billing"], responses={200: PaymentStatusSerializer})
    @action(detail=False, methods=["get"], url_path="status")
    def payment_status(self, request):
        profile = request_profile(request)
        result = EntitlementEvaluator.evaluate(patient_id=profile.id)

        if result.kind == EntitlementKind.SUBSCRIPTION:
            sub = get_active_subscription(patient_id=profile.id)
            body = {
                "has_active_payment": True,
                "payment_type": EntitlementKind.SUBSCRIPTION.value,
                "remaining_appointments": None,  # unlimited
                "subscription": SubscriptionSerializer(sub).data if sub else None,
                "payments": [],
            }
        else:
            credit = list_credit_payments(patient_id=profile.id)
            body = {
                "has_active_payment": result.kind == EntitlementKind.SINGLE,
                "payment_type": EntitlementKind.SINGLE.value,
                "remaining_appointments": result.remaining or 0,
                "subscription": None,
                "payments": PaymentSerializer(credit, many=True).data,
            }
        return Response(body, status=status.HTTP_200_OK)

    @extend_schema(tags=["Billing"], responses={200: CanBookSerializer})
    @action(detail=False, methods=["get"], url_path="can-book")
    def can_book(self, request):
        profile = request_profile(request)
        result = EntitlementEvaluator.evaluate(patient_id=profile.id)

        return Response(
            {
                "can_book": result.can_book,
                "requires_payment": not result.can_book,
                "payment_type": result.kind.value,
                "remaining_appointments": None if result.unlimited else (result.remaining or 0),
                "message": result.message,
            },
            status=status.HTTP_200_OK,
        )
