# tm_core/billing/selectors.py
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from django.db.models import QuerySet
from django.utils import timezone

from tm_core.billing.entitlements import active_subscriptions, single_credit_payments
from tm_core.billing.models import Payment, Subscription, SubscriptionPlan
from tm_core.common.api.exceptions import PaymentRecordNotFound


def list_active_plans() -> QuerySet[SubscriptionPlan]:
    return SubscriptionPlan.objects.filter(is_active=True).order_by("price")


def get_active_subscription(*, patient_id: UUID, now: datetime | None = None) -> Subscription | None:
    now = now or timezone.now()
    return (
        active_subscriptions(patient_id=patient_id, now=now)
        .select_related("plan")
        .order_by("-end_date")
        .first()
    )


def list_subscriptions(*, patient_id: UUID) -> QuerySet[Subscription]:
    return Subscription.objects.select_related("plan").filter(patient_id=patient_id).order_by("-start_date")


def list_payments(*, patient_id: UUID, status: str | None = None) -> QuerySet[Payment]:
    qs = Payment.objects.select_related("subscription_plan").filter(patient_id=patient_id)
    if status:
        qs = qs.filter(status=status)
    return qs.order_by("-created_at")


def get_payment(*, patient_id: UUID, payment_id: UUID) -> Payment:
    payment = Payment.objects.filter(id=payment_id, patient_id=patient_id).first()
    if payment is None:
        raise PaymentRecordNotFound()
    return payment


def list_credit_payments(*, patient_id: UUID) -> QuerySet[Payment]:
    """
    Completed single payments that still fund bookings, oldest first.
    """
    return single_credit_payments(patient_id=patient_id).order_by("created_at", "id")
