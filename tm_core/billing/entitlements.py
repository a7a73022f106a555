# tm_core/billing/entitlements.py
"""
Entitlement evaluation: may this patient book right now, and on what basis?

Variants are checked in ENTITLEMENT_PRIORITY order and the first match wins:
  - subscription: an active subscription whose end_date has not passed (unlimited)
  - single: completed single payments with remaining credit (sum of remaining)
Otherwise the patient has no entitlement.

Pure read. Nothing here is cached; callers that decide on the result inside a
transaction must evaluate inside that transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional
from uuid import UUID

from django.db.models import Sum
from django.utils import timezone

from tm_core.billing.models import Payment, PaymentStatus, PaymentType, Subscription, SubscriptionStatus
from tm_core.common.api.exceptions import EntitlementExhausted


class EntitlementKind(str, Enum):
    SUBSCRIPTION = "subscription"
    SINGLE = "single"
    NONE = "none"


ENTITLEMENT_PRIORITY: tuple[EntitlementKind, ...] = (EntitlementKind.SUBSCRIPTION, EntitlementKind.SINGLE)


@dataclass(frozen=True)
class EntitlementResult:
    kind: EntitlementKind
    remaining: int | None = None
    subscription_id: UUID | None = None
    subscription_end_date: datetime | None = None
    has_paid: bool = False

    @property
    def unlimited(self) -> bool:
        return self.kind == EntitlementKind.SUBSCRIPTION

    @property
    def can_book(self) -> bool:
        return self.kind != EntitlementKind.NONE

    @property
    def exhausted_reason(self) -> str:
        return EntitlementExhausted.CREDITS_USED if self.has_paid else EntitlementExhausted.NO_PAYMENT

    @property
    def message(self) -> str:
        if self.kind == EntitlementKind.SUBSCRIPTION:
            return "You have an active subscription"
        if self.kind == EntitlementKind.SINGLE:
            return f"You can book {self.remaining} more appointment(s)"
        return "You need to make a payment to book an appointment"


def active_subscriptions(*, patient_id: UUID, now: datetime):
    return Subscription.objects.filter(
        patient_id=patient_id,
        status=SubscriptionStatus.ACTIVE,
        end_date__gte=now,
    )


def single_credit_payments(*, patient_id: UUID):
    return Payment.objects.filter(
        patient_id=patient_id,
        payment_type=PaymentType.SINGLE,
        status=PaymentStatus.COMPLETED,
        remaining_appointments__gt=0,
    )


def _subscription_variant(patient_id: UUID, now: datetime) -> Optional[EntitlementResult]:
    sub = active_subscriptions(patient_id=patient_id, now=now).order_by("-end_date").first()
    if sub is None:
        return None
    return EntitlementResult(
        kind=EntitlementKind.SUBSCRIPTION,
        subscription_id=sub.id,
        subscription_end_date=sub.end_date,
        has_paid=True,
    )


def _single_variant(patient_id: UUID, now: datetime) -> Optional[EntitlementResult]:
    total = single_credit_payments(patient_id=patient_id).aggregate(total=Sum("remaining_appointments"))["total"] or 0
    if total <= 0:
        return None
    return EntitlementResult(kind=EntitlementKind.SINGLE, remaining=int(total), has_paid=True)


_VARIANT_LOOKUPS: dict[EntitlementKind, Callable[[UUID, datetime], Optional[EntitlementResult]]] = {
    EntitlementKind.SUBSCRIPTION: _subscription_variant,
    EntitlementKind.SINGLE: _single_variant,
}


class EntitlementEvaluator:
    @staticmethod
    def evaluate(*, patient_id: UUID, now: datetime | None = None) -> EntitlementResult:
        now = now or timezone.now()

        for kind in ENTITLEMENT_PRIORITY:
            result = _VARIANT_LOOKUPS[kind](patient_id, now)
            if result is not None:
                return result

        has_paid = Payment.objects.filter(patient_id=patient_id, status=PaymentStatus.COMPLETED).exists()
        return EntitlementResult(kind=EntitlementKind.NONE, remaining=0, has_paid=has_paid)
