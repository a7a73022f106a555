# tm_core/billing/services.py
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from tm_core.audit.services import AuditService
from tm_core.billing import gateway
from tm_core.billing.models import (
    Payment,
    PaymentStatus,
    PaymentType,
    Subscription,
    SubscriptionPlan,
    SubscriptionStatus,
)
from tm_core.common.api.exceptions import (
    ConflictError,
    InvalidSignature,
    PaymentRecordNotFound,
    PlanNotFound,
    SubscriptionNotFound,
)
from tm_core.iam.selectors import get_patient

logger = logging.getLogger(__name__)

MINOR_UNITS_PER_MAJOR = 100


@dataclass(frozen=True)
class VerificationResult:
    payment: Payment
    payment_type: str
    subscription: Subscription | None = None
    remaining_appointments: int | None = None
    already_verified: bool = False


def _currency() -> str:
    return settings.PAYMENT_GATEWAY.get("CURRENCY", "INR")


class OrderService:
    """
    Creates gateway orders and the matching pending Payment rows.
    The gateway call happens before any row is written: no order id, no Payment.
    """

    @staticmethod
    def create_single_order(*, patient_id: UUID, amount: int, notes: str = "") -> Payment:
        """
        `amount` is in major units (rupees); stored and sent in minor units.
        """
        patient = get_patient(patient_id=patient_id)
        if amount is None or int(amount) <= 0:
            raise ValidationError({"amount": "Amount must be > 0."})

        amount_minor = int(amount) * MINOR_UNITS_PER_MAJOR
        receipt = f"single_{str(uuid.uuid4())[:32]}"
        currency = _currency()

        order = gateway.get_gateway_client().create_order(
            amount=amount_minor,
            currency=currency,
            receipt=receipt,
            notes={"paymentType": PaymentType.SINGLE.value, "userId": str(patient.id), "notes": notes or ""},
        )

        return OrderService._record_pending(
            patient_id=patient.id,
            amount=amount_minor,
            currency=currency,
            payment_type=PaymentType.SINGLE,
            gateway_order_id=order.order_id,
            notes=notes,
        )

    @staticmethod
    def create_subscription_order(*, patient_id: UUID, plan_id: UUID, notes: str = "") -> Payment:
        patient = get_patient(patient_id=patient_id)
        plan = SubscriptionPlan.objects.filter(id=plan_id, is_active=True).first()
        if plan is None:
            raise PlanNotFound()

        receipt = f"subscription_{uuid.uuid4()}"
        currency = _currency()

        order = gateway.get_gateway_client().create_order(
            amount=plan.price,
            currency=currency,
            receipt=receipt,
            notes={
                "paymentType": PaymentType.SUBSCRIPTION.value,
                "userId": str(patient.id),
                "planId": str(plan.id),
                "notes": notes or "",
            },
        )

        return OrderService._record_pending(
            patient_id=patient.id,
            amount=plan.price,
            currency=currency,
            payment_type=PaymentType.SUBSCRIPTION,
            gateway_order_id=order.order_id,
            notes=notes,
            subscription_plan=plan,
        )

    @staticmethod
    @transaction.atomic
    def _record_pending(
        *,
        patient_id: UUID,
        amount: int,
        currency: str,
        payment_type: str,
        gateway_order_id: str,
        notes: str = "",
        subscription_plan: SubscriptionPlan | None = None,
    ) -> Payment:
        payment = Payment.objects.create(
            patient_id=patient_id,
            amount=amount,
            currency=currency,
            payment_type=payment_type,
            status=PaymentStatus.PENDING,
            gateway_order_id=gateway_order_id,
            subscription_plan=subscription_plan,
            notes=notes or "",
        )

        AuditService.log(
            event_code="payment.order_created",
            entity_type="Payment",
            entity_id=payment.id,
            actor_profile_id=patient_id,
            metadata={
                "payment_type": payment_type,
                "amount": amount,
                "gateway_order_id": gateway_order_id,
                "subscription_plan_id": str(subscription_plan.id) if subscription_plan else None,
            },
        )
        logger.info(
            "Payment order recorded payment_id=%s type=%s order_id=%s amount=%s",
            payment.id,
            payment_type,
            gateway_order_id,
            amount,
        )
        return payment


class PaymentVerificationService:
    """
    The only code path that grants entitlement.
    """

    @staticmethod
    def verify(
        *,
        patient_id: UUID,
        payment_id: UUID,
        gateway_order_id: str,
        gateway_payment_id: str,
        gateway_signature: str,
    ) -> VerificationResult:
        secret = settings.PAYMENT_GATEWAY.get("KEY_SECRET", "")
        if not gateway.verify_signature(
            secret=secret,
            order_id=gateway_order_id,
            payment_id=gateway_payment_id,
            signature=gateway_signature,
        ):
            logger.warning(
                "Payment signature mismatch payment_id=%s order_id=%s patient_id=%s",
                payment_id,
                gateway_order_id,
                patient_id,
            )
            raise InvalidSignature()

        return PaymentVerificationService._complete(
            patient_id=patient_id,
            payment_id=payment_id,
            gateway_order_id=gateway_order_id,
            gateway_payment_id=gateway_payment_id,
            gateway_signature=gateway_signature,
        )

    @staticmethod
    @transaction.atomic
    def _complete(
        *,
        patient_id: UUID,
        payment_id: UUID,
        gateway_order_id: str,
        gateway_payment_id: str,
        gateway_signature: str,
    ) -> VerificationResult:
        payment = (
            Payment.objects.select_for_update()
            .filter(id=payment_id, patient_id=patient_id, gateway_order_id=gateway_order_id)
            .first()
        )
        if payment is None:
            raise PaymentRecordNotFound()

        if payment.status == PaymentStatus.COMPLETED:
            # Re-delivered confirmation: report the grant that already exists.
            logger.info("Payment already verified payment_id=%s", payment.id)
            return PaymentVerificationService._result_for(payment, already_verified=True)

        if payment.status != PaymentStatus.PENDING:
            raise ConflictError(f"Payment is {payment.status} and cannot be verified.")

        now = timezone.now()
        payment.status = PaymentStatus.COMPLETED
        payment.gateway_payment_id = gateway_payment_id
        payment.gateway_signature = gateway_signature
        payment.completed_at = now

        if payment.payment_type == PaymentType.SUBSCRIPTION:
            plan = payment.subscription_plan
            if plan is None:
                raise PlanNotFound()

            subscription = Subscription.objects.create(
                patient_id=patient_id,
                plan=plan,
                status=SubscriptionStatus.ACTIVE,
                start_date=now,
                end_date=now + timedelta(days=plan.duration_days),
            )
            payment.subscription = subscription

            AuditService.log(
                event_code="subscription.created",
                entity_type="Subscription",
                entity_id=subscription.id,
                actor_profile_id=patient_id,
                metadata={"plan_id": str(plan.id), "end_date": subscription.end_date.isoformat()},
            )

        payment.save(
            update_fields=[
                "status",
                "gateway_payment_id",
                "gateway_signature",
                "completed_at",
                "subscription",
                "updated_at",
            ]
        )

        AuditService.log(
            event_code="payment.verified",
            entity_type="Payment",
            entity_id=payment.id,
            actor_profile_id=patient_id,
            metadata={"payment_type": payment.payment_type, "gateway_payment_id": gateway_payment_id},
        )
        logger.info("Payment verified payment_id=%s type=%s", payment.id, payment.payment_type)
        return PaymentVerificationService._result_for(payment)

    @staticmethod
    def _result_for(payment: Payment, *, already_verified: bool = False) -> VerificationResult:
        if payment.payment_type == PaymentType.SUBSCRIPTION:
            return VerificationResult(
                payment=payment,
                payment_type=payment.payment_type,
                subscription=payment.subscription,
                already_verified=already_verified,
            )
        return VerificationResult(
            payment=payment,
            payment_type=payment.payment_type,
            remaining_appointments=payment.remaining_appointments,
            already_verified=already_verified,
        )


class SubscriptionService:
    @staticmethod
    @transaction.atomic
    def cancel(*, patient_id: UUID, subscription_id: UUID, reason: str = "") -> Subscription:
        sub = Subscription.objects.select_for_update().filter(id=subscription_id, patient_id=patient_id).first()
        if sub is None:
            raise SubscriptionNotFound()

        if sub.status != SubscriptionStatus.ACTIVE:
            raise ConflictError("Only active subscriptions can be canceled.")

        sub.status = SubscriptionStatus.CANCELED
        sub.canceled_at = timezone.now()
        sub.cancel_reason = reason or ""
        sub.auto_renew = False
        sub.save(update_fields=["status", "canceled_at", "cancel_reason", "auto_renew", "updated_at"])

        AuditService.log(
            event_code="subscription.canceled",
            entity_type="Subscription",
            entity_id=sub.id,
            actor_profile_id=patient_id,
            metadata={"reason": sub.cancel_reason},
        )
        logger.info("Subscription canceled subscription_id=%s patient_id=%s", sub.id, patient_id)
        return sub

    @staticmethod
    @transaction.atomic
    def expire_lapsed(*, now: datetime | None = None) -> int:
        """
        Active subscriptions past end_date -> expired. Returns how many changed.
        Lapsed rows already grant nothing; this only keeps status truthful.
        """
        now = now or timezone.now()
        lapsed_ids = list(
            Subscription.objects.select_for_update()
            .filter(status=SubscriptionStatus.ACTIVE, end_date__lt=now)
            .values_list("id", flat=True)
        )
        if not lapsed_ids:
            return 0

        updated = Subscription.objects.filter(id__in=lapsed_ids, status=SubscriptionStatus.ACTIVE).update(
            status=SubscriptionStatus.EXPIRED,
            updated_at=now,
        )

        for sub_id in lapsed_ids:
            AuditService.log(
                event_code="subscription.expired",
                entity_type="Subscription",
                entity_id=sub_id,
                actor_profile_id=None,
                metadata={"expired_at": now.isoformat()},
            )
        logger.info("Expired %s lapsed subscription(s)", updated)
        return updated
