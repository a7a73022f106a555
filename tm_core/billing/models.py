# tm_core/billing/models.py
from __future__ import annotations

from django.db import models
from django.utils import timezone

from tm_core.common.models import UUIDModel
from tm_core.iam.models import UserProfile


class SubscriptionStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    CANCELED = "canceled", "Canceled"
    EXPIRED = "expired", "Expired"
    TRIAL = "trial", "Trial"


class PaymentType(models.TextChoices):
    SINGLE = "single", "Single appointment"
    SUBSCRIPTION = "subscription", "Subscription"


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"
    REFUNDED = "refunded", "Refunded"


class SubscriptionPlan(UUIDModel):
    """
    Sellable plan: unlimited bookings for `duration_days` after payment.
    `price` is in minor units (paise).
    """
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    duration_days = models.PositiveIntegerField()  # 7, 30, 90, 180
    price = models.PositiveIntegerField()
    features = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = "billing_subscription_plan"
        ordering = ["price"]

    def __str__(self) -> str:
        return f"{self.name} ({self.duration_days}d)"


class Subscription(UUIDModel):
    """
    Grants entitlement while status=active and end_date >= now.
    Rows are never deleted by services; they move to canceled/expired.
    """
    patient = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name="subscriptions")
    plan = models.ForeignKey(SubscriptionPlan, on_delete=models.PROTECT, related_name="subscriptions")

    status = models.CharField(
        max_length=16,
        choices=SubscriptionStatus.choices,
        default=SubscriptionStatus.ACTIVE,
        db_index=True,
    )
    start_date = models.DateTimeField(default=timezone.now)
    end_date = models.DateTimeField(db_index=True)
    auto_renew = models.BooleanField(default=True)

    canceled_at = models.DateTimeField(null=True, blank=True)
    cancel_reason = models.TextField(blank=True, default="")

    class Meta:
        db_table = "billing_subscription"
        indexes = [
            models.Index(fields=["patient", "status", "end_date"], name="billing_sub_entitlement_idx"),
        ]

    def provides_entitlement(self, *, now=None) -> bool:
        now = now or timezone.now()
        return self.status == SubscriptionStatus.ACTIVE and self.end_date >= now


class Payment(UUIDModel):
    """
    One gateway order. Amount in minor units.
    Completed single payments carry appointment credit in `remaining_appointments`;
    the counter is only ever decremented by a guarded UPDATE in the booking service.
    """
    patient = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name="payments")

    amount = models.PositiveIntegerField()
    currency = models.CharField(max_length=8, default="INR")
    payment_method = models.CharField(max_length=32, default="razorpay")
    payment_type = models.CharField(max_length=16, choices=PaymentType.choices, db_index=True)
    status = models.CharField(
        max_length=16,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        db_index=True,
    )

    gateway_order_id = models.CharField(max_length=64, unique=True)
    gateway_payment_id = models.CharField(max_length=64, blank=True, default="")
    gateway_signature = models.CharField(max_length=256, blank=True, default="")

    subscription_plan = models.ForeignKey(
        SubscriptionPlan,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
    )
    subscription = models.ForeignKey(
        Subscription,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments",
    )

    notes = models.TextField(blank=True, default="")
    remaining_appointments = models.IntegerField(default=1)

    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "billing_payment"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(remaining_appointments__gte=0),
                name="ck_payment_remaining_appointments_gte_0",
            ),
        ]
        indexes = [
            models.Index(fields=["patient", "payment_type", "status"], name="billing_payment_credit_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.payment_type} {self.gateway_order_id} ({self.status})"
