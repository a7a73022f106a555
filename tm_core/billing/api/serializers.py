# tm_core/billing/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from tm_core.billing.models import Payment, Subscription, SubscriptionPlan


class SubscriptionPlanSerializer(serializers.ModelSerializer):
    class Meta:
        model = SubscriptionPlan
        fields = ["id", "name", "description", "duration_days", "price", "features", "is_active"]
        read_only_fields = fields


class SubscriptionSerializer(serializers.ModelSerializer):
    plan = SubscriptionPlanSerializer(read_only=True)

    class Meta:
        model = Subscription
        fields = [
            "id",
            "plan",
            "status",
            "start_date",
            "end_date",
            "auto_renew",
            "canceled_at",
            "cancel_reason",
            "created_at",
        ]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = [
            "id",
            "amount",
            "currency",
            "payment_method",
            "payment_type",
            "status",
            "gateway_order_id",
            "gateway_payment_id",
            "subscription_plan_id",
            "subscription_id",
            "notes",
            "remaining_appointments",
            "completed_at",
            "created_at",
        ]
        read_only_fields = fields


class SingleOrderCreateSerializer(serializers.Serializer):
    amount = serializers.IntegerField(min_value=1, help_text="Major units (e.g. rupees).")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class SubscriptionOrderCreateSerializer(serializers.Serializer):
    plan_id = serializers.UUIDField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class OrderResponseSerializer(serializers.Serializer):
    payment_id = serializers.UUIDField()
    gateway_order_id = serializers.CharField()
    amount = serializers.IntegerField(help_text="Minor units (e.g. paise).")
    currency = serializers.CharField()
    key_id = serializers.CharField()
    plan_name = serializers.CharField(required=False)


class PaymentVerifySerializer(serializers.Serializer):
    payment_id = serializers.UUIDField()
    gateway_order_id = serializers.CharField(max_length=64)
    gateway_payment_id = serializers.CharField(max_length=64)
    gateway_signature = serializers.CharField(max_length=256)


class VerificationResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    payment_type = serializers.CharField()
    already_verified = serializers.BooleanField()
    subscription = SubscriptionSerializer(allow_null=True, required=False)
    remaining_appointments = serializers.IntegerField(allow_null=True, required=False)


class SubscriptionCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class CanBookSerializer(serializers.Serializer):
    can_book = serializers.BooleanField()
    requires_payment = serializers.BooleanField()
    payment_type = serializers.CharField()
    remaining_appointments = serializers.IntegerField(allow_null=True)
    message = serializers.CharField()


class PaymentStatusSerializer(serializers.Serializer):
    has_active_payment = serializers.BooleanField()
    payment_type = serializers.CharField()
    remaining_appointments = serializers.IntegerField(allow_null=True)
    subscription = SubscriptionSerializer(allow_null=True)
    payments = PaymentSerializer(many=True)
