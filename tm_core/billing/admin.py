# tm_core/billing/admin.py
from __future__ import annotations

from django.contrib import admin

from tm_core.billing.models import Payment, Subscription, SubscriptionPlan


@admin.register(SubscriptionPlan)
class SubscriptionPlanAdmin(admin.ModelAdmin):
    list_display = ("name", "duration_days", "price", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name",)
    ordering = ("price",)


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ("id", "patient", "plan", "status", "start_date", "end_date", "auto_renew")
    list_filter = ("status", "plan")
    search_fields = ("patient__email", "patient__first_name", "patient__last_name")
    autocomplete_fields = ("patient",)
    ordering = ("-start_date",)


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "patient",
        "payment_type",
        "status",
        "amount",
        "remaining_appointments",
        "gateway_order_id",
        "created_at",
    )
    list_filter = ("payment_type", "status", "payment_method")
    search_fields = ("gateway_order_id", "gateway_payment_id", "patient__email")
    autocomplete_fields = ("patient",)
    # Credit and gateway fields change only through booking / verification services.
    readonly_fields = ("remaining_appointments", "gateway_order_id", "gateway_payment_id", "gateway_signature")
    ordering = ("-created_at",)
