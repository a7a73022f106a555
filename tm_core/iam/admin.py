# tm_core/iam/admin.py
from __future__ import annotations

from django.contrib import admin

from tm_core.iam.models import UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "email", "first_name", "last_name", "role", "specialization", "created_at")
    list_filter = ("role", "specialization")
    search_fields = ("email", "first_name", "last_name", "external_id", "user__username")
    autocomplete_fields = ("user",)
    readonly_fields = ("external_id",)
    ordering = ("-created_at",)
