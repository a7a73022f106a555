# tm_core/doctors/admin.py
from __future__ import annotations

from django.contrib import admin

from tm_core.doctors.models import Specialization


@admin.register(Specialization)
class SpecializationAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "created_at")
    search_fields = ("name",)
    ordering = ("name",)
