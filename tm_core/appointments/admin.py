# tm_core/appointments/admin.py
from __future__ import annotations

from django.contrib import admin

from tm_core.appointments.models import Appointment


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "patient", "doctor", "date", "status", "severity", "payment")
    list_filter = ("status", "severity")
    search_fields = ("title", "patient__email", "doctor__email", "notes")
    autocomplete_fields = ("patient", "doctor")
    # Funding link is set only by the booking service.
    readonly_fields = ("payment",)
    ordering = ("-date",)
