# tm_core/appointments/filters.py
from __future__ import annotations

import django_filters

from tm_core.appointments.models import Appointment, AppointmentStatus, Severity


class AppointmentFilter(django_filters.FilterSet):
    status = django_filters.MultipleChoiceFilter(choices=AppointmentStatus.choices)
    severity = django_filters.ChoiceFilter(choices=Severity.choices)
    doctor = django_filters.UUIDFilter(field_name="doctor_id")
    date_from = django_filters.IsoDateTimeFilter(field_name="date", lookup_expr="gte")
    date_to = django_filters.IsoDateTimeFilter(field_name="date", lookup_expr="lte")

    class Meta:
        model = Appointment
        fields = ["status", "severity", "doctor", "date_from", "date_to"]
