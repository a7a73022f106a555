# tm_core/clinical/admin.py
from __future__ import annotations

from django.contrib import admin

from tm_core.clinical.models import AiAnalysis, MedicalRecord, Prescription


class PrescriptionInline(admin.TabularInline):
    model = Prescription
    extra = 0


@admin.register(MedicalRecord)
class MedicalRecordAdmin(admin.ModelAdmin):
    list_display = ("id", "patient", "doctor", "diagnosis", "record_date")
    search_fields = ("diagnosis", "treatment", "patient__email", "doctor__email")
    autocomplete_fields = ("patient", "doctor")
    raw_id_fields = ("appointment",)
    inlines = [PrescriptionInline]
    ordering = ("-record_date",)


@admin.register(AiAnalysis)
class AiAnalysisAdmin(admin.ModelAdmin):
    list_display = ("id", "patient", "severity_score", "created_at")
    list_filter = ("severity_score",)
    search_fields = ("symptoms", "disease_summary", "patient__email")
    autocomplete_fields = ("patient",)
    ordering = ("-created_at",)
