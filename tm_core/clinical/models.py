# tm_core/clinical/models.py
from __future__ import annotations

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from tm_core.appointments.models import Appointment
from tm_core.common.models import UUIDModel
from tm_core.iam.models import UserProfile


class MedicalRecord(UUIDModel):
    """
    Diagnosis written by a doctor, optionally tied to the appointment it came out of.
    """
    patient = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name="medical_records")
    doctor = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name="authored_medical_records")
    appointment = models.ForeignKey(
        Appointment,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="medical_records",
    )

    diagnosis = models.TextField()
    treatment = models.TextField()
    notes = models.TextField(blank=True, default="")
    record_date = models.DateTimeField()

    class Meta:
        db_table = "clinical_medical_record"
        indexes = [
            models.Index(fields=["patient", "record_date"], name="clin_record_patient_date_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.diagnosis[:40]} ({self.record_date:%Y-%m-%d})"


class Prescription(UUIDModel):
    medical_record = models.ForeignKey(MedicalRecord, on_delete=models.CASCADE, related_name="prescriptions")

    medication = models.CharField(max_length=255)
    dosage = models.CharField(max_length=255)
    instructions = models.TextField(blank=True, default="")
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()

    class Meta:
        db_table = "clinical_prescription"
        indexes = [
            models.Index(fields=["medical_record", "start_date"], name="clin_rx_record_start_idx"),
        ]


class AiAnalysis(UUIDModel):
    """
    Symptom triage produced before booking; surfaced on the doctor dashboard.
    """
    patient = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name="ai_analyses")

    symptoms = models.TextField()
    severity_score = models.PositiveSmallIntegerField(validators=[MinValueValidator(0), MaxValueValidator(10)])
    disease_summary = models.TextField()
    suggested_medications = models.TextField()
    additional_notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "clinical_ai_analysis"
        verbose_name_plural = "AI analyses"
        indexes = [
            models.Index(fields=["patient", "created_at"], name="clin_ai_patient_time_idx"),
        ]
