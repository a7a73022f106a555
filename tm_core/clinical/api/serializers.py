# tm_core/clinical/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from tm_core.clinical.models import AiAnalysis, MedicalRecord, Prescription


class MedicalRecordSerializer(serializers.ModelSerializer):
    doctor_name = serializers.CharField(source="doctor.full_name", read_only=True)

    class Meta:
        model = MedicalRecord
        fields = ["id", "doctor_id", "doctor_name", "appointment_id", "diagnosis", "treatment", "notes", "record_date"]
        read_only_fields = fields


class PrescriptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Prescription
        fields = ["id", "medical_record_id", "medication", "dosage", "instructions", "start_date", "end_date"]
        read_only_fields = fields


class AiAnalysisSummarySerializer(serializers.ModelSerializer):
    patient_name = serializers.CharField(source="patient.full_name", read_only=True)

    class Meta:
        model = AiAnalysis
        fields = [
            "id",
            "patient_id",
            "patient_name",
            "symptoms",
            "severity_score",
            "disease_summary",
            "suggested_medications",
            "created_at",
        ]
        read_only_fields = fields
