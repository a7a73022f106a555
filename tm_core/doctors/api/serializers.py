# tm_core/doctors/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from tm_core.appointments.models import Appointment
from tm_core.doctors.models import Specialization
from tm_core.iam.models import UserProfile


class SpecializationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Specialization
        fields = ["id", "name", "description", "created_at"]
        read_only_fields = ["id", "created_at"]


class SpecializationCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")


class DoctorSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    specialization_name = serializers.SerializerMethodField()

    class Meta:
        model = UserProfile
        fields = [
            "id",
            "first_name",
            "last_name",
            "full_name",
            "image_url",
            "gender",
            "specialization_id",
            "specialization_name",
        ]
        read_only_fields = fields

    def get_specialization_name(self, obj) -> str | None:
        return obj.specialization.name if obj.specialization else None


class DoctorAppointmentSerializer(serializers.ModelSerializer):
    patient_name = serializers.CharField(source="patient.full_name", read_only=True)

    class Meta:
        model = Appointment
        fields = ["id", "title", "patient_id", "patient_name", "date", "status", "severity", "notes", "ai_summary"]
        read_only_fields = fields
