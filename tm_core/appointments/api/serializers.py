# tm_core/appointments/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from tm_core.appointments.models import Appointment, AppointmentStatus, Severity


class AppointmentCreateSerializer(serializers.Serializer):
    doctor_id = serializers.UUIDField()
    date = serializers.DateTimeField()
    title = serializers.CharField(max_length=255, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    severity = serializers.ChoiceField(choices=Severity.choices, required=False)
    payment_id = serializers.UUIDField(required=False, allow_null=True)


class AppointmentUpdateSerializer(serializers.Serializer):
    """
    Partial update contract (PATCH).
    """
    date = serializers.DateTimeField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=AppointmentStatus.choices, required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class AppointmentSerializer(serializers.ModelSerializer):
    doctor_name = serializers.SerializerMethodField()
    specialization_id = serializers.UUIDField(source="doctor.specialization_id", read_only=True, allow_null=True)
    specialization_name = serializers.SerializerMethodField()
    chat_room_id = serializers.SerializerMethodField()

    class Meta:
        model = Appointment
        fields = [
            "id",
            "title",
            "patient_id",
            "doctor_id",
            "doctor_name",
            "specialization_id",
            "specialization_name",
            "payment_id",
            "date",
            "status",
            "severity",
            "notes",
            "ai_summary",
            "chat_room_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_doctor_name(self, obj) -> str:
        return obj.doctor.full_name

    def get_specialization_name(self, obj) -> str | None:
        specialization = obj.doctor.specialization
        return specialization.name if specialization else None

    def get_chat_room_id(self, obj) -> str | None:
        room = getattr(obj, "chat_room", None)
        return str(room.id) if room else None
