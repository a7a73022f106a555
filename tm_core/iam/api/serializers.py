# tm_core/iam/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from tm_core.iam.models import UserProfile


class SpecializationMiniSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()


class ProfileSerializer(serializers.ModelSerializer):
    specialization = SpecializationMiniSerializer(allow_null=True, read_only=True)

    class Meta:
        model = UserProfile
        fields = [
            "id",
            "role",
            "first_name",
            "last_name",
            "email",
            "phone",
            "image_url",
            "dob",
            "gender",
            "specialization",
            "blood_type",
            "insurance_info",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProfileUpdateSerializer(serializers.Serializer):
    """
    Partial update contract (PATCH /me/).
    """
    role = serializers.ChoiceField(choices=UserProfile.Role.choices, required=False)
    specialization_id = serializers.UUIDField(required=False)
    first_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    dob = serializers.DateField(required=False)
    gender = serializers.ChoiceField(choices=UserProfile.Gender.choices, required=False)
    blood_type = serializers.ChoiceField(choices=UserProfile.BloodType.choices, required=False)
    insurance_info = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class WebhookAckSerializer(serializers.Serializer):
    received = serializers.BooleanField()
    event_type = serializers.CharField()
