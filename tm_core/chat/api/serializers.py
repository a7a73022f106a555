# tm_core/chat/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from tm_core.chat.models import ChatMessage, ChatRoom, MessageType
from tm_core.chat.services import PRESENCE_STATUSES, VideoService


class ChatRoomSerializer(serializers.ModelSerializer):
    appointment_date = serializers.DateTimeField(source="appointment.date", read_only=True)
    appointment_title = serializers.CharField(source="appointment.title", read_only=True)
    appointment_status = serializers.CharField(source="appointment.status", read_only=True)
    patient_name = serializers.CharField(source="patient.full_name", read_only=True)
    doctor_name = serializers.CharField(source="doctor.full_name", read_only=True)
    counterpart_name = serializers.SerializerMethodField()

    class Meta:
        model = ChatRoom
        fields = [
            "id",
            "appointment_id",
            "appointment_date",
            "appointment_title",
            "appointment_status",
            "patient_id",
            "patient_name",
            "doctor_id",
            "doctor_name",
            "counterpart_name",
            "created_at",
        ]
        read_only_fields = fields

    def get_counterpart_name(self, obj) -> str:
        profile_id = self.context.get("profile_id")
        if profile_id == obj.patient_id:
            return obj.doctor.full_name
        return obj.patient.full_name


class ChatMessageSerializer(serializers.ModelSerializer):
    sender_name = serializers.CharField(source="sender.full_name", read_only=True)
    sender_image = serializers.CharField(source="sender.image_url", read_only=True)

    class Meta:
        model = ChatMessage
        fields = [
            "id",
            "room_id",
            "sender_id",
            "sender_name",
            "sender_image",
            "content",
            "type",
            "file_url",
            "created_at",
        ]
        read_only_fields = fields


class ChatMessageCreateSerializer(serializers.Serializer):
    content = serializers.CharField(required=False, allow_blank=True, default="")
    type = serializers.ChoiceField(choices=MessageType.choices, default=MessageType.TEXT)
    file_url = serializers.URLField(max_length=1024, required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if not attrs.get("content") and not attrs.get("file_url"):
            raise serializers.ValidationError("Message needs content or a file_url.")
        return attrs


class PresenceSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[(s, s) for s in PRESENCE_STATUSES])


class VideoRoomCreateSerializer(serializers.Serializer):
    appointment_id = serializers.UUIDField()


class VideoRoomSerializer(serializers.Serializer):
    room_id = serializers.CharField()
    room_name = serializers.CharField()


class VideoTokenRequestSerializer(serializers.Serializer):
    room_id = serializers.CharField(max_length=128)
    role = serializers.ChoiceField(choices=[(r, r) for r in VideoService.ROLES], default=VideoService.ROLE_HOST)


class VideoTokenSerializer(serializers.Serializer):
    token = serializers.CharField()


class UploadRequestSerializer(serializers.Serializer):
    file = serializers.CharField(required=False, allow_blank=True, help_text="Base64 data URI.")


class UploadResponseSerializer(serializers.Serializer):
    file_url = serializers.URLField()
