# tm_core/chat/models.py
from __future__ import annotations

from django.db import models

from tm_core.appointments.models import Appointment
from tm_core.common.models import UUIDModel
from tm_core.iam.models import UserProfile


class MessageType(models.TextChoices):
    TEXT = "text", "Text"
    IMAGE = "image", "Image"
    DOCUMENT = "document", "Document"
    EMOJI = "emoji", "Emoji"


class ChatRoom(UUIDModel):
    """
    One room per appointment, created in the booking transaction.
    """
    appointment = models.OneToOneField(Appointment, on_delete=models.CASCADE, related_name="chat_room")
    patient = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name="patient_chat_rooms")
    doctor = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name="doctor_chat_rooms")
    video_room_id = models.CharField(max_length=128, blank=True, default="", db_index=True)

    class Meta:
        db_table = "chat_room"

    def has_participant(self, profile_id) -> bool:
        return profile_id in (self.patient_id, self.doctor_id)


class ChatMessage(UUIDModel):
    room = models.ForeignKey(ChatRoom, on_delete=models.CASCADE, related_name="messages")
    sender = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name="chat_messages")

    content = models.TextField(blank=True, default="")
    type = models.CharField(max_length=16, choices=MessageType.choices, default=MessageType.TEXT)
    file_url = models.URLField(max_length=1024, blank=True, default="")

    class Meta:
        db_table = "chat_message"
        indexes = [
            models.Index(fields=["room", "created_at"], name="chat_message_room_time_idx"),
        ]
