# tm_core/chat/services.py
from __future__ import annotations

import logging
from uuid import UUID

from django.db import transaction
from django.db.models import Q
from rest_framework.exceptions import ValidationError

from tm_core.appointments.models import Appointment
from tm_core.chat import clients
from tm_core.chat.clients import VideoRoom
from tm_core.chat.models import ChatMessage, ChatRoom, MessageType
from tm_core.chat.selectors import get_room_for_participant, get_room_for_video_participant
from tm_core.common.api.exceptions import AppointmentNotFound, ProviderUnavailable

logger = logging.getLogger(__name__)

CHAT_EVENT_NEW_MESSAGE = "new-message"
PRESENCE_EVENT_USER_STATUS = "user-status"

PRESENCE_ONLINE = "online"
PRESENCE_OFFLINE = "offline"
PRESENCE_STATUSES = (PRESENCE_ONLINE, PRESENCE_OFFLINE)


def room_channel(room_id) -> str:
    return f"chat-room-{room_id}"


def presence_channel(profile_id) -> str:
    return f"presence-{profile_id}"


def message_payload(message: ChatMessage) -> dict:
    sender = message.sender
    return {
        "id": str(message.id),
        "room_id": str(message.room_id),
        "sender_id": str(message.sender_id),
        "sender_name": sender.full_name,
        "sender_image": sender.image_url or None,
        "content": message.content,
        "type": message.type,
        "file_url": message.file_url or None,
        "created_at": message.created_at.isoformat(),
    }


class ChatService:
    @staticmethod
    def send_message(
        *,
        room_id: UUID,
        sender_id: UUID,
        content: str = "",
        message_type: str = MessageType.TEXT,
        file_url: str = "",
    ) -> ChatMessage:
        """
        Stores the message, then fans it out on the room channel.
        A failed publish is logged and not raised: the row is already stored
        and clients pick it up on their next history fetch.
        """
        room = get_room_for_participant(room_id=room_id, profile_id=sender_id)

        with transaction.atomic():
            message = ChatMessage.objects.create(
                room=room,
                sender_id=sender_id,
                content=content or "",
                type=message_type,
                file_url=file_url or "",
            )

        message = ChatMessage.objects.select_related("sender").get(id=message.id)

        try:
            clients.get_realtime_bus().trigger(
                channel=room_channel(room.id),
                event=CHAT_EVENT_NEW_MESSAGE,
                data=message_payload(message),
            )
        except ProviderUnavailable:
            logger.warning("Chat message stored but not published message_id=%s room_id=%s", message.id, room.id)

        return message

    @staticmethod
    def update_presence(*, profile_id: UUID, status: str) -> None:
        if status not in PRESENCE_STATUSES:
            raise ValidationError({"status": [f"Must be one of: {', '.join(PRESENCE_STATUSES)}."]})

        clients.get_realtime_bus().trigger(
            channel=presence_channel(profile_id),
            event=PRESENCE_EVENT_USER_STATUS,
            data={"user_id": str(profile_id), "status": status},
        )


class VideoService:
    ROLE_HOST = "host"
    ROLE_GUEST = "guest"
    ROLES = (ROLE_HOST, ROLE_GUEST)

    @staticmethod
    def create_room(*, appointment_id: UUID, profile_id: UUID) -> VideoRoom:
        appointment = (
            Appointment.objects.filter(id=appointment_id)
            .filter(Q(patient_id=profile_id) | Q(doctor_id=profile_id))
            .first()
        )
        if appointment is None:
            raise AppointmentNotFound()

        room = clients.get_video_provider().create_room(
            name=f"appointment-{appointment.id}",
            description=f"Video call for appointment {appointment.id}",
        )
        ChatRoom.objects.filter(appointment_id=appointment.id).update(video_room_id=room.id)
        logger.info("Video room created appointment_id=%s room_id=%s", appointment.id, room.id)
        return room

    @staticmethod
    def issue_token(*, room_id: str, profile_id: UUID, role: str = ROLE_HOST) -> str:
        get_room_for_video_participant(video_room_id=room_id, profile_id=profile_id)
        return clients.get_video_provider().auth_token(
            room_id=room_id,
            user_id=str(profile_id),
            role=role,
            user_name=f"user-{str(profile_id)[:8]}",
        )


class UploadService:
    @staticmethod
    def upload(*, file_data: str | None) -> str:
        if not file_data:
            raise ValidationError({"detail": "No file provided"})
        return clients.get_object_storage().upload(file_data=file_data)
