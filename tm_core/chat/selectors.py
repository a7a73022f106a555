# tm_core/chat/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import Q, QuerySet

from tm_core.chat.models import ChatMessage, ChatRoom
from tm_core.common.api.exceptions import ChatRoomNotFound


def list_rooms_for(*, profile_id: UUID) -> QuerySet[ChatRoom]:
    """
    Rooms where the profile is either side of the consultation.
    """
    return (
        ChatRoom.objects.select_related("appointment", "patient", "doctor")
        .filter(Q(patient_id=profile_id) | Q(doctor_id=profile_id))
        .order_by("-appointment__date")
    )


def get_room_for_participant(*, room_id: UUID, profile_id: UUID) -> ChatRoom:
    room = (
        ChatRoom.objects.select_related("appointment", "patient", "doctor")
        .filter(id=room_id)
        .filter(Q(patient_id=profile_id) | Q(doctor_id=profile_id))
        .first()
    )
    if room is None:
        raise ChatRoomNotFound()
    return room


def list_room_messages(*, room_id: UUID) -> QuerySet[ChatMessage]:
    return ChatMessage.objects.select_related("sender").filter(room_id=room_id).order_by("created_at")


def get_room_for_video_participant(*, video_room_id: str, profile_id: UUID) -> ChatRoom:
    """
    Resolves a provider video room back to its consultation, for participants only.
    """
    if not video_room_id:
        raise ChatRoomNotFound()
    room = (
        ChatRoom.objects.filter(video_room_id=video_room_id)
        .filter(Q(patient_id=profile_id) | Q(doctor_id=profile_id))
        .first()
    )
    if room is None:
        raise ChatRoomNotFound()
    return room
