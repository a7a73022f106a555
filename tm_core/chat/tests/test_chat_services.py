# tm_core/chat/tests/test_chat_services.py

import pytest
from rest_framework.exceptions import ValidationError

from tm_core.chat.models import ChatMessage, MessageType
from tm_core.chat.services import ChatService, UploadService, VideoService
from tm_core.common.api.exceptions import AppointmentNotFound, ChatRoomNotFound, ProviderUnavailable

pytestmark = pytest.mark.django_db


def test_participant_message_is_stored_then_published(patient, room, fake_bus):
    msg = ChatService.send_message(room_id=room.id, sender_id=patient.id, content="Hello doctor")

    assert ChatMessage.objects.filter(id=msg.id, room=room, sender=patient).exists()
    assert len(fake_bus.events) == 1
    event = fake_bus.events[0]
    assert event["channel"] == f"chat-room-{room.id}"
    assert event["event"] == "new-message"
    assert event["data"]["content"] == "Hello doctor"
    assert event["data"]["sender_name"] == "Asha Rao"
    assert event["data"]["id"] == str(msg.id)


def test_doctor_side_can_reply(doctor, room, fake_bus):
    msg = ChatService.send_message(
        room_id=room.id,
        sender_id=doctor.id,
        message_type=MessageType.IMAGE,
        file_url="https://res.cloudinary.test/x.png",
    )

    assert msg.type == MessageType.IMAGE
    assert fake_bus.events[0]["data"]["file_url"] == "https://res.cloudinary.test/x.png"


def test_outsider_cannot_post(other_patient, room, fake_bus):
    with pytest.raises(ChatRoomNotFound):
        ChatService.send_message(room_id=room.id, sender_id=other_patient.id, content="hi")

    assert ChatMessage.objects.count() == 0
    assert fake_bus.events == []


def test_bus_outage_keeps_the_message(patient, room, monkeypatch):
    from tm_core.chat import clients
    from tm_core.chat.tests.conftest import FakeRealtimeBus

    monkeypatch.setattr(clients, "get_realtime_bus", lambda: FakeRealtimeBus(fail_with=ProviderUnavailable()))

    msg = ChatService.send_message(room_id=room.id, sender_id=patient.id, content="still here")

    assert ChatMessage.objects.filter(id=msg.id).exists()


def test_presence_is_published_on_profile_channel(patient, fake_bus):
    ChatService.update_presence(profile_id=patient.id, status="online")

    assert fake_bus.events == [
        {
            "channel": f"presence-{patient.id}",
            "event": "user-status",
            "data": {"user_id": str(patient.id), "status": "online"},
        }
    ]


def test_unknown_presence_status_is_rejected(patient, fake_bus):
    with pytest.raises(ValidationError):
        ChatService.update_presence(profile_id=patient.id, status="away")

    assert fake_bus.events == []


def test_video_room_is_named_after_appointment(doctor, booked, fake_video):
    room = VideoService.create_room(appointment_id=booked.id, profile_id=doctor.id)

    assert room.name == f"appointment-{booked.id}"
    assert fake_video.rooms[0]["description"] == f"Video call for appointment {booked.id}"


def test_video_room_requires_participant(other_patient, booked, fake_video):
    with pytest.raises(AppointmentNotFound):
        VideoService.create_room(appointment_id=booked.id, profile_id=other_patient.id)

    assert fake_video.rooms == []


def test_video_room_is_linked_to_chat_room(doctor, booked, room, fake_video):
    video = VideoService.create_room(appointment_id=booked.id, profile_id=doctor.id)

    room.refresh_from_db()
    assert room.video_room_id == video.id


def test_join_token_is_issued_per_user(patient, doctor, booked, fake_video):
    VideoService.create_room(appointment_id=booked.id, profile_id=doctor.id)

    token = VideoService.issue_token(room_id="room_1", profile_id=patient.id, role="guest")

    assert token == "token-room_1-guest"
    issued = fake_video.tokens[0]
    assert issued["user_id"] == str(patient.id)
    assert issued["user_name"] == f"user-{str(patient.id)[:8]}"


def test_join_token_refused_outside_the_consultation(other_patient, doctor, booked, fake_video):
    VideoService.create_room(appointment_id=booked.id, profile_id=doctor.id)

    with pytest.raises(ChatRoomNotFound):
        VideoService.issue_token(room_id="room_1", profile_id=other_patient.id, role="host")

    assert fake_video.tokens == []


def test_join_token_refused_for_unknown_room(patient, booked, fake_video):
    with pytest.raises(ChatRoomNotFound):
        VideoService.issue_token(room_id="room_404", profile_id=patient.id)

    assert fake_video.tokens == []


def test_upload_requires_a_file(fake_storage):
    with pytest.raises(ValidationError):
        UploadService.upload(file_data="")

    assert fake_storage.uploads == []


def test_upload_returns_stored_url(fake_storage):
    url = UploadService.upload(file_data="data:image/png;base64,iVBORw0KGgo=")

    assert url.startswith("https://res.cloudinary.test/")
