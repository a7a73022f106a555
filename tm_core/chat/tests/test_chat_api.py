# tm_core/chat/tests/test_chat_api.py

import pytest

pytestmark = pytest.mark.django_db


def test_rooms_show_counterpart_name(room, patient_client, doctor_client):
    patient_view = patient_client.get("/api/v1/chat/rooms/").json()
    doctor_view = doctor_client.get("/api/v1/chat/rooms/").json()

    assert patient_view[0]["id"] == str(room.id)
    assert patient_view[0]["counterpart_name"] == "Meera Iyer"
    assert doctor_view[0]["counterpart_name"] == "Asha Rao"


def test_post_and_read_messages(room, patient_client, doctor_client, fake_bus):
    r = patient_client.post(f"/api/v1/chat/rooms/{room.id}/messages/", {"content": "first"}, format="json")
    assert r.status_code == 201, r.content
    r = doctor_client.post(f"/api/v1/chat/rooms/{room.id}/messages/", {"content": "second"}, format="json")
    assert r.status_code == 201, r.content

    messages = patient_client.get(f"/api/v1/chat/rooms/{room.id}/messages/").json()

    assert [m["content"] for m in messages] == ["first", "second"]
    assert len(fake_bus.events) == 2


def test_outsider_gets_not_found(room, other_patient, client_for):
    r = client_for(other_patient).get(f"/api/v1/chat/rooms/{room.id}/messages/")

    assert r.status_code == 404
    assert r.json()["error"]["code"] == "chat_room_not_found"


def test_empty_message_is_rejected(room, patient_client, fake_bus):
    r = patient_client.post(f"/api/v1/chat/rooms/{room.id}/messages/", {"content": ""}, format="json")

    assert r.status_code == 400
    assert r.json()["error"]["code"] == "validation_error"


def test_upload_without_file_is_400(patient_client, fake_storage):
    r = patient_client.post("/api/v1/chat/upload/", {}, format="json")

    assert r.status_code == 400
    assert r.json()["error"]["message"] == "No file provided"


def test_upload_returns_file_url(patient_client, fake_storage):
    r = patient_client.post("/api/v1/chat/upload/", {"file": "data:image/png;base64,AAAA"}, format="json")

    assert r.status_code == 201
    assert r.json()["file_url"].startswith("https://")


def test_video_room_and_token(booked, doctor_client, fake_video):
    r = doctor_client.post("/api/v1/video/rooms/", {"appointment_id": str(booked.id)}, format="json")
    assert r.status_code == 201, r.content
    room_id = r.json()["room_id"]

    r = doctor_client.post("/api/v1/video/tokens/", {"room_id": room_id}, format="json")
    assert r.status_code == 200
    assert r.json()["token"] == f"token-{room_id}-host"


def test_video_token_hidden_from_outsiders(booked, doctor_client, other_patient, client_for, fake_video):
    r = doctor_client.post("/api/v1/video/rooms/", {"appointment_id": str(booked.id)}, format="json")
    room_id = r.json()["room_id"]

    r = client_for(other_patient).post("/api/v1/video/tokens/", {"room_id": room_id}, format="json")

    assert r.status_code == 404
    assert r.json()["error"]["code"] == "chat_room_not_found"
    assert fake_video.tokens == []


def test_presence_endpoint(patient_client, fake_bus):
    r = patient_client.post("/api/v1/chat/presence/", {"status": "offline"}, format="json")

    assert r.status_code == 202
    assert fake_bus.events[0]["data"]["status"] == "offline"
