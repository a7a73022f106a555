# tm_core/chat/tests/conftest.py
from datetime import timedelta

import httpx
import pytest
from django.utils import timezone

from tm_core.appointments.services import BookingService
from tm_core.chat import clients
from tm_core.chat.clients import VideoRoom
from tm_core.chat.models import ChatRoom


class FakeRealtimeBus:
    def __init__(self, *, fail_with=None):
        self.fail_with = fail_with
        self.events = []

    def trigger(self, *, channel, event, data):
        if self.fail_with is not None:
            raise self.fail_with
        self.events.append({"channel": channel, "event": event, "data": data})


class FakeVideoProvider:
    def __init__(self):
        self.rooms = []
        self.tokens = []

    def create_room(self, *, name, description):
        room = VideoRoom(id=f"room_{len(self.rooms) + 1}", name=name)
        self.rooms.append({"room": room, "description": description})
        return room

    def auth_token(self, *, room_id, user_id, role, user_name):
        self.tokens.append({"room_id": room_id, "user_id": user_id, "role": role, "user_name": user_name})
        return f"token-{room_id}-{role}"


class FakeObjectStorage:
    def __init__(self):
        self.uploads = []

    def upload(self, *, file_data):
        self.uploads.append(file_data)
        return f"https://res.cloudinary.test/upload/{len(self.uploads)}.png"


@pytest.fixture
def fake_bus(monkeypatch):
    bus = FakeRealtimeBus()
    monkeypatch.setattr(clients, "get_realtime_bus", lambda: bus)
    return bus


@pytest.fixture
def fake_video(monkeypatch):
    provider = FakeVideoProvider()
    monkeypatch.setattr(clients, "get_video_provider", lambda: provider)
    return provider


@pytest.fixture
def fake_storage(monkeypatch):
    storage = FakeObjectStorage()
    monkeypatch.setattr(clients, "get_object_storage", lambda: storage)
    return storage


@pytest.fixture
def booked(patient, doctor, make_subscription):
    make_subscription(patient)
    return BookingService.book_appointment(
        patient_id=patient.id,
        doctor_id=doctor.id,
        date=timezone.now() + timedelta(days=1),
    )


@pytest.fixture
def room(booked):
    return ChatRoom.objects.get(appointment=booked)


@pytest.fixture
def mock_http(monkeypatch):
    """
    Routes every httpx.Client created by the provider clients through a handler.
    Returns the list of captured requests; set `.handler` to control answers.
    """
    real_client = httpx.Client

    class Recorder(list):
        handler = staticmethod(lambda request: httpx.Response(200, json={}))

    recorder = Recorder()

    def _dispatch(request):
        recorder.append(request)
        return recorder.handler(request)

    def _client(**kwargs):
        return real_client(transport=httpx.MockTransport(_dispatch), **kwargs)

    monkeypatch.setattr(clients.httpx, "Client", _client)
    return recorder
