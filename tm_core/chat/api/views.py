# tm_core/chat/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from tm_core.chat.api.serializers import (
    ChatMessageCreateSerializer,
    ChatMessageSerializer,
    ChatRoomSerializer,
    PresenceSerializer,
    UploadRequestSerializer,
    UploadResponseSerializer,
    VideoRoomCreateSerializer,
    VideoRoomSerializer,
    VideoTokenRequestSerializer,
    VideoTokenSerializer,
)
from tm_core.chat.models import ChatRoom
from tm_core.chat.selectors import get_room_for_participant, list_room_messages, list_rooms_for
from tm_core.chat.services import ChatService, UploadService, VideoService
from tm_core.common.api.lookups import UUID_LOOKUP_REGEX
from tm_core.common.permissions import IsPatientOrDoctor
from tm_core.iam.auth import request_profile


class ChatRoomViewSet(viewsets.GenericViewSet):
    """
    Consultation chat for both sides of an appointment.
    """
    permission_classes = [IsPatientOrDoctor]
    serializer_class = ChatRoomSerializer
    queryset = ChatRoom.objects.none()
    lookup_value_regex = UUID_LOOKUP_REGEX

    @extend_schema(tags=["Chat"], responses={200: ChatRoomSerializer(many=True)})
    def list(self, request):
        profile = request_profile(request)
        rooms = list_rooms_for(profile_id=profile.id)
        return Response(
            ChatRoomSerializer(rooms, many=True, context={"profile_id": profile.id}).data,
            status=status.HTTP_200_OK,
        )

    @extend_schema(tags=["Chat"], responses={200: ChatRoomSerializer})
    def retrieve(self, request, pk=None):
        profile = request_profile(request)
        room = get_room_for_participant(room_id=UUID(str(pk)), profile_id=profile.id)
        return Response(ChatRoomSerializer(room, context={"profile_id": profile.id}).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Chat"], responses={200: ChatMessageSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="messages")
    def messages(self, request, pk=None):
        profile = request_profile(request)
        room = get_room_for_participant(room_id=UUID(str(pk)), profile_id=profile.id)
        return Response(ChatMessageSerializer(list_room_messages(room_id=room.id), many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Chat"], request=ChatMessageCreateSerializer, responses={201: ChatMessageSerializer})
    @messages.mapping.post
    def send_message(self, request, pk=None):
        profile = request_profile(request)

        ser = ChatMessageCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        v = ser.validated_data

        message = ChatService.send_message(
            room_id=UUID(str(pk)),
            sender_id=profile.id,
            content=v.get("content", ""),
            message_type=v["type"],
            file_url=v.get("file_url", ""),
        )
        return Response(ChatMessageSerializer(message).data, status=status.HTTP_201_CREATED)


class PresenceView(APIView):
    permission_classes = [IsPatientOrDoctor]

    @extend_schema(tags=["Chat"], request=PresenceSerializer, responses={202: PresenceSerializer})
    def post(self, request):
        profile = request_profile(request)

        ser = PresenceSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        ChatService.update_presence(profile_id=profile.id, status=ser.validated_data["status"])
        return Response(ser.validated_data, status=status.HTTP_202_ACCEPTED)


class VideoRoomView(APIView):
    permission_classes = [IsPatientOrDoctor]

    @extend_schema(tags=["Video"], request=VideoRoomCreateSerializer, responses={201: VideoRoomSerializer})
    def post(self, request):
        profile = request_profile(request)

        ser = VideoRoomCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        room = VideoService.create_room(appointment_id=ser.validated_data["appointment_id"], profile_id=profile.id)
        return Response({"room_id": room.id, "room_name": room.name}, status=status.HTTP_201_CREATED)


class VideoTokenView(APIView):
    permission_classes = [IsPatientOrDoctor]

    @extend_schema(tags=["Video"], request=VideoTokenRequestSerializer, responses={200: VideoTokenSerializer})
    def post(self, request):
        profile = request_profile(request)

        ser = VideoTokenRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        v = ser.validated_data

        token = VideoService.issue_token(room_id=v["room_id"], profile_id=profile.id, role=v["role"])
        return Response({"token": token}, status=status.HTTP_200_OK)


class UploadView(APIView):
    permission_classes = [IsPatientOrDoctor]

    @extend_schema(tags=["Chat"], request=UploadRequestSerializer, responses={201: UploadResponseSerializer})
    def post(self, request):
        ser = UploadRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        file_url = UploadService.upload(file_data=ser.validated_data.get("file"))
        return Response({"file_url": file_url}, status=status.HTTP_201_CREATED)
