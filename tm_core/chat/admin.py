# tm_core/chat/admin.py
from __future__ import annotations

from django.contrib import admin

from tm_core.chat.models import ChatMessage, ChatRoom


@admin.register(ChatRoom)
class ChatRoomAdmin(admin.ModelAdmin):
    list_display = ("id", "appointment", "patient", "doctor", "video_room_id", "created_at")
    search_fields = ("patient__email", "doctor__email")
    raw_id_fields = ("appointment", "patient", "doctor")


@admin.register(ChatMessage)
class ChatMessageAdmin(admin.ModelAdmin):
    list_display = ("id", "room", "sender", "type", "created_at")
    list_filter = ("type",)
    search_fields = ("content",)
    raw_id_fields = ("room", "sender")
    ordering = ("-created_at",)
