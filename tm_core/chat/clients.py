# tm_core/chat/clients.py
"""
Narrow HTTP clients for the realtime bus (Pusher Channels), the video provider (100ms)
and object storage (Cloudinary). Each call has a bounded timeout; any transport error,
timeout or non-2xx answer surfaces as ProviderUnavailable.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict
from urllib.parse import urlencode

import httpx
import jwt
from django.conf import settings

from tm_core.common.api.exceptions import ProviderUnavailable

logger = logging.getLogger(__name__)


def _json_or_empty(response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


# -------------------------------------------------------------------
# Realtime bus
# -------------------------------------------------------------------

class RealtimeBusClient:
    """
    Pusher Channels HTTP API: POST /apps/<app_id>/events, signed query string.
    """

    def __init__(self, *, app_id: str, key: str, secret: str, cluster: str, timeout: float = 5.0):
        self.app_id = app_id
        self.key = key
        self.secret = secret
        self.host = f"api-{cluster}.pusher.com"
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "RealtimeBusClient":
        cfg = settings.REALTIME_BUS
        return cls(
            app_id=cfg["APP_ID"],
            key=cfg["KEY"],
            secret=cfg["SECRET"],
            cluster=cfg.get("CLUSTER", "ap2"),
            timeout=float(cfg.get("TIMEOUT_SECONDS", 5)),
        )

    def signed_query(self, *, path: str, body: str, timestamp: int | None = None) -> Dict[str, str]:
        params = {
            "auth_key": self.key,
            "auth_timestamp": str(timestamp if timestamp is not None else int(time.time())),
            "auth_version": "1.0",
            "body_md5": hashlib.md5(body.encode("utf-8")).hexdigest(),
        }
        string_to_sign = "\n".join(["POST", path, urlencode(sorted(params.items()))])
        params["auth_signature"] = hmac.new(
            self.secret.encode("utf-8"),
            string_to_sign.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()
        return params

    def trigger(self, *, channel: str, event: str, data: Dict[str, Any]) -> None:
        path = f"/apps/{self.app_id}/events"
        body = json.dumps({"name": event, "channels": [channel], "data": json.dumps(data, default=str)})

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(
                    f"https://{self.host}{path}",
                    params=self.signed_query(path=path, body=body),
                    content=body,
                    headers={"Content-Type": "application/json"},
                )
        except httpx.HTTPError as exc:
            logger.error("Realtime bus unreachable channel=%s event=%s error=%s", channel, event, exc)
            raise ProviderUnavailable()

        if response.status_code != 200:
            logger.error(
                "Realtime bus rejected event channel=%s event=%s status=%s body=%s",
                channel,
                event,
                response.status_code,
                response.text[:500],
            )
            raise ProviderUnavailable()


# -------------------------------------------------------------------
# Video provider
# -------------------------------------------------------------------

@dataclass(frozen=True)
class VideoRoom:
    id: str
    name: str


class VideoProviderClient:
    """
    100ms REST API. Calls authenticate with a short-lived management token (HS256 JWT).
    """

    MANAGEMENT_TOKEN_TTL_SECONDS = 300

    def __init__(self, *, base_url: str, access_key: str, secret: str, template_id: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.access_key = access_key
        self.secret = secret
        self.template_id = template_id
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "VideoProviderClient":
        cfg = settings.VIDEO_PROVIDER
        return cls(
            base_url=cfg["BASE_URL"],
            access_key=cfg["ACCESS_KEY"],
            secret=cfg["SECRET"],
            template_id=cfg["TEMPLATE_ID"],
            timeout=float(cfg.get("TIMEOUT_SECONDS", 10)),
        )

    def management_token(self, *, now: int | None = None) -> str:
        issued_at = now if now is not None else int(time.time())
        payload = {
            "access_key": self.access_key,
            "type": "management",
            "version": 2,
            "iat": issued_at,
            "nbf": issued_at,
            "exp": issued_at + self.MANAGEMENT_TOKEN_TTL_SECONDS,
            "jti": str(uuid.uuid4()),
        }
        return jwt.encode(payload, self.secret, algorithm="HS256")

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(
                    f"{self.base_url}{path}",
                    json=payload,
                    headers={"Authorization": f"Bearer {self.management_token()}"},
                )
        except httpx.HTTPError as exc:
            logger.error("Video provider unreachable path=%s error=%s", path, exc)
            raise ProviderUnavailable()

        if response.status_code not in (200, 201):
            logger.error(
                "Video provider rejected request path=%s status=%s body=%s",
                path,
                response.status_code,
                response.text[:500],
            )
            raise ProviderUnavailable()

        return _json_or_empty(response)

    def create_room(self, *, name: str, description: str) -> VideoRoom:
        data = self._post("/rooms", {"name": name, "description": description, "template_id": self.template_id})
        if not data.get("id"):
            logger.error("Video provider answered without room id name=%s", name)
            raise ProviderUnavailable()
        return VideoRoom(id=data["id"], name=data.get("name") or name)

    def auth_token(self, *, room_id: str, user_id: str, role: str, user_name: str) -> str:
        data = self._post(
            "/room-codes/auth-token",
            {"room_id": room_id, "user_id": user_id, "role": role, "user_name": user_name},
        )
        token = data.get("token")
        if not token:
            logger.error("Video provider answered without token room_id=%s", room_id)
            raise ProviderUnavailable()
        return token


# -------------------------------------------------------------------
# Object storage
# -------------------------------------------------------------------

class ObjectStorageClient:
    """
    Cloudinary unsigned upload: the preset decides folder and transformations.
    """

    def __init__(self, *, cloud_name: str, upload_preset: str, timeout: float = 30.0):
        self.cloud_name = cloud_name
        self.upload_preset = upload_preset
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "ObjectStorageClient":
        cfg = settings.OBJECT_STORAGE
        return cls(
            cloud_name=cfg["CLOUD_NAME"],
            upload_preset=cfg["UPLOAD_PRESET"],
            timeout=float(cfg.get("TIMEOUT_SECONDS", 30)),
        )

    def upload(self, *, file_data: str) -> str:
        """
        file_data: data URI ("data:image/png;base64,...") or a remote URL.
        Returns the stored file's https URL.
        """
        url = f"https://api.cloudinary.com/v1_1/{self.cloud_name}/auto/upload"
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(url, data={"file": file_data, "upload_preset": self.upload_preset})
        except httpx.HTTPError as exc:
            logger.error("Object storage unreachable error=%s", exc)
            raise ProviderUnavailable("Failed to upload file.")

        if response.status_code != 200:
            logger.error("Object storage rejected upload status=%s body=%s", response.status_code, response.text[:500])
            raise ProviderUnavailable("Failed to upload file.")

        secure_url = _json_or_empty(response).get("secure_url")
        if not secure_url:
            raise ProviderUnavailable("Failed to upload file.")
        return secure_url


def get_realtime_bus() -> RealtimeBusClient:
    return RealtimeBusClient.from_settings()


def get_video_provider() -> VideoProviderClient:
    return VideoProviderClient.from_settings()


def get_object_storage() -> ObjectStorageClient:
    return ObjectStorageClient.from_settings()
