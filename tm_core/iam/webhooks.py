# tm_core/iam/webhooks.py
"""
Signature checks for identity provider webhooks.

The provider delivers user lifecycle events signed the Svix way:
    svix-signature: "v1,<base64 hmac>" (space separated, one per active secret)
    signed message: "<svix-id>.<svix-timestamp>.<raw body>"
    key: base64-decoded part of the "whsec_..." secret
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
import time

from tm_core.common.api.exceptions import InvalidWebhookSignature

logger = logging.getLogger(__name__)

# Maximum age of webhook in seconds (5 minutes)
MAX_WEBHOOK_AGE_SECONDS = 300


def extract_signing_key(secret: str) -> bytes:
    """
    "whsec_BASE64KEY" -> decoded key bytes.
    Secrets that are not base64 are used as raw UTF-8 bytes.
    """
    b64_part = secret[6:] if secret.startswith("whsec_") else secret
    try:
        return base64.b64decode(b64_part, validate=True)
    except (binascii.Error, ValueError):
        return secret.encode("utf-8")


def sign_payload(*, secret: str, message_id: str, timestamp: str, body: bytes) -> str:
    signed = b".".join([message_id.encode("utf-8"), timestamp.encode("utf-8"), body])
    digest = hmac.new(extract_signing_key(secret), signed, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def verify_timestamp(timestamp: str, *, max_age: int = MAX_WEBHOOK_AGE_SECONDS, now: float | None = None) -> bool:
    try:
        sent_at = int(timestamp)
    except (TypeError, ValueError):
        return False
    current = int(now if now is not None else time.time())
    return abs(current - sent_at) <= max_age


def verify_webhook(*, secret: str, headers, body: bytes) -> None:
    """
    Raises InvalidWebhookSignature unless one of the v1 signatures matches.
    `headers` is any case-insensitive mapping (request.headers).
    """
    if not secret:
        logger.error("Identity webhook secret is not configured")
        raise InvalidWebhookSignature()

    message_id = headers.get("svix-id", "")
    timestamp = headers.get("svix-timestamp", "")
    signature_header = headers.get("svix-signature", "")

    if not message_id or not timestamp or not signature_header:
        raise InvalidWebhookSignature("Missing webhook signature headers.")

    if not verify_timestamp(timestamp):
        logger.warning("Identity webhook timestamp outside tolerance id=%s ts=%s", message_id, timestamp)
        raise InvalidWebhookSignature("Webhook timestamp expired.")

    expected = sign_payload(secret=secret, message_id=message_id, timestamp=timestamp, body=body)

    for part in signature_header.split():
        version, _, received = part.partition(",")
        if version == "v1" and received and hmac.compare_digest(expected, received):
            return

    logger.warning("Identity webhook signature mismatch id=%s", message_id)
    raise InvalidWebhookSignature()
