# apps/api/v1/chat.py
"""
EN: Item chat handlers shared by the client, gruzchik and admin portals.
UA: Спільні обробники чату позиції для всіх порталів.

Each portal resolves the item through its own scope first; the helpers here
only deal with the thread itself.
"""
import logging
import os
import uuid

from django.conf import settings
from django.core.files.storage import default_storage
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from apps.orders.messaging import item_thread_state, post_message, serialize_message

logger = logging.getLogger("app")

CHAT_UPLOAD_DIR = "chat"


def thread_response(item, user):
    messages = item.messages.select_related("user").all()
    return Response({
        "messages": [serialize_message(m) for m in messages],
        "thread": item_thread_state(item, user),
    })


def _attachments_from(data):
    attachments = data.get("attachments") or []
    if not isinstance(attachments, list):
        raise ValidationError("attachments must be a list")
    for a in attachments:
        if not isinstance(a, dict) or not a.get("url"):
            raise ValidationError("Invalid attachment")
    return attachments


def create_message_response(item, user, data):
    message = post_message(
        item,
        user,
        text=data.get("text"),
        attachments=_attachments_from(data),
    )
    return Response({"message": serialize_message(message)}, status=status.HTTP_201_CREATED)


def store_attachment(item, upload) -> dict:
    """Save an uploaded file to the default storage and describe it for ``attachments``."""
    if upload.size > settings.ATTACHMENT_MAX_SIZE:
        raise ValidationError("File is too large")
    _, ext = os.path.splitext(upload.name or "")
    path = default_storage.save(f"{CHAT_UPLOAD_DIR}/{item.pk}/{uuid.uuid4().hex}{ext.lower()}", upload)
    return {
        "type": getattr(upload, "content_type", None) or "application/octet-stream",
        "name": upload.name,
        "url": default_storage.url(path),
    }


def upload_message_response(item, user, request):
    upload = request.FILES.get("file")
    if upload is None:
        raise ValidationError("No file uploaded")
    attachment = store_attachment(item, upload)
    message = post_message(item, user, text=request.data.get("text"), attachments=[attachment])
    logger.info("Attachment %s uploaded to item %s by %s", attachment["name"], item.item_code, user)
    return Response({"message": serialize_message(message)}, status=status.HTTP_201_CREATED)
