# apps/api/exceptions.py
import logging

from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger("app")


def exception_handler(exc, context):
    """
    DRF handler plus the ``extra`` payload of project exceptions
    (e.g. the existing record on 409). Validation errors are flattened to
    ``{"detail": "..."}`` when raised with a single message.
    """
    response = drf_exception_handler(exc, context)
    if response is None:
        return None

    data = response.data
    if isinstance(data, list) and len(data) == 1:
        response.data = {"detail": data[0]}
    elif isinstance(data, list):
        response.data = {"detail": data}

    extra = getattr(exc, "extra", None)
    if extra and isinstance(response.data, dict):
        response.data.update(extra)

    if response.status_code >= 500:
        logger.error("API error %s: %s", response.status_code, exc)
    return response
