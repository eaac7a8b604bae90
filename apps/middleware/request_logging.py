# apps/middleware/request_logging.py
import logging

from apps.accounts.roles import role_of

logger = logging.getLogger("app")


class RequestLoggingMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)
        # DRF authenticates inside the view, so JWT users are known only after it ran
        user = getattr(request, "user", None)
        authenticated = user is not None and user.is_authenticated
        logger.info(
            "REQUEST %s %s STATUS=%s USER=%s ROLE=%s",
            request.method,
            request.path,
            response.status_code,
            user if authenticated else "anon",
            role_of(user) if authenticated else "-",
        )
        return response
