# services/pirep-service/src/apps/core/middleware.py
"""
Request tracing and access logging for the PIREP service.
"""

import uuid
import time
import logging
from typing import Callable, Optional

from django.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

HEALTH_PATHS = ('/health/', '/ready/')


def _actor_id(request: HttpRequest) -> Optional[str]:
    """Caller identity as forwarded by the gateway."""
    return request.headers.get('X-User-ID')


class RequestIDMiddleware:
    """
    Middleware that adds a unique request ID to each request.
    The ID is used for request tracing across services.
    """

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request_id = request.headers.get('X-Request-ID') or str(uuid.uuid4())
        request.request_id = request_id

        response = self.get_response(request)
        response['X-Request-ID'] = request_id
        return response


class LoggingMiddleware:
    """
    Middleware that logs each PIREP API call with its outcome and duration.
    """

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        if request.path in HEALTH_PATHS:
            return self.get_response(request)

        start_time = time.time()
        logger.info(
            f"Request started: {request.method} {request.path}",
            extra={
                'request_id': getattr(request, 'request_id', None),
                'method': request.method,
                'path': request.path,
                'user_id': _actor_id(request),
                'ip_address': self.get_client_ip(request),
            }
        )

        response = self.get_response(request)
        duration = time.time() - start_time

        log_method = logger.warning if response.status_code >= 400 else logger.info
        log_method(
            f"Request completed: {request.method} {request.path} - {response.status_code}",
            extra={
                'request_id': getattr(request, 'request_id', None),
                'status_code': response.status_code,
                'duration_ms': round(duration * 1000, 2),
                'user_id': _actor_id(request),
            }
        )

        response['X-Response-Time'] = f"{duration * 1000:.2f}ms"
        return response

    def get_client_ip(self, request: HttpRequest) -> str:
        """Extract client IP from request"""
        x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
        if x_forwarded_for:
            return x_forwarded_for.split(',')[0].strip()
        return request.META.get('REMOTE_ADDR', '')
