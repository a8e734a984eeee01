"""
Request middleware for NewsWire.
"""

import logging

from django.conf import settings
from django.http import JsonResponse

logger = logging.getLogger(__name__)


class RequestBodyLimitMiddleware:
    """
    Reject requests whose declared body is larger than MAX_REQUEST_BODY_SIZE.

    The check uses the Content-Length header so oversized uploads are refused
    with 413 before the body is read.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        limit = settings.MAX_REQUEST_BODY_SIZE
        try:
            length = int(request.META.get('CONTENT_LENGTH') or 0)
        except ValueError:
            length = 0

        if limit and length > limit:
            logger.warning(f"Request body too large: {length} bytes (limit {limit}) for {request.path}")
            return JsonResponse(
                {'detail': f'Request body exceeds the {limit} byte limit.'},
                status=413,
            )

        return self.get_response(request)
