"""
Views for NewsWire

Uploaded images are stored outside the web root; this module serves them
back with long-lived caching headers.
"""

import logging

from django.conf import settings
from django.views.decorators.http import require_GET
from django.views.static import serve

logger = logging.getLogger(__name__)


@require_GET
def serve_upload(request, path):
    """
    Serve a stored upload from UPLOADS_ROOT.

    Files are named with random identifiers and never rewritten, so they are
    cached publicly for UPLOADS_CACHE_MAX_AGE seconds.

    Raises:
        Http404: If the file does not exist or the path leaves UPLOADS_ROOT
    """
    response = serve(request, path, document_root=str(settings.UPLOADS_ROOT))
    response['Cache-Control'] = f'public, max-age={settings.UPLOADS_CACHE_MAX_AGE}'
    return response
