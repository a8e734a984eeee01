"""
URL Configuration for NewsWire

Serves stored uploads from UPLOADS_ROOT under UPLOADS_URL.
"""

from django.conf import settings
from django.urls import path
from . import views

urlpatterns = [
    path(f"{settings.UPLOADS_URL.strip('/')}/<path:path>", views.serve_upload, name='serve_upload'),
]
