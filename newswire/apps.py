import logging
from pathlib import Path

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)


class NewswireConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'newswire'
    verbose_name = 'NewsWire'

    def ready(self):
        # Register signal handlers
        from . import signals  # noqa: F401

        uploads_root = getattr(settings, 'UPLOADS_ROOT', None)
        if not uploads_root:
            return
        uploads_root = Path(uploads_root)
        if not uploads_root.exists():
            try:
                uploads_root.mkdir(parents=True, exist_ok=True)
                logger.info(f"Created uploads directory at: {uploads_root}")
            except OSError as e:
                logger.error(f"Could not create uploads directory {uploads_root}: {str(e)}")
