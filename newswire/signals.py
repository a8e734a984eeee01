"""
Django Signals for NewsWire

Releases stored images when the record referencing them is deleted. Default
assets are shared and are never removed; ``delete_image`` skips them.
"""

from django.db.models.signals import post_delete
from django.dispatch import receiver
import logging

from .models import CustomUser, News, TeamMember
from .uploads import ImageUploadService

# Set up logging for debugging and error tracking
logger = logging.getLogger(__name__)


def release_image(path, owner):
    """
    Delete an image that is no longer referenced.

    Args:
        path: Public path of the image
        owner: Description of the deleted record, for logging
    """
    if not path:
        return

    if ImageUploadService().delete_image(path):
        logger.info(f"Released image {path} of deleted {owner}")
    else:
        logger.warning(f"Could not release image {path} of deleted {owner}")


@receiver(post_delete, sender=News)
def release_news_image(sender, instance, **kwargs):
    """Release the article image after the article is deleted."""
    release_image(instance.image_url, f"article {instance.pk}")


@receiver(post_delete, sender=TeamMember)
def release_team_member_image(sender, instance, **kwargs):
    """Release the team member photo after the member is deleted."""
    release_image(instance.image_url, f"team member {instance.pk}")


@receiver(post_delete, sender=CustomUser)
def release_profile_picture(sender, instance, **kwargs):
    """Release the profile picture after the user is deleted."""
    release_image(instance.profile_picture_url, f"user {instance.pk}")
