"""
NewsWire Models

This module contains all database models for the news site including:
- CustomUser: Site user with a profile picture and role groups (Admin, User)
- Category: Topic grouping for news articles
- News: Articles written by users, each with an image
- UserFavorite: Articles a user has marked as favorite
- TeamMember: Staff shown on the site's team page
- ContactMessage: Messages sent through the contact form
"""

from django.conf import settings
from django.contrib.auth.models import AbstractUser, Group
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


def default_news_image():
    return settings.DEFAULT_NEWS_IMAGE


def default_avatar_image():
    return settings.DEFAULT_AVATAR_IMAGE


class CustomUser(AbstractUser):
    """
    Custom user model with a profile picture and role groups.

    Roles are auth groups:
    - Admin: Manages categories, team members, users and contact messages,
      and may edit or delete any article
    - User: Writes articles and edits or deletes only their own
    """

    profile_picture_url = models.CharField(
        max_length=500,
        blank=True,
        default='',
        help_text=_("Public path of the user's profile picture")
    )

    class Meta:
        verbose_name = _('User')
        verbose_name_plural = _('Users')
        ordering = ['-date_joined']

    def __str__(self):
        return self.username

    def save(self, *args, **kwargs):
        """
        Override save to put new users in the default User role group.
        """
        is_new = self.pk is None
        super().save(*args, **kwargs)

        if is_new:
            self._assign_default_role()

    def _assign_default_role(self):
        """Add the user to the User role group."""
        group, _created = Group.objects.get_or_create(name=settings.NEWSWIRE_USER_ROLE)
        self.groups.add(group)

    @property
    def roles(self):
        """Names of the role groups this user belongs to."""
        return set(self.groups.values_list('name', flat=True))

    @property
    def is_admin(self):
        """Check if user holds the Admin role."""
        return self.is_superuser or settings.NEWSWIRE_ADMIN_ROLE in self.roles

    @property
    def picture_path(self):
        """Profile picture path, falling back to the default avatar."""
        return self.profile_picture_url or settings.DEFAULT_AVATAR_IMAGE


class Category(models.Model):
    """
    Category grouping news articles by subject.
    """

    name = models.CharField(
        max_length=100,
        unique=True,
        help_text=_("Category name")
    )

    description = models.TextField(
        blank=True,
        help_text=_("Description of the category")
    )

    class Meta:
        verbose_name = _('Category')
        verbose_name_plural = _('Categories')
        ordering = ['name']

    def __str__(self):
        return self.name


class News(models.Model):
    """
    News article written by a user.

    The author is kept nullable so articles survive their author's account
    being deleted. Every article has an image path; when no image was
    uploaded it points at the shared default news image.
    """

    title = models.CharField(
        max_length=200,
        help_text=_("Article title")
    )

    content = models.TextField(
        help_text=_("Article content/body")
    )

    image_url = models.CharField(
        max_length=500,
        default=default_news_image,
        help_text=_("Public path of the article image")
    )

    published_at = models.DateTimeField(
        default=timezone.now,
        help_text=_("When the article was published")
    )

    topic = models.CharField(
        max_length=100,
        help_text=_("Short topic label")
    )

    category = models.ForeignKey(
        Category,
        on_delete=models.CASCADE,
        related_name='news_items',
        help_text=_("Category the article belongs to")
    )

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='news',
        null=True,
        blank=True,
        help_text=_("User who wrote the article")
    )

    class Meta:
        verbose_name = _('News')
        verbose_name_plural = _('News')
        ordering = ['-published_at']
        indexes = [
            models.Index(fields=['-published_at'], name='news_published_idx'),
            models.Index(fields=['category', '-published_at'], name='news_category_published_idx'),
        ]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        """Override save so the image path is never left empty."""
        if not self.image_url:
            self.image_url = default_news_image()
        super().save(*args, **kwargs)


class UserFavorite(models.Model):
    """
    An article marked as favorite by a user.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='favorites',
    )

    news = models.ForeignKey(
        News,
        on_delete=models.CASCADE,
        related_name='favorited_by',
    )

    favorited_at = models.DateTimeField(
        default=timezone.now,
        help_text=_("When the article was added to favorites")
    )

    class Meta:
        verbose_name = _('Favorite')
        verbose_name_plural = _('Favorites')
        ordering = ['-favorited_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'news'], name='unique_user_favorite'),
        ]

    def __str__(self):
        return f"{self.user} → {self.news}"


class TeamMember(models.Model):
    """
    Member of the editorial team shown on the site.
    """

    name = models.CharField(max_length=100)

    job_title = models.CharField(max_length=100)

    image_url = models.CharField(
        max_length=500,
        default=default_avatar_image,
        help_text=_("Public path of the team member's photo")
    )

    class Meta:
        verbose_name = _('Team member')
        verbose_name_plural = _('Team members')
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.job_title})"

    def save(self, *args, **kwargs):
        if not self.image_url:
            self.image_url = default_avatar_image()
        super().save(*args, **kwargs)


class ContactMessage(models.Model):
    """
    Message sent by a visitor through the contact form.
    """

    name = models.CharField(max_length=100)

    email = models.EmailField(max_length=150)

    subject = models.CharField(max_length=200)

    message = models.TextField(max_length=2000)

    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text=_("When the message was received")
    )

    class Meta:
        verbose_name = _('Contact message')
        verbose_name_plural = _('Contact messages')
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.subject} ({self.email})"
