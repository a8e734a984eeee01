"""
Domain Services for NewsWire

Operations shared by the API views. Content changes pass the ownership check
first, then any attached image goes through the upload service before the
record is saved.
"""

import calendar
import logging
from collections import Counter

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from .models import Category, ContactMessage, News, TeamMember, UserFavorite
from .ownership import ActingUser, ensure_can_mutate
from .uploads import NEWS_FOLDER, PROFILES_FOLDER, TEAM_MEMBERS_FOLDER, ImageUploadService

logger = logging.getLogger(__name__)

User = get_user_model()


def months_before(moment, months):
    """Same day and time a number of calendar months earlier, clamped to month end."""
    month_index = moment.year * 12 + moment.month - 1 - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def get_upload_service():
    """Upload service configured from the current settings."""
    return ImageUploadService()


# ===== NEWS =====

def create_news(user, image_file=None, **fields):
    """
    Create an article authored by user.

    A missing, rejected or unwritable image falls back to the default news
    image; the article is still created.

    Args:
        user: Author of the article
        image_file: Optional uploaded image
        **fields: Article fields (title, content, topic, category)

    Returns:
        The saved News instance
    """
    fields.pop('author', None)
    fields.pop('image_url', None)

    image_url = get_upload_service().store_image(
        image_file, NEWS_FOLDER, settings.DEFAULT_NEWS_IMAGE
    )
    news = News.objects.create(
        author=user,
        published_at=timezone.now(),
        image_url=image_url,
        **fields
    )
    logger.info(f"User '{user.pk}' created article {news.pk} '{news.title}'")
    return news


def update_news(user, news, image_file=None, **fields):
    """
    Update an article after checking ownership.

    The author never changes. A new image replaces the old one only when it
    was stored successfully.

    Raises:
        PermissionDenied: If user may not edit the article
    """
    actor = ActingUser.from_user(user)
    ensure_can_mutate(actor, news, "You don't have permission to edit this article.")

    fields.pop('author', None)
    fields.pop('image_url', None)

    for name, value in fields.items():
        setattr(news, name, value)

    news.image_url = get_upload_service().replace_image(
        image_file, news.image_url, NEWS_FOLDER, settings.DEFAULT_NEWS_IMAGE
    )
    news.save()
    logger.info(f"User '{actor.id}' updated article {news.pk}")
    return news


def delete_news(user, news):
    """
    Delete an article after checking ownership.

    The article image is released by the post_delete signal.

    Raises:
        PermissionDenied: If user may not delete the article
    """
    actor = ActingUser.from_user(user)
    ensure_can_mutate(actor, news, "You don't have permission to delete this article.")

    news_id = news.pk
    news.delete()
    logger.info(f"User '{actor.id}' deleted article {news_id}")


# ===== FAVORITES =====

def toggle_favorite(user, news):
    """
    Add the article to the user's favorites, or remove it if already there.

    Returns:
        Boolean indicating if the article is a favorite afterwards
    """
    deleted, _details = UserFavorite.objects.filter(user=user, news=news).delete()
    if deleted:
        return False

    UserFavorite.objects.get_or_create(user=user, news=news)
    return True


def favorite_news_ids(user):
    """Ids of the articles the user has marked as favorite."""
    if user is None or not user.is_authenticated:
        return set()
    return set(UserFavorite.objects.filter(user=user).values_list('news_id', flat=True))


# ===== PROFILE =====

def get_profile(user):
    """Profile summary with picture fallback and content counts."""
    return {
        'id': user.pk,
        'username': user.username,
        'first_name': user.first_name,
        'last_name': user.last_name,
        'email': user.email,
        'current_picture_path': user.picture_path,
        'total_news_count': News.objects.filter(author=user).count(),
        'total_favorite_count': UserFavorite.objects.filter(user=user).count(),
        'join_date': user.date_joined,
        'last_login': user.last_login,
    }


@transaction.atomic
def update_profile(user, image_file=None, first_name=None, last_name=None, email=None):
    """
    Update a user's own profile.

    Raises:
        ValidationError: If the new e-mail address belongs to another account
    """
    if email and email.lower() != (user.email or '').lower():
        _ensure_unique_email(email, user)
        user.email = email

    if first_name is not None:
        user.first_name = first_name
    if last_name is not None:
        user.last_name = last_name

    if image_file is not None:
        user.profile_picture_url = get_upload_service().replace_image(
            image_file, user.profile_picture_url, PROFILES_FOLDER, settings.DEFAULT_AVATAR_IMAGE
        )

    user.save()
    logger.info(f"User '{user.pk}' updated their profile")
    return user


def get_profile_statistics(user, now=None):
    """
    Writing statistics for a user's profile page.

    Returns:
        Dictionary with total_articles, published_this_month,
        total_favorites, category_breakdown and activity_chart
    """
    now = now or timezone.now()
    start_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    six_months_ago = months_before(now, 6)

    user_news = list(News.objects.filter(author=user).select_related('category'))
    total = len(user_news)

    category_counts = Counter(
        news.category.name if news.category_id else 'Unknown' for news in user_news
    )
    category_breakdown = [
        {
            'category_name': name,
            'article_count': count,
            'percentage': round(count / total * 100, 1),
        }
        for name, count in sorted(category_counts.items(), key=lambda item: (-item[1], item[0]))
    ]

    monthly_counts = Counter(
        news.published_at.strftime('%Y-%m')
        for news in user_news
        if news.published_at >= six_months_ago
    )
    activity_chart = [
        {'month': month, 'article_count': count}
        for month, count in sorted(monthly_counts.items())
    ]

    return {
        'total_articles': total,
        'published_this_month': sum(1 for news in user_news if news.published_at >= start_of_month),
        'total_favorites': UserFavorite.objects.filter(user=user).count(),
        'category_breakdown': category_breakdown,
        'activity_chart': activity_chart,
    }


# ===== CATEGORIES =====

def _ensure_unique_category_name(name, exclude_id=None):
    queryset = Category.objects.filter(name__iexact=name)
    if exclude_id is not None:
        queryset = queryset.exclude(pk=exclude_id)
    if queryset.exists():
        logger.warning(f"Category with name '{name}' already exists")
        raise ValidationError({'name': f"Category '{name}' already exists."})


def create_category(**fields):
    _ensure_unique_category_name(fields.get('name', ''))
    return Category.objects.create(**fields)


def update_category(category, **fields):
    if 'name' in fields:
        _ensure_unique_category_name(fields['name'], exclude_id=category.pk)
    for name, value in fields.items():
        setattr(category, name, value)
    category.save()
    return category


def delete_category(category):
    """
    Delete a category that has no articles.

    Raises:
        ValidationError: If articles still belong to the category
    """
    if category.news_items.exists():
        logger.warning(f"Cannot delete category with existing news articles: {category.pk}")
        raise ValidationError({'detail': 'Cannot delete a category that still has articles.'})
    category.delete()


# ===== TEAM MEMBERS =====

def save_team_member(member, image_file=None):
    """Save a team member, storing or replacing their photo if one is given."""
    member.image_url = get_upload_service().replace_image(
        image_file, member.image_url, TEAM_MEMBERS_FOLDER, settings.DEFAULT_AVATAR_IMAGE
    )
    member.save()
    return member


# ===== USERS & ROLES =====

def _ensure_unique_email(email, user):
    """Reject an e-mail address already used by another account, ignoring case."""
    if User.objects.filter(email__iexact=email).exclude(pk=user.pk).exists():
        logger.warning(f"E-mail address already in use, rejected for user '{user.pk}'")
        raise ValidationError({'email': 'This e-mail address is already in use.'})


@transaction.atomic
def update_user(acting_user, user, roles=None, **fields):
    """
    Update another account as an administrator.

    Args:
        acting_user: Administrator making the change
        user: Account being changed
        roles: Optional new list of role names
        **fields: Account fields (email, first_name, last_name)

    Raises:
        ValidationError: If the e-mail address is taken or the roles are invalid
    """
    email = fields.get('email')
    if email and email.lower() != (user.email or '').lower():
        _ensure_unique_email(email, user)

    for name, value in fields.items():
        setattr(user, name, value)
    user.save()

    if roles is not None:
        update_user_roles(user, roles, acting_user=acting_user)

    logger.info(f"User '{acting_user.pk}' updated user '{user.pk}'")
    return user


def update_user_roles(user, roles, acting_user=None):
    """
    Replace the role groups of a user.

    Administrators cannot drop their own Admin role.

    Raises:
        ValidationError: If a role name does not exist, or acting_user
            would remove their own Admin role
    """
    admin = settings.NEWSWIRE_ADMIN_ROLE
    known_roles = {admin, settings.NEWSWIRE_USER_ROLE}
    unknown = set(roles) - known_roles
    if unknown:
        raise ValidationError({'roles': f"Unknown roles: {', '.join(sorted(unknown))}"})

    if acting_user is not None and acting_user.pk == user.pk and admin not in roles:
        raise ValidationError({'roles': 'You cannot remove your own Admin role!'})

    groups = [Group.objects.get_or_create(name=role)[0] for role in roles]
    current = user.groups.filter(name__in=known_roles)
    user.groups.remove(*current)
    user.groups.add(*groups)
    logger.info(f"Roles of user '{user.pk}' set to {sorted(roles)}")
    return user


def delete_user(acting_user, user):
    """
    Delete a user account; administrators cannot delete themselves.

    Raises:
        ValidationError: If acting_user tries to delete their own account
    """
    if acting_user.pk == user.pk:
        raise ValidationError({'detail': 'You cannot delete your own account!'})
    user_id = user.pk
    user.delete()
    logger.info(f"User '{acting_user.pk}' deleted user '{user_id}'")


# ===== DASHBOARD =====

def get_dashboard_stats():
    """Site-wide record counts for the admin dashboard."""
    return {
        'total_news': News.objects.count(),
        'total_categories': Category.objects.count(),
        'total_team_members': TeamMember.objects.count(),
        'total_contact_messages': ContactMessage.objects.count(),
        'total_users': User.objects.count(),
    }
