"""
Unit Tests for NewsWire ownership rules, models and services

Tests cover: the author-or-admin predicate, role groups, default images,
permission classes and the domain services used by the API.
"""

from datetime import datetime, timezone as dt_timezone
from types import SimpleNamespace

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.exceptions import PermissionDenied
from django.db import IntegrityError, transaction
from django.test import TestCase
from rest_framework.exceptions import ValidationError

from newswire import services
from newswire.models import Category, News, TeamMember, UserFavorite
from newswire.ownership import ActingUser, can_mutate, ensure_can_mutate, is_admin
from newswire.permissions import CanMutateContent, IsAdmin, IsAdminOrReadOnly, IsContributor

User = get_user_model()


def make_admin(username='admin'):
    user = User.objects.create_user(username=username, password='pass123')
    admin_group, _created = Group.objects.get_or_create(name=settings.NEWSWIRE_ADMIN_ROLE)
    user.groups.add(admin_group)
    return user


# ========== OWNERSHIP TESTS ==========

class OwnershipTestCase(TestCase):
    """Test the author-or-admin rule on plain records."""

    def setUp(self):
        self.admin = ActingUser(id='1', roles=frozenset({'Admin'}))
        self.author = ActingUser(id='5', roles=frozenset({'User'}))
        self.other = ActingUser(id='6', roles=frozenset({'User'}))

    def test_admin_can_mutate_any_record(self):
        self.assertTrue(can_mutate(self.admin, SimpleNamespace(author_id=5)))
        self.assertTrue(can_mutate(self.admin, SimpleNamespace(author_id=None)))

    def test_author_can_mutate_own_record(self):
        self.assertTrue(can_mutate(self.author, SimpleNamespace(author_id=5)))
        self.assertTrue(can_mutate(self.author, SimpleNamespace(author_id='5')))

    def test_other_user_cannot_mutate(self):
        self.assertFalse(can_mutate(self.other, SimpleNamespace(author_id=5)))

    def test_missing_author_never_matches(self):
        """A record without an author is editable by admins only."""
        self.assertFalse(can_mutate(self.author, SimpleNamespace(author_id=None)))
        self.assertFalse(can_mutate(self.author, SimpleNamespace(author_id='')))
        self.assertFalse(can_mutate(self.author, SimpleNamespace()))

    def test_anonymous_cannot_mutate_orphan_record(self):
        anonymous = ActingUser(id='')
        self.assertFalse(can_mutate(anonymous, SimpleNamespace(author_id='')))
        self.assertFalse(can_mutate(anonymous, SimpleNamespace(author_id=None)))

    def test_ensure_can_mutate_raises_with_message(self):
        with self.assertRaisesMessage(PermissionDenied, 'Not yours'):
            ensure_can_mutate(self.other, SimpleNamespace(author_id=5, pk=1), 'Not yours')

    def test_ensure_can_mutate_allows_author(self):
        ensure_can_mutate(self.author, SimpleNamespace(author_id=5, pk=1))

    def test_is_admin(self):
        self.assertTrue(is_admin(self.admin))
        self.assertFalse(is_admin(self.author))


class ActingUserTestCase(TestCase):
    """Test building ActingUser from Django users."""

    def test_anonymous_user(self):
        actor = ActingUser.from_user(SimpleNamespace(is_authenticated=False))
        self.assertEqual(actor.id, '')
        self.assertEqual(actor.roles, frozenset())

    def test_roles_come_from_groups(self):
        user = User.objects.create_user(username='writer', password='pass123')
        actor = ActingUser.from_user(user)
        self.assertEqual(actor.id, str(user.pk))
        self.assertEqual(actor.roles, frozenset({'User'}))
        self.assertFalse(actor.is_admin)

    def test_superuser_is_admin(self):
        user = User.objects.create_superuser(username='root', password='pass123', email='root@test.com')
        self.assertTrue(ActingUser.from_user(user).is_admin)


# ========== MODEL TESTS ==========

class ModelTestCase(TestCase):
    """Test model defaults and constraints."""

    def setUp(self):
        self.user = User.objects.create_user(username='writer', password='pass123')
        self.category = Category.objects.create(name='Sport')

    def test_new_user_gets_user_role(self):
        self.assertEqual(self.user.roles, {'User'})
        self.assertFalse(self.user.is_admin)

    def test_admin_role(self):
        admin = make_admin()
        self.assertTrue(admin.is_admin)

    def test_picture_path_falls_back_to_default(self):
        self.assertEqual(self.user.picture_path, settings.DEFAULT_AVATAR_IMAGE)
        self.user.profile_picture_url = '/uploads/Profiles/abc.png'
        self.assertEqual(self.user.picture_path, '/uploads/Profiles/abc.png')

    def test_news_image_never_empty(self):
        news = News.objects.create(
            title='Title', content='Body', topic='Topic',
            category=self.category, author=self.user, image_url=''
        )
        self.assertEqual(news.image_url, settings.DEFAULT_NEWS_IMAGE)

    def test_team_member_default_image(self):
        member = TeamMember.objects.create(name='Ana', job_title='Editor')
        self.assertEqual(member.image_url, settings.DEFAULT_AVATAR_IMAGE)

    def test_favorite_is_unique_per_user_and_news(self):
        news = News.objects.create(title='T', content='C', topic='X', category=self.category)
        UserFavorite.objects.create(user=self.user, news=news)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                UserFavorite.objects.create(user=self.user, news=news)

    def test_news_survives_author_deletion(self):
        news = News.objects.create(title='T', content='C', topic='X', category=self.category, author=self.user)
        self.user.delete()
        news.refresh_from_db()
        self.assertIsNone(news.author_id)


# ========== PERMISSION TESTS ==========

class PermissionTestCase(TestCase):
    """Test DRF permission classes built on the ownership rules."""

    def setUp(self):
        self.admin = make_admin()
        self.author = User.objects.create_user(username='author', password='pass123')
        self.other = User.objects.create_user(username='other', password='pass123')
        self.reader = User.objects.create_user(username='reader', password='pass123')
        self.reader.groups.clear()
        self.anonymous = SimpleNamespace(is_authenticated=False)

        category = Category.objects.create(name='Tech')
        self.news = News.objects.create(
            title='T', content='C', topic='X', category=category, author=self.author
        )

    def _request(self, user, method='GET'):
        return SimpleNamespace(user=user, method=method)

    def test_is_admin(self):
        permission = IsAdmin()
        self.assertTrue(permission.has_permission(self._request(self.admin), None))
        self.assertFalse(permission.has_permission(self._request(self.author), None))
        self.assertFalse(permission.has_permission(self._request(self.anonymous), None))

    def test_is_admin_or_read_only(self):
        permission = IsAdminOrReadOnly()
        self.assertTrue(permission.has_permission(self._request(self.anonymous), None))
        self.assertFalse(permission.has_permission(self._request(self.author, 'POST'), None))
        self.assertTrue(permission.has_permission(self._request(self.admin, 'POST'), None))

    def test_is_contributor(self):
        permission = IsContributor()
        self.assertTrue(permission.has_permission(self._request(self.author, 'POST'), None))
        self.assertTrue(permission.has_permission(self._request(self.admin, 'POST'), None))
        self.assertFalse(permission.has_permission(self._request(self.reader, 'POST'), None))
        self.assertFalse(permission.has_permission(self._request(self.anonymous, 'POST'), None))

    def test_can_mutate_content(self):
        permission = CanMutateContent()
        self.assertTrue(permission.has_object_permission(self._request(self.author, 'PATCH'), None, self.news))
        self.assertTrue(permission.has_object_permission(self._request(self.admin, 'DELETE'), None, self.news))
        self.assertFalse(permission.has_object_permission(self._request(self.other, 'PATCH'), None, self.news))
        self.assertTrue(permission.has_object_permission(self._request(self.other, 'GET'), None, self.news))


# ========== SERVICE TESTS ==========

class ServiceTestCase(TestCase):
    """Test domain services."""

    def setUp(self):
        self.admin = make_admin()
        self.author = User.objects.create_user(username='author', password='pass123', email='author@test.com')
        self.other = User.objects.create_user(username='other', password='pass123', email='other@test.com')
        self.sport = Category.objects.create(name='Sport')
        self.tech = Category.objects.create(name='Tech')

    def _news(self, published_at, category=None, author=None):
        return News.objects.create(
            title='T', content='C', topic='X',
            category=category or self.sport,
            author=author or self.author,
            published_at=published_at,
        )

    def test_create_news_uses_default_image_without_upload(self):
        news = services.create_news(
            self.author, title='Title', content='Body', topic='Local', category=self.sport
        )
        self.assertEqual(news.author, self.author)
        self.assertEqual(news.image_url, settings.DEFAULT_NEWS_IMAGE)

    def test_create_news_ignores_client_author(self):
        news = services.create_news(
            self.author, title='Title', content='Body', topic='Local',
            category=self.sport, author=self.other
        )
        self.assertEqual(news.author, self.author)

    def test_update_news_denied_for_other_user(self):
        news = self._news(datetime(2026, 1, 1, tzinfo=dt_timezone.utc))
        with self.assertRaises(PermissionDenied):
            services.update_news(self.other, news, title='Hijacked')
        news.refresh_from_db()
        self.assertEqual(news.title, 'T')

    def test_admin_deletes_any_news(self):
        news = self._news(datetime(2026, 1, 1, tzinfo=dt_timezone.utc))
        services.delete_news(self.admin, news)
        self.assertFalse(News.objects.filter(pk=news.pk).exists())

    def test_toggle_favorite(self):
        news = self._news(datetime(2026, 1, 1, tzinfo=dt_timezone.utc))
        self.assertTrue(services.toggle_favorite(self.other, news))
        self.assertEqual(services.favorite_news_ids(self.other), {news.pk})
        self.assertFalse(services.toggle_favorite(self.other, news))
        self.assertEqual(services.favorite_news_ids(self.other), set())

    def test_profile_statistics(self):
        self._news(datetime(2026, 3, 1, 12, tzinfo=dt_timezone.utc))
        self._news(datetime(2026, 3, 10, tzinfo=dt_timezone.utc))
        self._news(datetime(2026, 1, 5, tzinfo=dt_timezone.utc), category=self.tech)
        self._news(datetime(2025, 5, 1, tzinfo=dt_timezone.utc))
        self._news(datetime(2026, 3, 2, tzinfo=dt_timezone.utc), author=self.other)

        stats = services.get_profile_statistics(
            self.author, now=datetime(2026, 3, 15, tzinfo=dt_timezone.utc)
        )

        self.assertEqual(stats['total_articles'], 4)
        self.assertEqual(stats['published_this_month'], 2)
        self.assertEqual(stats['category_breakdown'], [
            {'category_name': 'Sport', 'article_count': 3, 'percentage': 75.0},
            {'category_name': 'Tech', 'article_count': 1, 'percentage': 25.0},
        ])
        self.assertEqual(stats['activity_chart'], [
            {'month': '2026-01', 'article_count': 1},
            {'month': '2026-03', 'article_count': 2},
        ])

    def test_activity_window_uses_calendar_months(self):
        self._news(datetime(2025, 9, 29, 12, tzinfo=dt_timezone.utc))
        self._news(datetime(2025, 9, 30, 12, tzinfo=dt_timezone.utc))

        stats = services.get_profile_statistics(
            self.author, now=datetime(2026, 3, 31, 10, tzinfo=dt_timezone.utc)
        )

        self.assertEqual(stats['activity_chart'], [{'month': '2025-09', 'article_count': 1}])

    def test_months_before_clamps_to_month_end(self):
        self.assertEqual(
            services.months_before(datetime(2026, 8, 31, 9, tzinfo=dt_timezone.utc), 6),
            datetime(2026, 2, 28, 9, tzinfo=dt_timezone.utc)
        )
        self.assertEqual(
            services.months_before(datetime(2026, 3, 15, tzinfo=dt_timezone.utc), 6),
            datetime(2025, 9, 15, tzinfo=dt_timezone.utc)
        )

    def test_profile_statistics_without_articles(self):
        stats = services.get_profile_statistics(self.other)
        self.assertEqual(stats['total_articles'], 0)
        self.assertEqual(stats['category_breakdown'], [])
        self.assertEqual(stats['activity_chart'], [])

    def test_update_profile_rejects_duplicate_email(self):
        with self.assertRaises(ValidationError):
            services.update_profile(self.author, email='OTHER@test.com')

    def test_update_profile_changes_names(self):
        services.update_profile(self.author, first_name='Ana', last_name='Lima')
        self.author.refresh_from_db()
        self.assertEqual(self.author.get_full_name(), 'Ana Lima')

    def test_category_names_are_unique_ignoring_case(self):
        with self.assertRaises(ValidationError):
            services.create_category(name='sport')

    def test_category_in_use_cannot_be_deleted(self):
        self._news(datetime(2026, 1, 1, tzinfo=dt_timezone.utc))
        with self.assertRaises(ValidationError):
            services.delete_category(self.sport)
        services.delete_category(self.tech)
        self.assertFalse(Category.objects.filter(pk=self.tech.pk).exists())

    def test_update_user_roles(self):
        services.update_user_roles(self.other, ['Admin'])
        self.assertEqual(self.other.roles, {'Admin'})
        with self.assertRaises(ValidationError):
            services.update_user_roles(self.other, ['Editor'])

    def test_admin_update_rejects_duplicate_email(self):
        with self.assertRaises(ValidationError):
            services.update_user(self.admin, self.author, email='Other@Test.com')
        self.author.refresh_from_db()
        self.assertEqual(self.author.email, 'author@test.com')

    def test_admin_update_changes_fields_and_roles(self):
        services.update_user(self.admin, self.author, roles=['Admin', 'User'], first_name='Ana')
        self.author.refresh_from_db()
        self.assertEqual(self.author.first_name, 'Ana')
        self.assertEqual(self.author.roles, {'Admin', 'User'})

    def test_admin_cannot_remove_own_admin_role(self):
        with self.assertRaises(ValidationError):
            services.update_user(self.admin, self.admin, roles=['User'])
        self.assertIn('Admin', self.admin.roles)

    def test_admin_cannot_delete_self(self):
        with self.assertRaises(ValidationError):
            services.delete_user(self.admin, self.admin)
        services.delete_user(self.admin, self.other)
        self.assertFalse(User.objects.filter(pk=self.other.pk).exists())
