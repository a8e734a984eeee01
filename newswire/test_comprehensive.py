"""
Comprehensive Tests for NewsWire API

This test suite covers:
1. Authentication (JWT) and role-based access
2. News CRUD with author-or-admin ownership
3. Favorites and per-user listing flags
4. Categories, team members and contact messages
5. User administration and the current user's profile
6. Dashboard statistics and the setup_groups command
7. Both successful and failed request scenarios

Run with: python manage.py test newswire.test_comprehensive
"""

from io import StringIO

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from newswire.models import Category, ContactMessage, News, TeamMember, UserFavorite

User = get_user_model()


class NewsWireAPITestCase(APITestCase):
    """Shared fixtures: an admin, two writers, a reader without roles."""

    def setUp(self):
        self.admin = User.objects.create_user(
            username='admin_test',
            password='testpass123',
            email='admin@test.com'
        )
        admin_group, _created = Group.objects.get_or_create(name=settings.NEWSWIRE_ADMIN_ROLE)
        self.admin.groups.add(admin_group)

        self.author = User.objects.create_user(
            username='author_test',
            password='testpass123',
            email='author@test.com'
        )
        self.other = User.objects.create_user(
            username='other_test',
            password='testpass123',
            email='other@test.com'
        )
        self.reader = User.objects.create_user(
            username='reader_test',
            password='testpass123',
            email='reader@test.com'
        )
        self.reader.groups.clear()

        self.sport = Category.objects.create(name='Sport', description='Matches and results')
        self.tech = Category.objects.create(name='Tech')

        self.news = News.objects.create(
            title='Cup final',
            content='Report from the final.',
            topic='Football',
            category=self.sport,
            author=self.author
        )

    def _authenticate(self, user):
        """Helper method to authenticate user and get JWT token."""
        response = self.client.post('/api/token/', {
            'username': user.username,
            'password': 'testpass123'
        })
        token = response.data['access']
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')


# ========== API AUTHENTICATION TESTS ==========

class APIAuthenticationTestCase(NewsWireAPITestCase):
    """Test JWT authentication."""

    def test_obtain_jwt_token(self):
        response = self.client.post('/api/token/', {
            'username': 'author_test',
            'password': 'testpass123'
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

    def test_obtain_token_invalid_credentials(self):
        response = self.client.post('/api/token/', {
            'username': 'author_test',
            'password': 'wrongpassword'
        })
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh_token(self):
        response = self.client.post('/api/token/', {
            'username': 'author_test',
            'password': 'testpass123'
        })
        refresh = self.client.post('/api/token/refresh/', {'refresh': response.data['refresh']})
        self.assertEqual(refresh.status_code, status.HTTP_200_OK)
        self.assertIn('access', refresh.data)

    def test_profile_requires_authentication(self):
        response = self.client.get('/api/users/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


# ========== NEWS API TESTS ==========

class NewsAPITestCase(NewsWireAPITestCase):
    """Test News endpoints and ownership rules."""

    def _payload(self, **overrides):
        payload = {
            'title': 'Election night',
            'content': 'Live coverage.',
            'topic': 'Politics',
            'category': self.tech.id,
        }
        payload.update(overrides)
        return payload

    def test_anonymous_can_list_news(self):
        response = self.client.get('/api/news/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['total_pages'], 1)
        item = response.data['results'][0]
        self.assertEqual(item['category_name'], 'Sport')
        self.assertFalse(item['is_owner'])
        self.assertFalse(item['is_favorite'])

    def test_listing_is_paged_newest_first(self):
        for i in range(7):
            News.objects.create(
                title=f'Story {i}', content='C', topic='T', category=self.tech, author=self.other
            )

        response = self.client.get('/api/news/')

        self.assertEqual(response.data['count'], 8)
        self.assertEqual(response.data['total_pages'], 2)
        self.assertEqual(len(response.data['results']), settings.NEWS_PAGE_SIZE)
        published = [item['published_at'] for item in response.data['results']]
        self.assertEqual(published, sorted(published, reverse=True))

        second_page = self.client.get('/api/news/?page=2')
        self.assertEqual(len(second_page.data['results']), 2)

    def test_filter_by_category(self):
        News.objects.create(title='Chips', content='C', topic='T', category=self.tech, author=self.other)

        response = self.client.get(f'/api/news/?category={self.tech.id}')

        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['title'], 'Chips')

    def test_filter_by_invalid_category(self):
        response = self.client.get('/api/news/?category=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_retrieve_news(self):
        response = self.client.get(f'/api/news/{self.news.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['title'], 'Cup final')
        self.assertEqual(response.data['image_url'], settings.DEFAULT_NEWS_IMAGE)

    def test_retrieve_missing_news(self):
        response = self.client.get('/api/news/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_is_owner_flag(self):
        self._authenticate(self.author)
        response = self.client.get(f'/api/news/{self.news.id}/')
        self.assertTrue(response.data['is_owner'])

        self._authenticate(self.other)
        response = self.client.get(f'/api/news/{self.news.id}/')
        self.assertFalse(response.data['is_owner'])

    def test_user_can_create_news(self):
        self._authenticate(self.other)
        response = self.client.post('/api/news/', self._payload())

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['author'], self.other.id)
        self.assertEqual(response.data['image_url'], settings.DEFAULT_NEWS_IMAGE)

    def test_create_ignores_client_author(self):
        self._authenticate(self.other)
        response = self.client.post('/api/news/', self._payload(author=self.author.id))

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(News.objects.get(pk=response.data['id']).author, self.other)

    def test_anonymous_cannot_create_news(self):
        response = self.client.post('/api/news/', self._payload())
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_user_without_role_cannot_create_news(self):
        self._authenticate(self.reader)
        response = self.client.post('/api/news/', self._payload())
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_news_missing_fields(self):
        self._authenticate(self.author)
        response = self.client.post('/api/news/', {'title': 'Only a title'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('content', response.data)

    def test_author_can_update_own_news(self):
        self._authenticate(self.author)
        response = self.client.patch(f'/api/news/{self.news.id}/', {'title': 'Cup final (updated)'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.news.refresh_from_db()
        self.assertEqual(self.news.title, 'Cup final (updated)')

    def test_other_user_cannot_update_news(self):
        self._authenticate(self.other)
        response = self.client.patch(f'/api/news/{self.news.id}/', {'title': 'Hijacked'})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.news.refresh_from_db()
        self.assertEqual(self.news.title, 'Cup final')

    def test_other_user_cannot_delete_news(self):
        self._authenticate(self.other)
        response = self.client.delete(f'/api/news/{self.news.id}/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(News.objects.filter(pk=self.news.id).exists())

    def test_admin_can_update_and_delete_any_news(self):
        self._authenticate(self.admin)
        response = self.client.patch(f'/api/news/{self.news.id}/', {'topic': 'Finals'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.delete(f'/api/news/{self.news.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(News.objects.filter(pk=self.news.id).exists())

    def test_news_without_author_is_admin_only(self):
        orphan = News.objects.create(title='Orphan', content='C', topic='T', category=self.sport)

        self._authenticate(self.author)
        response = self.client.patch(f'/api/news/{orphan.id}/', {'title': 'Mine now'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self._authenticate(self.admin)
        response = self.client.patch(f'/api/news/{orphan.id}/', {'title': 'Edited'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_update_does_not_change_author(self):
        self._authenticate(self.admin)
        self.client.patch(f'/api/news/{self.news.id}/', {'author': self.admin.id, 'title': 'New'})

        self.news.refresh_from_db()
        self.assertEqual(self.news.author, self.author)


# ========== FAVORITES TESTS ==========

class FavoriteAPITestCase(NewsWireAPITestCase):
    """Test toggling favorites."""

    def test_toggle_favorite(self):
        self._authenticate(self.other)

        response = self.client.post(f'/api/news/{self.news.id}/favorite/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_favorite'])
        self.assertTrue(self.client.get(f'/api/news/{self.news.id}/').data['is_favorite'])

        response = self.client.post(f'/api/news/{self.news.id}/favorite/')
        self.assertFalse(response.data['is_favorite'])
        self.assertFalse(UserFavorite.objects.filter(user=self.other).exists())

    def test_anonymous_cannot_favorite(self):
        response = self.client.post(f'/api/news/{self.news.id}/favorite/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_my_favorites(self):
        UserFavorite.objects.create(user=self.other, news=self.news)
        self._authenticate(self.other)

        response = self.client.get('/api/users/me/favorites/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['id'] for item in response.data['results']], [self.news.id])
        self.assertTrue(response.data['results'][0]['is_favorite'])


# ========== CATEGORY TESTS ==========

class CategoryAPITestCase(NewsWireAPITestCase):
    """Test Category endpoints."""

    def test_anonymous_can_list_categories(self):
        response = self.client.get('/api/categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        counts = {item['name']: item['news_count'] for item in response.data}
        self.assertEqual(counts, {'Sport': 1, 'Tech': 0})

    def test_user_cannot_create_category(self):
        self._authenticate(self.author)
        response = self.client.post('/api/categories/', {'name': 'Science'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_can_create_category(self):
        self._authenticate(self.admin)
        response = self.client.post('/api/categories/', {'name': 'Science', 'description': 'Research'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Category.objects.filter(name='Science').exists())

    def test_duplicate_category_name_rejected(self):
        self._authenticate(self.admin)
        response = self.client.post('/api/categories/', {'name': 'SPORT'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_rename_category(self):
        self._authenticate(self.admin)
        response = self.client.patch(f'/api/categories/{self.tech.id}/', {'name': 'Technology'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.tech.refresh_from_db()
        self.assertEqual(self.tech.name, 'Technology')

    def test_category_with_news_cannot_be_deleted(self):
        self._authenticate(self.admin)
        response = self.client.delete(f'/api/categories/{self.sport.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Category.objects.filter(pk=self.sport.id).exists())

    def test_empty_category_can_be_deleted(self):
        self._authenticate(self.admin)
        response = self.client.delete(f'/api/categories/{self.tech.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)


# ========== TEAM MEMBER TESTS ==========

class TeamMemberAPITestCase(NewsWireAPITestCase):
    """Test TeamMember endpoints."""

    def setUp(self):
        super().setUp()
        self.member = TeamMember.objects.create(name='Ana', job_title='Editor in chief')

    def test_team_requires_authentication(self):
        response = self.client.get('/api/team-members/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_user_can_view_team(self):
        self._authenticate(self.author)
        response = self.client.get('/api/team-members/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['image_url'], settings.DEFAULT_AVATAR_IMAGE)

    def test_user_cannot_add_member(self):
        self._authenticate(self.author)
        response = self.client.post('/api/team-members/', {'name': 'Bo', 'job_title': 'Reporter'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_manages_team(self):
        self._authenticate(self.admin)
        response = self.client.post('/api/team-members/', {'name': 'Bo', 'job_title': 'Reporter'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['image_url'], settings.DEFAULT_AVATAR_IMAGE)

        response = self.client.patch(f'/api/team-members/{self.member.id}/', {'job_title': 'Publisher'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.member.refresh_from_db()
        self.assertEqual(self.member.job_title, 'Publisher')

        response = self.client.delete(f'/api/team-members/{self.member.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)


# ========== CONTACT MESSAGE TESTS ==========

class ContactMessageAPITestCase(NewsWireAPITestCase):
    """Test the contact form endpoints."""

    def _message(self):
        return {
            'name': 'Visitor',
            'email': 'visitor@test.com',
            'subject': 'Correction',
            'message': 'The score was 2-1.',
        }

    def test_anonymous_can_send_message(self):
        response = self.client.post('/api/contact-messages/', self._message())
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(ContactMessage.objects.count(), 1)

    def test_invalid_email_rejected(self):
        payload = self._message()
        payload['email'] = 'not-an-email'
        response = self.client.post('/api/contact-messages/', payload)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_admin_reads_messages(self):
        ContactMessage.objects.create(**self._message())

        self._authenticate(self.author)
        response = self.client.get('/api/contact-messages/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self._authenticate(self.admin)
        response = self.client.get('/api/contact-messages/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)


# ========== USER ADMINISTRATION TESTS ==========

class UserAPITestCase(NewsWireAPITestCase):
    """Test user administration and the profile endpoints."""

    def test_admin_lists_users(self):
        self._authenticate(self.admin)
        response = self.client.get('/api/users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 4)

    def test_user_cannot_list_users(self):
        self._authenticate(self.author)
        response = self.client.get('/api/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_changes_roles(self):
        self._authenticate(self.admin)
        response = self.client.patch(
            f'/api/users/{self.other.id}/', {'roles': ['Admin', 'User']}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['roles'], ['Admin', 'User'])
        self.assertTrue(User.objects.get(pk=self.other.id).is_admin)

    def test_unknown_role_rejected(self):
        self._authenticate(self.admin)
        response = self.client.patch(
            f'/api/users/{self.other.id}/', {'roles': ['Editor']}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_cannot_assign_taken_email(self):
        self._authenticate(self.admin)
        response = self.client.patch(
            f'/api/users/{self.other.id}/', {'email': 'AUTHOR@test.com'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.other.refresh_from_db()
        self.assertEqual(self.other.email, 'other@test.com')

    def test_admin_cannot_drop_own_admin_role(self):
        self._authenticate(self.admin)
        response = self.client.patch(
            f'/api/users/{self.admin.id}/', {'roles': ['User']}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(User.objects.get(pk=self.admin.id).is_admin)

    def test_admin_cannot_delete_self(self):
        self._authenticate(self.admin)
        response = self.client.delete(f'/api/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_deletes_user_news_kept(self):
        self._authenticate(self.admin)
        response = self.client.delete(f'/api/users/{self.author.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.news.refresh_from_db()
        self.assertIsNone(self.news.author)

    def test_get_profile(self):
        UserFavorite.objects.create(user=self.author, news=self.news)
        self._authenticate(self.author)

        response = self.client.get('/api/users/me/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], 'author_test')
        self.assertEqual(response.data['current_picture_path'], settings.DEFAULT_AVATAR_IMAGE)
        self.assertEqual(response.data['total_news_count'], 1)
        self.assertEqual(response.data['total_favorite_count'], 1)

    def test_update_profile(self):
        self._authenticate(self.author)
        response = self.client.patch('/api/users/me/', {'first_name': 'Ana', 'email': 'ana@test.com'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['first_name'], 'Ana')
        self.assertEqual(response.data['email'], 'ana@test.com')

    def test_update_profile_duplicate_email(self):
        self._authenticate(self.author)
        response = self.client.patch('/api/users/me/', {'email': 'other@test.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_my_news_and_statistics(self):
        self._authenticate(self.author)

        response = self.client.get('/api/users/me/news/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['id'] for item in response.data['results']], [self.news.id])
        self.assertTrue(response.data['results'][0]['is_owner'])

        response = self.client.get('/api/users/me/statistics/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_articles'], 1)
        self.assertEqual(response.data['category_breakdown'][0]['category_name'], 'Sport')
        self.assertEqual(response.data['category_breakdown'][0]['percentage'], 100.0)


# ========== DASHBOARD TESTS ==========

class DashboardAPITestCase(NewsWireAPITestCase):
    """Test the admin dashboard."""

    def test_admin_sees_dashboard(self):
        self._authenticate(self.admin)
        response = self.client.get('/api/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {
            'total_news': 1,
            'total_categories': 2,
            'total_team_members': 0,
            'total_contact_messages': 0,
            'total_users': 4,
        })

    def test_user_cannot_see_dashboard(self):
        self._authenticate(self.author)
        response = self.client.get('/api/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


# ========== MANAGEMENT COMMAND TESTS ==========

class SetupGroupsCommandTestCase(TestCase):
    """Test the setup_groups management command."""

    def test_creates_groups_with_permissions(self):
        call_command('setup_groups', stdout=StringIO())

        admin_group = Group.objects.get(name='Admin')
        user_group = Group.objects.get(name='User')
        user_codenames = set(user_group.permissions.values_list('codename', flat=True))

        self.assertIn('delete_category', admin_group.permissions.values_list('codename', flat=True))
        self.assertIn('add_news', user_codenames)
        self.assertNotIn('add_category', user_codenames)

    def test_seeds_admin_account(self):
        out = StringIO()
        call_command(
            'setup_groups',
            admin_username='boss',
            admin_email='boss@test.com',
            admin_password='secret123',
            stdout=out,
        )

        admin = User.objects.get(username='boss')
        self.assertTrue(admin.is_superuser)
        self.assertIn('Admin', admin.roles)
        self.assertTrue(admin.check_password('secret123'))
        self.assertIn('Created administrator', out.getvalue())

    def test_command_is_idempotent(self):
        call_command('setup_groups', admin_username='boss', admin_password='secret123', stdout=StringIO())
        call_command('setup_groups', admin_username='boss', admin_password='secret123', stdout=StringIO())
        self.assertEqual(Group.objects.filter(name='Admin').count(), 1)
        self.assertEqual(User.objects.filter(username='boss').count(), 1)
