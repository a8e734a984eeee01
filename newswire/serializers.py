"""
Django REST Framework Serializers for NewsWire API

This module defines serializers for converting model instances to/from JSON
for the RESTful API endpoints. Image files are not serializer fields: views
read them from ``request.FILES`` and hand them to the upload service, so a
rejected image never fails the request.
"""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Category, ContactMessage, News, TeamMember

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for CustomUser model as seen by administrators.

    Roles are returned as a sorted list of role names and may be replaced
    on update; role names and e-mail uniqueness are checked by the service
    layer.
    """

    roles = serializers.ListField(
        child=serializers.CharField(),
        required=False,
    )
    picture_path = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'first_name', 'last_name',
            'picture_path', 'roles', 'date_joined',
        ]
        read_only_fields = ['id', 'username', 'date_joined']

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['roles'] = sorted(instance.roles)
        return data


class ProfileUpdateSerializer(serializers.Serializer):
    """
    Fields a user may change on their own profile.

    The profile picture arrives separately as the ``image`` upload.
    """

    first_name = serializers.CharField(max_length=50, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=50, required=False, allow_blank=True)
    email = serializers.EmailField(required=False)


class CategorySerializer(serializers.ModelSerializer):
    """
    Serializer for Category model.

    Includes the number of articles in the category.
    """

    news_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ['id', 'name', 'description', 'news_count']
        read_only_fields = ['id']
        extra_kwargs = {
            # Uniqueness is checked case-insensitively by the service layer
            'name': {'validators': []},
        }

    def get_news_count(self, obj):
        """Get the number of articles in this category."""
        return obj.news_items.count()


class NewsSerializer(serializers.ModelSerializer):
    """
    Serializer for News model.

    ``is_owner`` and ``is_favorite`` are computed for the requesting user;
    views pass the user's favorite article ids in the ``favorite_ids``
    context entry.
    """

    category_name = serializers.CharField(source='category.name', read_only=True)
    author_name = serializers.SerializerMethodField()
    is_owner = serializers.SerializerMethodField()
    is_favorite = serializers.SerializerMethodField()

    class Meta:
        model = News
        fields = [
            'id', 'title', 'content', 'topic', 'category', 'category_name',
            'image_url', 'published_at', 'author', 'author_name',
            'is_owner', 'is_favorite',
        ]
        read_only_fields = ['id', 'image_url', 'published_at', 'author']

    def _request_user(self):
        request = self.context.get('request')
        return request.user if request else None

    def get_author_name(self, obj):
        """Get the author's full name or username."""
        if obj.author:
            return obj.author.get_full_name() or obj.author.username
        return None

    def get_is_owner(self, obj):
        """Check if the requesting user wrote the article."""
        user = self._request_user()
        if user is None or not user.is_authenticated or obj.author_id is None:
            return False
        return obj.author_id == user.pk

    def get_is_favorite(self, obj):
        """Check if the requesting user marked the article as favorite."""
        return obj.pk in self.context.get('favorite_ids', set())


class TeamMemberSerializer(serializers.ModelSerializer):
    """
    Serializer for TeamMember model.
    """

    class Meta:
        model = TeamMember
        fields = ['id', 'name', 'job_title', 'image_url']
        read_only_fields = ['id', 'image_url']


class ContactMessageSerializer(serializers.ModelSerializer):
    """
    Serializer for ContactMessage model.
    """

    class Meta:
        model = ContactMessage
        fields = ['id', 'name', 'email', 'subject', 'message', 'created_at']
        read_only_fields = ['id', 'created_at']
