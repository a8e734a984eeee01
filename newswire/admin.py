"""
Django Admin Configuration for NewsWire

Registers all models with customized admin interfaces for better management.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from django.utils.translation import gettext_lazy as _

from .models import Category, ContactMessage, CustomUser, News, TeamMember, UserFavorite


@admin.register(CustomUser)
class CustomUserAdmin(UserAdmin):
    """
    Custom admin interface for CustomUser model.
    """

    # Fields to display in the list view
    list_display = ['username', 'email', 'get_roles', 'is_staff', 'is_active', 'date_joined']
    list_filter = ['groups', 'is_staff', 'is_active', 'date_joined']
    search_fields = ['username', 'email', 'first_name', 'last_name']

    # Organize fields in the edit form
    fieldsets = (
        (None, {'fields': ('username', 'password')}),
        (_('Personal info'), {'fields': ('first_name', 'last_name', 'email', 'profile_picture_url')}),
        (_('Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'description': 'Roles are the Admin and User groups.'
        }),
        (_('Important dates'), {'fields': ('last_login', 'date_joined')}),
    )

    def get_roles(self, obj):
        """Get the user's role names."""
        return ', '.join(sorted(obj.roles))
    get_roles.short_description = 'Roles'


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    """
    Admin interface for Category model.
    """

    list_display = ['name', 'get_news_count']
    search_fields = ['name', 'description']

    def get_news_count(self, obj):
        """Get the number of articles in this category."""
        return obj.news_items.count()
    get_news_count.short_description = 'Article Count'


@admin.register(News)
class NewsAdmin(admin.ModelAdmin):
    """
    Admin interface for News model.
    """

    list_display = ['title', 'category', 'author', 'topic', 'published_at']
    list_filter = ['category', 'published_at']
    search_fields = ['title', 'content', 'topic', 'author__username']
    date_hierarchy = 'published_at'

    fieldsets = (
        (None, {
            'fields': ('title', 'topic', 'content')
        }),
        (_('Classification'), {
            'fields': ('category', 'author'),
        }),
        (_('Media'), {
            'fields': ('image_url',),
        }),
        (_('Timestamps'), {
            'fields': ('published_at',),
        }),
    )


@admin.register(UserFavorite)
class UserFavoriteAdmin(admin.ModelAdmin):
    list_display = ['user', 'news', 'favorited_at']
    search_fields = ['user__username', 'news__title']


@admin.register(TeamMember)
class TeamMemberAdmin(admin.ModelAdmin):
    list_display = ['name', 'job_title', 'image_url']
    search_fields = ['name', 'job_title']


@admin.register(ContactMessage)
class ContactMessageAdmin(admin.ModelAdmin):
    """
    Admin interface for ContactMessage model.
    """

    list_display = ['subject', 'name', 'email', 'created_at']
    search_fields = ['name', 'email', 'subject', 'message']
    readonly_fields = ['created_at']
