"""
Django REST Framework Views for NewsWire API

This module contains ViewSets for the RESTful API endpoints. Article changes
are gated by ownership (author or admin); categories, team members, users,
contact messages and the dashboard are administered by admins only.
"""

from django.conf import settings
from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from . import services
from .models import Category, ContactMessage, News, TeamMember, UserFavorite
from .permissions import CanMutateContent, IsAdmin, IsAdminOrReadOnly, IsContributor
from .serializers import (
    CategorySerializer,
    ContactMessageSerializer,
    NewsSerializer,
    ProfileUpdateSerializer,
    TeamMemberSerializer,
    UserSerializer,
)


class NewsPagination(PageNumberPagination):
    """
    Page-number pagination for article listings.

    Adds total_pages and current_page so clients can render page links.
    """

    def get_page_size(self, request):
        return settings.NEWS_PAGE_SIZE

    def get_paginated_response(self, data):
        return Response({
            'count': self.page.paginator.count,
            'total_pages': self.page.paginator.num_pages,
            'current_page': self.page.number,
            'next': self.get_next_link(),
            'previous': self.get_previous_link(),
            'results': data,
        })


class NewsViewSet(viewsets.ModelViewSet):
    """
    ViewSet for News CRUD operations.

    Endpoints:
    - GET /api/news/?category=<id> - List articles, newest first (public)
    - GET /api/news/<id>/ - Retrieve single article (public)
    - POST /api/news/ - Create article with optional image (admins/users)
    - PUT/PATCH /api/news/<id>/ - Update article (author or admin)
    - DELETE /api/news/<id>/ - Delete article (author or admin)
    - POST /api/news/<id>/favorite/ - Toggle favorite (authenticated)
    """

    queryset = News.objects.select_related('category', 'author')
    serializer_class = NewsSerializer
    pagination_class = NewsPagination
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['title', 'content', 'topic', 'author__username']
    ordering_fields = ['published_at', 'title']
    ordering = ['-published_at']

    def get_queryset(self):
        """Optionally restrict the listing to one category."""
        queryset = super().get_queryset()
        category_id = self.request.query_params.get('category')
        if category_id:
            if not category_id.isdigit():
                raise ValidationError({'category': 'Category must be a numeric id.'})
            queryset = queryset.filter(category_id=int(category_id))
        return queryset

    def get_permissions(self):
        """
        Set permissions based on action.
        """
        if self.action in ['list', 'retrieve']:
            return [AllowAny()]
        elif self.action == 'create':
            return [IsAuthenticated(), IsContributor()]
        elif self.action in ['update', 'partial_update', 'destroy']:
            return [IsAuthenticated(), CanMutateContent()]

        return [IsAuthenticated()]

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['favorite_ids'] = services.favorite_news_ids(self.request.user)
        return context

    def perform_create(self, serializer):
        """
        Create the article for the current user.

        The image is optional; a rejected image falls back to the default.
        """
        serializer.instance = services.create_news(
            self.request.user,
            image_file=self.request.FILES.get('image'),
            **serializer.validated_data
        )

    def perform_update(self, serializer):
        serializer.instance = services.update_news(
            self.request.user,
            serializer.instance,
            image_file=self.request.FILES.get('image'),
            **serializer.validated_data
        )

    def perform_destroy(self, instance):
        services.delete_news(self.request.user, instance)

    @action(detail=True, methods=['post'], url_path='favorite')
    def favorite(self, request, pk=None):
        """
        Add the article to favorites, or remove it if already there.

        POST /api/news/<id>/favorite/
        """
        news = self.get_object()
        is_favorite = services.toggle_favorite(request.user, news)
        return Response({
            'is_favorite': is_favorite,
            'detail': 'Added to favorites!' if is_favorite else 'Removed from favorites!',
        })


class CategoryViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Category CRUD operations.

    Anyone may read categories; only administrators may change them.
    A category that still has articles cannot be deleted.
    """

    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    permission_classes = [IsAdminOrReadOnly]
    pagination_class = None

    def perform_create(self, serializer):
        serializer.instance = services.create_category(**serializer.validated_data)

    def perform_update(self, serializer):
        serializer.instance = services.update_category(
            serializer.instance, **serializer.validated_data
        )

    def perform_destroy(self, instance):
        services.delete_category(instance)


class TeamMemberViewSet(viewsets.ModelViewSet):
    """
    ViewSet for TeamMember CRUD operations.

    Authenticated users may view the team; administrators manage it and may
    attach a photo as the ``image`` upload.
    """

    queryset = TeamMember.objects.all()
    serializer_class = TeamMemberSerializer
    pagination_class = None

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action in ['list', 'retrieve']:
            return [IsAuthenticated()]
        return [IsAuthenticated(), IsAdmin()]

    def perform_create(self, serializer):
        member = TeamMember(**serializer.validated_data)
        serializer.instance = services.save_team_member(
            member, image_file=self.request.FILES.get('image')
        )

    def perform_update(self, serializer):
        member = serializer.instance
        for name, value in serializer.validated_data.items():
            setattr(member, name, value)
        serializer.instance = services.save_team_member(
            member, image_file=self.request.FILES.get('image')
        )


class ContactMessageViewSet(mixins.CreateModelMixin,
                            mixins.ListModelMixin,
                            mixins.RetrieveModelMixin,
                            mixins.DestroyModelMixin,
                            viewsets.GenericViewSet):
    """
    ViewSet for contact messages.

    Endpoints:
    - POST /api/contact-messages/ - Send a message (public)
    - GET /api/contact-messages/ - List messages (admins only)
    - GET/DELETE /api/contact-messages/<id>/ - Read or delete (admins only)
    """

    queryset = ContactMessage.objects.all()
    serializer_class = ContactMessageSerializer

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action == 'create':
            return [AllowAny()]
        return [IsAuthenticated(), IsAdmin()]


class UserViewSet(mixins.ListModelMixin,
                  mixins.RetrieveModelMixin,
                  mixins.UpdateModelMixin,
                  mixins.DestroyModelMixin,
                  viewsets.GenericViewSet):
    """
    ViewSet for users and the current user's profile.

    Endpoints:
    - GET /api/users/ - List users (admins only)
    - GET/PUT/PATCH/DELETE /api/users/<id>/ - Manage a user and their roles (admins only)
    - GET/PATCH /api/users/me/ - Current user's profile
    - GET /api/users/me/statistics/ - Current user's writing statistics
    - GET /api/users/me/news/ - Current user's articles
    - GET /api/users/me/favorites/ - Current user's favorite articles
    """

    queryset = services.User.objects.prefetch_related('groups')
    serializer_class = UserSerializer
    filter_backends = [filters.SearchFilter]
    search_fields = ['username', 'email', 'first_name', 'last_name']

    profile_actions = ['me', 'statistics', 'my_news', 'my_favorites']

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action in self.profile_actions:
            return [IsAuthenticated()]
        return [IsAuthenticated(), IsAdmin()]

    def perform_update(self, serializer):
        serializer.instance = services.update_user(
            self.request.user, serializer.instance, **serializer.validated_data
        )

    def perform_destroy(self, instance):
        services.delete_user(self.request.user, instance)

    @action(detail=False, methods=['get', 'patch'], url_path='me')
    def me(self, request):
        """
        Get or update the current user's profile.

        PATCH accepts first_name, last_name, email and an optional
        ``image`` upload for the profile picture.
        """
        if request.method == 'PATCH':
            serializer = ProfileUpdateSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            services.update_profile(
                request.user,
                image_file=request.FILES.get('image'),
                **serializer.validated_data
            )
        return Response(services.get_profile(request.user))

    @action(detail=False, methods=['get'], url_path='me/statistics')
    def statistics(self, request):
        """GET /api/users/me/statistics/"""
        return Response(services.get_profile_statistics(request.user))

    @action(detail=False, methods=['get'], url_path='me/news')
    def my_news(self, request):
        """GET /api/users/me/news/"""
        queryset = News.objects.filter(author=request.user).select_related('category', 'author')
        return self._paginated_news(request, queryset)

    @action(detail=False, methods=['get'], url_path='me/favorites')
    def my_favorites(self, request):
        """GET /api/users/me/favorites/"""
        favorite_ids = UserFavorite.objects.filter(user=request.user).values('news_id')
        queryset = News.objects.filter(pk__in=favorite_ids).select_related('category', 'author')
        return self._paginated_news(request, queryset)

    def _paginated_news(self, request, queryset):
        paginator = NewsPagination()
        page = paginator.paginate_queryset(queryset.order_by('-published_at'), request, view=self)
        context = {
            'request': request,
            'favorite_ids': services.favorite_news_ids(request.user),
        }
        serializer = NewsSerializer(page, many=True, context=context)
        return paginator.get_paginated_response(serializer.data)


class DashboardViewSet(viewsets.ViewSet):
    """
    Site statistics for administrators.

    GET /api/dashboard/
    """

    permission_classes = [IsAuthenticated, IsAdmin]

    def list(self, request):
        return Response(services.get_dashboard_stats(), status=status.HTTP_200_OK)
