"""
API URL Configuration for NewsWire

Maps API endpoints to ViewSets using Django REST Framework routers.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .api_views import (
    CategoryViewSet,
    ContactMessageViewSet,
    DashboardViewSet,
    NewsViewSet,
    TeamMemberViewSet,
    UserViewSet,
)

# Create a router and register our viewsets
router = DefaultRouter()
router.register(r'news', NewsViewSet, basename='news')
router.register(r'categories', CategoryViewSet, basename='category')
router.register(r'team-members', TeamMemberViewSet, basename='team-member')
router.register(r'contact-messages', ContactMessageViewSet, basename='contact-message')
router.register(r'users', UserViewSet, basename='user')
router.register(r'dashboard', DashboardViewSet, basename='dashboard')

# The API URLs are now determined automatically by the router
urlpatterns = [
    path('', include(router.urls)),
]
