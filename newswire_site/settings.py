"""
Django settings for the NewsWire site.

Deployment-specific values are read from environment variables and fall back
to development defaults. Upload storage, default image sentinels and request
size limits are configured here and injected into the upload service.
"""

import os
from datetime import timedelta
from pathlib import Path


def _env_flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get(
    'DJANGO_SECRET_KEY',
    'django-insecure-newswire-development-key-change-me'
)

DEBUG = _env_flag('DJANGO_DEBUG', default=True)

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',')
    if host.strip()
]


# ===== APPLICATIONS =====

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'rest_framework_simplejwt',
    'newswire.apps.NewswireConfig',
]

MIDDLEWARE = [
    'newswire.middleware.RequestBodyLimitMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'newswire_site.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'newswire_site.wsgi.application'


# ===== DATABASE =====

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.environ.get('NEWSWIRE_DB_PATH', str(BASE_DIR / 'db.sqlite3')),
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# ===== AUTHENTICATION =====

AUTH_USER_MODEL = 'newswire.CustomUser'

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
     'OPTIONS': {'min_length': 6}},
]

# Role names map to auth groups
NEWSWIRE_ADMIN_ROLE = 'Admin'
NEWSWIRE_USER_ROLE = 'User'


# ===== REST FRAMEWORK =====

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework_simplejwt.authentication.JWTAuthentication',
        'rest_framework.authentication.SessionAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_PAGINATION_CLASS': 'rest_framework.pagination.PageNumberPagination',
    'PAGE_SIZE': 10,
}

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(minutes=60),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=1),
}

NEWS_PAGE_SIZE = 6


# ===== INTERNATIONALIZATION =====

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True


# ===== STATIC FILES & UPLOADS =====

STATIC_URL = '/static/'

# Uploaded images live outside the web root and are served under UPLOADS_URL
UPLOADS_ROOT = Path(os.environ.get('NEWSWIRE_UPLOADS_ROOT', str(BASE_DIR / 'Uploads')))
UPLOADS_URL = '/uploads/'
UPLOADS_CACHE_MAX_AGE = 60 * 60 * 24 * 365

# Legacy convention: images referenced relative to the web root
WEB_ROOT = Path(os.environ.get('NEWSWIRE_WEB_ROOT', str(BASE_DIR / 'wwwroot')))

MAX_IMAGE_UPLOAD_SIZE = 5 * 1024 * 1024
MAX_REQUEST_BODY_SIZE = 10 * 1024 * 1024

# Keep uploads above this size on disk while the request is parsed
FILE_UPLOAD_MAX_MEMORY_SIZE = 2 * 1024 * 1024

# Shared placeholder images; any path containing the marker is never deleted
DEFAULT_ASSET_MARKER = 'default'
DEFAULT_NEWS_IMAGE = '/assets/img/Local/default-news.jpg'
DEFAULT_AVATAR_IMAGE = '/assets/img/Local/default-avatar.jpg'


# ===== LOGGING =====

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'newswire': {
            'handlers': ['console'],
            'level': os.environ.get('NEWSWIRE_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
