# club_project/settings.py

import os
from pathlib import Path
from dotenv import load_dotenv

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# Load environment variables from a .env file
load_dotenv(os.path.join(BASE_DIR, '.env'))


# --- SECURITY SETTINGS ---
SECRET_KEY = os.environ.get('SECRET_KEY', 'django-insecure-local-development-key')

# Defaults to False (production) unless DEV_MODE=True in .env
DEBUG = os.environ.get('DEV_MODE') == 'True'

if DEBUG:
    ALLOWED_HOSTS = ['127.0.0.1', 'localhost', 'testserver']
    APP_SITE_URL = 'http://127.0.0.1:8000'
    CSRF_TRUSTED_ORIGINS = []
else:
    ALLOWED_HOSTS = [host for host in os.environ.get('ALLOWED_HOSTS', 'localhost,testserver').split(',') if host]
    APP_SITE_URL = os.environ.get('APP_SITE_URL', 'http://localhost:8000')
    CSRF_TRUSTED_ORIGINS = [APP_SITE_URL] if APP_SITE_URL.startswith('https://') else []


# --- APPLICATION DEFINITION ---
INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'django.contrib.staticfiles',
    'scheduling',
    'rest_framework',
    'corsheaders',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'whitenoise.middleware.WhiteNoiseMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'club_project.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
            ],
        },
    },
]

WSGI_APPLICATION = 'club_project.wsgi.application'


# --- DATABASE ---
# The schedule lives in a JSON document; the database is only here for Django itself.
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}


# --- INTERNATIONALIZATION & TIMEZONE ---
LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.environ.get('TIME_ZONE', 'Europe/Ljubljana')
USE_I18N = True
# Training times are naive local wall-clock values.
USE_TZ = False


# --- STATIC FILES ---
STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles_collected'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# --- REST FRAMEWORK ---
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    'UNAUTHENTICATED_USER': None,
    'DEFAULT_RENDERER_CLASSES': ['rest_framework.renderers.JSONRenderer'],
}


# --- CORS SETTINGS ---
# The schedule API and the publish endpoint are called from the static site.
CORS_URLS_REGEX = r'^/schedule/api/.*$'
CORS_ALLOW_ALL_ORIGINS = True
CORS_ALLOW_METHODS = ['GET', 'POST', 'OPTIONS']
CORS_ALLOW_HEADERS = ['content-type', 'x-publish-key']


# --- LOGGING ---
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {'format': '{levelname} {asctime} {name}: {message}', 'style': '{'},
    },
    'handlers': {
        'console': {'class': 'logging.StreamHandler', 'formatter': 'simple'},
    },
    'loggers': {
        'scheduling': {
            'handlers': ['console'],
            'level': os.environ.get('SCHEDULING_LOG_LEVEL', 'DEBUG' if DEBUG else 'INFO'),
        },
    },
}


# --- CUSTOM APP SETTINGS ---
SITE_NAME = os.environ.get('SITE_NAME', 'ClubSync')

# Where the club document (players, coaches, locations, trainings) is stored.
CLUB_DOCUMENT_PATH = Path(os.environ.get('CLUB_DOCUMENT_PATH', BASE_DIR / 'data' / 'db.json'))

# Shared secret checked by the publish endpoint and sent by the publish command.
PUBLISH_KEY = os.environ.get('PUBLISH_KEY', '')
PUBLISH_ENDPOINT = os.environ.get('PUBLISH_ENDPOINT', APP_SITE_URL + '/schedule/api/publish/')

# Fallback for documents that do not set settings.publicDaysAhead.
DEFAULT_PUBLIC_DAYS_AHEAD = int(os.environ.get('DEFAULT_PUBLIC_DAYS_AHEAD', 60))
