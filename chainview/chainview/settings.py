import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'chainview-dev-only-secret-key')

DEBUG = os.environ.get('DJANGO_DEBUG', '0') == '1'

ALLOWED_HOSTS = os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',')


# Explorer backend
# The history endpoint is served from a different host than the detail endpoints
EXPLORER_API_URL = os.environ.get('EXPLORER_API_URL', 'http://localhost:8000')
HISTORY_API_URL = os.environ.get('HISTORY_API_URL', 'https://nhiapi.vercel.app')

MARKET_POLL_SECONDS = int(os.environ.get('MARKET_POLL_SECONDS', '30'))
HISTORY_PAGE_SIZE = 50
HISTORY_HELD_ADDRESSES = int(os.environ.get('HISTORY_HELD_ADDRESSES', '5'))


INSTALLED_APPS = [
    'django.contrib.sessions',
    'django.contrib.messages',
    'main',
    'transactions',
    'history',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'chainview.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'chainview.wsgi.application'


# Nothing is persisted: no database, sessions live in process memory
DATABASES = {}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    }
}

SESSION_ENGINE = 'django.contrib.sessions.backends.cache'

MESSAGE_STORAGE = 'django.contrib.messages.storage.session.SessionStorage'


LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'plain': {
            'format': '%(message)s',
        },
        'verbose': {
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
        'api_file': {
            'class': 'logging.FileHandler',
            'filename': os.environ.get('API_LOG_FILE', str(BASE_DIR / 'api.log')),
            'formatter': 'plain',
            'delay': True,
        },
    },
    'loggers': {
        'api_logger': {
            'handlers': ['api_file'],
            'level': 'WARNING',
        },
        'transactions': {
            'handlers': ['console'],
            'level': 'INFO',
        },
        'history': {
            'handlers': ['console'],
            'level': 'INFO',
        },
    },
}


LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'UTC'

USE_I18N = True

USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
