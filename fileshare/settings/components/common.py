"""Core Django settings: apps, database, cache, i18n."""

from typing import Final

from fileshare.settings.components import BASE_DIR, config

SECRET_KEY = config(
    'DJANGO_SECRET_KEY',
    default='django-insecure-fileshare-development-key',
)

DEBUG = config('DJANGO_DEBUG', cast=bool, default=False)

ALLOWED_HOSTS = config(
    'DJANGO_ALLOWED_HOSTS',
    cast=lambda hosts: [host.strip() for host in hosts.split(',') if host],
    default='localhost,127.0.0.1',
)

INSTALLED_APPS: Final = (
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Project apps
    'fileshare.apps.files',
)

MIDDLEWARE: Final = (
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
)

ROOT_URLCONF = 'fileshare.urls'

TEMPLATES = [{
    'BACKEND': 'django.template.backends.django.DjangoTemplates',
    'DIRS': [],
    'APP_DIRS': True,
    'OPTIONS': {
        'context_processors': [
            'django.template.context_processors.request',
            'django.contrib.auth.context_processors.auth',
            'django.contrib.messages.context_processors.messages',
        ],
    },
}]

# Metadata store. SQLite by default, the table lives next to `auth_user`
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': config(
            'DJANGO_DATABASE_PATH',
            default=str(BASE_DIR.joinpath('fileshare.sqlite3')),
        ),
    },
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Holds the single-flight expiry sweep lock. The file cache is shared by
# every process on one host (run_sweeper plus a cron sweep_expired); use
# memcached or redis when sweepers run on several hosts.
CACHES = {
    'default': {
        'BACKEND': config(
            'DJANGO_CACHE_BACKEND',
            default='django.core.cache.backends.filebased.FileBasedCache',
        ),
        'LOCATION': config(
            'DJANGO_CACHE_LOCATION',
            default=str(BASE_DIR.joinpath('files', 'cache')),
        ),
    },
}

LANGUAGE_CODE = config('DJANGO_LANGUAGE_CODE', default='en-us')
TIME_ZONE = config('DJANGO_TIME_ZONE', default='UTC')
USE_I18N = True
USE_TZ = True

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR.joinpath('staticfiles')
