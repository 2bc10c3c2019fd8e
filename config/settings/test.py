"""
StockPoint — Test Settings

Activated by pytest (see pyproject.toml). SQLite in memory unless
DATABASE_URL points elsewhere; set it to a PostgreSQL URL to run the
row-locking concurrency tests.

@file config/settings/test.py
"""

from .base import *  # noqa: F401, F403

DEBUG = False

DATABASES = {
    'default': env.db('DATABASE_URL', default='sqlite://:memory:'),  # noqa: F405
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

REST_FRAMEWORK['DEFAULT_THROTTLE_CLASSES'] = []  # noqa: F405

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

LOGGING['loggers']['stockpoint']['level'] = 'DEBUG'  # noqa: F405
