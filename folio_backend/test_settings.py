"""
Settings used by the pytest suite: SQLite and a throwaway media root.
"""
import tempfile
from pathlib import Path

from .settings import *  # noqa: F401,F403

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

MEDIA_ROOT = Path(tempfile.mkdtemp(prefix='folio-media-'))

STORAGES = {
    'default': {
        'BACKEND': 'content.storage.OverwriteStorage',
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}

ADMIN_PASSWORD = 'test-admin-password'

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # noqa: F405
    'TEST_REQUEST_DEFAULT_FORMAT': 'json',
}
