"""Shared fixtures for files app tests."""

from collections.abc import Callable
from pathlib import Path
from typing import Final

import boto3
import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from moto import mock_aws

from fileshare.apps.files.infrastructure.content_store import (
    ContentStore,
    get_content_store,
)
from fileshare.apps.files.infrastructure.storage import S3FileStorage

_TEST_BUCKET: Final = 'fileshare'

User = get_user_model()


@pytest.fixture(autouse=True)
def content_root(settings, tmp_path: Path) -> Path:
    """Point the default storage at a per-test directory.

    Returns:
        Root directory of stored blobs.
    """
    root = tmp_path / 'content'
    settings.STORAGES = {
        'default': {
            'BACKEND': (
                'fileshare.apps.files.infrastructure.storage.LocalFileStorage'
            ),
            'OPTIONS': {'location': str(root)},
        },
        'staticfiles': {
            'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
        },
    }
    return root


@pytest.fixture(autouse=True)
def cache_root(settings, tmp_path: Path):
    """Keep the sweep lock cache in a per-test directory.

    Yields:
        Directory of the file-based cache.
    """
    root = tmp_path / 'cache'
    settings.CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.filebased.FileBasedCache',
            'LOCATION': str(root),
        },
    }
    cache.clear()
    yield root
    cache.clear()


@pytest.fixture
def content_store(content_root: Path) -> ContentStore:
    """Content store over the per-test local directory.

    Returns:
        ContentStore wrapping the default storage.
    """
    return get_content_store()


@pytest.fixture
def user(db):
    """Create the uploading user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='tester',
        password='testpass123',
        email='tester@example.com',
    )


@pytest.fixture
def recipient(db):
    """Create the user files are shared with.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='alpha',
        password='testpass123',
        email='alpha@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create a user nothing is shared with, for isolation tests.

    Returns:
        Third user instance.
    """
    return User.objects.create_user(
        username='badPerson',
        password='testpass123',
        email='bad@example.com',
    )


@pytest.fixture
def make_source(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing an uploaded temp file.

    Returns:
        Callable taking content bytes and returning the file path.
    """
    uploads = tmp_path / 'incoming'
    uploads.mkdir()
    counter = iter(range(1000))

    def _make_source(content: bytes = b'test file content') -> Path:  # noqa: WPS430
        path = uploads / f'upload-{next(counter)}'
        path.write_bytes(content)
        return path

    return _make_source


@pytest.fixture
def mock_s3():
    """Mock S3 service with the fileshare bucket.

    Yields:
        boto3 S3 resource with the bucket created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket=_TEST_BUCKET)

        yield conn


@pytest.fixture
def s3_content_store(mock_s3) -> ContentStore:
    """Content store over the mocked S3 bucket.

    Returns:
        ContentStore wrapping an S3FileStorage.
    """
    storage = S3FileStorage(
        bucket_name=_TEST_BUCKET,
        access_key='testing',
        secret_key='testing',
        region_name='us-east-1',
        file_overwrite=True,
        default_acl=None,
    )
    return ContentStore(storage)
