"""Django storage configuration for uploaded file content.

Two content backends are supported:
- Local disk (default), one directory per uploading user
- S3-compatible object storage (MinIO, Cloudflare R2, AWS) via
  django-storages

Both lay blobs out as ``<owner>/<hash_id>.<extension>`` and overwrite
an existing blob on re-upload.
"""

from typing import Any, Final

from fileshare.settings.components import BASE_DIR, config

FILESHARE_STORAGE_BACKEND = config(
    'FILESHARE_STORAGE_BACKEND',
    default='local',
)

FILESHARE_STORAGE_ROOT = config(
    'FILESHARE_STORAGE_ROOT',
    default=str(BASE_DIR.joinpath('files', 'uploads')),
)

_LOCAL_STORAGE: Final[dict[str, Any]] = {
    'BACKEND': 'fileshare.apps.files.infrastructure.storage.LocalFileStorage',
    'OPTIONS': {
        'location': FILESHARE_STORAGE_ROOT,
    },
}

if FILESHARE_STORAGE_BACKEND == 's3':
    _CONTENT_STORAGE: dict[str, Any] = {
        'BACKEND': 'fileshare.apps.files.infrastructure.storage.S3FileStorage',
        'OPTIONS': {
            'bucket_name': config('AWS_STORAGE_BUCKET_NAME'),
            'access_key': config('AWS_ACCESS_KEY_ID'),
            'secret_key': config('AWS_SECRET_ACCESS_KEY'),
            'endpoint_url': config(
                'AWS_S3_ENDPOINT_URL',
                default=None,
            ),
            'region_name': config(
                'AWS_S3_REGION_NAME',
                default='auto',
            ),
            'file_overwrite': True,  # Re-upload replaces the blob
            'default_acl': None,  # Inherit bucket ACL
        },
    }
else:
    _CONTENT_STORAGE = _LOCAL_STORAGE

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': _CONTENT_STORAGE,
    'staticfiles': {
        # Keep static files separate from user files
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
