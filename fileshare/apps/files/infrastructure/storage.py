"""Storage backends for shared file content.

Both backends overwrite an existing blob on save (re-uploading the same
name replaces its bytes) and report backend failures as ``OSError`` so
the content store can treat local disk and S3 alike.
"""

import logging
import os
from typing import Any, final, override

from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError
from django.core.files.storage import FileSystemStorage
from storages.backends.s3 import S3Storage
from storages.utils import clean_name

logger = logging.getLogger(__name__)

_HTTP_NOT_FOUND = 404
_S3_WRITE_ERRORS = (ClientError, BotoCoreError, S3UploadFailedError)


class _LoggingStorageMixin:
    """Adds logging and rollback support to a Django storage backend."""

    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save file with error handling and logging.

        Args:
            name: Storage path for the file.
            content: File content (file-like object).
            max_length: Optional maximum length for the filename.

        Returns:
            Actual storage path used.

        Raises:
            OSError: If the backend fails to store the content.
        """
        try:
            logger.debug('Writing blob to storage: %s', name)
            saved_name = super().save(name, content, max_length)  # type: ignore[misc]
        except Exception:
            logger.exception('Failed to write blob to storage: %s', name)
            raise
        else:
            logger.info('Stored blob: %s', saved_name)
            return saved_name

    def delete(self, name: str) -> None:
        """Delete file with error handling and logging.

        Args:
            name: Storage path of file to delete.

        Raises:
            OSError: If the backend fails to delete the blob.
        """
        try:
            logger.debug('Deleting blob from storage: %s', name)
            super().delete(name)  # type: ignore[misc]
        except Exception:
            logger.exception('Failed to delete blob from storage: %s', name)
            raise
        else:
            logger.info('Deleted blob: %s', name)

    def rollback_upload(self, name: str) -> None:
        """Delete a blob whose metadata insert was rolled back.

        This is a best-effort operation: if deletion fails the blob is
        left orphaned and the error is logged, not raised. Orphans are
        overwritten by a retried upload.

        Args:
            name: Storage path of the blob to delete.
        """
        try:
            logger.warning('Rolling back upload, deleting blob: %s', name)
            self.delete(name)
        except Exception:
            logger.exception(
                'Failed to rollback upload, orphaned blob: %s',
                name,
            )


@final
class LocalFileStorage(_LoggingStorageMixin, FileSystemStorage):
    """Local disk storage with one directory per uploading user."""

    def __init__(self, **kwargs: Any) -> None:
        """Create storage that overwrites existing blobs.

        Args:
            kwargs: FileSystemStorage options (location, base_url...).
        """
        kwargs.setdefault('allow_overwrite', True)
        super().__init__(**kwargs)

    @override
    def get_available_name(
        self,
        name: str,
        max_length: int | None = None,
    ) -> str:
        """Keep the requested name; blob names are deterministic.

        Args:
            name: Requested storage path.
            max_length: Ignored, hash names have a fixed length.

        Returns:
            The requested name unchanged.
        """
        return name

    @override
    def exists(self, name: str) -> bool:
        """Check whether a blob is present on disk.

        Args:
            name: Storage path of the blob.

        Returns:
            True if a file (or dangling link) exists at the path.
        """
        return os.path.lexists(self.path(name))

    def ensure_directory(self, name: str) -> None:
        """Create a directory under the storage root if it is absent.

        Concurrent creation of the same directory is not an error.

        Args:
            name: Directory path relative to the storage root.
        """
        os.makedirs(self.path(name), exist_ok=True)


@final
class S3FileStorage(_LoggingStorageMixin, S3Storage):
    """S3-compatible storage (MinIO, R2, AWS) for shared file content.

    Object keys follow the same ``<owner>/<hash_id>.<ext>`` layout as
    the local backend; "directories" are implicit key prefixes.
    """

    @override
    def exists(self, name: str) -> bool:
        """Check whether an object exists.

        Args:
            name: Storage path of the object.

        Returns:
            True if the object exists, False if S3 reports 404.

        Raises:
            OSError: If S3 cannot be queried.
        """
        try:
            self.connection.meta.client.head_object(
                Bucket=self.bucket_name,
                Key=self._normalize_name(clean_name(name)),
            )
        except ClientError as error:
            if _status_code(error) == _HTTP_NOT_FOUND:
                return False
            raise OSError(f'Cannot stat object {name}') from error
        return True

    @override
    def _save(self, name: str, content: Any) -> str:
        """Upload an object, translating S3 errors to OSError.

        Args:
            name: Storage path of the object.
            content: File content (file-like object).

        Returns:
            Storage path of the written object.

        Raises:
            OSError: If S3 rejects or fails the upload.
        """
        try:
            return super()._save(name, content)
        except _S3_WRITE_ERRORS as error:
            raise OSError(f'Cannot write object {name}') from error

    @override
    def size(self, name: str) -> int:
        """Get object size in bytes.

        Args:
            name: Storage path of the object.

        Returns:
            Size in bytes.

        Raises:
            FileNotFoundError: If the object does not exist.
            OSError: If S3 cannot be queried.
        """
        try:
            return super().size(name)
        except ClientError as error:
            if _status_code(error) == _HTTP_NOT_FOUND:
                raise FileNotFoundError(name) from error
            raise OSError(f'Cannot stat object {name}') from error

    @override
    def delete(self, name: str) -> None:
        """Delete an object, translating S3 errors to OSError.

        Args:
            name: Storage path of the object.

        Raises:
            OSError: If S3 rejects the delete.
        """
        try:
            super().delete(name)
        except ClientError as error:
            raise OSError(f'Cannot delete object {name}') from error

    def ensure_directory(self, name: str) -> None:
        """Directories are implicit key prefixes in S3, nothing to create.

        Args:
            name: Directory path relative to the bucket root.
        """


def _status_code(error: ClientError) -> int | None:
    return error.response.get('ResponseMetadata', {}).get('HTTPStatusCode')
