"""Content store: the blob half of a shared file.

Wraps a Django storage backend with the owner/id/extension addressing
used everywhere else. Blob presence and absence are reported as values;
only genuine backend failures raise.
"""

import logging
from typing import IO, TYPE_CHECKING, Any, BinaryIO, final

from django.core.files.base import File as DjangoFile
from django.core.files.storage import default_storage

from fileshare.apps.files.exceptions import ContentStoreError
from fileshare.apps.files.infrastructure.naming import blob_name

if TYPE_CHECKING:
    from django.core.files.storage import Storage

logger = logging.getLogger(__name__)


@final
class ContentStore:
    """Blob storage addressed by ``(owner, hash_id, extension)``."""

    def __init__(self, storage: 'Storage') -> None:
        """Wrap a storage backend.

        Args:
            storage: Django storage backend holding the blobs.
        """
        self.storage = storage

    def ensure_namespace(self, owner: str) -> None:
        """Create the owner's directory if it does not exist yet.

        Args:
            owner: Username of the uploading user.

        Raises:
            ContentStoreError: If the directory cannot be created.
        """
        ensure_directory = getattr(self.storage, 'ensure_directory', None)
        if ensure_directory is None:
            return
        try:
            ensure_directory(owner)
        except OSError as error:
            logger.exception('Cannot create namespace for %s', owner)
            raise ContentStoreError(
                f'Cannot create storage directory for {owner}',
            ) from error

    def write(
        self,
        owner: str,
        hash_id: str,
        extension: str,
        stream: BinaryIO,
    ) -> str:
        """Write a blob, replacing any existing one at the same name.

        Args:
            owner: Username of the uploading user.
            hash_id: Derived id of the file.
            extension: File extension without the dot.
            stream: Binary file-like object with the content.

        Returns:
            Storage name of the written blob.

        Raises:
            ContentStoreError: If the backend fails to write.
        """
        name = blob_name(owner, hash_id, extension)
        try:
            return self.storage.save(name, DjangoFile(stream, name=name))
        except OSError as error:
            raise ContentStoreError(f'Cannot write blob {name}') from error

    def read(self, owner: str, hash_id: str, extension: str) -> IO[Any]:
        """Open a blob for reading.

        Args:
            owner: Username of the uploading user.
            hash_id: Derived id of the file.
            extension: File extension without the dot.

        Returns:
            Open binary file; the caller closes it.

        Raises:
            FileNotFoundError: If the blob does not exist.
            ContentStoreError: If the backend fails otherwise.
        """
        name = blob_name(owner, hash_id, extension)
        try:
            return self.storage.open(name, 'rb')
        except FileNotFoundError:
            raise
        except OSError as error:
            raise ContentStoreError(f'Cannot read blob {name}') from error

    def exists(self, owner: str, hash_id: str, extension: str) -> bool:
        """Check whether a blob is present.

        Args:
            owner: Username of the uploading user.
            hash_id: Derived id of the file.
            extension: File extension without the dot.

        Returns:
            True if the blob exists.

        Raises:
            ContentStoreError: If presence cannot be determined.
        """
        name = blob_name(owner, hash_id, extension)
        try:
            return self.storage.exists(name)
        except OSError as error:
            raise ContentStoreError(f'Cannot stat blob {name}') from error

    def remove(self, owner: str, hash_id: str, extension: str) -> bool:
        """Delete a blob.

        Args:
            owner: Username of the uploading user.
            hash_id: Derived id of the file.
            extension: File extension without the dot.

        Returns:
            True if the blob was deleted, False if it was already gone.

        Raises:
            ContentStoreError: If the blob exists but cannot be deleted.
        """
        if not self.exists(owner, hash_id, extension):
            logger.debug(
                'Blob already absent: %s',
                blob_name(owner, hash_id, extension),
            )
            return False

        name = blob_name(owner, hash_id, extension)
        try:
            self.storage.delete(name)
        except FileNotFoundError:
            return False
        except OSError as error:
            raise ContentStoreError(f'Cannot delete blob {name}') from error
        return True

    def size_of(self, owner: str, hash_id: str, extension: str) -> int | None:
        """Get blob size for display.

        Args:
            owner: Username of the uploading user.
            hash_id: Derived id of the file.
            extension: File extension without the dot.

        Returns:
            Size in bytes, or None when the blob cannot be statted.
        """
        name = blob_name(owner, hash_id, extension)
        try:
            return self.storage.size(name)
        except OSError:
            logger.warning('Cannot stat blob for size: %s', name)
            return None

    def discard(self, owner: str, hash_id: str, extension: str) -> None:
        """Best-effort delete of a blob whose upload was rolled back.

        Args:
            owner: Username of the uploading user.
            hash_id: Derived id of the file.
            extension: File extension without the dot.
        """
        name = blob_name(owner, hash_id, extension)
        rollback_upload = getattr(self.storage, 'rollback_upload', None)
        if rollback_upload is not None:
            rollback_upload(name)
            return
        try:
            self.storage.delete(name)
        except OSError:
            logger.exception('Failed to discard orphaned blob: %s', name)


def get_content_store() -> ContentStore:
    """Get a content store over the configured default storage.

    Returns:
        ContentStore wrapping ``default_storage``.
    """
    return ContentStore(default_storage)  # type: ignore[arg-type]
