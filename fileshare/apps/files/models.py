"""Database models for files app."""

from typing import Final, final, override

from django.conf import settings
from django.db import models

from fileshare.apps.files.infrastructure.naming import blob_name

# Constants for field max lengths
_HASH_ID_MAX_LENGTH: Final = 40  # SHA1 hex length
_FILE_NAME_MAX_LENGTH: Final = 255
_EXTENSION_MAX_LENGTH: Final = 32


@final
class FileRecord(models.Model):
    """Metadata for one shared file.

    The blob itself lives in the content store at
    ``<owner>/<hash_id>.<extension>``. The record is never mutated:
    it is created by an upload and deleted by expiry or an explicit
    removal request.
    """

    # Digest of the original base filename (extension excluded)
    hash_id = models.CharField(
        max_length=_HASH_ID_MAX_LENGTH,
        db_index=True,
        help_text='SHA1 hex digest of the base filename',
    )

    file_name = models.CharField(
        max_length=_FILE_NAME_MAX_LENGTH,
        help_text='Filename as submitted by the uploader',
    )

    extension = models.CharField(
        max_length=_EXTENSION_MAX_LENGTH,
        help_text='Final dot-separated segment of the filename',
    )

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='uploaded_files',
        db_column='user_upload',
    )

    # The only identity allowed to retrieve the file
    target = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='received_files',
        db_column='target_user',
    )

    uploaded_at = models.BigIntegerField(
        db_column='upload_time',
        db_index=True,
        help_text='Minutes since the Unix epoch',
    )

    class Meta:
        """Model metadata."""

        db_table = 'files'
        verbose_name = 'Shared file'  # type: ignore[mutable-override]
        verbose_name_plural = 'Shared files'  # type: ignore[mutable-override]
        ordering = ['-uploaded_at']

        indexes = [
            # Optimize recipient listing queries
            models.Index(
                fields=['target', '-uploaded_at'],
                name='files_target_recent_idx',
            ),
        ]

        constraints = [
            # A user cannot share two files with the same base name
            models.UniqueConstraint(
                fields=['owner', 'hash_id'],
                name='files_owner_hash_unique',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.owner.username}:{self.file_name}'

    @property
    def blob_name(self) -> str:
        """Storage name of the blob, relative to the content root.

        Example: owner 'tester', 'test.txt' ->
        'tester/a94a8fe5ccb19ba61c4c0873d391e987982fbbd3.txt'

        Returns:
            Path of the blob inside the content store.
        """
        return blob_name(self.owner.username, self.hash_id, self.extension)
