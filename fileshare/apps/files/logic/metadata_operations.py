"""Business logic for the file metadata store.

Every function surfaces a broken or unavailable database as
``StoreError`` so callers can tell it apart from "not found".
"""

import logging
from typing import Any, Final

from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from fileshare.apps.files.exceptions import DuplicateRecordError, StoreError
from fileshare.apps.files.models import FileRecord

# User type for Django's dynamic user model
_User = Any

_SECONDS_PER_MINUTE: Final = 60

User = get_user_model()
logger = logging.getLogger(__name__)


def current_minute() -> int:
    """Get the current time at minute resolution.

    Returns:
        Whole minutes since the Unix epoch.
    """
    return int(timezone.now().timestamp()) // _SECONDS_PER_MINUTE


def get_identity(username: str | None) -> _User | None:
    """Get a registered user by identity string.

    Args:
        username: Identity to look up.

    Returns:
        User instance, or None if no such user is registered.

    Raises:
        StoreError: If the users relation cannot be queried.
    """
    if not username:
        return None
    try:
        return User.objects.filter(username=username).first()
    except DatabaseError as error:
        logger.exception('Failed to look up identity: %s', username)
        raise StoreError(f'Cannot look up user {username}') from error


def insert_record(  # noqa: WPS211
    *,
    hash_id: str,
    file_name: str,
    extension: str,
    owner: _User,
    target: _User,
    uploaded_at: int | None = None,
) -> FileRecord:
    """Insert a file record.

    Uniqueness of ``(owner, hash_id)`` is checked before inserting and
    enforced again by the database constraint for concurrent inserts.

    Args:
        hash_id: Derived id of the file.
        file_name: Filename as submitted.
        extension: File extension without the dot.
        owner: Uploading user.
        target: Recipient user.
        uploaded_at: Minute timestamp, defaults to the current minute.

    Returns:
        Created FileRecord instance.

    Raises:
        DuplicateRecordError: If the owner already has this hash id.
        StoreError: If the insert fails for any other reason.
    """
    if uploaded_at is None:
        uploaded_at = current_minute()

    try:
        already_uploaded = FileRecord.objects.filter(
            owner=owner,
            hash_id=hash_id,
        ).exists()
        if already_uploaded:
            raise DuplicateRecordError(owner.username, hash_id)

        with transaction.atomic():
            record = FileRecord.objects.create(
                hash_id=hash_id,
                file_name=file_name,
                extension=extension,
                owner=owner,
                target=target,
                uploaded_at=uploaded_at,
            )
    except IntegrityError as error:
        # Lost a race against a concurrent upload of the same name
        raise DuplicateRecordError(owner.username, hash_id) from error
    except DatabaseError as error:
        logger.exception(
            'Failed to insert file record: %s/%s',
            owner.username,
            hash_id,
        )
        raise StoreError('Failed to add file details to the database') from error

    logger.debug(
        'File record created: %s/%s (ID: %d)',
        owner.username,
        hash_id,
        record.id,
    )
    return record


def find_by_owner_and_id(owner: str, hash_id: str) -> FileRecord | None:
    """Get the record an owner holds for a hash id.

    Args:
        owner: Username of the uploading user.
        hash_id: Derived id of the file.

    Returns:
        FileRecord if found, None otherwise.

    Raises:
        StoreError: If the database cannot be queried.
    """
    try:
        return FileRecord.objects.select_related('owner', 'target').filter(
            owner__username=owner,
            hash_id=hash_id,
        ).first()
    except DatabaseError as error:
        logger.exception('Failed to look up file: %s/%s', owner, hash_id)
        raise StoreError('Failed to look up file') from error


def find_by_target(target: str) -> list[FileRecord]:
    """Get all records shared with a recipient, newest first.

    Args:
        target: Username of the recipient.

    Returns:
        List of FileRecord instances.

    Raises:
        StoreError: If the database cannot be queried.
    """
    try:
        return list(
            FileRecord.objects.select_related('owner', 'target').filter(
                target__username=target,
            ).order_by('-uploaded_at', 'file_name'),
        )
    except DatabaseError as error:
        logger.exception('Failed to list files for target: %s', target)
        raise StoreError('Failed to list files') from error


def delete_by_owner_and_id(
    owner: str,
    hash_id: str,
    extension: str | None = None,
) -> bool:
    """Delete the record an owner holds for a hash id.

    Args:
        owner: Username of the uploading user.
        hash_id: Derived id of the file.
        extension: If given, only a record with this extension matches.

    Returns:
        True if a record was deleted, False if none existed.

    Raises:
        StoreError: If the delete fails.
    """
    records = FileRecord.objects.filter(
        owner__username=owner,
        hash_id=hash_id,
    )
    if extension:
        records = records.filter(extension=extension)

    try:
        deleted, _ = records.delete()
    except DatabaseError as error:
        logger.exception('Failed to delete file record: %s/%s', owner, hash_id)
        raise StoreError('Failed to remove file from the database') from error

    if deleted:
        logger.info('File record deleted: %s/%s', owner, hash_id)
    return deleted > 0


def find_expired_before(
    cutoff_minutes: int,
    limit: int | None = None,
) -> list[FileRecord]:
    """Get records uploaded at or before a cutoff, oldest first.

    Args:
        cutoff_minutes: Minute timestamp; records at it are included.
        limit: Max records to return, all when None.

    Returns:
        List of FileRecord instances with owners loaded.

    Raises:
        StoreError: If the database cannot be queried.
    """
    records = FileRecord.objects.select_related('owner').filter(
        uploaded_at__lte=cutoff_minutes,
    ).order_by('uploaded_at', 'id')
    if limit is not None:
        records = records[:limit]

    try:
        return list(records)
    except DatabaseError as error:
        logger.exception('Failed to scan for files before %d', cutoff_minutes)
        raise StoreError('Failed to scan for expired files') from error
