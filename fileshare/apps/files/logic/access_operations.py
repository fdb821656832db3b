"""Business logic for deciding who may retrieve a shared file.

``authorize`` is the single check consulted before any file content is
handed out. Every failure degrades to a denial, and denials look the
same whether the file is missing or belongs to someone else.
"""

import logging
from typing import IO, Any

from fileshare.apps.files.exceptions import AccessDeniedError, StoreError
from fileshare.apps.files.infrastructure.content_store import (
    ContentStore,
    get_content_store,
)
from fileshare.apps.files.infrastructure.naming import blob_name
from fileshare.apps.files.logic.metadata_operations import find_by_owner_and_id
from fileshare.apps.files.models import FileRecord

logger = logging.getLogger(__name__)


def authorize(
    hash_id: str | None,
    owner: str | None,
    requester: str | None,
) -> bool:
    """Check whether a requester may read a file.

    Args:
        hash_id: Derived id of the file.
        owner: Username of the uploading user.
        requester: Username of the user asking for the file.

    Returns:
        True only if the file exists and the requester is its target.
        Missing arguments and store failures return False.
    """
    if not hash_id or not owner or not requester:
        return False

    try:
        record = find_by_owner_and_id(owner, hash_id)
    except StoreError:
        logger.exception('Denying access, store unavailable: %s/%s', owner, hash_id)
        return False

    if record is None:
        return False
    return record.target.username == requester


def resolve_path(requester: str, owner: str, hash_id: str) -> str:
    """Get the storage path of a file the requester may download.

    Args:
        requester: Username of the user asking for the file.
        owner: Username of the uploading user.
        hash_id: Derived id of the file.

    Returns:
        Blob path relative to the content root
        (``<owner>/<hash_id>.<extension>``).

    Raises:
        AccessDeniedError: If the file is missing or not shared with
            the requester.
    """
    record = _get_authorized_record(requester, owner, hash_id)
    return blob_name(owner, hash_id, record.extension)


def open_shared_file(
    requester: str,
    owner: str,
    hash_id: str,
    content_store: ContentStore | None = None,
) -> tuple[FileRecord, IO[Any]]:
    """Open a shared file for the requester to download.

    Args:
        requester: Username of the user asking for the file.
        owner: Username of the uploading user.
        hash_id: Derived id of the file.
        content_store: Blob store, defaults to the configured storage.

    Returns:
        Tuple of the file record (for the download name) and the open
        binary file. The caller closes the file.

    Raises:
        AccessDeniedError: If the file is missing, not shared with the
            requester, or its blob is gone.
    """
    record = _get_authorized_record(requester, owner, hash_id)
    store = content_store or get_content_store()
    try:
        stream = store.read(owner, hash_id, record.extension)
    except FileNotFoundError as error:
        logger.warning(
            'Record without blob, waiting for expiry: %s',
            record.blob_name,
        )
        raise AccessDeniedError from error
    return record, stream


def _get_authorized_record(
    requester: str,
    owner: str,
    hash_id: str,
) -> FileRecord:
    if not authorize(hash_id, owner, requester):
        logger.warning(
            'Access denied: %s requested %s/%s',
            requester,
            owner,
            hash_id,
        )
        raise AccessDeniedError

    try:
        record = find_by_owner_and_id(owner, hash_id)
    except StoreError as error:
        raise AccessDeniedError from error
    if record is None:
        # Removed between the check and the lookup
        raise AccessDeniedError
    return record
