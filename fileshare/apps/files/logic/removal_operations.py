"""Business logic for removing a shared file from both stores.

The blob and the record live in stores without a shared transaction,
so either may outlive the other after a partial failure. Removal
drives both to "absent" from whichever state it finds:

- blob and record present: delete both concurrently
- blob missing: delete the record alone (already-absent is success)
- record missing: delete the blob, report ``RECORD_NOT_FOUND``
"""

import enum
import logging
from concurrent.futures import Future

from fileshare.apps.files.exceptions import ContentStoreError, StoreError
from fileshare.apps.files.infrastructure.content_store import (
    ContentStore,
    get_content_store,
)
from fileshare.apps.files.infrastructure.naming import blob_name
from fileshare.apps.files.infrastructure.workers import (
    get_operation_timeout,
    submit,
)
from fileshare.apps.files.logic.metadata_operations import (
    delete_by_owner_and_id,
    find_by_owner_and_id,
)

logger = logging.getLogger(__name__)


@enum.unique
class RemovalStatus(enum.Enum):
    """Outcome of removing one file."""

    REMOVED = 'removed'
    RECORD_NOT_FOUND = 'record_not_found'
    MISSING_ARGS = 'missing_args'
    EXTENSION_UNKNOWN = 'extension_unknown'
    CONTENT_ERROR = 'content_error'
    STORE_ERROR = 'store_error'

    @property
    def succeeded(self) -> bool:
        """Whether both stores are known to be free of the file."""
        return self in {RemovalStatus.REMOVED, RemovalStatus.RECORD_NOT_FOUND}


def remove_file(
    owner: str | None,
    hash_id: str | None,
    extension: str | None = None,
    content_store: ContentStore | None = None,
) -> RemovalStatus:
    """Remove a file's blob and record.

    Used by both the expiry sweep and explicit removal requests.
    Calling it again for a removed file is safe.

    Args:
        owner: Username of the uploading user.
        hash_id: Derived id of the file.
        extension: File extension; looked up from the record if omitted.
        content_store: Blob store, defaults to the configured storage.

    Returns:
        RemovalStatus; a content failure wins over a store failure.
    """
    if not owner or not hash_id:
        return RemovalStatus.MISSING_ARGS

    store = content_store or get_content_store()

    if not extension:
        try:
            record = find_by_owner_and_id(owner, hash_id)
        except StoreError:
            return RemovalStatus.STORE_ERROR
        if record is None:
            logger.info(
                'Nothing to remove, no record for %s/%s',
                owner,
                hash_id,
            )
            return RemovalStatus.EXTENSION_UNKNOWN
        extension = record.extension

    name = blob_name(owner, hash_id, extension)
    try:
        blob_present = store.exists(owner, hash_id, extension)
    except ContentStoreError:
        logger.exception('Cannot check blob before removal: %s', name)
        return RemovalStatus.CONTENT_ERROR

    if not blob_present:
        logger.warning('Blob already absent, removing record only: %s', name)
        return _remove_record(owner, hash_id, extension)

    # Both deletions run at once; ORM work stays on this thread
    content_removal = submit(store.remove, owner, hash_id, extension)
    record_status = _remove_record(owner, hash_id, extension)
    if not _await_content_removal(content_removal, name):
        return RemovalStatus.CONTENT_ERROR

    if record_status is RemovalStatus.RECORD_NOT_FOUND:
        logger.warning('Removed orphaned blob without a record: %s', name)
    else:
        logger.info('File removed: %s (%s)', name, record_status.value)
    return record_status


def _remove_record(owner: str, hash_id: str, extension: str) -> RemovalStatus:
    try:
        deleted = delete_by_owner_and_id(owner, hash_id, extension)
    except StoreError:
        return RemovalStatus.STORE_ERROR
    if deleted:
        return RemovalStatus.REMOVED
    return RemovalStatus.RECORD_NOT_FOUND


def _await_content_removal(future: Future[bool], name: str) -> bool:
    """Wait for a blob deletion submitted to the I/O pool.

    Args:
        future: Pending ``ContentStore.remove`` call.
        name: Blob name for logging.

    Returns:
        True if the blob is gone (deleted now or already absent).
    """
    timeout = get_operation_timeout()
    try:
        future.result(timeout=timeout)
    except TimeoutError:
        logger.warning('Blob removal timed out after %.1fs: %s', timeout, name)
        return False
    except ContentStoreError:
        logger.exception('Failed to remove blob: %s', name)
        return False
    return True
