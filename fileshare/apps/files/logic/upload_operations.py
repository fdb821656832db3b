"""Business logic for uploading a file to share."""

import functools
import logging
from concurrent.futures import Future
from pathlib import Path
from typing import IO, Any

from fileshare.apps.files.exceptions import (
    ContentStoreError,
    DuplicateRecordError,
    DuplicateUploadError,
    InvalidNameError,
    InvalidSourceUserError,
    InvalidTargetUserError,
    MissingInputError,
    NamingFailedError,
    PersistenceError,
    SourceNotFoundError,
    StoreError,
)
from fileshare.apps.files.infrastructure.content_store import (
    ContentStore,
    get_content_store,
)
from fileshare.apps.files.infrastructure.naming import (
    blob_name,
    derive_id,
    split_extension,
)
from fileshare.apps.files.infrastructure.workers import (
    get_operation_timeout,
    submit,
)
from fileshare.apps.files.logic.metadata_operations import (
    delete_by_owner_and_id,
    find_by_owner_and_id,
    get_identity,
    insert_record,
)

# User type for Django's dynamic user model
_User = Any

logger = logging.getLogger(__name__)


def upload_file(
    source_path: str | Path | None,
    original_name: str | None,
    owner: str,
    target: str,
    content_store: ContentStore | None = None,
) -> str:
    """Store a file and share it with a single recipient.

    Validation failures are reported before anything is written.

    Transaction safety: the record is committed first in its own short
    transaction, so a concurrent upload of the same name fails on the
    unique constraint before writing any bytes. The blob is then written
    outside any transaction, keeping the database free for other
    requests during the copy. If the write fails, the record is deleted
    again and the partial blob discarded. A write that times out is
    discarded once the worker finishes with it.

    Args:
        source_path: Path of the uploaded bytes (e.g., a temp file).
        original_name: Filename as submitted by the uploader.
        owner: Username of the uploading user.
        target: Username of the recipient.
        content_store: Blob store, defaults to the configured storage.

    Returns:
        Derived id of the stored file, used to build the share link.

    Raises:
        MissingInputError: If no file or no file name was given.
        InvalidSourceUserError: If the owner is not registered.
        InvalidTargetUserError: If the target is not registered.
        SourceNotFoundError: If the uploaded bytes cannot be opened.
        NamingFailedError: If the name has no usable extension.
        DuplicateUploadError: If the owner already shares this name.
        PersistenceError: If content or metadata could not be stored.
    """
    if not source_path or not original_name:
        raise MissingInputError('No file or no file name specified for upload')

    owner_user = _require_identity(owner, InvalidSourceUserError)
    target_user = _require_identity(target, InvalidTargetUserError)

    source = Path(source_path)
    if not source.is_file():
        raise SourceNotFoundError(f'Selected file does not exist: {source}')

    store = content_store or get_content_store()
    try:
        store.ensure_namespace(owner)
    except ContentStoreError as error:
        raise PersistenceError(str(error)) from error

    try:
        hash_id = derive_id(original_name)
        _, extension = split_extension(original_name)
    except InvalidNameError as error:
        raise NamingFailedError(str(error)) from error

    _ensure_not_uploaded(owner, hash_id, original_name)

    logger.info(
        'Uploading %s from %s for %s (ID: %s)',
        original_name,
        owner,
        target,
        hash_id,
    )

    try:
        insert_record(
            hash_id=hash_id,
            file_name=original_name,
            extension=extension,
            owner=owner_user,
            target=target_user,
        )
    except DuplicateRecordError as error:
        raise DuplicateUploadError(str(error)) from error
    except StoreError as error:
        raise PersistenceError(str(error)) from error

    try:
        _copy_content(store, source, owner, hash_id, extension)
    except (SourceNotFoundError, PersistenceError):
        _undo_insert(owner, hash_id, extension)
        raise

    logger.info('File uploaded: %s/%s.%s', owner, hash_id, extension)
    return hash_id


def _require_identity(
    username: str | None,
    error_class: type[InvalidSourceUserError | InvalidTargetUserError],
) -> _User:
    """Resolve a username to a registered user.

    Args:
        username: Identity to resolve.
        error_class: Error to raise when the identity is unknown.

    Returns:
        User instance.

    Raises:
        InvalidSourceUserError: For an unknown owner.
        InvalidTargetUserError: For an unknown target.
        PersistenceError: If the users relation cannot be queried.
    """
    try:
        user = get_identity(username)
    except StoreError as error:
        raise PersistenceError(str(error)) from error
    if user is None:
        raise error_class(username)
    return user


def _ensure_not_uploaded(owner: str, hash_id: str, original_name: str) -> None:
    try:
        existing = find_by_owner_and_id(owner, hash_id)
    except StoreError as error:
        raise PersistenceError(str(error)) from error
    if existing is not None:
        logger.info(
            'Rejected duplicate upload of %s by %s (ID: %s)',
            original_name,
            owner,
            hash_id,
        )
        raise DuplicateUploadError(
            f'File of the same name already uploaded by {owner}',
        )


def _undo_insert(owner: str, hash_id: str, extension: str) -> None:
    """Delete the record of an upload whose content was not stored.

    A record that cannot be deleted is left for the expiry sweep.

    Args:
        owner: Username of the uploading user.
        hash_id: Derived id of the file.
        extension: File extension without the dot.
    """
    try:
        delete_by_owner_and_id(owner, hash_id, extension)
    except StoreError:
        logger.exception(
            'Failed to undo upload, record left for expiry: %s',
            blob_name(owner, hash_id, extension),
        )


def _copy_content(  # noqa: WPS211
    store: ContentStore,
    source: Path,
    owner: str,
    hash_id: str,
    extension: str,
) -> None:
    """Copy the uploaded bytes into the content store.

    The write runs on the I/O pool and is awaited for at most the
    operation timeout. On timeout the worker keeps the source open;
    it is closed and the blob discarded once the write finishes.

    Args:
        store: Blob store to write to.
        source: Path of the uploaded bytes.
        owner: Username of the uploading user.
        hash_id: Derived id of the file.
        extension: File extension without the dot.

    Raises:
        SourceNotFoundError: If the source vanished or cannot be read.
        PersistenceError: If the write failed or timed out.
    """
    try:
        stream = source.open('rb')
    except OSError as error:
        raise SourceNotFoundError(
            f'Selected file cannot be opened: {source}',
        ) from error

    handed_off = False
    write = submit(store.write, owner, hash_id, extension, stream)
    timeout = get_operation_timeout()
    try:
        write.result(timeout=timeout)
    except TimeoutError as error:
        logger.warning(
            'Blob write exceeded %.1f seconds, discarding when done: %s',
            timeout,
            blob_name(owner, hash_id, extension),
        )
        handed_off = True
        write.add_done_callback(
            functools.partial(
                _discard_late_write,
                store,
                stream,
                (owner, hash_id, extension),
            ),
        )
        raise PersistenceError('Timed out storing file content') from error
    except ContentStoreError as error:
        store.discard(owner, hash_id, extension)
        raise PersistenceError('Failed to store file content') from error
    finally:
        if not handed_off:
            stream.close()


def _discard_late_write(
    store: ContentStore,
    stream: IO[bytes],
    address: tuple[str, str, str],
    write: Future[str],
) -> None:
    """Clean up after a blob write the upload stopped waiting for.

    Args:
        store: Blob store the write went to.
        stream: Source file handed to the write.
        address: Owner, hash id and extension of the blob.
        write: The finished write.
    """
    stream.close()
    error = write.exception()
    if error is not None:
        logger.warning(
            'Late blob write failed: %s (%s)',
            blob_name(*address),
            error,
        )
    store.discard(*address)
