"""Business logic for expiring files past their retention window."""

import enum
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Final

from django.conf import settings
from django.core.cache import cache

from fileshare.apps.files.exceptions import ScanFailedError, StoreError
from fileshare.apps.files.infrastructure.content_store import (
    ContentStore,
    get_content_store,
)
from fileshare.apps.files.logic.metadata_operations import (
    current_minute,
    find_expired_before,
)
from fileshare.apps.files.logic.removal_operations import remove_file
from fileshare.apps.files.models import FileRecord

_SWEEP_LOCK_KEY: Final = 'fileshare:expiry-sweep-lock'
# Lock outlives the sweep deadline so a stuck removal cannot
# let a second sweep start while the first is still deleting
_SWEEP_LOCK_GRACE: Final = 60

logger = logging.getLogger(__name__)


def get_retention_minutes() -> int:
    """Get how long an upload stays available.

    Returns:
        Retention in minutes from settings or default of 3 days.
    """
    return getattr(settings, 'FILESHARE_RETENTION_MINUTES', 3 * 24 * 60)


def get_sweep_timeout() -> int:
    """Get the time budget of one sweep.

    Returns:
        Budget in seconds from settings or default of 120.
    """
    return getattr(settings, 'FILESHARE_SWEEP_TIMEOUT', 120)


@enum.unique
class SweepStatus(enum.Enum):
    """Outcome of one expiry sweep."""

    COMPLETED = 'completed'
    NO_WORK_FOUND = 'no_work_found'
    FAILED = 'failed'
    SKIPPED = 'skipped'


@dataclass(frozen=True)
class SweepResult:
    """Summary of one expiry sweep."""

    status: SweepStatus
    removed: int = 0
    failed: int = 0
    deferred: int = 0
    message: str = ''


def find_expired(
    now: int | None = None,
    limit: int | None = None,
) -> list[FileRecord]:
    """Get records whose retention window has passed, oldest first.

    A record uploaded exactly ``retention`` minutes ago is expired.

    Args:
        now: Current minute timestamp, defaults to the clock.
        limit: Max records to return, all when None.

    Returns:
        List of expired FileRecord instances.

    Raises:
        ScanFailedError: If the metadata store cannot be queried.
    """
    now_minutes = current_minute() if now is None else now
    cutoff = now_minutes - get_retention_minutes()
    try:
        return find_expired_before(cutoff, limit=limit)
    except StoreError as error:
        raise ScanFailedError(str(error)) from error


def sweep(
    now: int | None = None,
    limit: int | None = None,
    content_store: ContentStore | None = None,
) -> SweepResult:
    """Remove every expired file, best effort.

    Only one sweep runs at a time: a sweep that finds another one
    holding the cache lock returns ``SKIPPED`` without scanning.
    One failing file does not stop the pass. Files not reached before
    the sweep timeout are left for the next cycle.

    Args:
        now: Current minute timestamp, defaults to the clock.
        limit: Max files to process in this pass.
        content_store: Blob store, defaults to the configured storage.

    Returns:
        SweepResult with the outcome and per-file counts.
    """
    timeout = get_sweep_timeout()
    token = uuid.uuid4().hex
    if not cache.add(_SWEEP_LOCK_KEY, token, timeout + _SWEEP_LOCK_GRACE):
        logger.info('Expiry sweep already running, skipping this cycle')
        return SweepResult(
            status=SweepStatus.SKIPPED,
            message='Another sweep is already running',
        )

    try:
        return _run_sweep(
            now,
            limit,
            content_store or get_content_store(),
            deadline=time.monotonic() + timeout,
        )
    finally:
        # Only release a lock we still own
        if cache.get(_SWEEP_LOCK_KEY) == token:
            cache.delete(_SWEEP_LOCK_KEY)


def _run_sweep(
    now: int | None,
    limit: int | None,
    store: ContentStore,
    deadline: float,
) -> SweepResult:
    try:
        expired = find_expired(now=now, limit=limit)
    except ScanFailedError as error:
        logger.exception('Expiry scan failed')
        return SweepResult(status=SweepStatus.FAILED, message=str(error))

    if not expired:
        logger.debug('Expiry sweep found no expired files')
        return SweepResult(status=SweepStatus.NO_WORK_FOUND)

    removed = 0
    failed = 0
    deferred = 0
    for index, record in enumerate(expired):
        if time.monotonic() > deadline:
            deferred = len(expired) - index
            logger.warning(
                'Expiry sweep out of time, deferring %d files',
                deferred,
            )
            break

        if _expire_record(record, store):
            removed += 1
        else:
            failed += 1

    logger.info(
        'Expiry sweep finished: %d removed, %d failed, %d deferred',
        removed,
        failed,
        deferred,
    )
    return SweepResult(
        status=SweepStatus.COMPLETED,
        removed=removed,
        failed=failed,
        deferred=deferred,
    )


def _expire_record(record: FileRecord, store: ContentStore) -> bool:
    """Remove one expired file without letting errors escape.

    Args:
        record: Expired file record.
        store: Blob store.

    Returns:
        True if the file is gone from both stores.
    """
    try:
        status = remove_file(
            record.owner.username,
            record.hash_id,
            record.extension,
            content_store=store,
        )
    except Exception:
        logger.exception('Failed to expire file: %s', record.blob_name)
        return False

    if not status.succeeded:
        logger.warning(
            'Failed to expire file: %s (%s)',
            record.blob_name,
            status.value,
        )
        return False
    return True
