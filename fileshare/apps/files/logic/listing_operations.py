"""Business logic for listing the files shared with a user."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Final

from django.utils import formats, timezone

from fileshare.apps.files.exceptions import NotLoggedInError
from fileshare.apps.files.infrastructure.categories import categorize
from fileshare.apps.files.infrastructure.content_store import (
    ContentStore,
    get_content_store,
)
from fileshare.apps.files.logic.expiry_operations import get_retention_minutes
from fileshare.apps.files.logic.metadata_operations import (
    current_minute,
    find_by_target,
)
from fileshare.apps.files.logic.share_links import build_share_url
from fileshare.apps.files.models import FileRecord

_KILOBYTE: Final = 1024
_MEGABYTE: Final = _KILOBYTE * _KILOBYTE
_SECONDS_PER_MINUTE: Final = 60
_UNKNOWN_SIZE: Final = 'N/A'

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DisplayRecord:
    """A file shared with the requester, ready for display."""

    hash_id: str
    owner: str
    file_name: str
    file_type: str
    file_cat: str
    file_size: str
    minutes_left: int
    uploaded: str
    share_url: str


def list_available(
    requester: str | None,
    content_store: ContentStore | None = None,
    now: int | None = None,
) -> list[DisplayRecord]:
    """List the files shared with a requester, newest first.

    Args:
        requester: Username of the logged in user.
        content_store: Blob store, defaults to the configured storage.
        now: Current minute timestamp, defaults to the clock.

    Returns:
        One DisplayRecord per file targeted at the requester.

    Raises:
        NotLoggedInError: If there is no requester.
        StoreError: If the metadata store cannot be queried.
    """
    if not requester:
        raise NotLoggedInError('You need to log in to see shared files')

    store = content_store or get_content_store()
    now_minutes = current_minute() if now is None else now

    records = find_by_target(requester)
    logger.debug('Listing %d files for %s', len(records), requester)
    return [
        _to_display_record(record, store, now_minutes)
        for record in records
    ]


def format_size(num_bytes: int | None) -> str:
    """Format a byte count for humans.

    Args:
        num_bytes: Size in bytes, None when unknown.

    Returns:
        '512 bytes', '1.5 KB', '3.2 MB', or 'N/A' when unknown.
    """
    if num_bytes is None:
        return _UNKNOWN_SIZE
    if num_bytes <= _KILOBYTE:
        return f'{num_bytes} bytes'
    if num_bytes <= _MEGABYTE:
        return f'{num_bytes / _KILOBYTE:.1f} KB'
    return f'{num_bytes / _MEGABYTE:.1f} MB'


def minutes_left(uploaded_at: int, now: int) -> int:
    """Get the minutes remaining before a file expires.

    Args:
        uploaded_at: Upload minute timestamp.
        now: Current minute timestamp.

    Returns:
        Remaining minutes, never negative.
    """
    return max(0, uploaded_at + get_retention_minutes() - now)


def format_upload_date(uploaded_at: int) -> str:
    """Format an upload minute timestamp in the active locale.

    Args:
        uploaded_at: Upload minute timestamp.

    Returns:
        Localized short date and time in the current time zone.
    """
    moment = datetime.fromtimestamp(uploaded_at * _SECONDS_PER_MINUTE, tz=UTC)
    return formats.date_format(
        timezone.localtime(moment),
        'SHORT_DATETIME_FORMAT',
    )


def _to_display_record(
    record: FileRecord,
    store: ContentStore,
    now: int,
) -> DisplayRecord:
    owner = record.owner.username
    size = store.size_of(owner, record.hash_id, record.extension)
    return DisplayRecord(
        hash_id=record.hash_id,
        owner=owner,
        file_name=record.file_name,
        file_type=record.extension,
        file_cat=categorize(record.extension),
        file_size=format_size(size),
        minutes_left=minutes_left(record.uploaded_at, now),
        uploaded=format_upload_date(record.uploaded_at),
        share_url=build_share_url(record.hash_id, owner),
    )
