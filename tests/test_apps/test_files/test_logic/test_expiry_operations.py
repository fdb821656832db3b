"""Tests for finding and sweeping expired files."""

from unittest.mock import patch

import pytest
from django.core.cache import cache
from django.core.cache.backends.filebased import FileBasedCache

from fileshare.apps.files.exceptions import ScanFailedError, StoreError
from fileshare.apps.files.logic.expiry_operations import (
    SweepStatus,
    find_expired,
    sweep,
)
from fileshare.apps.files.logic.metadata_operations import current_minute
from fileshare.apps.files.logic.removal_operations import RemovalStatus
from fileshare.apps.files.logic.upload_operations import upload_file
from fileshare.apps.files.models import FileRecord

_RETENTION = 4320
_NOW = 30_000_000


@pytest.fixture(autouse=True)
def expiry_settings(settings):
    """Use the default retention and a generous sweep budget."""
    settings.FILESHARE_RETENTION_MINUTES = _RETENTION
    settings.FILESHARE_SWEEP_TIMEOUT = 120


@pytest.fixture
def upload(user, recipient, make_source):
    """Factory uploading a file at a given minute.

    Returns:
        Callable taking name and upload minute.
    """
    def _upload(name, uploaded_at):  # noqa: WPS430
        hash_id = upload_file(make_source(), name, 'tester', 'alpha')
        FileRecord.objects.filter(hash_id=hash_id).update(
            uploaded_at=uploaded_at,
        )
        return hash_id

    return _upload


@pytest.mark.django_db
class TestFindExpired:
    """Tests for find_expired."""

    def test_boundary_is_inclusive(self, upload):
        """Test a file exactly at the retention limit is expired."""
        at_limit = upload('limit.txt', _NOW - _RETENTION)
        upload('fresh.txt', _NOW - _RETENTION + 1)

        expired = find_expired(now=_NOW)

        assert [record.hash_id for record in expired] == [at_limit]

    def test_oldest_first(self, upload):
        """Test expired files come back oldest first."""
        newer = upload('newer.txt', _NOW - _RETENTION - 1)
        older = upload('older.txt', _NOW - _RETENTION - 100)

        expired = find_expired(now=_NOW)

        assert [record.hash_id for record in expired] == [older, newer]

    def test_defaults_to_clock(self, upload):
        """Test the current minute is used when none is given."""
        upload('old.txt', current_minute() - _RETENTION - 1)

        assert len(find_expired()) == 1

    def test_scan_failure(self, db):
        """Test an unavailable store raises ScanFailedError."""
        with patch(
            'fileshare.apps.files.logic.expiry_operations.find_expired_before',
            side_effect=StoreError('Failed to scan for expired files'),
        ):
            with pytest.raises(ScanFailedError, match='scan'):
                find_expired(now=_NOW)


@pytest.mark.django_db
class TestSweep:
    """Tests for sweep."""

    def test_no_work_found(self, db):
        """Test a sweep over nothing expired reports no work."""
        result = sweep(now=_NOW)

        assert result.status is SweepStatus.NO_WORK_FOUND
        assert result.removed == 0

    def test_removes_only_expired(self, upload, content_store):
        """Test expired files go from both stores, fresh ones stay."""
        expired_id = upload('old.txt', _NOW - _RETENTION)
        fresh_id = upload('new.txt', _NOW - 10)

        result = sweep(now=_NOW)

        assert result.status is SweepStatus.COMPLETED
        assert result.removed == 1
        assert result.failed == 0
        assert not content_store.exists('tester', expired_id, 'txt')
        assert content_store.exists('tester', fresh_id, 'txt')
        assert list(FileRecord.objects.values_list('hash_id', flat=True)) == [
            fresh_id,
        ]

    def test_one_failure_does_not_stop_sweep(self, upload):
        """Test the sweep continues past a failing file."""
        upload('first.txt', _NOW - _RETENTION - 2)
        upload('second.txt', _NOW - _RETENTION - 1)

        with patch(
            'fileshare.apps.files.logic.expiry_operations.remove_file',
            side_effect=[RemovalStatus.CONTENT_ERROR, RemovalStatus.REMOVED],
        ) as remove:
            result = sweep(now=_NOW)

        assert remove.call_count == 2
        assert result.status is SweepStatus.COMPLETED
        assert result.removed == 1
        assert result.failed == 1

    def test_unexpected_error_counts_as_failure(self, upload):
        """Test an exception while removing is contained."""
        upload('old.txt', _NOW - _RETENTION)

        with patch(
            'fileshare.apps.files.logic.expiry_operations.remove_file',
            side_effect=RuntimeError('boom'),
        ):
            result = sweep(now=_NOW)

        assert result.status is SweepStatus.COMPLETED
        assert result.failed == 1

    def test_limit(self, upload):
        """Test the limit caps files processed in one pass."""
        upload('first.txt', _NOW - _RETENTION - 2)
        upload('second.txt', _NOW - _RETENTION - 1)

        result = sweep(now=_NOW, limit=1)

        assert result.removed == 1
        assert FileRecord.objects.count() == 1

    def test_out_of_time_defers_rest(self, upload, settings):
        """Test files not reached before the deadline are deferred."""
        settings.FILESHARE_SWEEP_TIMEOUT = -1
        upload('old.txt', _NOW - _RETENTION)

        result = sweep(now=_NOW)

        assert result.status is SweepStatus.COMPLETED
        assert result.deferred == 1
        assert FileRecord.objects.count() == 1

    def test_scan_failure(self, db):
        """Test a failed scan is reported, not raised."""
        with patch(
            'fileshare.apps.files.logic.expiry_operations.find_expired_before',
            side_effect=StoreError('Failed to scan for expired files'),
        ):
            result = sweep(now=_NOW)

        assert result.status is SweepStatus.FAILED
        assert 'scan' in result.message

    def test_skipped_while_another_sweep_runs(self, upload):
        """Test only one sweep runs at a time."""
        upload('old.txt', _NOW - _RETENTION)
        cache.add('fileshare:expiry-sweep-lock', 'other-sweeper', 60)

        result = sweep(now=_NOW)

        assert result.status is SweepStatus.SKIPPED
        assert FileRecord.objects.count() == 1
        assert cache.get('fileshare:expiry-sweep-lock') == 'other-sweeper'

    def test_lock_released_after_sweep(self, db):
        """Test a finished sweep lets the next one run."""
        sweep(now=_NOW)

        assert sweep(now=_NOW).status is SweepStatus.NO_WORK_FOUND

    def test_lock_held_by_another_process_is_honoured(self, upload, cache_root):
        """Test a lock taken through a separate cache handle skips the sweep."""
        upload('old.txt', _NOW - _RETENTION)
        other_process = FileBasedCache(str(cache_root), {})
        other_process.add('fileshare:expiry-sweep-lock', 'other-sweeper', 60)

        result = sweep(now=_NOW)

        assert result.status is SweepStatus.SKIPPED
        assert FileRecord.objects.count() == 1
