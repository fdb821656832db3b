"""Tests for the recipient file listing."""

from unittest.mock import patch

import pytest

from fileshare.apps.files.exceptions import NotLoggedInError, StoreError
from fileshare.apps.files.logic.listing_operations import (
    format_size,
    format_upload_date,
    list_available,
    minutes_left,
)
from fileshare.apps.files.logic.share_links import build_share_url
from fileshare.apps.files.logic.upload_operations import upload_file
from fileshare.apps.files.models import FileRecord


@pytest.fixture(autouse=True)
def listing_settings(settings):
    """Fix retention and share link base for predictable output."""
    settings.FILESHARE_RETENTION_MINUTES = 4320
    settings.FILESHARE_SHARE_BASE_URL = 'http://share.example.com/'


@pytest.mark.django_db
class TestListAvailable:
    """Tests for list_available."""

    def test_lists_file_shared_with_requester(
        self,
        user,
        recipient,
        make_source,
    ):
        """Test the recipient sees the file with display fields."""
        hash_id = upload_file(make_source(b'hello'), 'test.txt', 'tester', 'alpha')
        record = FileRecord.objects.get()

        listing = list_available('alpha', now=record.uploaded_at + 20)

        assert len(listing) == 1
        entry = listing[0]
        assert entry.hash_id == hash_id
        assert entry.owner == 'tester'
        assert entry.file_name == 'test.txt'
        assert entry.file_type == 'txt'
        assert entry.file_cat == 'write'
        assert entry.file_size == '5 bytes'
        assert entry.minutes_left == 4300
        assert entry.uploaded
        assert entry.share_url == (
            f'http://share.example.com/file?h={hash_id}&u=tester'
        )

    def test_owner_does_not_see_outgoing_files(
        self,
        user,
        recipient,
        make_source,
    ):
        """Test only files targeted at the requester are listed."""
        upload_file(make_source(), 'test.txt', 'tester', 'alpha')

        assert list_available('tester') == []

    def test_stranger_sees_nothing(self, user, recipient, other_user, make_source):
        """Test a user nothing was shared with gets an empty list."""
        upload_file(make_source(), 'test.txt', 'tester', 'alpha')

        assert list_available('badPerson') == []

    def test_newest_first(self, user, recipient, make_source):
        """Test entries are ordered by upload time, newest first."""
        upload_file(make_source(), 'old.txt', 'tester', 'alpha')
        upload_file(make_source(), 'new.txt', 'tester', 'alpha')
        FileRecord.objects.filter(file_name='old.txt').update(uploaded_at=100)
        FileRecord.objects.filter(file_name='new.txt').update(uploaded_at=200)

        listing = list_available('alpha', now=200)

        assert [entry.file_name for entry in listing] == ['new.txt', 'old.txt']

    def test_missing_blob_shows_unknown_size(
        self,
        user,
        recipient,
        make_source,
        content_store,
    ):
        """Test a record without a blob is listed with size N/A."""
        hash_id = upload_file(make_source(), 'test.txt', 'tester', 'alpha')
        content_store.remove('tester', hash_id, 'txt')

        listing = list_available('alpha')

        assert listing[0].file_size == 'N/A'

    def test_expired_file_has_zero_minutes_left(
        self,
        user,
        recipient,
        make_source,
    ):
        """Test files past retention but not yet swept show zero."""
        upload_file(make_source(), 'test.txt', 'tester', 'alpha')
        record = FileRecord.objects.get()

        listing = list_available('alpha', now=record.uploaded_at + 5000)

        assert listing[0].minutes_left == 0

    @pytest.mark.parametrize('requester', [None, ''])
    def test_not_logged_in(self, requester):
        """Test an anonymous requester is rejected."""
        with pytest.raises(NotLoggedInError):
            list_available(requester)

    def test_store_failure_propagates(self, recipient):
        """Test an unavailable store is reported to the caller."""
        with patch(
            'fileshare.apps.files.logic.listing_operations.find_by_target',
            side_effect=StoreError('gone'),
        ):
            with pytest.raises(StoreError):
                list_available('alpha')


@pytest.mark.parametrize(('num_bytes', 'expected'), [
    (None, 'N/A'),
    (0, '0 bytes'),
    (512, '512 bytes'),
    (1024, '1024 bytes'),
    (1536, '1.5 KB'),
    (1024 * 1024, '1024.0 KB'),
    (5 * 1024 * 1024 + 200 * 1024, '5.2 MB'),
])
def test_format_size(num_bytes, expected):
    """Test byte counts are rendered in the largest fitting unit."""
    assert format_size(num_bytes) == expected


def test_minutes_left():
    """Test remaining minutes count down and stop at zero."""
    assert minutes_left(1000, 1000) == 4320
    assert minutes_left(1000, 1000 + 4320) == 0
    assert minutes_left(1000, 1000 + 9999) == 0


def test_format_upload_date_is_localized(settings):
    """Test the upload date renders through the active locale."""
    settings.TIME_ZONE = 'UTC'
    rendered = format_upload_date(28_000_000)

    assert '2023' in rendered


def test_build_share_url_encodes_query():
    """Test owner names are URL-encoded in share links."""
    assert build_share_url('abc', 'john doe') == (
        'http://share.example.com/file?h=abc&u=john+doe'
    )
