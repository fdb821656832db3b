"""Tests for FileRecord model."""

import pytest
from django.db import IntegrityError

from fileshare.apps.files.models import FileRecord

_HASH_ID = 'a94a8fe5ccb19ba61c4c0873d391e987982fbbd3'


@pytest.mark.django_db
class TestFileRecordModel:
    """Tests for FileRecord model."""

    def test_blob_name(self, user, recipient):
        """Test blob name follows the owner directory layout."""
        record = FileRecord.objects.create(
            hash_id=_HASH_ID,
            file_name='test.txt',
            extension='txt',
            owner=user,
            target=recipient,
            uploaded_at=1000,
        )

        assert record.blob_name == f'tester/{_HASH_ID}.txt'
        assert 'test.txt' in str(record)

    def test_owner_and_id_unique(self, user, recipient):
        """Test the database rejects a second record for the same owner."""
        FileRecord.objects.create(
            hash_id=_HASH_ID,
            file_name='test.txt',
            extension='txt',
            owner=user,
            target=recipient,
            uploaded_at=1000,
        )

        with pytest.raises(IntegrityError):
            FileRecord.objects.create(
                hash_id=_HASH_ID,
                file_name='test.pdf',
                extension='pdf',
                owner=user,
                target=recipient,
                uploaded_at=1001,
            )

    def test_deleting_user_removes_records(self, user, recipient):
        """Test records go away with their owner."""
        FileRecord.objects.create(
            hash_id=_HASH_ID,
            file_name='test.txt',
            extension='txt',
            owner=user,
            target=recipient,
            uploaded_at=1000,
        )

        user.delete()

        assert not FileRecord.objects.exists()
