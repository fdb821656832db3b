"""Management command to remove files past their retention window."""

import logging
from typing import Any, Final, final, override

from django.core.management.base import BaseCommand

from fileshare.apps.files.logic.expiry_operations import (
    SweepStatus,
    find_expired,
    get_retention_minutes,
    sweep,
)

_DEFAULT_BATCH_SIZE: Final = 1000

logger = logging.getLogger(__name__)


@final
class Command(BaseCommand):
    """Run one expiry sweep over all shared files."""

    help = 'Remove shared files older than the retention window'

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be removed without removing',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=_DEFAULT_BATCH_SIZE,
            help=f'Max files to process (default: {_DEFAULT_BATCH_SIZE})',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the sweep.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        batch_size = options['batch_size']
        retention = get_retention_minutes()

        self.stdout.write(
            f'Looking for files older than {retention} minutes',
        )

        if options['dry_run']:
            self._dry_run(batch_size)
            return

        result = sweep(limit=batch_size)
        logger.info('sweep_expired finished with status %s', result.status.value)

        if result.status is SweepStatus.FAILED:
            self.stderr.write(f'Expiry sweep failed: {result.message}')
        elif result.status is SweepStatus.SKIPPED:
            self.stdout.write(self.style.WARNING(result.message))
        elif result.status is SweepStatus.NO_WORK_FOUND:
            self.stdout.write(self.style.SUCCESS('No expired files found'))
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Removed {result.removed} files, '
                    f'{result.failed} failed, {result.deferred} deferred',
                ),
            )

    def _dry_run(self, batch_size: int) -> None:
        """List expired files without removing them.

        Args:
            batch_size: Max files to list.
        """
        expired = find_expired(limit=batch_size)
        for record in expired:
            self.stdout.write(
                f'Would remove: {record.file_name} '
                f'(owner: {record.owner.username}, '
                f'uploaded: {record.uploaded_at})',
            )
        self.stdout.write(
            self.style.SUCCESS(f'Would remove {len(expired)} files'),
        )
