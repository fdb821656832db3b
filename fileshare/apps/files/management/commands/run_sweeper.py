"""Django management command to run expiry sweeps on a fixed interval."""

import logging
import signal
import threading
from typing import Any, final, override

from django.conf import settings
from django.core.management.base import BaseCommand

from fileshare.apps.files.logic.expiry_operations import SweepStatus, sweep

logger = logging.getLogger(__name__)


@final
class Command(BaseCommand):
    """Run the expiry sweeper until interrupted."""

    help = 'Periodically remove shared files past their retention window'

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--interval',
            type=int,
            default=None,
            help='Seconds between sweeps (default: from settings)',
        )
        parser.add_argument(
            '--max-cycles',
            type=int,
            default=None,
            help='Stop after this many sweeps (default: run forever)',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the command.

        Args:
            args: Positional arguments.
            options: Keyword arguments from command line.
        """
        interval = options['interval'] or getattr(
            settings,
            'FILESHARE_SWEEP_INTERVAL',
            300,
        )
        max_cycles = options['max_cycles']
        stop = threading.Event()
        # SIGTERM ends the loop once the running cycle finishes
        previous_handler = signal.signal(
            signal.SIGTERM,
            lambda signum, frame: stop.set(),
        )

        self.stdout.write(
            self.style.SUCCESS(
                f'Starting expiry sweeper, interval {interval}s',
            ),
        )
        logger.info('Expiry sweeper starting, interval %ds', interval)

        cycles = 0
        try:
            while not stop.is_set():
                self._run_cycle()
                cycles += 1
                if max_cycles is not None and cycles >= max_cycles:
                    break
                stop.wait(interval)
        except KeyboardInterrupt:
            self.stdout.write(self.style.WARNING('\nShutting down...'))
        finally:
            signal.signal(signal.SIGTERM, previous_handler)
            logger.info('Expiry sweeper stopped after %d cycles', cycles)
            self.stdout.write(self.style.SUCCESS('Expiry sweeper stopped'))

    def _run_cycle(self) -> None:
        """Run one sweep; a failing cycle never stops the loop."""
        try:
            result = sweep()
        except Exception:
            logger.exception('Expiry sweep cycle crashed')
            self.stderr.write('Expiry sweep cycle crashed, see logs')
            return

        if result.status is SweepStatus.COMPLETED:
            self.stdout.write(
                f'Removed {result.removed} files, '
                f'{result.failed} failed, {result.deferred} deferred',
            )
        elif result.status is SweepStatus.FAILED:
            self.stderr.write(f'Expiry sweep failed: {result.message}')
