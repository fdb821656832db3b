"""Thread pool for blob I/O that runs beside database work.

Only storage calls are submitted here. ORM queries stay on the calling
thread so they share its connection and transaction.
"""

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Final, ParamSpec, TypeVar

from django.conf import settings

_MAX_WORKERS: Final = 8

_P = ParamSpec('_P')
_T = TypeVar('_T')

_executor = ThreadPoolExecutor(
    max_workers=_MAX_WORKERS,
    thread_name_prefix='fileshare-io',
)


def get_operation_timeout() -> float:
    """Get the upper bound for a single blob operation.

    Returns:
        Timeout in seconds from settings or default of 30.
    """
    return getattr(settings, 'FILESHARE_OPERATION_TIMEOUT', 30)


def submit(
    func: Callable[_P, _T],
    *args: _P.args,
    **kwargs: _P.kwargs,
) -> Future[_T]:
    """Schedule a blob operation on the I/O pool.

    Args:
        func: Callable to run.
        args: Positional arguments for func.
        kwargs: Keyword arguments for func.

    Returns:
        Future resolving to the callable's result.
    """
    return _executor.submit(func, *args, **kwargs)
