"""Content-addressed naming for stored files."""

import hashlib
from typing import Final

from fileshare.apps.files.exceptions import InvalidNameError

_EXTENSION_SEPARATOR: Final = '.'
_PATH_SEPARATORS: Final = frozenset(('/', '\\'))


def split_extension(name: str | None) -> tuple[str, str]:
    """Split a filename into base and extension.

    Only the final dot-separated segment is the extension, so
    'archive.tar.gz' splits into ('archive.tar', 'gz').

    Args:
        name: Filename as submitted (e.g., 'report.pdf').

    Returns:
        Tuple of (base, extension), extension without the dot.

    Raises:
        InvalidNameError: If the name is empty, has no extension or
            the extension could escape the owner's directory.
    """
    if not name:
        raise InvalidNameError('No file name passed')

    base, separator, extension = name.rpartition(_EXTENSION_SEPARATOR)
    if not separator:
        raise InvalidNameError(
            f'File name is invalid: no extension found ({name})',
        )
    if not extension:
        raise InvalidNameError(f'File name is invalid: empty extension ({name})')
    if _PATH_SEPARATORS.intersection(extension):
        raise InvalidNameError(
            f'File name is invalid: extension contains a path ({name})',
        )

    return base, extension


def derive_id(name: str | None) -> str:
    """Derive the deterministic id of a file from its name.

    The id is the SHA1 digest of the base name (extension excluded),
    so 'test.txt' and 'test.pdf' share an id and re-deriving it after
    a restart always yields the same value.

    Args:
        name: Filename as submitted.

    Returns:
        Lowercase hex digest (40 characters).

    Raises:
        InvalidNameError: If the name cannot be split.
    """
    base, _ = split_extension(name)
    return hashlib.sha1(base.encode('utf-8')).hexdigest()  # noqa: S324


def blob_name(owner: str, hash_id: str, extension: str) -> str:
    """Build the storage name of a blob.

    Args:
        owner: Username of the uploading user.
        hash_id: Derived id of the file.
        extension: File extension without the dot.

    Returns:
        Storage path relative to the content root
        (e.g., 'tester/a94a8fe5ccb19ba61c4c0873d391e987982fbbd3.txt').
    """
    return f'{owner}/{hash_id}.{extension}'
