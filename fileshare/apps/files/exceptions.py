"""Exceptions for files app."""


class FileShareError(Exception):
    """Base class for file sharing errors."""


class InvalidNameError(FileShareError):
    """Raised when a filename cannot be split into base and extension."""


class StoreError(FileShareError):
    """Raised when the metadata store is broken or unavailable."""


class DuplicateRecordError(FileShareError):
    """Raised when an owner already has a record with the same hash id."""

    def __init__(self, owner: str, hash_id: str) -> None:
        """Initialize DuplicateRecordError.

        Args:
            owner: Username of the uploading user.
            hash_id: Derived id that already exists for the owner.
        """
        self.owner = owner
        self.hash_id = hash_id
        super().__init__(
            f'File of the same name already uploaded by {owner}',
        )


class ContentStoreError(FileShareError):
    """Raised when blob storage fails for a reason other than absence."""


class UploadError(FileShareError):
    """Base class for upload pipeline failures."""


class MissingInputError(UploadError):
    """Raised when no file or no file name was supplied."""


class InvalidUserError(UploadError):
    """Raised when an upload references an unknown identity."""

    role = 'User'

    def __init__(self, username: str | None) -> None:
        """Initialize InvalidUserError.

        Args:
            username: The identity that could not be found.
        """
        self.username = username
        super().__init__(f'{self.role} "{username}" does not exist')


class InvalidSourceUserError(InvalidUserError):
    """Raised when the uploading user is not registered."""

    role = 'Uploading user'


class InvalidTargetUserError(InvalidUserError):
    """Raised when the recipient is not registered."""

    role = 'Target user'


class SourceNotFoundError(UploadError):
    """Raised when the uploaded bytes cannot be opened."""


class NamingFailedError(UploadError):
    """Raised when no id can be derived from the submitted name."""


class DuplicateUploadError(UploadError):
    """Raised when the owner already shares a file with the same name."""


class PersistenceError(UploadError):
    """Raised when content or metadata could not be stored."""


class AccessDeniedError(FileShareError):
    """Raised when a file cannot be served to the requester.

    The message is identical whether the file does not exist or the
    requester is not its target, so callers cannot discover which files exist.
    """

    def __init__(self) -> None:
        """Initialize AccessDeniedError with the uniform message."""
        super().__init__('Requested file could not be found')


class NotLoggedInError(FileShareError):
    """Raised when an operation needs a requester identity and has none."""


class ScanFailedError(FileShareError):
    """Raised when the expiry scan cannot query the metadata store."""
