"""Share links handed to the recipient of a file."""

from urllib.parse import urlencode

from django.conf import settings


def build_share_url(hash_id: str, owner: str) -> str:
    """Build the link a recipient opens to retrieve a file.

    Args:
        hash_id: Derived id of the file.
        owner: Username of the uploading user.

    Returns:
        Absolute URL, e.g. 'http://localhost:8080/file?h=<id>&u=tester'.
    """
    base_url = getattr(
        settings,
        'FILESHARE_SHARE_BASE_URL',
        'http://localhost:8080',
    ).rstrip('/')
    query = urlencode({'h': hash_id, 'u': owner})
    return f'{base_url}/file?{query}'
