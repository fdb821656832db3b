"""Coarse file categories derived from extensions.

Used by the file listing to pick an icon for each entry. Tables are
checked in order and the first match wins; anything unmatched is
``GENERIC_CATEGORY``.
"""

from typing import Final

GENERIC_CATEGORY: Final = 'file'

_AUDIO: Final = frozenset((
    'aif', 'aiff', 'cda', 'flac', 'm4a', 'mid', 'midi', 'mp3', 'mpa',
    'ogg', 'opus', 'wav', 'wma', 'wpl',
))
_IMAGE: Final = frozenset((
    'ai', 'bmp', 'gif', 'heic', 'ico', 'jpeg', 'jpg', 'png', 'ps', 'psd',
    'svg', 'tif', 'tiff', 'webp',
))
_VIDEO: Final = frozenset((
    '3g2', '3gp', 'avi', 'flv', 'h264', 'm4v', 'mkv', 'mov', 'mp4',
    'mpeg', 'mpg', 'rm', 'swf', 'vob', 'webm', 'wmv',
))
_ARCHIVE: Final = frozenset((
    '7z', 'arj', 'bz2', 'deb', 'gz', 'pkg', 'rar', 'rpm', 'tar', 'tgz',
    'xz', 'z', 'zip',
))
_DOCUMENT: Final = frozenset((
    'doc', 'docx', 'md', 'odt', 'pdf', 'rtf', 'tex', 'txt', 'wpd', 'wps',
))
_PRESENTATION: Final = frozenset(('key', 'odp', 'pps', 'ppt', 'pptx'))
_SPREADSHEET: Final = frozenset(('ods', 'xlr', 'xls', 'xlsm', 'xlsx'))
_FONT: Final = frozenset(('fnt', 'fon', 'otf', 'ttf', 'woff', 'woff2'))
_SOURCE_CODE: Final = frozenset((
    'c', 'class', 'cpp', 'cs', 'go', 'h', 'hpp', 'java', 'js', 'kt',
    'lua', 'php', 'pl', 'py', 'rb', 'rs', 'sh', 'swift', 'ts', 'vb',
))
_EXECUTABLE: Final = frozenset((
    'apk', 'app', 'bat', 'bin', 'cgi', 'com', 'exe', 'gadget', 'jar',
    'msi', 'wsf',
))
_STRUCTURED_DATA: Final = frozenset((
    'csv', 'dat', 'db', 'dbf', 'json', 'log', 'mdb', 'sav', 'sql',
    'sqlite', 'tsv', 'xml', 'yaml', 'yml',
))
_WEB: Final = frozenset((
    'asp', 'aspx', 'cer', 'cfm', 'css', 'htm', 'html', 'jsp', 'part',
    'rss', 'xhtml',
))
_DISK_IMAGE: Final = frozenset(('dmg', 'img', 'iso', 'toast', 'vcd', 'vhd'))
_SYSTEM: Final = frozenset((
    'bak', 'cab', 'cfg', 'cpl', 'cur', 'dll', 'dmp', 'drv', 'icns', 'ini',
    'lnk', 'sys', 'tmp',
))

# Order matters: an extension in two tables gets the first category
_CATEGORY_TABLES: Final = (
    ('audio', _AUDIO),
    ('image', _IMAGE),
    ('video', _VIDEO),
    ('archive', _ARCHIVE),
    ('write', _DOCUMENT),
    ('presentation', _PRESENTATION),
    ('spreadsheet', _SPREADSHEET),
    ('font', _FONT),
    ('code', _SOURCE_CODE),
    ('executable', _EXECUTABLE),
    ('data', _STRUCTURED_DATA),
    ('web', _WEB),
    ('disk', _DISK_IMAGE),
    ('system', _SYSTEM),
)


def categorize(extension: str | None) -> str:
    """Get the display category for a file extension.

    Args:
        extension: Extension without dot, any case (e.g., 'TXT').

    Returns:
        Category tag (e.g., 'write' for 'txt'), ``GENERIC_CATEGORY``
        when the extension is missing or unknown.
    """
    if not extension:
        return GENERIC_CATEGORY

    normalized = extension.lower()
    for category, extensions in _CATEGORY_TABLES:
        if normalized in extensions:
            return category
    return GENERIC_CATEGORY
