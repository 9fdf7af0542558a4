"""
Error types raised while locating files.

Listing failures subclass OSError so callers that already handle
FileNotFoundError / PermissionError keep working.
"""


class AssetLocatorError(Exception):
    """Base class for asset-locator errors that are not OS errors."""


class ParseError(AssetLocatorError, ValueError):
    """A directory reference could not be parsed."""


class UnsupportedBackendError(AssetLocatorError):
    """The directory reference names a storage backend we cannot handle."""

    def __init__(self, kind: str):
        super().__init__(f"Cannot handle files stored in backend '{kind}'")
        self.kind = kind


class ListingError(OSError):
    """A directory listing failed (network, permission, missing path, timeout)."""


class DirectoryNotFoundError(ListingError, FileNotFoundError):
    pass


class ListingPermissionError(ListingError, PermissionError):
    pass


class ResolutionError(AssetLocatorError):
    """The fetch URL for a file could not be determined."""

    def __init__(self, directory_ref, filename):
        super().__init__(
            f'Unable to determine file URL for directory "{directory_ref}" '
            f'and filename "{filename}"'
        )
        self.directory_ref = directory_ref
        self.filename = filename
