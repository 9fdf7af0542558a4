__version__ = "0.1.0"

# Public API exports
from .backends import (
    BackendKind,
    DirectorySpec,
    encode_uri,
    parse_directory_ref,
    remove_file_extension,
)
from .cache import DirectoryCache
from .checker import FileExistenceChecker
from .config import (
    AppConfig,
    CacheConfig,
    ConnectionConfig,
    HostConfig,
    IdentityConfig,
    LogConfig,
    SSHConfig,
    StorageConfig,
    load_config,
)
from .exceptions import (
    AssetLocatorError,
    DirectoryNotFoundError,
    ListingError,
    ListingPermissionError,
    ParseError,
    ResolutionError,
    UnsupportedBackendError,
)
from .host import (
    BundleDetector,
    CachedIdentityProvider,
    DirectoryLister,
    IdentityProvider,
    IdentityStatus,
    ListingResult,
    PrefixBundleDetector,
    StaticIdentityProvider,
    Uploader,
    UploadFile,
    UploadResult,
)
from .local_host import LocalDataHost
from .locator import FileLocator
from .resolver import BackendResolver


def get_sftp_host():
    """Lazy loader for SFTPDataHost.

    Returns the SFTPDataHost class, importing it on first use so that
    importing asset_locator does not load paramiko.
    """
    from .sftp_host import SFTPDataHost

    return SFTPDataHost


__all__ = [
    "__version__",
    # Directory references
    "BackendKind",
    "DirectorySpec",
    "parse_directory_ref",
    "encode_uri",
    "remove_file_extension",
    # Configuration
    "AppConfig",
    "StorageConfig",
    "IdentityConfig",
    "HostConfig",
    "SSHConfig",
    "CacheConfig",
    "ConnectionConfig",
    "LogConfig",
    "load_config",
    # Errors
    "AssetLocatorError",
    "ParseError",
    "UnsupportedBackendError",
    "ListingError",
    "DirectoryNotFoundError",
    "ListingPermissionError",
    "ResolutionError",
    # Host capabilities
    "DirectoryLister",
    "Uploader",
    "IdentityProvider",
    "BundleDetector",
    "ListingResult",
    "IdentityStatus",
    "UploadFile",
    "UploadResult",
    "StaticIdentityProvider",
    "CachedIdentityProvider",
    "PrefixBundleDetector",
    "LocalDataHost",
    "get_sftp_host",
    # Core
    "DirectoryCache",
    "BackendResolver",
    "FileExistenceChecker",
    "FileLocator",
]
