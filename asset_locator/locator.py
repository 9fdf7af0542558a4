"""
FileLocator: one lookup session over a storage host.

Owns the DirectoryCache for the session and exposes the public
operations. Call reset() to forget everything learned so far.
"""

import logging
import mimetypes

from .cache import DirectoryCache
from .checker import FileExistenceChecker
from .config import AppConfig, StorageConfig
from .host import (
    BundleDetector,
    CachedIdentityProvider,
    DirectoryLister,
    IdentityProvider,
    PrefixBundleDetector,
    StaticIdentityProvider,
    Uploader,
    UploadFile,
    UploadResult,
)

logger = logging.getLogger(__name__)


class FileLocator:
    def __init__(
        self,
        lister: DirectoryLister,
        uploader: Uploader | None = None,
        storage: StorageConfig | None = None,
        identity: IdentityProvider | None = None,
        bundle_detector: BundleDetector | None = None,
        timeout_seconds: float | None = 30,
    ):
        self.lister = lister
        self.uploader = uploader
        self.storage = storage or StorageConfig()
        self.identity = identity or StaticIdentityProvider(None)
        self.bundle_detector = bundle_detector or PrefixBundleDetector(
            self.storage.bundle_prefixes
        )
        self.timeout_seconds = timeout_seconds
        self.reset()

    @classmethod
    def from_config(cls, config: AppConfig, host) -> "FileLocator":
        """
        Build a locator for a host adapter that both lists and uploads.

        Args:
            config: Loaded application configuration.
            host: LocalDataHost, SFTPDataHost or any object implementing
                DirectoryLister and Uploader.
        """
        identity = CachedIdentityProvider(
            StaticIdentityProvider(config.identity.user_id),
            ttl_seconds=config.cache.identity_ttl_seconds,
        )
        return cls(
            lister=host,
            uploader=host,
            storage=config.storage,
            identity=identity,
            timeout_seconds=config.connection.timeout_seconds,
        )

    def reset(self) -> None:
        """Start over with an empty cache."""
        self._cache = DirectoryCache()
        self._checker = FileExistenceChecker(
            self._cache,
            self.lister,
            self.storage,
            self.identity,
            bundle_detector=self.bundle_detector,
            timeout_seconds=self.timeout_seconds,
        )
        logger.debug("Locator cache reset")

    @property
    def cache(self) -> DirectoryCache:
        return self._cache

    async def file_exists(self, directory_ref: str, filename: str) -> bool:
        return await self._checker.file_exists(directory_ref, filename)

    async def get_file_url(self, directory_ref: str, filename: str) -> str:
        return await self._checker.get_file_url(directory_ref, filename)

    async def does_dir_exist(self, directory_ref: str) -> bool:
        return await self._checker.does_dir_exist(directory_ref)

    async def ensure_directory_scanned(self, directory_ref: str) -> None:
        await self._checker.ensure_directory_scanned(directory_ref)

    async def upload_file(
        self,
        data: bytes,
        directory_ref: str,
        filename: str,
        content_type: str | None = None,
    ) -> UploadResult:
        """
        Upload data as filename into a directory.

        The uploaded path is remembered as a known file.

        Raises:
            RuntimeError: If the locator has no uploader.
            Exception: Whatever the uploader raised, after logging it.
        """
        if self.uploader is None:
            raise RuntimeError("No uploader configured for this locator")

        if content_type is None:
            content_type, _ = mimetypes.guess_type(filename)
        file = UploadFile(name=filename, data=data, content_type=content_type)

        try:
            result = await self.uploader.upload_to_path(directory_ref, file)
        except Exception as e:
            logger.error("Error uploading %s to %s: %s", filename, directory_ref, e)
            raise

        self._cache.record_file(result.path)
        logger.debug("Uploaded %s to %s", filename, result.path)
        return result

    async def upload_image(self, data: bytes, directory_ref: str, filename: str) -> str:
        """Upload an image and return the path it is served from."""
        result = await self.upload_file(data, directory_ref, filename)
        return result.path
