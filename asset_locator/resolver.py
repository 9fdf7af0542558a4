"""
Fetch URL resolution for each storage backend.

Local and bucket URLs are pure string templates. Cloud-proxy URLs need
one of two lazy host calls, both cached per directory reference:

- standard storage: an identity lookup gives the user id that prefixes
  every URL of the directory;
- bundles: files have individually assigned URLs, so the directory is
  listed once and the filename -> URL map is kept.
"""

import logging
from collections.abc import Awaitable, Callable

from .backends import BackendKind, DirectorySpec, encode_uri, join_path
from .cache import DirectoryCache
from .config import StorageConfig
from .exceptions import UnsupportedBackendError
from .host import BundleDetector, IdentityProvider, PrefixBundleDetector

logger = logging.getLogger(__name__)

ScanFunc = Callable[[str], Awaitable[None]]


class BackendResolver:
    """Computes canonical file URLs for parsed directory references."""

    def __init__(
        self,
        cache: DirectoryCache,
        storage: StorageConfig,
        identity: IdentityProvider,
        scan: ScanFunc,
        bundle_detector: BundleDetector | None = None,
    ):
        """
        Args:
            cache: Session cache holding URL prefixes and bundle targets.
            storage: Host names and paths used in URL templates.
            identity: Identity lookup for cloud-proxy URL prefixes.
            scan: Coroutine function listing a directory reference into the
                cache (FileExistenceChecker.ensure_directory_scanned).
            bundle_detector: Decides which cloud-proxy directories are bundles.
        """
        self._cache = cache
        self._storage = storage
        self._identity = identity
        self._scan = scan
        self._bundle_detector = bundle_detector or PrefixBundleDetector(storage.bundle_prefixes)

    async def resolve_url(self, directory_ref: str, spec: DirectorySpec, filename: str) -> str:
        """
        Resolve the fetch URL of filename inside a directory.

        Args:
            directory_ref: The unparsed reference, used as cache key.
            spec: The parsed reference.
            filename: Bare filename within the directory.

        Returns:
            The canonical URL.

        Raises:
            UnsupportedBackendError: For backends without a URL scheme.
            ValueError: If the bucket endpoint host is not configured.
        """
        if spec.kind is BackendKind.LOCAL:
            return self.local_url(spec, filename)
        elif spec.kind is BackendKind.BUCKET:
            return self.bucket_url(spec, filename)
        elif spec.kind is BackendKind.CLOUD_PROXY:
            return await self._cloud_proxy_url(directory_ref, spec, filename)
        raise UnsupportedBackendError(str(spec.kind))

    def local_url(self, spec: DirectorySpec, filename: str) -> str:
        return encode_uri(join_path(spec.current_path, filename))

    def bucket_url(self, spec: DirectorySpec, filename: str) -> str:
        endpoint = self._storage.bucket_endpoint_host
        if not endpoint:
            raise ValueError("No bucket endpoint host configured")
        path = join_path(spec.current_path, filename)
        return encode_uri(f"https://{spec.bucket}.{endpoint}/{path}")

    async def _cloud_proxy_url(
        self, directory_ref: str, spec: DirectorySpec, filename: str
    ) -> str:
        targets = self._cache.target_files(directory_ref)
        if (
            targets is None
            and self._cache.url_prefix(directory_ref) is None
            and self._bundle_detector.is_bundle(spec)
        ):
            await self._scan(directory_ref)
            targets = self._cache.target_files(directory_ref) or {}

        if targets is not None:
            url = targets.get(filename)
            if url:
                return url
            # Not in the listing; guess where the bundle would serve it from
            logger.debug("No assigned URL for %s in bundle %s", filename, directory_ref)
            return encode_uri(
                f"https://{self._storage.assets_host}/"
                + join_path(self._storage.bundle_path, spec.current_path, filename)
            )

        prefix = self._cache.url_prefix(directory_ref)
        if prefix is None:
            status = await self._identity.identity_status()
            prefix = f"https://{self._storage.assets_host}/" + join_path(
                status.user, spec.current_path
            )
            if not self._cache.set_url_prefix(directory_ref, prefix):
                # A listing flagged the directory as a bundle meanwhile
                return await self._cloud_proxy_url(directory_ref, spec, filename)
        return encode_uri(f"{prefix}/{filename}")
