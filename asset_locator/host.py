"""
Host capability protocols.

The locator never talks to a storage host directly. Listing, uploading,
identity lookup and bundle detection are supplied by the host through the
protocols below, so the resolver and checker can be driven by fakes in
tests and by LocalDataHost / SFTPDataHost in the CLI.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from cachetools import TTLCache

from .backends import BackendKind, DirectorySpec

logger = logging.getLogger(__name__)


@dataclass
class ListingResult:
    """Contents of one directory as reported by the host."""

    files: list[str] = field(default_factory=list)
    dirs: list[str] = field(default_factory=list)
    is_bundle: bool = False


@dataclass
class IdentityStatus:
    user: str


@dataclass
class UploadFile:
    name: str
    data: bytes
    content_type: str | None = None


@dataclass
class UploadResult:
    path: str
    message: str | None = None


@runtime_checkable
class DirectoryLister(Protocol):
    """Lists a backend directory on demand."""

    async def browse(
        self, kind: BackendKind, path: str, bucket: str | None = None
    ) -> ListingResult:
        """List a directory.

        Args:
            kind: Storage backend of the directory.
            path: Directory path within the backend.
            bucket: Bucket name for bucket backends.

        Returns:
            ListingResult with file URLs and directory identifiers.

        Raises:
            FileNotFoundError: If path does not exist.
            PermissionError: If access denied.
        """
        ...


@runtime_checkable
class Uploader(Protocol):
    async def upload_to_path(self, directory_ref: str, file: UploadFile) -> UploadResult:
        """Store a file in the directory named by directory_ref."""
        ...


@runtime_checkable
class IdentityProvider(Protocol):
    async def identity_status(self) -> IdentityStatus:
        """Return the user/tenant the cloud proxy serves files for."""
        ...


@runtime_checkable
class BundleDetector(Protocol):
    def is_bundle(self, spec: DirectorySpec) -> bool:
        """Return True if the directory holds marketplace-bundle files."""
        ...


class StaticIdentityProvider:
    """Identity provider backed by a configured user id."""

    def __init__(self, user_id: str | None):
        self.user_id = user_id

    async def identity_status(self) -> IdentityStatus:
        if not self.user_id:
            raise LookupError("No cloud-proxy user id configured")
        return IdentityStatus(user=self.user_id)


class CachedIdentityProvider:
    """
    Wraps an IdentityProvider and remembers its last successful answer.

    Concurrent callers share one lookup. Failures are not cached, so the
    next call asks the wrapped provider again.
    """

    def __init__(self, provider: IdentityProvider, ttl_seconds: int = 300):
        self._provider = provider
        self._cache: TTLCache = TTLCache(maxsize=1, ttl=ttl_seconds)
        self._lock = asyncio.Lock()

    async def identity_status(self) -> IdentityStatus:
        status = self._cache.get("status")
        if status is not None:
            return status

        async with self._lock:
            status = self._cache.get("status")
            if status is None:
                logger.debug("Looking up cloud-proxy identity")
                status = await self._provider.identity_status()
                self._cache["status"] = status
            return status


class PrefixBundleDetector:
    """Treats cloud-proxy directories under the given path prefixes as bundles."""

    def __init__(self, prefixes=()):
        self.prefixes = [p.strip("/") for p in prefixes if p.strip("/")]

    def is_bundle(self, spec: DirectorySpec) -> bool:
        if spec.kind is not BackendKind.CLOUD_PROXY:
            return False
        path = spec.current_path
        return any(path == p or path.startswith(p + "/") for p in self.prefixes)
