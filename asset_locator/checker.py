import asyncio
import logging
from urllib.parse import unquote

from .backends import BackendKind, DirectorySpec, parse_directory_ref
from .cache import DirectoryCache
from .config import StorageConfig
from .exceptions import (
    DirectoryNotFoundError,
    ListingError,
    ListingPermissionError,
    ResolutionError,
)
from .host import BundleDetector, DirectoryLister, IdentityProvider, ListingResult
from .resolver import BackendResolver

logger = logging.getLogger(__name__)


class FileExistenceChecker:
    """
    Answers "does this file exist, and where is it served from?".

    Every directory reference is listed at most once per session: a
    successful listing marks it checked, and racing callers share the one
    in-flight listing. A failed listing leaves the directory unchecked so
    the next call retries.
    """

    def __init__(
        self,
        cache: DirectoryCache,
        lister: DirectoryLister,
        storage: StorageConfig,
        identity: IdentityProvider,
        bundle_detector: BundleDetector | None = None,
        timeout_seconds: float | None = 30,
    ):
        self.cache = cache
        self.lister = lister
        self.timeout_seconds = timeout_seconds
        self.resolver = BackendResolver(
            cache,
            storage,
            identity,
            scan=self.ensure_directory_scanned,
            bundle_detector=bundle_detector,
        )
        self._inflight: dict[str, asyncio.Task] = {}

    async def get_file_url(self, directory_ref: str, filename: str) -> str:
        """
        Resolve the URL a file is (or would be) served from.

        Raises:
            ResolutionError: If the reference cannot be parsed or resolved.
        """
        try:
            spec = parse_directory_ref(directory_ref)
            return await self.resolver.resolve_url(directory_ref, spec, filename)
        except Exception as e:
            raise ResolutionError(directory_ref, filename) from e

    async def file_exists(self, directory_ref: str, filename: str) -> bool:
        """
        Check whether filename exists in the directory.

        Answers from the cache when the file URL is already known;
        otherwise lists the directory once and checks again.

        Raises:
            ResolutionError: If the file URL cannot be determined.
            ListingError: If the directory listing fails.
        """
        file_url = await self.get_file_url(directory_ref, filename)
        if self.cache.has(file_url):
            return True

        logger.debug("Checking for %s at %s...", filename, file_url)
        await self.ensure_directory_scanned(directory_ref)

        # The listing may have flagged a bundle, which assigns its own URLs
        file_url = await self.get_file_url(directory_ref, filename)
        if self.cache.has(file_url):
            logger.debug("Found %s after directory scan.", file_url)
            return True

        logger.debug(
            "Could not find %s (directory=%s, filename=%s)", file_url, directory_ref, filename
        )
        return False

    async def ensure_directory_scanned(self, directory_ref: str) -> None:
        """
        List a directory into the cache unless it has been listed already.

        Raises:
            ParseError: If the reference is malformed.
            ListingError: If the listing fails or times out.
        """
        if self.cache.is_checked(directory_ref):
            logger.debug("Skipping full dir scan for %s...", directory_ref)
            return

        task = self._inflight.get(directory_ref)
        if task is None:
            task = asyncio.ensure_future(self._scan(directory_ref))
            self._inflight[directory_ref] = task
            task.add_done_callback(lambda t: self._scan_finished(directory_ref, t))
        else:
            logger.debug("Joining in-flight scan of %s", directory_ref)

        # One caller giving up must not cancel the scan for the others
        await asyncio.shield(task)

    def _scan_finished(self, directory_ref: str, task: asyncio.Task) -> None:
        if self._inflight.get(directory_ref) is task:
            del self._inflight[directory_ref]
        if not task.cancelled() and task.exception() is not None:
            logger.debug("Scan of %s failed: %s", directory_ref, task.exception())

    async def _scan(self, directory_ref: str) -> None:
        logger.debug("Checking for files in %s...", directory_ref)
        spec = parse_directory_ref(directory_ref)
        listing = await self._browse(spec)

        new_files = self.cache.record_files(listing.files)
        self.cache.record_dirs(listing.dirs)

        if listing.is_bundle and spec.kind is BackendKind.CLOUD_PROXY:
            targets = {unquote(f.rsplit("/", 1)[-1]): f for f in listing.files}
            self.cache.set_target_files(directory_ref, targets, replace_prefix=True)

        self.cache.mark_checked(directory_ref)
        logger.debug(
            "Scanned %s: %d files (%d new), %d dirs",
            directory_ref,
            len(listing.files),
            new_files,
            len(listing.dirs),
        )

    async def _browse(self, spec: DirectorySpec) -> ListingResult:
        """Run one listing under the timeout, translating failures to ListingError."""
        try:
            return await asyncio.wait_for(
                self.lister.browse(spec.kind, spec.current_path, bucket=spec.bucket),
                timeout=self.timeout_seconds,
            )
        except ListingError:
            raise
        except asyncio.TimeoutError as e:
            raise ListingError(
                f"Listing {spec.kind.value}:{spec.current_path} timed out "
                f"after {self.timeout_seconds}s"
            ) from e
        except FileNotFoundError as e:
            raise DirectoryNotFoundError(f"No such directory: {spec.current_path}") from e
        except PermissionError as e:
            raise ListingPermissionError(f"Permission denied: {spec.current_path}") from e
        except Exception as e:
            raise ListingError(f"Listing {spec.current_path} failed: {e}") from e

    async def does_dir_exist(self, directory_ref: str) -> bool:
        """
        Check whether a directory can be listed.

        Nothing is recorded in the cache. Every failure, whatever its
        cause, reads as "does not exist".
        """
        try:
            spec = parse_directory_ref(directory_ref)
            await self._browse(spec)
            return True
        except Exception as e:
            logger.debug("Directory %s not available: %s", directory_ref, e)
            return False
