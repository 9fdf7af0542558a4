import logging
import threading
from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)


class DirectoryCache:
    """
    Cache of files and directories discovered by directory listings.

    Thread-safe, owned by a single FileLocator session. The known file and
    directory sets only ever grow; a directory is marked checked once it
    has been listed successfully, which stops further scans of it.

    Cloud-proxy references additionally get either a URL prefix (standard
    storage) or a filename -> URL map (bundles), never both.
    """

    def __init__(self):
        self._files: set[str] = set()
        self._dirs: set[str] = set()
        self._checked: set[str] = set()
        self._url_prefixes: dict[str, str] = {}
        self._target_files: dict[str, dict[str, str]] = {}
        self._lock = threading.Lock()

    def has(self, file_id: str) -> bool:
        """Return True if the file URL/identifier has been seen."""
        with self._lock:
            return file_id in self._files

    def has_dir(self, dir_id: str) -> bool:
        with self._lock:
            return dir_id in self._dirs

    def record_files(self, file_ids: Iterable[str]) -> int:
        """
        Remember files returned by a listing.

        Args:
            file_ids: File URLs/identifiers.

        Returns:
            Number of identifiers that were not known before.
        """
        with self._lock:
            return self._add_new(self._files, file_ids)

    def record_file(self, file_id: str) -> bool:
        """Remember a single file. Returns True if it was new."""
        return self.record_files([file_id]) == 1

    def record_dirs(self, dir_ids: Iterable[str]) -> int:
        """
        Remember directories returned by a listing.

        Args:
            dir_ids: Directory identifiers.

        Returns:
            Number of identifiers that were not known before.
        """
        with self._lock:
            return self._add_new(self._dirs, dir_ids)

    @staticmethod
    def _add_new(target: set[str], ids: Iterable[str]) -> int:
        new_ids = {i for i in ids if i not in target}
        target.update(new_ids)
        return len(new_ids)

    def mark_checked(self, directory_ref: str) -> None:
        """Mark a directory reference as fully listed."""
        with self._lock:
            self._checked.add(directory_ref)

    def is_checked(self, directory_ref: str) -> bool:
        with self._lock:
            return directory_ref in self._checked

    def url_prefix(self, directory_ref: str) -> str | None:
        with self._lock:
            return self._url_prefixes.get(directory_ref)

    def set_url_prefix(self, directory_ref: str, prefix: str) -> bool:
        """
        Store the templated URL prefix of a cloud-proxy directory.

        Returns:
            False (and stores nothing) if the reference already has a
            bundle file map.
        """
        with self._lock:
            if directory_ref in self._target_files:
                logger.warning(
                    "Not storing URL prefix for %s: directory is a bundle", directory_ref
                )
                return False
            self._url_prefixes[directory_ref] = prefix
            return True

    def target_files(self, directory_ref: str) -> dict[str, str] | None:
        """Return a copy of the bundle file map for a reference, if any."""
        with self._lock:
            targets = self._target_files.get(directory_ref)
            return dict(targets) if targets is not None else None

    def set_target_files(
        self, directory_ref: str, targets: Mapping[str, str], replace_prefix: bool = False
    ) -> bool:
        """
        Store the filename -> assigned URL map of a bundle directory.

        Args:
            directory_ref: Cloud-proxy directory reference.
            targets: Filename -> assigned URL.
            replace_prefix: Drop a URL prefix already stored for the
                reference instead of refusing the map. Used when a listing
                flags the directory as a bundle, which outranks a prefix
                guessed from the identity lookup.

        Returns:
            False (and stores nothing) if the reference already has a URL
            prefix and replace_prefix is not set.
        """
        with self._lock:
            if replace_prefix and self._url_prefixes.pop(directory_ref, None) is not None:
                logger.debug("Listing flagged %s as a bundle, dropping URL prefix", directory_ref)
            if directory_ref in self._url_prefixes:
                logger.warning(
                    "Not storing bundle targets for %s: directory has a URL prefix",
                    directory_ref,
                )
                return False
            self._target_files[directory_ref] = dict(targets)
            return True

    @property
    def known_files_count(self) -> int:
        with self._lock:
            return len(self._files)

    @property
    def known_dirs_count(self) -> int:
        with self._lock:
            return len(self._dirs)
