"""
Local data directory host.

Lists and stores files of the "[data]" backend under a root directory on
this machine. Listed entries use the same encoded form the resolver
produces for local URLs ("images/a%20b.png"), so listings and lookups
match without translation.
"""

import asyncio
import logging
from pathlib import Path

from .backends import BackendKind, encode_uri, join_path, parse_directory_ref
from .exceptions import UnsupportedBackendError
from .host import ListingResult, UploadFile, UploadResult

logger = logging.getLogger(__name__)


class LocalDataHost:
    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    def _local_path(self, path: str) -> Path:
        """Map a backend path to a filesystem path inside the root."""
        target = (self.root / path.strip("/")).resolve()
        if target != self.root and self.root not in target.parents:
            raise PermissionError(f"Path escapes data root: {path}")
        return target

    async def browse(
        self, kind: BackendKind, path: str, bucket: str | None = None
    ) -> ListingResult:
        if kind is not BackendKind.LOCAL:
            raise UnsupportedBackendError(kind.value)
        return await asyncio.to_thread(self._list_dir, path)

    def _list_dir(self, path: str) -> ListingResult:
        directory = self._local_path(path)
        logger.debug("Listing directory: %s", directory)
        if not directory.is_dir():
            raise FileNotFoundError(f"No such directory: {path}")

        result = ListingResult()
        for entry in sorted(directory.iterdir()):
            entry_id = encode_uri(join_path(path, entry.name))
            if entry.is_dir():
                result.dirs.append(entry_id)
            else:
                result.files.append(entry_id)

        logger.debug("Listed %d files, %d dirs in %s", len(result.files), len(result.dirs), path)
        return result

    async def upload_to_path(self, directory_ref: str, file: UploadFile) -> UploadResult:
        spec = parse_directory_ref(directory_ref)
        if spec.kind is not BackendKind.LOCAL:
            raise UnsupportedBackendError(spec.kind.value)
        return await asyncio.to_thread(self._write_file, spec.current_path, file)

    def _write_file(self, path: str, file: UploadFile) -> UploadResult:
        if "/" in file.name or "\\" in file.name:
            raise ValueError(f"Invalid filename: {file.name}")
        directory = self._local_path(path)
        directory.mkdir(parents=True, exist_ok=True)
        (directory / file.name).write_bytes(file.data)
        logger.debug("Wrote %d bytes to %s", len(file.data), directory / file.name)

        return UploadResult(
            path=encode_uri(join_path(path, file.name)),
            message=f"{file.name} saved to {path or '/'}",
        )
