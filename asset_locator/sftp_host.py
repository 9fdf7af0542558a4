"""
SFTP data directory host using paramiko.

Serves the "[data]" backend when the host's data directory lives on a
remote server reachable over SSH. Blocking paramiko calls run in a worker
thread; one SFTP session is shared and guarded by a lock.
"""

import asyncio
import errno
import io
import logging
import os
import posixpath
import stat
import threading
import time

import paramiko

from .backends import BackendKind, encode_uri, join_path, parse_directory_ref
from .config import ConnectionConfig, SSHConfig
from .exceptions import UnsupportedBackendError
from .host import ListingResult, UploadFile, UploadResult

logger = logging.getLogger(__name__)


class SFTPDataHost:
    def __init__(self, ssh_config: SSHConfig, conn_config: ConnectionConfig, root: str = "/"):
        self.ssh_config = ssh_config
        self.conn_config = conn_config
        self.root = "/" + root.replace("\\", "/").strip("/")
        self._ssh: paramiko.SSHClient | None = None
        self._sftp: paramiko.SFTPClient | None = None
        self._lock = threading.Lock()

    def _connect(self) -> None:
        """Open SSH + SFTP. Caller must hold lock."""
        ssh = paramiko.SSHClient()
        ssh.load_system_host_keys()
        # Unknown hosts must be added to known_hosts beforehand
        ssh.set_missing_host_key_policy(paramiko.RejectPolicy())

        kwargs: dict = {
            "hostname": self.ssh_config.host,
            "port": self.ssh_config.port,
            "timeout": self.conn_config.timeout_seconds,
            "allow_agent": self.ssh_config.use_agent,
        }
        if self.ssh_config.username:
            kwargs["username"] = self.ssh_config.username
        if self.ssh_config.key_file:
            kwargs["key_filename"] = os.path.expanduser(self.ssh_config.key_file)
            if self.ssh_config.key_passphrase:
                kwargs["passphrase"] = self.ssh_config.key_passphrase
        elif self.ssh_config.password:
            kwargs["password"] = self.ssh_config.password
            kwargs["look_for_keys"] = False

        try:
            ssh.connect(**kwargs)
        except paramiko.AuthenticationException as e:
            ssh.close()
            raise PermissionError(f"SSH authentication failed: {e}") from e
        except (OSError, paramiko.SSHException) as e:
            ssh.close()
            raise ConnectionError(f"SSH connection failed: {e}") from e

        self._ssh = ssh
        self._sftp = ssh.open_sftp()
        logger.info("Connected to SSH server %s:%d", self.ssh_config.host, self.ssh_config.port)

    def _disconnect(self) -> None:
        """Close SFTP and SSH. Caller must hold lock."""
        for resource in (self._sftp, self._ssh):
            if resource is not None:
                try:
                    resource.close()
                except Exception as e:
                    logger.debug("Error closing SSH resource: %s", e)
        self._sftp = None
        self._ssh = None

    def close(self) -> None:
        with self._lock:
            self._disconnect()

    def _ensure_connected(self) -> None:
        """Caller must hold lock."""
        transport = self._ssh.get_transport() if self._ssh else None
        if self._sftp is None or transport is None or not transport.is_active():
            self._disconnect()
            self._connect()

    def _with_retry(self, operation: str, func, *args):
        """Run func with the SFTP session, reconnecting on transport failures."""
        last_exception = None

        for attempt in range(self.conn_config.retry_attempts):
            try:
                with self._lock:
                    self._ensure_connected()
                    return func(*args)
            except (FileNotFoundError, PermissionError):
                raise
            except IOError as e:
                if getattr(e, "errno", None) is not None:
                    raise self._translate_io_error(e, operation) from e
                last_exception = e
            except paramiko.SSHException as e:
                last_exception = e

            logger.warning(
                "%s failed (attempt %d/%d): %s",
                operation,
                attempt + 1,
                self.conn_config.retry_attempts,
                last_exception,
            )
            if attempt < self.conn_config.retry_attempts - 1:
                time.sleep(self.conn_config.retry_delay_seconds)
                with self._lock:
                    self._disconnect()

        raise ConnectionError(f"{operation} failed: {last_exception}") from last_exception

    @staticmethod
    def _translate_io_error(error: IOError, operation: str) -> OSError:
        if error.errno == errno.ENOENT:
            return FileNotFoundError(f"No such file or directory: {operation}")
        if error.errno == errno.EACCES:
            return PermissionError(f"Permission denied: {operation}")
        return OSError(str(error))

    def _remote_path(self, path: str) -> str:
        path = path.replace("\\", "/").strip("/")
        if ".." in path.split("/"):
            raise PermissionError(f"Path escapes data root: {path}")
        return posixpath.join(self.root, path) if path else self.root

    async def browse(
        self, kind: BackendKind, path: str, bucket: str | None = None
    ) -> ListingResult:
        if kind is not BackendKind.LOCAL:
            raise UnsupportedBackendError(kind.value)
        remote = self._remote_path(path)
        return await asyncio.to_thread(
            self._with_retry, f"list_dir({remote})", self._list_dir, path, remote
        )

    def _list_dir(self, path: str, remote: str) -> ListingResult:
        result = ListingResult()
        for attr in self._sftp.listdir_attr(remote):
            if attr.filename in (".", ".."):
                continue
            entry_id = encode_uri(join_path(path, attr.filename))
            if attr.st_mode and stat.S_ISDIR(attr.st_mode):
                result.dirs.append(entry_id)
            else:
                result.files.append(entry_id)
        logger.debug("Listed %d files, %d dirs in %s", len(result.files), len(result.dirs), remote)
        return result

    async def upload_to_path(self, directory_ref: str, file: UploadFile) -> UploadResult:
        spec = parse_directory_ref(directory_ref)
        if spec.kind is not BackendKind.LOCAL:
            raise UnsupportedBackendError(spec.kind.value)
        remote_dir = self._remote_path(spec.current_path)
        await asyncio.to_thread(
            self._with_retry, f"upload({remote_dir}/{file.name})", self._put, remote_dir, file
        )
        return UploadResult(
            path=encode_uri(join_path(spec.current_path, file.name)),
            message=f"{file.name} saved to {remote_dir}",
        )

    def _put(self, remote_dir: str, file: UploadFile) -> None:
        current = ""
        for part in remote_dir.strip("/").split("/"):
            if not part:
                continue
            current = f"{current}/{part}"
            try:
                self._sftp.stat(current)
            except IOError:
                self._sftp.mkdir(current)
                logger.debug("Created directory: %s", current)
        self._sftp.putfo(io.BytesIO(file.data), posixpath.join(remote_dir, file.name))
        logger.debug("Uploaded %d bytes to %s/%s", len(file.data), remote_dir, file.name)
