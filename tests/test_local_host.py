"""
Tests for asset_locator.local_host using a real temporary directory.

Tests cover:
- browse lists files and directories in encoded form
- Missing directories and paths outside the root
- upload_to_path writes files and creates directories
- End-to-end lookups through FileLocator
"""

import asyncio
from pathlib import Path

import pytest

from asset_locator.backends import BackendKind
from asset_locator.exceptions import UnsupportedBackendError
from asset_locator.host import UploadFile
from asset_locator.local_host import LocalDataHost
from asset_locator.locator import FileLocator


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    """Creates a small data directory tree."""
    (tmp_path / "images" / "sub").mkdir(parents=True)
    (tmp_path / "images" / "a b.png").write_bytes(b"a")
    (tmp_path / "images" / "c.png").write_bytes(b"c")
    (tmp_path / "top.txt").write_text("top", encoding="utf-8")
    return tmp_path


class TestBrowse:
    def test_lists_files_and_dirs(self, data_root):
        host = LocalDataHost(data_root)
        result = asyncio.run(host.browse(BackendKind.LOCAL, "images"))

        assert result.files == ["images/a%20b.png", "images/c.png"]
        assert result.dirs == ["images/sub"]
        assert result.is_bundle is False

    def test_lists_root(self, data_root):
        result = asyncio.run(LocalDataHost(data_root).browse(BackendKind.LOCAL, ""))

        assert result.files == ["top.txt"]
        assert result.dirs == ["images"]

    def test_missing_directory(self, data_root):
        with pytest.raises(FileNotFoundError):
            asyncio.run(LocalDataHost(data_root).browse(BackendKind.LOCAL, "nope"))

    def test_file_is_not_a_directory(self, data_root):
        with pytest.raises(FileNotFoundError):
            asyncio.run(LocalDataHost(data_root).browse(BackendKind.LOCAL, "top.txt"))

    def test_path_outside_root_rejected(self, data_root):
        with pytest.raises(PermissionError):
            asyncio.run(LocalDataHost(data_root / "images").browse(BackendKind.LOCAL, "../"))

    def test_other_backends_unsupported(self, data_root):
        with pytest.raises(UnsupportedBackendError):
            asyncio.run(LocalDataHost(data_root).browse(BackendKind.BUCKET, "maps", bucket="b"))


class TestUpload:
    def test_writes_file(self, data_root):
        host = LocalDataHost(data_root)
        result = asyncio.run(
            host.upload_to_path("[data] uploads/new", UploadFile(name="my hero.png", data=b"PNG"))
        )

        assert (data_root / "uploads" / "new" / "my hero.png").read_bytes() == b"PNG"
        assert result.path == "uploads/new/my%20hero.png"

    def test_rejects_nested_filename(self, data_root):
        with pytest.raises(ValueError):
            asyncio.run(
                LocalDataHost(data_root).upload_to_path(
                    "[data] uploads", UploadFile(name="../evil.png", data=b"x")
                )
            )

    def test_rejects_non_local_reference(self, data_root):
        with pytest.raises(UnsupportedBackendError):
            asyncio.run(
                LocalDataHost(data_root).upload_to_path(
                    "[s3:b] uploads", UploadFile(name="a.png", data=b"x")
                )
            )


class TestLocatorWithLocalHost:
    """End-to-end: listings and resolved URLs use the same encoding."""

    def test_file_exists_for_encoded_name(self, data_root):
        host = LocalDataHost(data_root)
        locator = FileLocator(host, uploader=host)

        assert asyncio.run(locator.file_exists("[data] images", "a b.png")) is True
        assert asyncio.run(locator.file_exists("images", "c.png")) is True
        assert asyncio.run(locator.file_exists("[data] images", "d.png")) is False

    def test_uploaded_file_found_by_new_session(self, data_root):
        host = LocalDataHost(data_root)
        locator = FileLocator(host, uploader=host)

        path = asyncio.run(locator.upload_image(b"PNG", "[data] tokens", "orc.png"))
        locator.reset()

        assert path == "tokens/orc.png"
        assert asyncio.run(locator.file_exists("[data] tokens", "orc.png")) is True

    def test_dir_exists(self, data_root):
        locator = FileLocator(LocalDataHost(data_root))

        assert asyncio.run(locator.does_dir_exist("[data] images/sub")) is True
        assert asyncio.run(locator.does_dir_exist("[data] missing")) is False
