"""
Shared pytest fixtures for asset-locator tests.
"""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from asset_locator.cache import DirectoryCache
from asset_locator.checker import FileExistenceChecker
from asset_locator.config import ConnectionConfig, StorageConfig
from asset_locator.host import IdentityStatus, ListingResult, PrefixBundleDetector


@pytest.fixture
def tmp_config_file(tmp_path: Path) -> Generator[Path, None, None]:
    """
    Creates a temporary INI configuration file for config tests.

    Returns:
        Path to the temporary config file.
    """
    config_content = """[storage]
bucket_endpoint_host = s3.example.com
assets_host = assets.example.com
bundle_path = bazaar
bundle_prefixes = packs, bazaar/modules

[identity]
user_id = user42

[host]
backend = local
data_root = /srv/foundry/Data

[cache]
identity_ttl_seconds = 600

[connection]
timeout_seconds = 45
retry_attempts = 5
retry_delay_seconds = 2

[logging]
level = DEBUG
file = test.log
console = false
library_level = ERROR
"""
    config_path = tmp_path / "test_config.ini"
    config_path.write_text(config_content, encoding="utf-8")
    yield config_path


@pytest.fixture
def storage_config() -> StorageConfig:
    """Creates a StorageConfig with every host configured."""
    return StorageConfig(
        bucket_endpoint_host="s3.example.com",
        assets_host="assets.example.com",
        bundle_path="bazaar",
        bundle_prefixes=["packs"],
    )


@pytest.fixture
def conn_config() -> ConnectionConfig:
    return ConnectionConfig(
        timeout_seconds=30,
        retry_attempts=3,
        retry_delay_seconds=0,  # No delay in tests
    )


@pytest.fixture
def cache() -> DirectoryCache:
    return DirectoryCache()


@pytest.fixture
def mock_lister() -> MagicMock:
    """
    Creates a DirectoryLister whose browse() lists one local directory.

    Returns:
        Mock with an AsyncMock browse method.
    """
    mock = MagicMock()
    mock.browse = AsyncMock(
        return_value=ListingResult(
            files=["images/a%20b.png", "images/c.png"],
            dirs=["images/sub"],
        )
    )
    return mock


@pytest.fixture
def mock_identity() -> MagicMock:
    mock = MagicMock()
    mock.identity_status = AsyncMock(return_value=IdentityStatus(user="user42"))
    return mock


@pytest.fixture
def checker(
    cache: DirectoryCache,
    mock_lister: MagicMock,
    storage_config: StorageConfig,
    mock_identity: MagicMock,
) -> FileExistenceChecker:
    """Creates a FileExistenceChecker wired to the mocked host."""
    return FileExistenceChecker(
        cache,
        mock_lister,
        storage_config,
        mock_identity,
        bundle_detector=PrefixBundleDetector(storage_config.bundle_prefixes),
        timeout_seconds=5,
    )
