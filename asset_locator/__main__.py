"""
asset-locator - Main Entry Point

Command-line access to the locator: resolve file URLs, check whether
files or directories exist, and upload files to the data directory.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from . import get_sftp_host
from .config import AppConfig, load_config
from .exceptions import AssetLocatorError
from .local_host import LocalDataHost
from .locator import FileLocator
from .logger import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FALSE = 1
EXIT_ERROR = 2


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="asset-locator - Resolve and check asset file locations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  asset-locator exists "[data] worlds/maps" town.jpg --data-root ./Data
  asset-locator url "[s3:myassets] maps" town.jpg --config locator.ini
  asset-locator dir-exists "[data] worlds/maps"
  asset-locator upload "[data] uploads" ./token.png --name hero.png
        """,
    )
    parser.add_argument("--config", help="Path to configuration file")
    parser.add_argument("--data-root", help="Root of the local data directory")
    parser.add_argument("--user-id", help="Cloud-proxy user id")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    exists_parser = subparsers.add_parser("exists", help="Check whether a file exists")
    exists_parser.add_argument("directory", help="Directory reference")
    exists_parser.add_argument("filename", help="File name")

    url_parser = subparsers.add_parser("url", help="Print the URL of a file")
    url_parser.add_argument("directory", help="Directory reference")
    url_parser.add_argument("filename", help="File name")

    dir_parser = subparsers.add_parser("dir-exists", help="Check whether a directory exists")
    dir_parser.add_argument("directory", help="Directory reference")

    upload_parser = subparsers.add_parser("upload", help="Upload a file")
    upload_parser.add_argument("directory", help="Directory reference")
    upload_parser.add_argument("file", help="Local file to upload")
    upload_parser.add_argument("--name", help="Name to store the file under")

    return parser.parse_args(argv)


def build_host(config: AppConfig):
    if config.host.backend == "sftp":
        SFTPDataHost = get_sftp_host()
        return SFTPDataHost(config.ssh, config.connection, root=config.host.data_root)
    return LocalDataHost(config.host.data_root)


async def run_command(args, locator: FileLocator) -> int:
    if args.command == "exists":
        found = await locator.file_exists(args.directory, args.filename)
        print("yes" if found else "no")
        return EXIT_OK if found else EXIT_FALSE

    if args.command == "url":
        print(await locator.get_file_url(args.directory, args.filename))
        return EXIT_OK

    if args.command == "dir-exists":
        found = await locator.does_dir_exist(args.directory)
        print("yes" if found else "no")
        return EXIT_OK if found else EXIT_FALSE

    if args.command == "upload":
        source = Path(args.file)
        data = source.read_bytes()
        result = await locator.upload_file(data, args.directory, args.name or source.name)
        print(result.path)
        return EXIT_OK

    raise ValueError(f"Unknown command: {args.command}")


def main(argv=None) -> int:
    args = parse_args(argv)
    if not args.command:
        print("No command given. Use --help for usage.", file=sys.stderr)
        return EXIT_ERROR

    try:
        config = load_config(
            config_path=args.config,
            data_root=args.data_root,
            user_id=args.user_id,
            debug=args.verbose,
        )
    except (FileNotFoundError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_ERROR

    setup_logging(config.logging)
    host = build_host(config)
    locator = FileLocator.from_config(config, host)

    try:
        return asyncio.run(run_command(args, locator))
    except (AssetLocatorError, OSError) as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    finally:
        if config.host.backend == "sftp":
            host.close()


if __name__ == "__main__":
    sys.exit(main())
