"""
Directory reference parsing.

A directory reference is the host's string form of "which storage, which
folder". Recognized shapes:

    [data] worlds/maps        local server filesystem
    worlds/maps               same, no tag
    [forgevtt] assets/maps    cloud-asset proxy
    [s3:my-bucket] maps       object-storage bucket
"""

import re
from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote

from .exceptions import ParseError, UnsupportedBackendError

# Characters encodeURI leaves untouched besides letters, digits and "-_.~"
URI_SAFE_CHARS = ";,/?:@&=+$!*'()#"

_TAGGED_REF = re.compile(r"^\[([^\]]*)\]\s*(.*)$", re.DOTALL)


class BackendKind(Enum):
    LOCAL = "data"
    CLOUD_PROXY = "forgevtt"
    BUCKET = "s3"


@dataclass(frozen=True)
class DirectorySpec:
    """Parsed directory reference."""

    kind: BackendKind
    current_path: str
    bucket: str | None = None


def parse_directory_ref(directory_ref: str) -> DirectorySpec:
    """
    Parse a directory reference into a DirectorySpec.

    Args:
        directory_ref: Reference string such as "[s3:bucket] maps".

    Returns:
        DirectorySpec for the reference.

    Raises:
        ParseError: If the reference is blank or malformed.
        UnsupportedBackendError: If the tag names an unknown backend.
    """
    if not isinstance(directory_ref, str) or not directory_ref.strip():
        raise ParseError(f"Empty directory reference: {directory_ref!r}")

    ref = directory_ref.strip()
    if not ref.startswith("["):
        return DirectorySpec(kind=BackendKind.LOCAL, current_path=_clean_path(ref))

    match = _TAGGED_REF.match(ref)
    if match is None:
        raise ParseError(f"Unterminated backend tag in directory reference: {ref!r}")

    tag, path = match.group(1).strip(), match.group(2)
    if not tag:
        raise ParseError(f"Missing backend tag in directory reference: {ref!r}")

    source, _, bucket = tag.partition(":")
    try:
        kind = BackendKind(source.strip())
    except ValueError:
        raise UnsupportedBackendError(source.strip()) from None

    bucket = bucket.strip() or None
    if kind is BackendKind.BUCKET and bucket is None:
        raise ParseError(f"Bucket reference without a bucket name: {ref!r}")
    if kind is not BackendKind.BUCKET and bucket is not None:
        raise ParseError(f"Only bucket references may name a bucket: {ref!r}")

    return DirectorySpec(kind=kind, current_path=_clean_path(path), bucket=bucket)


def _clean_path(path: str) -> str:
    """Normalize separators and strip surrounding whitespace and slashes."""
    return path.replace("\\", "/").strip().strip("/")


def join_path(*parts: str) -> str:
    """Join URL path parts with "/", skipping empty parts."""
    return "/".join(part.strip("/") for part in parts if part and part.strip("/"))


def encode_uri(uri: str) -> str:
    """Percent-encode a URL or path, keeping reserved URL characters."""
    return quote(uri, safe=URI_SAFE_CHARS)


def remove_file_extension(name: str) -> str:
    """Drop the last extension from a filename ("a.b.png" -> "a.b")."""
    stem, dot, _ = name.rpartition(".")
    return stem if dot else name
