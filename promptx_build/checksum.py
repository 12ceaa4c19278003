"""Content fingerprint for prompt sources."""
from __future__ import annotations
import hashlib
from typing import Union


def checksum(content: Union[bytes, str]) -> str:
    """Return the 32 character hex MD5 digest of ``content``.

    Strings are encoded as UTF-8 first, so a file's text and its raw bytes
    fingerprint identically. Used purely for change detection.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.md5(content).hexdigest()  # noqa: S324


__all__ = ["checksum"]
