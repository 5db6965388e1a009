"""
Utility functions for request signing

This module provides the encoding, timestamp and digest helpers shared by
the signing pipeline and the HTTP client.
"""

import base64
import hashlib
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Optional, Union
from urllib.parse import quote


AUTH_TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%SZ'


def uri_encode(value: Union[str, int]) -> str:
    """
    Percent-encode a value following RFC 3986.

    Unreserved characters (letters, digits, ``-_.~``) are kept, everything
    else, including ``/`` and space, becomes ``%XX`` over the UTF-8 bytes.

    Args:
        value: String (or integer) to encode

    Returns:
        str: Encoded string
    """
    if not isinstance(value, str):
        value = str(value)
    return quote(value, safe='~')


def generate_timestamp() -> datetime:
    """
    Get the current UTC time truncated to whole seconds.

    Returns:
        datetime: Timezone-aware UTC datetime
    """
    return datetime.now(timezone.utc).replace(microsecond=0)


def format_auth_timestamp(timestamp: Optional[datetime] = None) -> str:
    """
    Format a timestamp as used inside bce-auth-v1 tokens.

    Args:
        timestamp: Datetime to format (current time if None); naive
            values are taken to be UTC

    Returns:
        str: ``YYYY-MM-DDTHH:MM:SSZ``
    """
    if timestamp is None:
        timestamp = generate_timestamp()

    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)

    return timestamp.astimezone(timezone.utc).strftime(AUTH_TIMESTAMP_FORMAT)


def format_http_date(timestamp: Optional[datetime] = None) -> str:
    """
    Format a timestamp as an RFC 1123 HTTP date for the ``Date`` header.

    Args:
        timestamp: Datetime to format (current time if None)

    Returns:
        str: e.g. ``Mon, 02 Jan 2023 03:04:05 GMT``
    """
    if timestamp is None:
        timestamp = generate_timestamp()

    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)

    return format_datetime(timestamp.astimezone(timezone.utc), usegmt=True)


def normalize_header_name(name: str) -> str:
    """
    Normalize header name to lowercase for consistent processing.

    Args:
        name: Header name to normalize

    Returns:
        str: Lowercase header name
    """
    return name.strip().lower()


def to_hex(data: bytes) -> str:
    """
    Convert bytes to lowercase hex string.

    Args:
        data: Bytes to convert

    Returns:
        str: Lowercase hex string
    """
    return data.hex()


def to_bytes(body: Union[str, bytes, None]) -> bytes:
    """Encode a request body as bytes (UTF-8 for text)."""
    if body is None:
        return b''
    if isinstance(body, str):
        return body.encode('utf-8')
    return bytes(body)


def calculate_content_md5(body: Union[str, bytes]) -> str:
    """
    Calculate the ``Content-MD5`` header value for a request body.

    Args:
        body: Request body

    Returns:
        str: Base64 of the raw MD5 digest
    """
    digest = hashlib.md5(to_bytes(body)).digest()
    return base64.b64encode(digest).decode('ascii')
