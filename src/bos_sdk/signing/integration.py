"""
HTTP client integration for request signing

This module plugs the authorizer into ``requests`` as an authentication
handler, so any request sent through a session can carry a bce-auth-v1
``Authorization`` header.
"""

import logging
from typing import Dict, Iterable, Optional, Tuple
from urllib.parse import unquote, unquote_plus, urlsplit

import requests
from requests.auth import AuthBase

from .authorizer import Authorizer
from .types import SigningError, SigningErrorCodes, SigningOptions

logger = logging.getLogger(__name__)


def split_url(url: str) -> Tuple[str, str, Dict[str, Optional[str]]]:
    """
    Split a URL into host, decoded path and decoded query.

    A query item without ``=`` is kept as a valueless flag (None), unlike
    ``urllib.parse.parse_qsl`` which would turn it into an empty string.
    Query items are form-decoded, so ``+`` reads as a space the way
    ``requests`` encodes ``params``. A repeated key cannot be represented
    in the signed query and raises SigningError.

    Returns:
        tuple: ``(netloc, path, query)``
    """
    parts = urlsplit(url)
    query: Dict[str, Optional[str]] = {}
    for item in parts.query.split('&'):
        if not item:
            continue
        key, sep, value = item.partition('=')
        key = unquote_plus(key)
        if key in query:
            raise SigningError(
                f"Repeated query parameter cannot be signed: {key}",
                SigningErrorCodes.INVALID_QUERY,
                {"parameter": key}
            )
        query[key] = unquote_plus(value) if sep else None
    return parts.netloc, unquote(parts.path) or '/', query


class BceAuth(AuthBase):
    """
    ``requests`` authentication handler signing with bce-auth-v1.

    Example:
        session.get(url, auth=BceAuth(authorizer, sign_headers=['range']))
    """

    def __init__(
        self,
        authorizer: Authorizer,
        sign_headers: Iterable[str] = (),
        expired_in: Optional[int] = None
    ):
        self.authorizer = authorizer
        self.options = SigningOptions(sign_headers=sign_headers, expired_in=expired_in)

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        netloc, path, query = split_url(request.url)

        # http.client adds Host itself; it must be present to be signed.
        if 'Host' not in request.headers:
            request.headers['Host'] = netloc

        request.headers['Authorization'] = self.authorizer.authorize(
            request.method,
            path,
            query,
            dict(request.headers),
            self.options
        )

        logger.debug(f"Signed {request.method} request to {request.url}")
        return request
