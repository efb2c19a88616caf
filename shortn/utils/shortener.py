"""Shortcode generation utility

This module provides a helper function for generating short, deterministic
codes from the content of a destination URL.

Functions:
    generate_shortcode(url, length=7):
        Derive a URL-safe shortcode from the SHA-256 digest of a URL.

Example:
    >>> from shortn.utils import generate_shortcode
    >>> generate_shortcode('https://example.com/x')
    'VM749C8'
"""

import base64
import hashlib

from shortn.constants import SHORTCODE_LENGTH


# URL-safe base64 alphabet: A-Z a-z 0-9 - _
ALPHABET = frozenset('ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_')

# A SHA-256 digest encodes to 43 significant base64 characters
MAX_LENGTH = 43


def generate_shortcode(url: str, length: int = SHORTCODE_LENGTH) -> str:
    """Generate a short, deterministic code for a destination URL.

    The UTF-8 bytes of the URL are hashed with SHA-256, the digest is encoded
    with the URL-safe base64 alphabet and truncated to `length` characters.

    Args:
        url (str):
            Destination URL the shortcode will redirect to.

        length (int, optional):
            Number of characters to keep. Defaults to 7 (~42 bits of entropy).

    Returns:
        str: A shortcode safe to place directly in a URL path segment.

    Example:
        >>> generate_shortcode('https://example.com/x') == generate_shortcode('https://example.com/x')
        True

    NOTE:
        - The same URL always maps to the same shortcode, so adding a URL twice
          overwrites the same key with equal content.
        - Two distinct URLs may collide once truncated. See
          ShortURLCassandraDAO(reject_collisions=...) for the policy.
    """
    if not isinstance(url, str):
        raise TypeError(f'URL must be of type string (given type: {type(url)}).')
    if not url:
        raise ValueError('URL must be a non-empty string.')
    if not isinstance(length, int) or isinstance(length, bool):
        raise TypeError(f'Length must be of type integer (given type: {type(length)}).')
    if not 0 < length <= MAX_LENGTH:
        raise ValueError(f'Length must be between 1 and {MAX_LENGTH} (given value: {length}).')

    digest = hashlib.sha256(url.encode('utf-8')).digest()
    return base64.urlsafe_b64encode(digest).decode('ascii')[:length]
