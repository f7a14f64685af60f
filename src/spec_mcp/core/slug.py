"""Slug generation for entity file names."""

import re

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def generate_slug(text: str) -> str:
    """Turn a display name into a file-name slug.

    >>> generate_slug("  User Auth: OAuth 2.0 ")
    'user-auth-oauth-2-0'
    """
    return _NON_ALNUM.sub("-", text.strip().lower()).strip("-")


def validate_slug(slug: str) -> bool:
    return bool(slug) and SLUG_PATTERN.match(slug) is not None
