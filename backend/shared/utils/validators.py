"""
Shared validators for input sanitization.
Used by the pydantic schemas (field validators) and by services.
"""

import re
from urllib.parse import urlparse
from typing import Optional

# Internal hosts that must never appear in stored image/logo URLs
BLOCKED_HOSTS = [
    "localhost",
    "127.0.0.1",
    "0.0.0.0",
    "10.",
    "192.168.",
    "169.254.",
    "[::1]",
    "metadata.google",
]
BLOCKED_HOST_PATTERN = re.compile(r"^172\.(1[6-9]|2\d|3[01])\.")

BLOCKED_SCHEMES = {"javascript", "data", "file", "ftp", "mailto", "tel"}

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
SLUG_MIN_LENGTH = 3
SLUG_MAX_LENGTH = 100

# Customer phone as stored by staff: optional +, 7-15 digits
PHONE_PATTERN = re.compile(r"^\+?[0-9]{7,15}$")
# Public ordering phone: optional +, no leading zero, 10-15 digits
PUBLIC_PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{9,14}$")

HEX_COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")


def validate_image_url(url: Optional[str]) -> Optional[str]:
    """
    Validate an image or logo URL.

    Returns:
        The stripped URL, or None for empty input.

    Raises:
        ValueError: If the URL is malformed or points at an internal host.
    """
    if url is None:
        return None

    url = url.strip()
    if not url:
        return None

    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    if scheme in BLOCKED_SCHEMES:
        raise ValueError(f"URL scheme not allowed: {scheme}")
    if scheme not in ("http", "https"):
        raise ValueError("Only HTTP/HTTPS URLs are allowed")

    host = parsed.netloc.lower()
    if not host:
        raise ValueError("URL has no host")
    if any(blocked in host for blocked in BLOCKED_HOSTS) or BLOCKED_HOST_PATTERN.match(host):
        raise ValueError("Internal URLs are not allowed")

    if len(url) > 2048:
        raise ValueError("URL too long (max 2048 characters)")

    return url


def validate_slug(slug: str) -> str:
    """
    Validate a restaurant slug: lowercase letters, digits and dashes,
    3 to 100 characters.

    Raises:
        ValueError: With a message suitable for the API response.
    """
    if len(slug) < SLUG_MIN_LENGTH or len(slug) > SLUG_MAX_LENGTH:
        raise ValueError(f"Slug must be between {SLUG_MIN_LENGTH} and {SLUG_MAX_LENGTH} characters")
    if not SLUG_PATTERN.match(slug):
        raise ValueError("Slug can only contain lowercase letters, numbers and hyphens")
    return slug


def slugify(value: str) -> str:
    """Derive a slug candidate from a restaurant name."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "restaurant"


def normalize_phone(phone: str) -> str:
    """Strip whitespace, dashes and parentheses from a phone number."""
    return re.sub(r"[\s\-()]", "", phone)


def validate_phone(phone: str, public: bool = False) -> str:
    """
    Normalize and validate a phone number.

    Args:
        phone: Raw phone input.
        public: Apply the stricter public-ordering format.
    """
    phone = normalize_phone(phone)
    pattern = PUBLIC_PHONE_PATTERN if public else PHONE_PATTERN
    if not pattern.match(phone):
        raise ValueError("Invalid phone number")
    return phone


def validate_hex_color(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not HEX_COLOR_PATTERN.match(value):
        raise ValueError("Colour must be a hex value like #1A2B3C")
    return value.upper()


def escape_like_pattern(value: str) -> str:
    """
    Escape LIKE wildcards so search input is matched literally.
    """
    if not value:
        return value

    value = value.replace("\\", "\\\\")
    value = value.replace("%", "\\%")
    value = value.replace("_", "\\_")
    return value


def sanitize_search_term(term: str, max_length: int = 100) -> str:
    """
    Trim, truncate and strip control characters from a search term.
    """
    if not term:
        return ""

    term = term.strip()[:max_length]
    return re.sub(r"[\x00-\x1f\x7f-\x9f]", "", term)
