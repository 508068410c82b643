"""Utilities to normalize tab URLs into tracked addresses."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from .models import UNKNOWN_ADDRESS

_DEFAULT_PORTS: dict[str, str] = {
    "http": ":80",
    "https": ":443",
}

_WHITESPACE_PATTERN = re.compile(r"\s+")


def normalize_address(url: Optional[str]) -> str:
    """Collapse a tab URL to the address its time is attributed to."""
    if not url:
        return UNKNOWN_ADDRESS
    cleaned = _WHITESPACE_PATTERN.sub("", url)
    if not cleaned:
        return UNKNOWN_ADDRESS

    try:
        parts = urlsplit(cleaned)
    except ValueError:
        return cleaned

    scheme = parts.scheme.lower()
    netloc = parts.netloc.lower()
    default_port = _DEFAULT_PORTS.get(scheme)
    if default_port and netloc.endswith(default_port):
        netloc = netloc[: -len(default_port)]

    path = parts.path
    if scheme in _DEFAULT_PORTS and not path:
        path = "/"
    return urlunsplit((scheme, netloc, path, parts.query, ""))
