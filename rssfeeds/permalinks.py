# rssfeeds/permalinks.py
from __future__ import annotations

from typing import Optional
from urllib.parse import quote, urlsplit

from rssfeeds.config import Settings
from rssfeeds.errors import PermalinkError


def _local_url(settings: Settings, path: str) -> str:
    """
    Absolute URL on this instance. Raises PermalinkError when the configured
    hostname does not yield a usable URL.
    """
    url = f"{settings.get_protocol_and_hostname()}{path}"
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError as e:
        raise PermalinkError(f"cannot build url for {path!r}: {e}") from e
    if not host or any(c.isspace() for c in parts.netloc) or parts.query or parts.fragment:
        raise PermalinkError(f"bad hostname {settings.hostname!r}")
    return url


def _require_id(entity: str, value: Optional[int]) -> int:
    if value is None or isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise PermalinkError(f"{entity} has no id")
    return value


def _require_name(entity: str, value: Optional[str]) -> str:
    if not value:
        raise PermalinkError(f"{entity} has no name")
    return quote(value, safe="")


def site_url(settings: Settings) -> str:
    return _local_url(settings, "")


def post_url(post_id: Optional[int], settings: Settings) -> str:
    return _local_url(settings, f"/post/{_require_id('post', post_id)}")


def comment_url(comment_id: Optional[int], settings: Settings) -> str:
    return _local_url(settings, f"/comment/{_require_id('comment', comment_id)}")


def community_url(name: Optional[str], settings: Settings) -> str:
    return _local_url(settings, f"/c/{_require_name('community', name)}")


def person_profile_url(name: Optional[str], settings: Settings) -> str:
    return _local_url(settings, f"/u/{_require_name('person', name)}")


def inbox_url(settings: Settings) -> str:
    return _local_url(settings, "/inbox")


__all__ = [
    "site_url",
    "post_url",
    "comment_url",
    "community_url",
    "person_profile_url",
    "inbox_url",
]
