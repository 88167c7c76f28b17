# rssfeeds/params.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from rssfeeds.config import Settings
from rssfeeds.errors import InvalidParameter


class PostSortType(str, Enum):
    Active = "Active"
    Hot = "Hot"
    New = "New"
    Old = "Old"
    Top = "Top"
    MostComments = "MostComments"
    NewComments = "NewComments"
    Controversial = "Controversial"
    Scaled = "Scaled"

    def __str__(self) -> str:
        return self.value


class ListingType(str, Enum):
    All = "All"
    Local = "Local"
    Subscribed = "Subscribed"

    def __str__(self) -> str:
        return self.value


class FeedKind(str, Enum):
    Community = "Community"
    User = "User"
    Front = "Front"
    Inbox = "Inbox"
    All = "All"
    Local = "Local"


# Path segment of /feeds/{type}/{name}.xml -> kind
PATH_TYPES = {
    "u": FeedKind.User,
    "c": FeedKind.Community,
    "front": FeedKind.Front,
    "inbox": FeedKind.Inbox,
}

DEFAULT_SORT = PostSortType.Hot

_TARGETED = {FeedKind.Community, FeedKind.User, FeedKind.Front, FeedKind.Inbox}
_AUTHENTICATED = {FeedKind.Front, FeedKind.Inbox}


def parse_sort(raw_sort: Optional[str]) -> PostSortType:
    if not raw_sort:
        return DEFAULT_SORT
    try:
        return PostSortType(raw_sort)
    except ValueError:
        raise InvalidParameter(f"unknown sort: {raw_sort!r}")


def parse_limit(raw_limit: Union[str, int, None], settings: Settings) -> int:
    """
    Absent -> the default fetch limit. Anything above `max_limit` is clamped;
    a caller cannot make one feed request do unbounded work.
    """
    if raw_limit is None or raw_limit == "":
        return min(settings.fetch_limit, settings.max_limit)
    try:
        limit = int(raw_limit)
    except (TypeError, ValueError):
        raise InvalidParameter(f"limit is not an integer: {raw_limit!r}")
    if limit < 0:
        raise InvalidParameter("limit must be non-negative")
    return min(limit, settings.max_limit)


def resolve(
    raw_sort: Optional[str],
    raw_limit: Union[str, int, None],
    settings: Settings,
) -> Tuple[PostSortType, int]:
    return parse_sort(raw_sort), parse_limit(raw_limit, settings)


def parse_kind(path_type: str) -> FeedKind:
    kind = PATH_TYPES.get(path_type)
    if kind is None:
        raise InvalidParameter("wrong_type")
    return kind


@dataclass(frozen=True)
class FeedRequest:
    kind: FeedKind
    sort: PostSortType = DEFAULT_SORT
    limit: int = 20
    target: Optional[str] = None
    credential: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind in _TARGETED and not self.target:
            raise InvalidParameter(f"{self.kind.value} feed needs a name")
        if self.kind not in _TARGETED and self.target is not None:
            raise InvalidParameter(f"{self.kind.value} feed takes no name")
        if self.kind in _AUTHENTICATED and not self.credential:
            raise InvalidParameter(f"{self.kind.value} feed needs a token")
        if self.limit < 0:
            raise InvalidParameter("limit must be non-negative")

    @classmethod
    def for_path(
        cls,
        path_type: str,
        name: str,
        sort: PostSortType,
        limit: int,
    ) -> "FeedRequest":
        kind = parse_kind(path_type)
        credential = name if kind in _AUTHENTICATED else None
        return cls(kind=kind, sort=sort, limit=limit, target=name, credential=credential)


__all__ = [
    "PostSortType",
    "ListingType",
    "FeedKind",
    "FeedRequest",
    "resolve",
    "parse_sort",
    "parse_limit",
    "parse_kind",
]
