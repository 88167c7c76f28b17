# rssfeeds/services/channel.py
from __future__ import annotations

from typing import Iterable, Optional

from rssfeeds.config import Settings
from rssfeeds.markup import markdown_to_html
from rssfeeds.permalinks import inbox_url, site_url
from rssfeeds.rss import RSS_NAMESPACES, FeedChannel, FeedItem
from rssfeeds.services.content import (
    CommunityContent,
    FrontContent,
    InboxContent,
    ListingContent,
    UserContent,
)


def _description(text: Optional[str]) -> Optional[str]:
    # No description at all rather than an empty one
    if not text:
        return None
    return markdown_to_html(text)


def _channel(
    site_name: str,
    label: str,
    link: str,
    items: Iterable[FeedItem],
    description: Optional[str] = None,
) -> FeedChannel:
    return FeedChannel(
        title=f"{site_name} - {label}",
        link=link,
        items=tuple(items),
        description=_description(description),
        namespaces=RSS_NAMESPACES,
    )


def listing_channel(content: ListingContent, items: Iterable[FeedItem], settings: Settings) -> FeedChannel:
    return _channel(
        content.site.name,
        content.listing_type.value,
        site_url(settings),
        items,
        content.site.description,
    )


def community_channel(content: CommunityContent, items: Iterable[FeedItem], settings: Settings) -> FeedChannel:
    return _channel(
        content.site.name,
        content.community.name,
        content.community.ap_id,
        items,
        content.community.description,
    )


def user_channel(content: UserContent, items: Iterable[FeedItem], settings: Settings) -> FeedChannel:
    return _channel(content.site.name, content.person.name, content.person.ap_id, items)


def front_channel(content: FrontContent, items: Iterable[FeedItem], settings: Settings) -> FeedChannel:
    return _channel(
        content.site.name, "Subscribed", site_url(settings), items, content.site.description
    )


def inbox_channel(content: InboxContent, items: Iterable[FeedItem], settings: Settings) -> FeedChannel:
    return _channel(
        content.site.name, "Inbox", inbox_url(settings), items, content.site.description
    )


__all__ = [
    "listing_channel",
    "community_channel",
    "user_channel",
    "front_channel",
    "inbox_channel",
]
