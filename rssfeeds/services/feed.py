# rssfeeds/services/feed.py
from __future__ import annotations

from rssfeeds.params import FeedKind, FeedRequest, ListingType
from rssfeeds.rss import FeedChannel
from rssfeeds.services.channel import (
    community_channel,
    front_channel,
    inbox_channel,
    listing_channel,
    user_channel,
)
from rssfeeds.services.content import (
    FeedContext,
    get_community_content,
    get_front_content,
    get_inbox_content,
    get_listing_content,
    get_user_content,
)
from rssfeeds.services.items import create_post_items, create_reply_and_mention_items

_LISTINGS = {FeedKind.All: ListingType.All, FeedKind.Local: ListingType.Local}


def build_feed(request: FeedRequest, ctx: FeedContext) -> FeedChannel:
    """
    Fetch, normalise and assemble one feed.

    Any FeedError raised on the way (lookup, auth, storage, permalinks) aborts
    the feed; there is no partial channel.
    """
    settings = ctx.settings
    kind = request.kind

    if kind in _LISTINGS:
        listing = get_listing_content(ctx, _LISTINGS[kind], request.sort, request.limit)
        return listing_channel(listing, create_post_items(listing.posts, settings), settings)

    if kind == FeedKind.Community:
        community = get_community_content(ctx, request.target, request.sort, request.limit)
        return community_channel(
            community, create_post_items(community.posts, settings), settings
        )

    if kind == FeedKind.User:
        user = get_user_content(ctx, request.target, request.limit)
        return user_channel(user, create_post_items(user.posts, settings), settings)

    if kind == FeedKind.Front:
        front = get_front_content(ctx, request.credential, request.sort, request.limit)
        return front_channel(front, create_post_items(front.posts, settings), settings)

    if kind == FeedKind.Inbox:
        inbox = get_inbox_content(ctx, request.credential)
        items = create_reply_and_mention_items(inbox.notifications, settings)
        return inbox_channel(inbox, items, settings)

    raise ValueError(f"unhandled feed kind: {kind}")


__all__ = ["build_feed"]
