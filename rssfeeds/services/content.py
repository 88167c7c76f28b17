# rssfeeds/services/content.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from rssfeeds.auth import check_private_instance, local_user_view_from_jwt
from rssfeeds.config import Settings
from rssfeeds.errors import NotFound
from rssfeeds.models import (
    CommunityRef,
    LocalUserView,
    NotificationRecord,
    PersonRef,
    PostView,
    SiteView,
)
from rssfeeds.params import ListingType, PostSortType
from rssfeeds.store import FeedStore


@dataclass(frozen=True)
class FeedContext:
    store: FeedStore
    settings: Settings


# ---------- What each feed kind fetched ----------
@dataclass(frozen=True)
class ListingContent:
    site: SiteView
    listing_type: ListingType
    posts: List[PostView]


@dataclass(frozen=True)
class CommunityContent:
    site: SiteView
    community: CommunityRef
    posts: List[PostView]


@dataclass(frozen=True)
class UserContent:
    site: SiteView
    person: PersonRef
    posts: List[PostView]


@dataclass(frozen=True)
class FrontContent:
    site: SiteView
    local_user: LocalUserView
    posts: List[PostView]


@dataclass(frozen=True)
class InboxContent:
    site: SiteView
    local_user: LocalUserView
    notifications: List[NotificationRecord]


# ---------- Resolvers ----------
def get_listing_content(
    ctx: FeedContext, listing_type: ListingType, sort: PostSortType, limit: int
) -> ListingContent:
    site = ctx.store.read_site()
    check_private_instance(None, site)
    posts = ctx.store.list_posts(listing_type=listing_type, sort=sort, limit=limit)
    return ListingContent(site=site, listing_type=listing_type, posts=posts)


def get_community_content(
    ctx: FeedContext, community_name: str, sort: PostSortType, limit: int
) -> CommunityContent:
    site = ctx.store.read_site()
    community: Optional[CommunityRef] = ctx.store.read_community(community_name)
    # Hidden communities look exactly like missing ones
    if community is None or not community.can_view_without_login():
        raise NotFound(f"community {community_name!r}")
    check_private_instance(None, site)
    posts = ctx.store.list_posts(community_id=community.id, sort=sort, limit=limit)
    return CommunityContent(site=site, community=community, posts=posts)


def get_user_content(ctx: FeedContext, user_name: str, limit: int) -> UserContent:
    """
    A person's own posts, newest first. User feeds have no sort option.
    """
    site = ctx.store.read_site()
    person = ctx.store.read_person(user_name)
    if person is None:
        raise NotFound(f"person {user_name!r}")
    check_private_instance(None, site)
    content = ctx.store.list_person_posts(person.id, limit=limit)
    posts = [c for c in content if isinstance(c, PostView)]
    return UserContent(site=site, person=person, posts=posts)


def get_front_content(
    ctx: FeedContext, token: str, sort: PostSortType, limit: int
) -> FrontContent:
    site = ctx.store.read_site()
    local_user = local_user_view_from_jwt(token, ctx.store, ctx.settings)
    check_private_instance(local_user, site)
    posts = ctx.store.list_posts(
        listing_type=ListingType.Subscribed,
        person_id=local_user.person.id,
        sort=sort,
        limit=limit,
    )
    return FrontContent(site=site, local_user=local_user, posts=posts)


def get_inbox_content(ctx: FeedContext, token: str) -> InboxContent:
    site = ctx.store.read_site()
    local_user = local_user_view_from_jwt(token, ctx.store, ctx.settings)
    check_private_instance(local_user, site)
    notifications = ctx.store.list_inbox(
        local_user.person.id,
        show_bot_accounts=local_user.show_bot_accounts,
    )
    return InboxContent(site=site, local_user=local_user, notifications=notifications)


__all__ = [
    "FeedContext",
    "ListingContent",
    "CommunityContent",
    "UserContent",
    "FrontContent",
    "InboxContent",
    "get_listing_content",
    "get_community_content",
    "get_user_content",
    "get_front_content",
    "get_inbox_content",
]
