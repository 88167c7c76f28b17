# rssfeeds/services/items.py
"""
Turn content records into feed items.

Posts and inbox notifications each have one builder. Builders are pure: they
take a record plus settings and return a new FeedItem. A record that cannot
be permalinked raises PermalinkError, and the whole feed fails with it.
"""

from __future__ import annotations

from html import escape
from typing import Iterable, List

from typing_extensions import assert_never

from rssfeeds.config import Settings
from rssfeeds.markup import markdown_to_html
from rssfeeds.models import (
    CommentMentionView,
    CommentReplyView,
    NotificationRecord,
    PostMentionView,
    PostView,
    PrivateMessageView,
)
from rssfeeds.permalinks import (
    comment_url,
    community_url,
    inbox_url,
    person_profile_url,
    post_url,
)
from rssfeeds.rss import Category, Enclosure, FeedItem, MediaContent

DEFAULT_MIME_TYPE = "application/octet-stream"


def _attr(value: str) -> str:
    return escape(value, quote=True)


def post_description(post: PostView, permalink: str, community_link: str) -> str:
    description = (
        f'submitted by <a href="{_attr(post.creator.ap_id)}">{escape(post.creator.name)}</a>'
        f' to <a href="{_attr(community_link)}">{escape(post.community.name)}</a>'
        f'<br>{post.score} points | <a href="{_attr(permalink)}">{post.comments} comments</a>'
    )
    if post.url:
        url = _attr(post.url)
        mime_type = post.url_content_type or DEFAULT_MIME_TYPE
        # Direct image links get an inline preview
        if mime_type.startswith("image/"):
            description += f'<br><a href="{url}"><img src="{url}"/></a>'
        else:
            description += f'<br><a href="{url}">{url}</a>'
    if post.body:
        description += markdown_to_html(post.body)
    return description


def build_post_item(post: PostView, settings: Settings) -> FeedItem:
    permalink = post_url(post.id, settings)
    community_link = community_url(post.community.name, settings)

    enclosure = None
    if post.url:
        enclosure = Enclosure(
            url=post.url,
            mime_type=post.url_content_type or DEFAULT_MIME_TYPE,
            length="0",
        )

    media_content = ()
    if post.thumbnail_url:
        media_content = (MediaContent(url=post.thumbnail_url, medium="image"),)

    return FeedItem(
        title=f"[{post.community.name}] {post.name}",
        link=permalink,
        pub_date=post.published,
        description=post_description(post, permalink, community_link),
        enclosure=enclosure,
        categories=(Category(name=post.community.title, domain=post.community.ap_id),),
        dc_creators=(post.creator.ap_id,),
        media_content=media_content,
    )


def create_post_items(posts: Iterable[PostView], settings: Settings) -> List[FeedItem]:
    return [build_post_item(p, settings) for p in posts]


def _notification_link_and_body(record: NotificationRecord, settings: Settings) -> tuple[str, str]:
    if isinstance(record, CommentReplyView):
        return comment_url(record.comment_id, settings), record.content
    if isinstance(record, CommentMentionView):
        return comment_url(record.comment_id, settings), record.content
    if isinstance(record, PostMentionView):
        return post_url(record.post_id, settings), record.body or ""
    if isinstance(record, PrivateMessageView):
        # Messages have no public page; point at the reader's inbox.
        return inbox_url(settings), record.content
    assert_never(record)


def build_notification_item(record: NotificationRecord, settings: Settings) -> FeedItem:
    link, body = _notification_link_and_body(record, settings)
    name = record.creator.name
    profile = person_profile_url(name, settings)
    return FeedItem(
        title=f"Reply from {name}",
        link=link,
        pub_date=record.published,
        description=markdown_to_html(body),
        author=f'/u/{name} <a href="{_attr(profile)}">(link)</a>',
    )


def create_reply_and_mention_items(
    inbox: Iterable[NotificationRecord], settings: Settings
) -> List[FeedItem]:
    return [build_notification_item(r, settings) for r in inbox]


__all__ = [
    "build_post_item",
    "build_notification_item",
    "create_post_items",
    "create_reply_and_mention_items",
    "post_description",
]
