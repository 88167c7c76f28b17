# rssfeeds/rss.py
"""
RSS 2.0 document model and its XML rendering.

`FeedItem` and `FeedChannel` are immutable; a channel is built once per
request, rendered once by `render_channel`, then dropped. Namespaces for
Dublin Core and Media RSS are declared on every document, whether or not an
item uses them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import format_datetime
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from lxml import etree

DC_NAMESPACE = "http://purl.org/dc/elements/1.1/"
MEDIA_NAMESPACE = "http://search.yahoo.com/mrss/"

RSS_NAMESPACES: Mapping[str, str] = MappingProxyType(
    {"dc": DC_NAMESPACE, "media": MEDIA_NAMESPACE}
)

# Characters XML 1.0 does not allow anywhere in a document
_XML_ILLEGAL = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


@dataclass(frozen=True)
class Enclosure:
    url: str
    mime_type: str
    length: str = "0"


@dataclass(frozen=True)
class Category:
    name: str
    domain: Optional[str] = None


@dataclass(frozen=True)
class MediaContent:
    url: str
    medium: str = "image"


@dataclass(frozen=True)
class FeedItem:
    title: str
    link: str
    pub_date: datetime
    description: str
    author: Optional[str] = None
    enclosure: Optional[Enclosure] = None
    categories: Tuple[Category, ...] = ()
    dc_creators: Tuple[str, ...] = ()
    media_content: Tuple[MediaContent, ...] = ()

    @property
    def guid(self) -> str:
        # Readers dedupe on this; it is always the permalink.
        return self.link

    @property
    def comments(self) -> str:
        return self.link


@dataclass(frozen=True)
class FeedChannel:
    title: str
    link: str
    items: Tuple[FeedItem, ...] = ()
    description: Optional[str] = None
    namespaces: Mapping[str, str] = field(default_factory=lambda: RSS_NAMESPACES)


def rfc2822(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value)


def _clean(text: str) -> str:
    return _XML_ILLEGAL.sub("", text)


def _text(parent: etree._Element, tag: str, value: Optional[str]) -> None:
    if value is None:
        return
    etree.SubElement(parent, tag).text = _clean(value)


def _item(channel_el: etree._Element, item: FeedItem) -> None:
    el = etree.SubElement(channel_el, "item")
    _text(el, "title", item.title)
    _text(el, "link", item.link)
    _text(el, "description", item.description)
    _text(el, "author", item.author)
    for cat in item.categories:
        cat_el = etree.SubElement(el, "category")
        cat_el.text = _clean(cat.name)
        if cat.domain:
            cat_el.set("domain", _clean(cat.domain))
    _text(el, "comments", item.comments)
    if item.enclosure is not None:
        etree.SubElement(
            el,
            "enclosure",
            url=_clean(item.enclosure.url),
            length=item.enclosure.length,
            type=_clean(item.enclosure.mime_type),
        )
    guid = etree.SubElement(el, "guid", isPermaLink="true")
    guid.text = _clean(item.guid)
    _text(el, "pubDate", rfc2822(item.pub_date))
    for creator in item.dc_creators:
        etree.SubElement(el, f"{{{DC_NAMESPACE}}}creator").text = _clean(creator)
    for media in item.media_content:
        etree.SubElement(
            el,
            f"{{{MEDIA_NAMESPACE}}}content",
            url=_clean(media.url),
            medium=media.medium,
        )


def render_channel(channel: FeedChannel) -> str:
    """Serialize a channel to a complete RSS 2.0 document."""
    rss = etree.Element("rss", version="2.0", nsmap=dict(channel.namespaces))
    channel_el = etree.SubElement(rss, "channel")
    _text(channel_el, "title", channel.title)
    _text(channel_el, "link", channel.link)
    _text(channel_el, "description", channel.description)
    for item in channel.items:
        _item(channel_el, item)
    return etree.tostring(
        rss, xml_declaration=True, encoding="UTF-8", pretty_print=True
    ).decode("utf-8")


__all__ = [
    "RSS_NAMESPACES",
    "Enclosure",
    "Category",
    "MediaContent",
    "FeedItem",
    "FeedChannel",
    "render_channel",
    "rfc2822",
]
