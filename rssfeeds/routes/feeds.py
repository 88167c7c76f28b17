# rssfeeds/routes/feeds.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from rssfeeds.config import FEED_LOG_REQUESTS, get_settings
from rssfeeds.errors import FeedError, Upstream
from rssfeeds.params import FeedKind, FeedRequest, resolve
from rssfeeds.rss import render_channel
from rssfeeds.services import FeedContext, build_feed
from rssfeeds.store import FeedStore

RSS_CONTENT_TYPE = "application/rss+xml"

router = APIRouter(prefix="/feeds", tags=["feeds"])

_store = FeedStore(inbox_limit=get_settings().inbox_limit)


def get_feed_context() -> FeedContext:
    return FeedContext(store=_store, settings=get_settings())


# ----------------------------- Helpers --------------------------------------

def _log(msg: str) -> None:
    if FEED_LOG_REQUESTS:
        print(f"[feeds] {msg}")


def _rss(request: FeedRequest, ctx: FeedContext) -> Response:
    channel = build_feed(request, ctx)
    _log(f"{request.kind.value} feed: {len(channel.items)} items")
    return Response(content=render_channel(channel), media_type=RSS_CONTENT_TYPE)


def _aggregate(kind: FeedKind, sort: Optional[str], limit: Optional[str], ctx: FeedContext) -> Response:
    try:
        sort_type, fetch_limit = resolve(sort, limit, ctx.settings)
        return _rss(FeedRequest(kind=kind, sort=sort_type, limit=fetch_limit), ctx)
    except FeedError as e:
        _log(f"{kind.value} feed failed: {e.__class__.__name__}: {e}")
        raise HTTPException(status_code=e.status_code, detail=e.detail)


# ---------------------------- Routes ----------------------------------------

@router.get("/all.xml")
def get_all_feed(
    sort: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    ctx: FeedContext = Depends(get_feed_context),
):
    return _aggregate(FeedKind.All, sort, limit, ctx)


@router.get("/local.xml")
def get_local_feed(
    sort: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    ctx: FeedContext = Depends(get_feed_context),
):
    return _aggregate(FeedKind.Local, sort, limit, ctx)


@router.get("/{feed_type}/{name}.xml")
def get_feed(
    feed_type: str,
    name: str,
    sort: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    ctx: FeedContext = Depends(get_feed_context),
):
    """
    /feeds/u/{user}.xml, /feeds/c/{community}.xml, /feeds/front/{token}.xml,
    /feeds/inbox/{token}.xml.

    Lookup, auth and privacy failures all come back as a plain 400 so the
    response never says whether a name or token exists. Storage failures
    stay 502.
    """
    try:
        sort_type, fetch_limit = resolve(sort, limit, ctx.settings)
        request = FeedRequest.for_path(feed_type, name, sort_type, fetch_limit)
        return _rss(request, ctx)
    except Upstream as e:
        _log(f"{feed_type} feed failed: {e}")
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except FeedError as e:
        _log(f"{feed_type} feed rejected: {e.__class__.__name__}: {e}")
        raise HTTPException(status_code=400, detail=e.detail)
