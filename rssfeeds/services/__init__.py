from rssfeeds.services.content import FeedContext
from rssfeeds.services.feed import build_feed

__all__ = ["FeedContext", "build_feed"]
