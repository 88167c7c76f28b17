# rssfeeds/errors.py
"""
Failures raised while assembling a feed.

Each error carries the HTTP status it maps to on the aggregate routes and a
generic `detail` safe to return to the client. The typed route
(`/feeds/{type}/{name}.xml`) flattens everything except storage failures into
400 so that it never reveals whether a community, user or token exists.
"""

from __future__ import annotations


class FeedError(Exception):
    status_code = 500
    detail = "feed_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.detail)


class InvalidParameter(FeedError):
    status_code = 400
    detail = "invalid_parameter"


class NotFound(FeedError):
    status_code = 404
    detail = "not_found"


class Unauthorized(FeedError):
    status_code = 401
    detail = "not_logged_in"


class ServiceUnavailable(FeedError):
    status_code = 503
    detail = "instance_is_private"


class PermalinkError(FeedError):
    status_code = 500
    detail = "permalink_error"


class Upstream(FeedError):
    status_code = 502
    detail = "upstream_failure"


__all__ = [
    "FeedError",
    "InvalidParameter",
    "NotFound",
    "Unauthorized",
    "ServiceUnavailable",
    "PermalinkError",
    "Upstream",
]
