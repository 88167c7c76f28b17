# rssfeeds/auth.py
from __future__ import annotations

from typing import Optional

import jwt  # PyJWT

from rssfeeds.config import Settings
from rssfeeds.errors import ServiceUnavailable, Unauthorized
from rssfeeds.models import LocalUserView, SiteView
from rssfeeds.store import FeedStore


def _local_user_id(token: str, secret: str) -> int:
    if not secret:
        raise Unauthorized("JWT_SECRET is not configured")
    options = {"verify_aud": False, "verify_signature": True}
    try:
        claims = jwt.decode(token, secret, algorithms=["HS256"], options=options)
    except jwt.PyJWTError:
        raise Unauthorized("Invalid token")
    sub = claims.get("sub")
    try:
        return int(sub)
    except (TypeError, ValueError):
        raise Unauthorized("Invalid token (no sub)")


def local_user_view_from_jwt(token: str, store: FeedStore, settings: Settings) -> LocalUserView:
    """
    Resolve a feed token to the logged-in user it was issued for.

    The token must verify against the instance secret, still be a live login
    token in storage, and belong to an account that is neither banned nor
    deleted.
    """
    local_user_id = _local_user_id(token, settings.jwt_secret)
    if not store.validate_login_token(local_user_id, token):
        raise Unauthorized("Token is not a current login")
    local_user = store.read_local_user(local_user_id)
    if local_user is None:
        raise Unauthorized("Unknown user")
    if local_user.banned or local_user.deleted:
        raise Unauthorized("Account is banned or deleted")
    return local_user


def check_private_instance(local_user: Optional[LocalUserView], site: SiteView) -> None:
    if local_user is None and site.private_instance:
        raise ServiceUnavailable("Instance is private")


__all__ = ["local_user_view_from_jwt", "check_private_instance"]
