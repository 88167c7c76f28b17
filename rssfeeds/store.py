# rssfeeds/store.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, ContextManager, Dict, Iterator, List, Optional

import psycopg

from rssfeeds.db import get_conn
from rssfeeds.errors import Upstream
from rssfeeds.models import (
    ANONYMOUS_VISIBILITIES,
    CommentMentionView,
    CommentReplyView,
    CommunityRef,
    LocalUserView,
    NotificationRecord,
    PersonRef,
    PostMentionView,
    PostView,
    PrivateMessageView,
    SiteView,
)
from rssfeeds.params import ListingType, PostSortType

ConnFactory = Callable[[], ContextManager[psycopg.Connection]]

# ORDER BY per sort; values are fixed SQL fragments, never user input.
_POST_ORDER: Dict[PostSortType, str] = {
    PostSortType.Active: "p.hot_rank_active desc, p.published desc",
    PostSortType.Hot: "p.hot_rank desc, p.published desc",
    PostSortType.New: "p.published desc",
    PostSortType.Old: "p.published asc",
    PostSortType.Top: "p.score desc, p.published desc",
    PostSortType.MostComments: "p.comments desc, p.published desc",
    PostSortType.NewComments: "p.newest_comment_time desc, p.published desc",
    PostSortType.Controversial: "p.controversy_rank desc, p.published desc",
    PostSortType.Scaled: "p.scaled_rank desc, p.published desc",
}

_POST_SELECT = """
    select p.id, p.name, p.url, p.url_content_type, p.body, p.thumbnail_url,
           p.published, p.score, p.comments,
           cr.id as creator_id, cr.name as creator_name, cr.ap_id as creator_ap_id,
           cr.bot_account as creator_bot_account,
           c.id as community_id, c.name as community_name, c.title as community_title,
           c.ap_id as community_ap_id, c.description as community_description,
           c.visibility::text as community_visibility, c.local as community_local
    from post p
    join person cr on cr.id = p.creator_id
    join community c on c.id = p.community_id
"""

_POST_LIVE = """
    not p.deleted and not p.removed
    and not c.deleted and not c.removed
"""

_INBOX_SELECT = """
    select kind, published, comment_id, post_id, private_message_id, content,
           creator_id, creator_name, creator_ap_id, creator_bot_account
    from (
        -- Replies to the person's comments and posts
        select 'comment_reply' as kind, c.published, c.id as comment_id,
               null::int as post_id, null::int as private_message_id, c.content,
               p.id as creator_id, p.name as creator_name, p.ap_id as creator_ap_id,
               p.bot_account as creator_bot_account
        from comment_reply r
        join comment c on c.id = r.comment_id
        join person p on p.id = c.creator_id
        where r.recipient_id = %(person_id)s
          and not c.deleted and not c.removed

        union all

        -- @mentions in comments
        select 'comment_mention', c.published, c.id, null, null, c.content,
               p.id, p.name, p.ap_id, p.bot_account
        from person_comment_mention m
        join comment c on c.id = m.comment_id
        join person p on p.id = c.creator_id
        where m.recipient_id = %(person_id)s
          and not c.deleted and not c.removed

        union all

        -- @mentions in post bodies
        select 'post_mention', po.published, null, po.id, null, po.body,
               p.id, p.name, p.ap_id, p.bot_account
        from person_post_mention m
        join post po on po.id = m.post_id
        join person p on p.id = po.creator_id
        where m.recipient_id = %(person_id)s
          and not po.deleted and not po.removed

        union all

        -- Private messages addressed to the person
        select 'private_message', pm.published, null, null, pm.id, pm.content,
               p.id, p.name, p.ap_id, p.bot_account
        from private_message pm
        join person p on p.id = pm.creator_id
        where pm.recipient_id = %(person_id)s
          and not pm.deleted
    ) x
    where (%(show_bot_accounts)s or not x.creator_bot_account)
    order by published desc
    limit %(limit)s
"""


def _creator(row: Dict[str, Any]) -> PersonRef:
    return PersonRef(
        id=row["creator_id"],
        name=row["creator_name"],
        ap_id=row["creator_ap_id"],
        bot_account=bool(row["creator_bot_account"]),
    )


def _row_to_post(row: Dict[str, Any]) -> PostView:
    return PostView(
        id=row["id"],
        name=row["name"],
        url=row["url"],
        url_content_type=row["url_content_type"],
        body=row["body"],
        thumbnail_url=row["thumbnail_url"],
        published=row["published"],
        score=row["score"] or 0,
        comments=row["comments"] or 0,
        creator=_creator(row),
        community=CommunityRef(
            id=row["community_id"],
            name=row["community_name"],
            title=row["community_title"],
            ap_id=row["community_ap_id"],
            description=row["community_description"],
            visibility=row["community_visibility"],
            local=bool(row["community_local"]),
        ),
    )


def _row_to_notification(row: Dict[str, Any]) -> NotificationRecord:
    kind = row["kind"]
    creator = _creator(row)
    if kind == "comment_reply":
        return CommentReplyView(
            comment_id=row["comment_id"], content=row["content"] or "",
            published=row["published"], creator=creator,
        )
    if kind == "comment_mention":
        return CommentMentionView(
            comment_id=row["comment_id"], content=row["content"] or "",
            published=row["published"], creator=creator,
        )
    if kind == "post_mention":
        return PostMentionView(
            post_id=row["post_id"], body=row["content"],
            published=row["published"], creator=creator,
        )
    if kind == "private_message":
        return PrivateMessageView(
            private_message_id=row["private_message_id"], content=row["content"] or "",
            published=row["published"], creator=creator,
        )
    raise Upstream(f"unknown inbox row kind: {kind!r}")


class FeedStore:
    """
    Read-only queries the feeds need, against the platform's Postgres schema.

    Every call opens its own connection; storage failures surface as Upstream.
    """

    def __init__(self, connect: ConnFactory = get_conn, inbox_limit: int = 10) -> None:
        self._connect = connect
        self.inbox_limit = inbox_limit

    @contextmanager
    def _cursor(self) -> Iterator[psycopg.Cursor]:
        try:
            with self._connect() as conn, conn.cursor() as cur:
                yield cur
        except psycopg.Error as e:
            raise Upstream(f"query failed: {e}") from e
        except RuntimeError as e:
            # get_conn() raises this when DATABASE_URL is missing
            raise Upstream(str(e)) from e

    def _fetchall(self, sql: str, args: Any) -> List[Dict[str, Any]]:
        with self._cursor() as cur:
            cur.execute(sql, args)
            return list(cur.fetchall())

    def _fetchone(self, sql: str, args: Any) -> Optional[Dict[str, Any]]:
        with self._cursor() as cur:
            cur.execute(sql, args)
            return cur.fetchone()

    # ---------------------------- Site / actors ------------------------------

    def read_site(self) -> SiteView:
        row = self._fetchone(
            """
            select s.name, s.description, s.instance_id, ls.private_instance
            from site s
            join local_site ls on ls.site_id = s.id
            limit 1
            """,
            (),
        )
        if not row:
            raise Upstream("local site is not set up")
        return SiteView(**row)

    def read_community(self, name: str) -> Optional[CommunityRef]:
        row = self._fetchone(
            """
            select id, name, title, ap_id, description, visibility::text as visibility, local
            from community
            where lower(name) = lower(%s) and local
              and not deleted and not removed
            """,
            (name,),
        )
        return CommunityRef(**row) if row else None

    def read_person(self, name: str) -> Optional[PersonRef]:
        row = self._fetchone(
            """
            select id, name, ap_id, bot_account
            from person
            where lower(name) = lower(%s) and local and not deleted
            """,
            (name,),
        )
        return PersonRef(**row) if row else None

    def read_local_user(self, local_user_id: int) -> Optional[LocalUserView]:
        row = self._fetchone(
            """
            select lu.id as local_user_id, lu.show_bot_accounts,
                   p.id as creator_id, p.name as creator_name, p.ap_id as creator_ap_id,
                   p.bot_account as creator_bot_account, p.banned, p.deleted
            from local_user lu
            join person p on p.id = lu.person_id
            where lu.id = %s
            """,
            (local_user_id,),
        )
        if not row:
            return None
        return LocalUserView(
            local_user_id=row["local_user_id"],
            person=_creator(row),
            show_bot_accounts=bool(row["show_bot_accounts"]),
            banned=bool(row["banned"]),
            deleted=bool(row["deleted"]),
        )

    def validate_login_token(self, local_user_id: int, token: str) -> bool:
        row = self._fetchone(
            "select 1 as ok from login_token where user_id = %s and token = %s",
            (local_user_id, token),
        )
        return row is not None

    # ------------------------------- Content ---------------------------------

    def list_posts(
        self,
        *,
        sort: PostSortType,
        limit: int,
        listing_type: Optional[ListingType] = None,
        community_id: Optional[int] = None,
        person_id: Optional[int] = None,
    ) -> List[PostView]:
        """
        Posts for a listing, ordered by `sort`, at most `limit` of them.

        `person_id` is the viewer and is required for the Subscribed listing;
        anonymous listings only see communities viewable without login.
        """
        where = [_POST_LIVE]
        args: List[Any] = []
        joins = ""

        if listing_type == ListingType.Subscribed:
            if person_id is None:
                raise ValueError("subscribed listing needs a person_id")
            joins = " join community_follower f on f.community_id = c.id and f.person_id = %s"
            args.append(person_id)
        else:
            where.append("c.visibility::text = any(%s)")
            args.append(list(ANONYMOUS_VISIBILITIES))
            if listing_type == ListingType.Local:
                where.append("c.local")

        if community_id is not None:
            where.append("p.community_id = %s")
            args.append(community_id)

        sql = (
            _POST_SELECT + joins
            + " where " + " and ".join(where)
            + f" order by {_POST_ORDER[sort]} limit %s"
        )
        args.append(limit)
        return [_row_to_post(r) for r in self._fetchall(sql, tuple(args))]

    def list_person_posts(self, person_id: int, *, limit: int) -> List[PostView]:
        sql = (
            _POST_SELECT
            + " where " + _POST_LIVE
            + " and p.creator_id = %s"
            + " and c.visibility::text = any(%s)"
            + " order by p.published desc limit %s"
        )
        rows = self._fetchall(sql, (person_id, list(ANONYMOUS_VISIBILITIES), limit))
        return [_row_to_post(r) for r in rows]

    def list_inbox(
        self,
        person_id: int,
        *,
        show_bot_accounts: bool = True,
        limit: Optional[int] = None,
    ) -> List[NotificationRecord]:
        args = {
            "person_id": person_id,
            "show_bot_accounts": show_bot_accounts,
            "limit": self.inbox_limit if limit is None else limit,
        }
        return [_row_to_notification(r) for r in self._fetchall(_INBOX_SELECT, args)]


__all__ = ["FeedStore"]
