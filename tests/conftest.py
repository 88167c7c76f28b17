from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Set, Tuple

import jwt
import pytest
from fastapi.testclient import TestClient

from rssfeeds.config import Settings
from rssfeeds.main import app
from rssfeeds.models import (
    CommentReplyView,
    CommunityRef,
    LocalUserView,
    PersonRef,
    PostView,
    PrivateMessageView,
    SiteView,
)
from rssfeeds.params import ListingType, PostSortType
from rssfeeds.routes.feeds import get_feed_context
from rssfeeds.services import FeedContext

SECRET = "test-secret"
HOST = "lemmy.test"
BASE = f"https://{HOST}"
T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_person(id: int = 1, name: str = "alice", bot_account: bool = False) -> PersonRef:
    return PersonRef(id=id, name=name, ap_id=f"{BASE}/u/{name}", bot_account=bot_account)


def make_community(id: int = 1, name: str = "foo", **kwargs) -> CommunityRef:
    fields = dict(
        id=id,
        name=name,
        title=f"{name.title()} Community",
        ap_id=f"{BASE}/c/{name}",
    )
    fields.update(kwargs)
    return CommunityRef(**fields)


def make_post(id: int, community: Optional[CommunityRef] = None, creator: Optional[PersonRef] = None, **kwargs) -> PostView:
    fields = dict(
        id=id,
        name=f"Post {id}",
        published=T0 + timedelta(hours=id),
        score=id * 10,
        comments=id,
        creator=creator or make_person(),
        community=community or make_community(),
    )
    fields.update(kwargs)
    return PostView(**fields)


def make_token(local_user_id: int, secret: str = SECRET) -> str:
    return jwt.encode({"sub": str(local_user_id), "iss": HOST}, secret, algorithm="HS256")


class FakeStore:
    """In-memory stand-in for FeedStore; records every call it receives."""

    def __init__(self) -> None:
        self.site = SiteView(name="Lemmy Test", description="A **test** site", instance_id=1)
        self.communities: Dict[str, CommunityRef] = {}
        self.persons: Dict[str, PersonRef] = {}
        self.local_users: Dict[int, LocalUserView] = {}
        self.login_tokens: Set[Tuple[int, str]] = set()
        self.posts: List[PostView] = []
        self.follows: Set[Tuple[int, int]] = set()
        self.inbox: Dict[int, list] = {}
        self.inbox_limit = 10
        self.calls: List[tuple] = []

    # helpers
    def add_user(self, local_user_id: int, person: PersonRef, **kwargs) -> str:
        self.persons[person.name] = person
        self.local_users[local_user_id] = LocalUserView(
            local_user_id=local_user_id, person=person, **kwargs
        )
        token = make_token(local_user_id)
        self.login_tokens.add((local_user_id, token))
        return token

    # FeedStore interface
    def read_site(self) -> SiteView:
        self.calls.append(("read_site",))
        return self.site

    def read_community(self, name: str) -> Optional[CommunityRef]:
        self.calls.append(("read_community", name))
        return self.communities.get(name)

    def read_person(self, name: str) -> Optional[PersonRef]:
        self.calls.append(("read_person", name))
        return self.persons.get(name)

    def read_local_user(self, local_user_id: int) -> Optional[LocalUserView]:
        self.calls.append(("read_local_user", local_user_id))
        return self.local_users.get(local_user_id)

    def validate_login_token(self, local_user_id: int, token: str) -> bool:
        self.calls.append(("validate_login_token", local_user_id))
        return (local_user_id, token) in self.login_tokens

    def list_posts(self, *, sort, limit, listing_type=None, community_id=None, person_id=None):
        self.calls.append(("list_posts", listing_type, sort, limit, community_id, person_id))
        posts = list(self.posts)
        if listing_type == ListingType.Subscribed:
            posts = [p for p in posts if (person_id, p.community.id) in self.follows]
        elif listing_type == ListingType.Local:
            posts = [p for p in posts if p.community.local]
        if community_id is not None:
            posts = [p for p in posts if p.community.id == community_id]
        if sort == PostSortType.New:
            posts.sort(key=lambda p: p.published, reverse=True)
        elif sort == PostSortType.Old:
            posts.sort(key=lambda p: p.published)
        elif sort == PostSortType.Top:
            posts.sort(key=lambda p: p.score, reverse=True)
        return posts[:limit]

    def list_person_posts(self, person_id: int, *, limit: int):
        self.calls.append(("list_person_posts", person_id, limit))
        posts = [p for p in self.posts if p.creator.id == person_id]
        posts.sort(key=lambda p: p.published, reverse=True)
        return posts[:limit]

    def list_inbox(self, person_id: int, *, show_bot_accounts: bool = True, limit=None):
        self.calls.append(("list_inbox", person_id, show_bot_accounts))
        records = self.inbox.get(person_id, [])
        if not show_bot_accounts:
            records = [r for r in records if not r.creator.bot_account]
        return records[: self.inbox_limit if limit is None else limit]


@pytest.fixture
def settings() -> Settings:
    return Settings(hostname=HOST, tls_enabled=True, jwt_secret=SECRET, fetch_limit=20, max_limit=50)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def ctx(store, settings) -> FeedContext:
    return FeedContext(store=store, settings=settings)


@pytest.fixture
def client(ctx):
    app.dependency_overrides[get_feed_context] = lambda: ctx
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def reply_and_message():
    bob = make_person(id=2, name="bob")
    reply = CommentReplyView(comment_id=7, content="nice *post*", published=T0, creator=bob)
    message = PrivateMessageView(
        private_message_id=3, content="hi there", published=T0 + timedelta(minutes=5), creator=bob
    )
    return reply, message
