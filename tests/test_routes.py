import feedparser
import pytest

from rssfeeds.config import Settings
from rssfeeds.errors import Upstream
from rssfeeds.main import app
from rssfeeds.routes.feeds import get_feed_context
from rssfeeds.services import FeedContext

from .conftest import BASE, make_community, make_person, make_post

RSS = "application/rss+xml"


def _feed(response):
    assert response.status_code == 200, response.text
    assert response.headers["content-type"].startswith(RSS)
    parsed = feedparser.parse(response.content)
    assert not parsed.bozo
    return parsed


def _queried(store) -> bool:
    return any(c[0].startswith("list_") for c in store.calls)


@pytest.fixture
def foo(store):
    community = make_community(id=1, name="foo")
    store.communities["foo"] = community
    store.posts = [
        make_post(1, community=community, name="oldest"),
        make_post(2, community=community, name="middle"),
        make_post(3, community=community, name="newest"),
    ]
    return community


def test_health(client):
    assert client.get("/health").json() == {"ok": "true"}


def test_community_feed_newest_first(client, foo):
    parsed = _feed(client.get("/feeds/c/foo.xml?sort=New&limit=2"))
    assert [e.title for e in parsed.entries] == ["[foo] newest", "[foo] middle"]
    assert parsed.feed.title == "Lemmy Test - foo"
    assert parsed.feed.link == f"{BASE}/c/foo"


def test_default_limit_applies(client, store, foo):
    store.posts = [make_post(i, community=foo) for i in range(1, 31)]
    assert len(_feed(client.get("/feeds/c/foo.xml")).entries) == 20


def test_limit_is_clamped(client, store, foo):
    store.posts = [make_post(i, community=foo) for i in range(1, 81)]
    assert len(_feed(client.get("/feeds/c/foo.xml?limit=500")).entries) == 50
    assert store.calls[-1][3] == 50


def test_private_instance_blocks_all_feed(client, store):
    store.site = store.site.model_copy(update={"private_instance": True})
    response = client.get("/feeds/all.xml")
    assert response.status_code == 503
    assert "<rss" not in response.text
    assert not _queried(store)


def test_private_instance_blocks_local_feed(client, store):
    store.site = store.site.model_copy(update={"private_instance": True})
    assert client.get("/feeds/local.xml").status_code == 503


def test_private_instance_on_typed_route_is_bad_request(client, store, foo):
    store.site = store.site.model_copy(update={"private_instance": True})
    assert client.get("/feeds/c/foo.xml").status_code == 400


def test_unknown_community_is_bad_request(client, store):
    response = client.get("/feeds/c/doesnotexist.xml")
    assert response.status_code == 400
    assert "<rss" not in response.text
    assert not _queried(store)


def test_unknown_user_is_bad_request(client):
    assert client.get("/feeds/u/ghost.xml").status_code == 400


def test_unknown_feed_type(client):
    assert client.get("/feeds/x/foo.xml").status_code == 400


@pytest.mark.parametrize(
    "path",
    [
        "/feeds/all.xml",
        "/feeds/local.xml",
        "/feeds/c/foo.xml",
        "/feeds/u/alice.xml",
        "/feeds/front/sometoken.xml",
        "/feeds/inbox/sometoken.xml",
    ],
)
def test_bogus_sort_is_rejected_before_querying(client, store, path):
    response = client.get(path, params={"sort": "bogus"})
    assert response.status_code == 400
    assert store.calls == []


@pytest.mark.parametrize("limit", ["-1", "ten"])
def test_bad_limit(client, store, limit):
    assert client.get("/feeds/all.xml", params={"limit": limit}).status_code == 400
    assert store.calls == []


def test_image_post_has_enclosure_and_preview(client, store, foo):
    url = "https://img.example/cat.png"
    store.posts = [make_post(1, community=foo, url=url, url_content_type="image/png")]
    entry = _feed(client.get("/feeds/c/foo.xml")).entries[0]
    assert entry.enclosures[0].href == url
    assert entry.enclosures[0].type == "image/png"
    assert f'<img src="{url}"' in entry.description


def test_all_and_local_feeds(client, store):
    remote = make_community(id=2, name="remote", local=False)
    store.posts = [make_post(1), make_post(2, community=remote)]
    all_feed = _feed(client.get("/feeds/all.xml?sort=New"))
    local_feed = _feed(client.get("/feeds/local.xml?sort=New"))
    assert all_feed.feed.title == "Lemmy Test - All"
    assert local_feed.feed.title == "Lemmy Test - Local"
    assert len(all_feed.entries) == 2
    assert len(local_feed.entries) == 1


def test_user_feed(client, store):
    alice = make_person(id=1, name="alice")
    store.persons["alice"] = alice
    store.posts = [make_post(1, creator=alice), make_post(2, creator=make_person(id=2, name="bob"))]
    parsed = _feed(client.get("/feeds/u/alice.xml"))
    assert parsed.feed.title == "Lemmy Test - alice"
    assert [e.link for e in parsed.entries] == [f"{BASE}/post/1"]


def test_front_feed(client, store, foo):
    token = store.add_user(10, make_person(id=1))
    store.follows.add((1, foo.id))
    parsed = _feed(client.get(f"/feeds/front/{token}.xml?sort=New"))
    assert parsed.feed.title == "Lemmy Test - Subscribed"
    assert len(parsed.entries) == 3


def test_inbox_feed(client, store, reply_and_message):
    token = store.add_user(10, make_person(id=1))
    reply, message = reply_and_message
    store.inbox[1] = [message, reply]
    parsed = _feed(client.get(f"/feeds/inbox/{token}.xml"))
    assert parsed.feed.title == "Lemmy Test - Inbox"
    assert parsed.feed.link == f"{BASE}/inbox"
    assert [e.title for e in parsed.entries] == ["Reply from bob", "Reply from bob"]
    assert [e.link for e in parsed.entries] == [f"{BASE}/inbox", f"{BASE}/comment/7"]


@pytest.mark.parametrize("feed_type", ["front", "inbox"])
def test_bad_token_is_bad_request(client, store, feed_type):
    response = client.get(f"/feeds/{feed_type}/not-a-token.xml")
    assert response.status_code == 400
    assert response.json() == {"detail": "not_logged_in"}


def test_storage_failure_is_upstream(client, store):
    def broken():
        raise Upstream("connection refused to db.internal:5432")

    store.read_site = broken
    for path in ("/feeds/all.xml", "/feeds/c/foo.xml"):
        response = client.get(path)
        assert response.status_code == 502
        assert "db.internal" not in response.text


def test_permalink_failure_aborts_feed(client, store, foo):
    broken = FeedContext(store=store, settings=Settings(hostname="bad host"))
    app.dependency_overrides[get_feed_context] = lambda: broken
    assert client.get("/feeds/all.xml").status_code == 500
    assert client.get("/feeds/c/foo.xml").status_code == 400


def test_pub_dates_are_rfc2822(client, foo):
    response = client.get("/feeds/c/foo.xml?sort=Old&limit=1")
    assert "<pubDate>Wed, 01 May 2024 13:00:00 +0000</pubDate>" in response.text
