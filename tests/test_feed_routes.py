from urllib.parse import parse_qs, urlsplit

import pytest
from httpx import ASGITransport, AsyncClient
from lxml import etree

from conftest import make_post

from redfeed.app import create_app
from redfeed.config import get_settings
from redfeed.errors import UpstreamFetchError
from redfeed.models import RawPost
from redfeed.routes.feeds import get_listing_client
from redfeed.services.feed_writer import ATOM_NS
from redfeed.services.xml_tree import XML_DECLARATION

A = f"{{{ATOM_NS}}}"


class FakeListingClient:
    def __init__(self, posts=None, error=None):
        self.posts = [RawPost.model_validate(p) for p in posts or []]
        self.error = error
        self.urls = []

    async def fetch_listing(self, url):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.posts


@pytest.fixture
def app(settings):
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: settings
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def listing(app):
    def install(posts=None, error=None):
        fake = FakeListingClient(posts, error)
        app.dependency_overrides[get_listing_client] = lambda: fake
        return fake

    return install


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def _parse(body: str):
    assert body.startswith(XML_DECLARATION)
    return etree.fromstring(body[len(XML_DECLARATION):].encode())


async def test_index(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.text == "Hello, world."


class TestSubredditFeed:
    async def test_filters_and_maps_posts(self, client, listing):
        listing([
            make_post(title="[Funny] Cat fails", created_utc=1760000000),
            make_post(title="Ignored", score=0, created_utc=1760900000),
            make_post(title="Cat wins", link_flair_text=None, created_utc=1760500000),
        ])

        response = await client.get("/r/cats")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/atom+xml")

        tree = _parse(response.text)
        entries = tree.findall(f"{A}entry")
        assert len(entries) == 2
        assert entries[0].findtext(f"{A}title") == "Cat fails"
        assert entries[0].find(f"{A}category").get("term") == "Funny"
        assert entries[1].find(f"{A}category") is None
        # max over emitted entries; the dropped post is newer
        assert tree.findtext(f"{A}updated") == "2025-10-15T03:46:40Z"

    async def test_feed_identity_is_request_url(self, client, listing):
        listing([make_post()])

        response = await client.get("/r/cats/top?t=week")
        tree = _parse(response.text)

        assert tree.findtext(f"{A}id") == "http://test/r/cats/top?t=week"
        assert tree.find(f"{A}link").get("href") == "http://test/r/cats/top?t=week"
        assert tree.findtext(f"{A}title") == "/r/cats"

    async def test_forwards_category_and_query(self, client, listing):
        fake = listing([])

        await client.get("/r/python/new", params={"limit": "5", "t": "day"})

        url = urlsplit(fake.urls[0])
        assert url.path == "/r/python/new.json"
        assert parse_qs(url.query) == {"limit": ["5"], "sort": ["new"], "t": ["day"]}

    async def test_missing_category_uses_hot(self, client, listing):
        fake = listing([])
        await client.get("/r/python")
        assert urlsplit(fake.urls[0]).path == "/r/python/hot.json"

    async def test_category_query_parameter_does_not_pick_path(self, client, listing):
        fake = listing([])
        await client.get("/r/python", params={"category": "top"})

        url = urlsplit(fake.urls[0])
        assert url.path == "/r/python/hot.json"
        assert "sort" not in parse_qs(url.query)

    async def test_empty_listing_renders_empty_feed(self, client, listing):
        listing([])

        response = await client.get("/r/cats")
        tree = _parse(response.text)

        assert response.status_code == 200
        assert tree.findall(f"{A}entry") == []
        assert tree.findtext(f"{A}updated")

    async def test_upstream_failure_is_bad_gateway(self, client, listing):
        listing(error=UpstreamFetchError("https://www.reddit.com/r/cats/hot.json", "status 503"))

        response = await client.get("/r/cats")

        assert response.status_code == 502
        assert "status 503" in response.text


class TestHaikuFeed:
    async def test_single_video_item(self, client, listing):
        listing([
            make_post(
                title="[Poem] Sad trombone",
                score=5,
                media={"oembed": {"url": "https://www.youtube.com/embed/xyz789?start=10"}},
            )
        ])

        response = await client.get("/haiku")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/rss+xml")

        tree = _parse(response.text)
        items = tree.findall("channel/item")
        assert len(items) == 1
        assert items[0].findtext("title") == "Sad trombone"
        assert items[0].findtext("link") == "https://www.youtube.com/watch?v=xyz789&t=10"
        assert items[0].findtext("guid") == items[0].findtext("link")

    async def test_drops_non_video_and_zero_score(self, client, listing):
        listing([
            make_post(title="No video", url="https://i.redd.it/cat.jpg"),
            make_post(title="Zero", score=0, url="https://youtu.be/watch?v=zero"),
            make_post(title="Kept", url="https://www.youtube.com/watch?v=kept1&start=3&end=9"),
        ])

        response = await client.get("/haiku/top")
        items = _parse(response.text).findall("channel/item")

        assert [i.findtext("title") for i in items] == ["Kept"]
        assert items[0].findtext("link") == "https://www.youtube.com/watch?v=kept1&start=3&end=3"

    async def test_channel_links(self, client, listing, settings):
        fake = listing([])

        response = await client.get("/haiku/new")
        channel = _parse(response.text).find("channel")

        assert channel.findtext("title") == "Youtube Haiku"
        assert channel.find(f"{A}link").get("href") == "http://feeds.test:8080/haiku/new"
        assert channel.findtext("link") == fake.urls[0]
        assert urlsplit(fake.urls[0]).path == "/r/youtubehaiku/new.json"

    async def test_self_link_without_category(self, client, listing):
        listing([])
        response = await client.get("/haiku")
        channel = _parse(response.text).find("channel")
        assert channel.find(f"{A}link").get("href") == "http://feeds.test:8080/haiku"

    async def test_category_query_parameter_is_only_forwarded(self, client, listing):
        fake = listing([])

        response = await client.get("/haiku", params={"category": "top"})
        channel = _parse(response.text).find("channel")

        url = urlsplit(fake.urls[0])
        assert url.path == "/r/youtubehaiku/hot.json"
        assert parse_qs(url.query) == {"limit": ["50"], "category": ["top"]}
        assert channel.find(f"{A}link").get("href") == "http://feeds.test:8080/haiku"
