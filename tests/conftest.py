import pytest

from redfeed.config import Settings


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        host="feeds.test",
        port=8080,
        posts_request_limit=50,
        reddit_base_url="https://www.reddit.com/r",
    )


def make_post(**overrides) -> dict:
    """Build a raw listing post as returned by the reddit JSON API."""
    post = {
        "id": "abc1",
        "name": "t3_abc1",
        "permalink": "/r/cats/comments/abc1/cat_fails/",
        "title": "Cat fails",
        "url": "https://i.redd.it/cat.jpg",
        "thumbnail": "https://b.thumbs.redditmedia.com/cat.jpg",
        "created_utc": 1760700000.0,
        "score": 42,
        "selftext": "",
        "author": "whiskers",
        "link_flair_text": "Funny",
        "media": None,
    }
    post.update(overrides)
    return post


def make_listing(*posts: dict) -> dict:
    return {
        "kind": "Listing",
        "data": {"children": [{"kind": "t3", "data": p} for p in posts]},
    }
