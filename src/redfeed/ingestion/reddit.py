from __future__ import annotations

import logging
from collections.abc import Mapping
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from redfeed.config import Settings
from redfeed.errors import UpstreamFetchError
from redfeed.models import Listing, ListingCategory, ListingChild, RawPost

logger = logging.getLogger(__name__)


class ListingURLBuilder:
    def __init__(self, settings: Settings):
        self.base_url = settings.reddit_base_url.rstrip("/")
        self.limit = settings.posts_request_limit

    def build(
        self,
        subreddit: str,
        category: str | None = None,
        extra_query: Mapping[str, str] | None = None,
    ) -> str:
        resolved = ListingCategory.resolve(category)
        params: dict[str, str] = {"limit": str(self.limit)}

        if resolved in (ListingCategory.new, ListingCategory.top):
            params["sort"] = resolved.value

        # Caller-supplied query overrides everything set above
        for key, value in (extra_query or {}).items():
            params[key] = value

        return f"{self.base_url}/{subreddit}/{resolved.value}.json?{urlencode(params)}"


def parse_listing(body: dict) -> list[RawPost]:
    """Validate a listing body and return its posts in listing order.

    Children whose post data does not validate are logged and skipped.
    Raises ValidationError when the body is not a listing at all.
    """
    listing = Listing.model_validate(body)

    posts = []
    for raw_child in listing.data.children:
        try:
            child = ListingChild.model_validate(raw_child)
        except ValidationError:
            logger.warning("Skipping malformed listing child: %s", raw_child)
            continue
        if not isinstance(child.data, dict):
            logger.warning("Skipping %s child without post data: %s", child.kind, child.data)
            continue
        try:
            posts.append(RawPost.model_validate(child.data))
        except ValidationError:
            logger.warning("Skipping malformed post: %s", child.data)
    return posts


class RedditListingClient:
    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.user_agent = settings.user_agent
        self.timeout = settings.upstream_timeout
        self.transport = transport

    async def fetch_listing(self, url: str) -> list[RawPost]:
        try:
            async with httpx.AsyncClient(
                transport=self.transport,
                headers={"User-Agent": self.user_agent},
                follow_redirects=True,
                timeout=self.timeout,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error("Listing fetch returned %s for %s", exc.response.status_code, url)
            raise UpstreamFetchError(url, f"status {exc.response.status_code}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.exception("Listing fetch failed for %s", url)
            raise UpstreamFetchError(url, str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            logger.error("Listing body is not JSON for %s", url)
            raise UpstreamFetchError(url, "response body is not JSON") from exc

        try:
            posts = parse_listing(body)
        except ValidationError as exc:
            logger.error("Listing body has no data.children for %s", url)
            raise UpstreamFetchError(url, "response body is not a listing") from exc

        logger.debug("Fetched %d posts from %s", len(posts), url)
        return posts
