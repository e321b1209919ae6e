from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime

from redfeed.config import Settings
from redfeed.ingestion.reddit import ListingURLBuilder, RedditListingClient
from redfeed.services.feed_writer import FeedMeta, latest_updated, render_atom, render_rss
from redfeed.services.normalize import normalize_posts, normalize_video_posts

logger = logging.getLogger(__name__)


class FeedService:
    def __init__(self, settings: Settings, client: RedditListingClient | None = None):
        self.settings = settings
        self.url_builder = ListingURLBuilder(settings)
        self.client = client or RedditListingClient(settings)

    def haiku_self_link(self, category: str | None) -> str:
        path = f"/haiku/{category}" if category else "/haiku"
        return f"http://{self.settings.host}:{self.settings.port}{path}"

    async def subreddit_atom(
        self,
        subreddit: str,
        category: str | None,
        query: Mapping[str, str],
        request_url: str,
    ) -> str:
        listing_url = self.url_builder.build(subreddit, category, query)
        logger.debug("Building Atom feed from %s", listing_url)

        posts = await self.client.fetch_listing(listing_url)
        entries = normalize_posts(posts)
        logger.debug("Kept %d of %d posts for /r/%s", len(entries), len(posts), subreddit)

        meta = FeedMeta(
            title=f"/r/{subreddit}",
            self_link=request_url,
            link=listing_url,
            updated=latest_updated(entries, fallback=datetime.now(UTC)),
        )
        return render_atom(meta, entries)

    async def haiku_rss(self, category: str | None, query: Mapping[str, str]) -> str:
        listing_url = self.url_builder.build(self.settings.haiku_subreddit, category, query)
        logger.debug("Building haiku RSS feed from %s", listing_url)

        posts = await self.client.fetch_listing(listing_url)
        items = normalize_video_posts(posts)
        logger.debug("Kept %d of %d haiku posts", len(items), len(posts))

        meta = FeedMeta(
            title=self.settings.haiku_feed_title,
            self_link=self.haiku_self_link(category),
            link=listing_url,
        )
        return render_rss(meta, items)
