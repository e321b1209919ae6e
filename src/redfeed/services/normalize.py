from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from redfeed.models import FeedEntry, RawPost, VideoEmbed, VideoEntry
from redfeed.services.embed import embed_source, extract_embed, make_watch_url

logger = logging.getLogger(__name__)

TAG_GROUP_RE = re.compile(r"\[[^\]]+\]")
DELETED_AUTHOR = "[deleted]"


def clean_title(title: str) -> str:
    """Strip bracketed tags such as ``[OC]`` and surrounding whitespace."""
    return TAG_GROUP_RE.sub("", title).strip()


def normalize_post(post: RawPost) -> FeedEntry | None:
    if post.title is None or not post.score:
        return None

    title = clean_title(post.title)
    updated = post.created_at
    if not title or updated is None:
        return None

    link = post.url or post.permalink_url
    if link is None:
        return None

    return FeedEntry(
        id=post.permalink_url or link,
        title=title,
        updated=updated,
        author=post.author or DELETED_AUTHOR,
        link=link,
        summary=post.selftext or "",
        category=post.link_flair_text or None,
    )


def _video_embed(post: RawPost) -> VideoEmbed | None:
    try:
        source = embed_source(post)
        if source is None:
            logger.warning("Post has no embed source: %s", post.model_dump())
            return None
        return extract_embed(source)
    except Exception:
        logger.exception("Embed extraction failed for post: %s", post.model_dump())
        return None


def normalize_video_post(post: RawPost) -> VideoEntry | None:
    embed = _video_embed(post)
    if embed is None or embed.video_id is None:
        return None

    if not post.score or post.title is None or post.created_at is None:
        return None

    return VideoEntry(
        title=clean_title(post.title),
        thumbnail=post.thumbnail,
        date=post.created_at,
        url=make_watch_url(embed),
    )


def normalize_posts(posts: Iterable[RawPost]) -> list[FeedEntry]:
    entries = [normalize_post(post) for post in posts]
    return [entry for entry in entries if entry is not None]


def normalize_video_posts(posts: Iterable[RawPost]) -> list[VideoEntry]:
    entries = [normalize_video_post(post) for post in posts]
    return [entry for entry in entries if entry is not None]
