from __future__ import annotations

import re
from urllib.parse import urlencode

from redfeed.models import RawPost, VideoEmbed

YOUTUBE_WATCH_URL = "https://www.youtube.com/watch"

# Percent-encoded delimiters that show up inside oEmbed markup
ENCODED_DELIMITERS = [
    (re.compile(r"%2f", re.IGNORECASE), "/"),
    (re.compile(r"%3d", re.IGNORECASE), "="),
    (re.compile(r"%26", re.IGNORECASE), "&"),
    (re.compile(r"%3f", re.IGNORECASE), "?"),
]

VIDEO_ID_RE = re.compile(r"(?:v/|embed/|[/&?]v=)([^#&?]+)", re.IGNORECASE)
START_RE = re.compile(r"start=([0-9]+)", re.IGNORECASE)
END_RE = re.compile(r"end=([0-9]+)", re.IGNORECASE)


def embed_source(post: RawPost) -> str | None:
    """Pick the string to extract an embed from: oEmbed html, oEmbed url, post url."""
    oembed = post.media.oembed if post.media else None
    if oembed is not None:
        if oembed.html:
            return oembed.html
        if oembed.url:
            return oembed.url
    return post.url


def normalize_source(source: str) -> str:
    for pattern, replacement in ENCODED_DELIMITERS:
        source = pattern.sub(replacement, source)
    return source


def extract_video_id(source: str) -> str | None:
    match = VIDEO_ID_RE.search(source)
    if match is None:
        return None
    return match.group(1)


def _extract_seconds(pattern: re.Pattern, source: str) -> int:
    match = pattern.search(source)
    if match is None:
        return 0
    return int(match.group(1))


def extract_embed(source: str) -> VideoEmbed:
    """Recover a YouTube video ID and start/end offsets from a URL or markup.

    The ID, start and end are searched independently, so offsets are
    reported even when no ID is found.
    """
    source = normalize_source(source)
    return VideoEmbed(
        video_id=extract_video_id(source),
        start=_extract_seconds(START_RE, source),
        end=_extract_seconds(END_RE, source),
    )


def make_watch_url(embed: VideoEmbed) -> str:
    params = [("v", embed.video_id or "")]

    if embed.start > 0 and embed.end > 0:
        # end repeats the start offset, matching previously published links
        params.append(("start", str(embed.start)))
        params.append(("end", str(embed.start)))
    elif embed.start > 0:
        params.append(("t", str(embed.start)))

    return f"{YOUTUBE_WATCH_URL}?{urlencode(params)}"
