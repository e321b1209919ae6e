from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime

from redfeed.models import FeedEntry, VideoEntry
from redfeed.services.xml_tree import Element, text_element, to_xml

ATOM_NS = "http://www.w3.org/2005/Atom"
RSS_CONTENT_TYPE = "application/rss+xml"
ATOM_CONTENT_TYPE = "application/atom+xml"


@dataclass(frozen=True)
class FeedMeta:
    title: str
    self_link: str
    link: str
    updated: datetime | None = None


def rfc1123(value: datetime) -> str:
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


def iso8601(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def latest_updated(entries: Iterable[FeedEntry], fallback: datetime) -> datetime:
    """Most recent entry timestamp, or ``fallback`` for an empty feed."""
    return max((entry.updated for entry in entries), default=fallback)


def _rss_item(item: VideoEntry) -> Element:
    return Element(
        "item",
        children=(
            text_element("title", item.title),
            text_element("pubDate", rfc1123(item.date)),
            text_element("link", item.url),
            text_element("guid", item.url),
        ),
    )


def render_rss(meta: FeedMeta, items: Sequence[VideoEntry]) -> str:
    channel = Element(
        "channel",
        children=(
            Element(
                "atom:link",
                attrs={"href": meta.self_link, "rel": "self", "type": RSS_CONTENT_TYPE},
            ),
            text_element("title", meta.title),
            text_element("link", meta.link),
            *(_rss_item(item) for item in items),
        ),
    )
    root = Element("rss", attrs={"version": "2.0"}, children=(channel,))
    return to_xml(root, {"atom": ATOM_NS})


def _atom_entry(entry: FeedEntry) -> Element:
    children = [
        text_element("id", entry.id),
        text_element("title", entry.title),
        text_element("updated", iso8601(entry.updated)),
        Element("author", children=(text_element("name", entry.author),)),
        Element("link", attrs={"rel": "alternate", "href": entry.link}),
    ]
    if entry.category is not None:
        children.append(Element("category", attrs={"term": entry.category}))
    children.append(text_element("summary", entry.summary))
    return Element("entry", children=tuple(children))


def render_atom(meta: FeedMeta, entries: Sequence[FeedEntry]) -> str:
    """Render an Atom 1.0 document.

    ``meta.updated`` must be set; use :func:`latest_updated` to derive it.
    """
    if meta.updated is None:
        raise ValueError("Atom feeds need meta.updated; derive it with latest_updated()")

    root = Element(
        "feed",
        children=(
            text_element("id", meta.self_link),
            Element("link", attrs={"rel": "self", "href": meta.self_link}),
            text_element("title", meta.title),
            text_element("updated", iso8601(meta.updated)),
            *(_atom_entry(entry) for entry in entries),
        ),
    )
    return to_xml(root, {None: ATOM_NS})
