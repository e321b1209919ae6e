from fastapi import APIRouter, Depends, Request, Response

from redfeed.config import Settings, get_settings
from redfeed.ingestion.reddit import RedditListingClient
from redfeed.services.feed_writer import ATOM_CONTENT_TYPE, RSS_CONTENT_TYPE
from redfeed.services.feeds import FeedService

router = APIRouter(tags=["feeds"])


def get_listing_client(settings: Settings = Depends(get_settings)) -> RedditListingClient:
    return RedditListingClient(settings)


def get_feed_service(
    settings: Settings = Depends(get_settings),
    client: RedditListingClient = Depends(get_listing_client),
) -> FeedService:
    return FeedService(settings, client)


async def _subreddit_atom(
    request: Request, service: FeedService, subreddit: str, category: str | None
) -> Response:
    body = await service.subreddit_atom(
        subreddit,
        category,
        dict(request.query_params),
        str(request.url),
    )
    return Response(content=body, media_type=ATOM_CONTENT_TYPE)


async def _haiku_rss(request: Request, service: FeedService, category: str | None) -> Response:
    body = await service.haiku_rss(category, dict(request.query_params))
    return Response(content=body, media_type=RSS_CONTENT_TYPE)


@router.get("/r/{subreddit}")
async def subreddit_feed(
    request: Request,
    subreddit: str,
    service: FeedService = Depends(get_feed_service),
):
    return await _subreddit_atom(request, service, subreddit, None)


@router.get("/r/{subreddit}/{category}")
async def subreddit_category_feed(
    request: Request,
    subreddit: str,
    category: str,
    service: FeedService = Depends(get_feed_service),
):
    return await _subreddit_atom(request, service, subreddit, category)


@router.get("/haiku")
async def haiku_feed(
    request: Request,
    service: FeedService = Depends(get_feed_service),
):
    return await _haiku_rss(request, service, None)


@router.get("/haiku/{category}")
async def haiku_category_feed(
    request: Request,
    category: str,
    service: FeedService = Depends(get_feed_service),
):
    return await _haiku_rss(request, service, category)
