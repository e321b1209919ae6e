class RedfeedError(Exception):
    """Base class for errors raised while building a feed."""


class UpstreamFetchError(RedfeedError):
    """The subreddit listing could not be fetched or decoded."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")
