from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    host: str = "localhost"
    port: int = 3234
    posts_request_limit: int = 50
    reddit_base_url: str = "https://www.reddit.com/r"
    haiku_subreddit: str = "youtubehaiku"
    haiku_feed_title: str = "Youtube Haiku"
    user_agent: str = "redfeed/0.1"
    upstream_timeout: float = 10.0
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "frozen": True}


@lru_cache
def get_settings() -> Settings:
    return Settings()
