from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from redfeed.errors import UpstreamFetchError
from redfeed.routes.feeds import router as feeds_router


def create_app() -> FastAPI:
    app = FastAPI(title="redfeed", version="0.1.0")

    app.include_router(feeds_router)

    @app.exception_handler(UpstreamFetchError)
    async def upstream_fetch_error(request: Request, exc: UpstreamFetchError):
        return PlainTextResponse(f"Upstream listing unavailable: {exc.reason}", status_code=502)

    @app.get("/", response_class=PlainTextResponse)
    async def index():
        return "Hello, world."

    return app


app = create_app()
