import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles

from rentfinder.api import (
    pages_router,
    search_router,
    post_property_router,
)
from rentfinder.clients.property_api import PropertyApiClient
from rentfinder.config import settings
from rentfinder.services.submission import DraftStore, PreviewStore

STATIC_DIR = Path(__file__).resolve().parent / "static"

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "origin-when-cross-origin",
}


def configure_logging():
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.api_client = PropertyApiClient()
    app.state.previews = PreviewStore()
    app.state.drafts = DraftStore(app.state.previews)
    try:
        yield
    finally:
        await app.state.api_client.close()


configure_logging()

app = FastAPI(title="RentFinder", version="0.1.0", lifespan=lifespan)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.update(SECURITY_HEADERS)
    return response


app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

app.include_router(pages_router)
app.include_router(search_router)
app.include_router(post_property_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
