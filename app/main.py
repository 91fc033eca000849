import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from app.config import get_settings
from app.core.errors import register_exception_handlers
from app.core.logging import RequestContextMiddleware, setup_logging
from app.routers import comments, dashboard, healthcheck, likes, playlists, subscriptions, tweets, users, videos
from app.services.media_storage import media_root

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

_media_dir = media_root()
_media_dir.mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Serving media from %s at %s", _media_dir, settings.media_url_prefix)
    yield
    logger.info("Shutting down")


app = FastAPI(title="VidTube API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestContextMiddleware)
register_exception_handlers(app)

app.include_router(healthcheck.router)
app.include_router(users.router)
app.include_router(videos.router)
app.include_router(comments.router)
app.include_router(likes.router)
app.include_router(playlists.router)
app.include_router(subscriptions.router)
app.include_router(tweets.router)
app.include_router(dashboard.router)

app.mount(settings.media_url_prefix, StaticFiles(directory=_media_dir), name="media")


@app.get("/")
def root():
    return {"message": "VidTube API", "docs": "/docs"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.port)
