from fastapi import FastAPI

from mobilede_feed import __version__
from mobilede_feed.api import feeds, health
from mobilede_feed.core.config import get_settings
from mobilede_feed.core.logging_config import setup_logging

setup_logging()
settings = get_settings()
app = FastAPI(title=settings.app_name, version=__version__)

app.include_router(health.router)
app.include_router(feeds.router)
