"""FastAPI + HTMX GUI for PaperReview."""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from paperreview.config import Settings
from paperreview.gui.routers import common, reviews
from paperreview.gui.state import base_dir, init_state


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize services on startup."""
    init_state(Settings.load())
    yield


app = FastAPI(lifespan=lifespan)
app.mount("/static", StaticFiles(directory=os.path.join(base_dir, "static")), name="static")

# Form routes first so /reviews/new wins over /reviews/{review_id}
app.include_router(reviews.router)
app.include_router(common.router)
