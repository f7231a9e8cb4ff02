"""
FastAPI application entry point.

    uvicorn sleep_system.main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from sleep_system.api.routes import router
from sleep_system.config import LOG_LEVEL
from sleep_system.core.database import init_db

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Sleep-System", version="1.0.0", lifespan=lifespan)
app.include_router(router)
