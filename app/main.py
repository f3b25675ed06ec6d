"""Backend API application object."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes_admin import router as admin_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Backend starting up...")
    yield
    logger.info("Backend shutting down...")


app = FastAPI(
    title="Backend",
    description="Backend HTTP service.",
    version="1.0.0",
    lifespan=lifespan,
)

# Frontends are served from their own origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(admin_router)


@app.get("/")
async def root():
    return {
        "service": "backend",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "health": "GET /health",
        },
    }
