"""FastAPI application for the train ticket estimator."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from train_estimator.api.endpoints import router
from train_estimator.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/")
async def root():
    """Root endpoint with service information."""
    return {
        "message": f"{settings.API_TITLE} API",
        "version": settings.API_VERSION,
        "docs": "/docs"
    }
