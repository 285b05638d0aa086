"""cmdtrail FastAPI application entry point."""
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cmdtrail import config
from cmdtrail.routers.discover import discover_router

logging.basicConfig(level=config.LOG_LEVEL)


app = FastAPI(
    title="cmdtrail API",
    description="Shell commands run by AI coding assistants, reconstructed from their session logs",
    version=config.APP_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        config.FRONTEND_ORIGIN,
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(discover_router)


@app.get("/api/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "version": config.APP_VERSION}
