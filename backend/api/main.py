from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import os
import logging
from contextlib import asynccontextmanager

from dbc2bsm import __version__
from dbc2bsm.config import ConfigManager
from backend.api import bsm as _bsm_module
from backend.api import metrics as _metrics_module

# Configure logging
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler: load converter configuration into app.state."""
    config = ConfigManager(os.environ.get("DBC2BSM_CONFIG"))
    errors = config.validate()
    if errors:
        logger.warning(f"Starting with invalid configuration: {errors}")
    app.state.config = config
    logger.info("dbc2bsm backend started")
    try:
        yield
    finally:
        logger.info("dbc2bsm backend shutting down")


app = FastAPI(title="dbc2bsm Backend", lifespan=lifespan)

# Allow local dev servers to call the API during development/testing.
if os.environ.get("ENV", "development") in ("development", "test"):
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:8080",
            "http://127.0.0.1:8080",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=False,
    )


@app.get("/api/health")
def health():
    """Simple health endpoint for smoke tests."""
    return {"status": "ok", "service": "dbc2bsm-backend", "version": __version__}


app.include_router(_bsm_module.router)
app.include_router(_metrics_module.router)
