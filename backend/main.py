"""
Quarry — table and field metadata service.
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import card, database, field, health, table
from config import settings

# ── Logging ──────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger("quarry")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Quarry starting up…")
    yield
    logger.info("Quarry shutting down.")


# ── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="Quarry — Table & Field Metadata",
    description="Schema sync, field fingerprints, dimensions and binning options for the query builder.",
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS ──────────────────────────────────────────────────────────────────────
origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(health.router,   prefix="/api")
app.include_router(database.router, prefix="/api")
app.include_router(table.router,    prefix="/api")
app.include_router(field.router,    prefix="/api")
app.include_router(card.router,     prefix="/api")
