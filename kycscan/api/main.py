"""
FastAPI Application — KYC Document Scan Service.

Architecture:
  - PostgreSQL (prod) / SQLite (dev) for submitted documents
  - PaddleOCR for on-server recognition
  - Regex field extractors per Indian KYC document
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from kycscan import __version__
from kycscan.api.routes.kyc import router as kyc_router
from kycscan.config.settings import get_settings
from kycscan.infrastructure.db.database import describe_database, init_db

logger = logging.getLogger(__name__)

app = FastAPI(
    title="KYC Document Scan",
    description="Field extraction and verification status for Aadhaar, PAN, electricity bill, GST and society documents.",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def configure_logging():
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ── Startup ──
@app.on_event("startup")
async def startup():
    """Configure logging and create tables."""
    configure_logging()
    init_db()
    logger.info("KYC Document Scan started")


# Register KYC routes
app.include_router(kyc_router, prefix="/api/v1", tags=["KYC"])


# ── Health ──
@app.get("/health")
async def health():
    return {
        "status": "ok",
        "version": __version__,
        "database": describe_database(),
        "env": get_settings().env,
    }
