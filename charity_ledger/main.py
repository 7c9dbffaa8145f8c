"""Charity Ledger API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map CharityLedgerError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database, payment rail and proof verifier initialized on startup via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Proof verifier singleton built at startup so an unknown verifier name fails fast
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from charity_ledger.api.dependencies import init_proof_verifier
from charity_ledger.api.error_handlers import register_error_handlers
from charity_ledger.api.routes import (
    charity, donations, health, payment_rail as payment_rail_routes, tokens,
)
from charity_ledger.config import get_settings
from charity_ledger.infrastructure.database import init_db
from charity_ledger.infrastructure.observability import setup_logging
from charity_ledger.infrastructure.payment_rail import init_payment_rail

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if settings.database_create_schema:
        await manager.create_schema()
    init_payment_rail(auto_approve=settings.payment_rail_auto_approve)
    verifier = init_proof_verifier(settings.proof_verifier)
    logger.info(
        f"Charity Ledger API started (verifier={settings.proof_verifier}, "
        f"charity={settings.charity_name!r})",
    )
    logger.debug(f"Proof verifier ready: {type(verifier).__name__}")
    yield
    logger.info("Charity Ledger API shutting down")
    await manager.dispose()


app = FastAPI(
    title="Charity Ledger API", version="1.0.0", lifespan=lifespan,
)

# CORS — configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes — explicit registration
app.include_router(health.router)
app.include_router(charity.router)
app.include_router(donations.router)
app.include_router(tokens.router)
app.include_router(payment_rail_routes.router)

register_error_handlers(app)
