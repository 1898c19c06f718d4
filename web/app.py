"""
FastAPI application for the DreamKeys marketplace API.

Production deployment configuration via environment variables (see
utils/config.py). Routes only translate HTTP into marketplace calls;
every authorization decision is made in dreamkeys.access.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dreamkeys import MarketplaceError, build_marketplace
from utils.config import Config
from web.bid_routes import router as bid_router
from web.identity_routes import router as identity_router
from web.property_routes import router as property_router
from web.wishlist_routes import router as wishlist_router


logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def create_app(config: Optional[Config] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Settings to wire the marketplace from. Defaults to the
            environment.
    """
    config = config or Config.load()

    app = FastAPI(
        title="DreamKeys Marketplace API",
        description="Authorization and lifecycle engine for property listings and bids",
        version=VERSION,
        debug=config.debug,
    )

    # ==========================================================================
    # Healthcheck endpoints are registered first and perform no IO.
    # ==========================================================================
    @app.get("/", include_in_schema=False)
    def root():
        return {"status": "ok"}

    @app.get("/health", include_in_schema=False)
    def health():
        """Health check endpoint."""
        return {"status": "healthy", "version": VERSION}

    if config.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.allowed_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PATCH", "DELETE"],
            allow_headers=["*"],
        )

    # ==========================================================================
    # Error mapping: every domain error carries its own status and message.
    # ==========================================================================
    @app.exception_handler(MarketplaceError)
    async def marketplace_error_handler(request: Request, exc: MarketplaceError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = first.get("msg", "Invalid request")
        message = f"{field}: {detail}" if field else detail
        return JSONResponse(status_code=400, content={"message": message})

    app.state.config = config
    app.state.marketplace = build_marketplace(config)

    app.include_router(identity_router)
    app.include_router(property_router)
    app.include_router(wishlist_router)
    app.include_router(bid_router)

    logger.info(
        "DreamKeys API configured (data_dir=%s, advertise_requires_verified=%s)",
        config.data_dir or "<memory>",
        config.advertise_requires_verified,
    )
    return app
