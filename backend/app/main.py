r"""backend\app\main.py

Main entrypoint for the FastAPI application.

The API predicts stock-out risk for single products, runs paced batch
predictions over the configured product range and serves the stored results
to the dashboard.  A health endpoint is also provided for readiness/liveness
checks.  Configuration is read from environment variables and YAML files in
`configs/`.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from .api.v1 import batch, catalog, configs, health, predict, predictions
from .core.config import get_settings
from .core.observability import TokenAndRateLimitMiddleware, metrics_endpoint
from .services.container import ServiceContainer, build_services

# Load .env from repo root
BASE_DIR = Path(__file__).resolve().parents[2]
load_dotenv(BASE_DIR / ".env")

LOGGER = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(services: Optional[ServiceContainer] = None) -> FastAPI:
    """Build the API around ``services`` (built from settings when omitted)."""

    services = services or build_services(get_settings())
    settings = services.settings
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        services.store.init_schema()
        LOGGER.info("Prediction store ready (%s)", services.store.engine.url.render_as_string(hide_password=True))
        yield
        services.batch.cancel_active()

    app = FastAPI(title="Inventory Prediction API", version="0.1.0", lifespan=lifespan)
    app.state.services = services

    # Allow cross-origin requests from the Streamlit UI (and others).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list(),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        TokenAndRateLimitMiddleware,
        token=settings.api_token,
        per_minute=settings.rate_limit_per_min,
    )

    # Include versioned routers
    app.include_router(health.router, prefix="/api/v1")
    app.include_router(predict.router, prefix="/api/v1")
    app.include_router(batch.router, prefix="/api/v1")
    app.include_router(predictions.router, prefix="/api/v1")
    app.include_router(catalog.router, prefix="/api/v1")
    app.include_router(configs.router, prefix="/api/v1")

    @app.get("/", include_in_schema=False)
    def _root() -> RedirectResponse:
        """Redirect the root path to the interactive docs."""

        return RedirectResponse(url="/docs")

    @app.get("/metrics", include_in_schema=False)
    async def _metrics() -> Response:
        """Expose Prometheus metrics."""

        return metrics_endpoint()

    return app


app = create_app()
