"""
FILE: src/api/main.py
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.api.observability import setup_observability
from src.api.routers.liquidity import router as liquidity_router

app = FastAPI(
    title="Liquidity Forecasting API",
    version="0.1.0",
    description=(
        "Deterministic liquidity forecasting and stress-testing service.\n\n"
        "Projects daily cash balances from positions and expected flows, applies "
        "adjustment scenarios and stress overlays, and derives liquidity alerts."
    ),
    openapi_tags=[
        {
            "name": "Liquidity",
            "description": "Cash-flow import, forecasting, stress tests and alerts.",
        },
        {
            "name": "Health",
            "description": "Liveness and readiness probes.",
        },
    ],
)

setup_observability(app)
logger = logging.getLogger(__name__)

app.include_router(liquidity_router)


@app.exception_handler(Exception)
async def unhandled_exception_to_problem_details(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception while serving request", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        media_type="application/problem+json",
        content={
            "type": "about:blank",
            "title": "Internal Server Error",
            "status": 500,
            "detail": "An unexpected error occurred.",
            "instance": str(request.url.path),
        },
    )


@app.get("/health", tags=["Health"])
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/health/live", tags=["Health"])
def health_live() -> dict[str, str]:
    return {"status": "live"}


@app.get("/health/ready", tags=["Health"])
def health_ready() -> dict[str, str]:
    return {"status": "ready"}
