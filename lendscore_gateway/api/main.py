"""FastAPI application factory"""

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from lendscore_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from lendscore_gateway.api.v1 import credit_score, history
from lendscore_gateway.infrastructure.observability.logging import setup_logging
from lendscore_gateway.config import get_settings

setup_logging(get_settings().log_level)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Collapse validation details into the {"error": ...} envelope without echoing input"""
    fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    logging.warning(
        "Request validation failed",
        extra={"request_id": getattr(request.state, "request_id", "unknown"), "fields": fields},
    )
    if fields == ["user_id"]:
        message = "user_id is required"
    elif fields:
        message = f"Invalid request: {', '.join(fields)}"
    else:
        message = "Invalid request"
    return JSONResponse(status_code=422, content={"error": message})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    settings = get_settings()
    app = FastAPI(
        title="LendScore Gateway",
        description="AI credit scoring for the P2P lending marketplace",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Last added = first executed
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type", "x-request-id"],
        expose_headers=["X-Request-ID"],
    )

    app.add_exception_handler(RequestValidationError, validation_error_handler)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(credit_score.router, prefix="/v1", tags=["credit-score"])
    app.include_router(history.router, prefix="/v1", tags=["credit-score"])

    return app


app = create_app()


def run() -> None:
    """Start the ASGI server for local development"""
    settings = get_settings()
    uvicorn.run("lendscore_gateway.api.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
