import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from .config import Settings
from .deps import Services
from .errors import AnalysisError, InvalidInput
from .pipeline.analyze import utcnow
from .routers import analyze, health
from .schemas import ErrorOut

logger = logging.getLogger(__name__)

# API metadata for OpenAPI documentation
description = """
## DataShield Analysis API

Relays URLs and raw emails to an external language model for a phishing / scam
risk estimate.

* **URL analysis:** the page is fetched (5 s timeout, at most 5 redirects) and
  sent with the URL to the classifier.
* **Email analysis:** the raw message is parsed into metadata, local indicators
  (subject keywords, shortened links) are computed, and everything is sent to
  the classifier. A coarse High/Low risk bucket is derived from the indicators.

Every successful analysis is stored with its timestamp and caller address.
Requests are rate limited per client address.
"""


def _error_response(status_code: int, error: str, details: str) -> JSONResponse:
    body = ErrorOut(error=error, details=details, timestamp=utcnow())
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def analysis_error_handler(request: Request, exc: AnalysisError) -> JSONResponse:
    return _error_response(exc.status_code, exc.category, exc.message)


def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}" for err in exc.errors()
    )
    return _error_response(400, InvalidInput.category, f"Malformed request body ({problems})")


def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return _error_response(429, "RateLimitExceeded", f"Too many requests: {exc.detail}")


def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return _error_response(500, "InternalError", str(exc) or type(exc).__name__)


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    ``services`` is normally built during startup from ``settings``; passing a
    ready-made instance (tests) skips that and leaves its lifecycle to the caller.
    """
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.services is None
        if owned:
            app.state.services = Services.from_settings(settings)
            logger.info("Connected to the analysis store")
        yield
        if owned:
            app.state.services.close()
            app.state.services = None
            logger.info("Analysis store connection closed")

    app = FastAPI(
        title="DataShield Analysis API",
        description=description,
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.services = services

    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit],
        strategy="moving-window",
    )
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.add_exception_handler(AnalysisError, analysis_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(analyze.router, tags=["analyze"])
    return app


app = create_app()
