"""
Travel Cover - FastAPI Application

Main entry point for the parametric travel insurance backend.

Flow:
- Oracle event → threshold check → matching active policies → payout records
- Every oracle event is written to an append-only audit log
- Identity verification sessions run alongside, independent of policies
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import get_settings
from .database import init_db
from .errors import TravelCoverError
from .routers import oracle_router, verification_router, policies_router, claims_router, admin_router

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize logging and database on startup."""
    settings = get_settings()
    configure_logging(settings.log_level)
    init_db()
    logger.info(f"Travel Cover started: env={settings.environment}, network={settings.network.name}")
    yield

# Create FastAPI app
app = FastAPI(
    lifespan=lifespan,
    title="Travel Cover",
    description="""
    Travel Cover - Parametric Travel Insurance Backend

    ## Oracle payouts
    - `flight_delay` pays travel policies when the delay exceeds 120 minutes
    - `extreme_weather` pays weather policies on `high` severity
    - `health_emergency` pays medical policies on a `critical` emergency level

    ## Key Principles
    - A policy is paid at most once
    - Every oracle event is logged, whether or not it paid out
    - Identity proofs are checked by an external verifier, never assumed
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(oracle_router)
app.include_router(verification_router)
app.include_router(policies_router)
app.include_router(claims_router)
app.include_router(admin_router)


# =============================================================================
# ERROR RESPONSES - every error body is {"error": "<message>"}
# =============================================================================

@app.exception_handler(TravelCoverError)
async def domain_error_handler(request: Request, exc: TravelCoverError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = [".".join(str(part) for part in err.get("loc", ()) if part != "body") for err in exc.errors()]
    message = "Invalid request"
    if fields:
        message = f"Invalid request: {', '.join(f for f in fields if f)}"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/")
async def root():
    """Root endpoint - API information."""
    return {
        "name": "Travel Cover",
        "version": __version__,
        "description": "Parametric Travel Insurance Backend",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    settings = get_settings()
    return {
        "status": "healthy",
        "version": __version__,
        "environment": settings.environment,
        "network": settings.network.name,
    }


# For running with: python -m travel_cover.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
