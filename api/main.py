"""
Peptide Protocol Engine - FastAPI Application

Main entry point for the API layer.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import os

from api.routes import health, protocol_engine, insights
from api.deps import init_database, close_database
from engine.errors import NotFoundError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle manager"""
    logger.info("Starting Peptide Protocol Engine API...")
    await init_database()
    logger.info("Database initialized")
    yield
    logger.info("Shutting down Peptide Protocol Engine API...")
    await close_database()


app = FastAPI(
    title="Peptide Protocol Engine",
    description="Protocol recommendations and outcome analytics for peptide users",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS_ORIGINS is a comma-separated list; local dev origins otherwise
CORS_ORIGINS_ENV = os.getenv("CORS_ORIGINS", "")
if CORS_ORIGINS_ENV:
    CORS_ORIGINS = [origin.strip() for origin in CORS_ORIGINS_ENV.split(",") if origin.strip()]
else:
    CORS_ORIGINS = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

logger.info(f"CORS origins configured: {CORS_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(
        status_code=404,
        content={"error": str(exc), "type": "not_found"}
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(
        status_code=400,
        content={"error": str(exc), "type": "validation_error"}
    )


@app.exception_handler(PermissionError)
async def permission_error_handler(request: Request, exc: PermissionError):
    return JSONResponse(
        status_code=403,
        content={"error": str(exc), "type": "permission_error"}
    )


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(protocol_engine.router, prefix="/api/v1", tags=["Protocol Engine"])
app.include_router(insights.router, prefix="/api/v1", tags=["Insights"])


@app.get("/")
async def root():
    """Root endpoint - API info"""
    return {
        "name": "Peptide Protocol Engine",
        "version": "0.1.0",
        "status": "operational",
        "docs": "/docs"
    }
