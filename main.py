"""
Event Management Dashboard - FastAPI application
Main application entry point
"""

import os
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from app.core.config import settings
from app.core.errors import APIError, DuplicateSubmission, ValidationFailure
from app.core.gate import RoutingGateMiddleware
from app.api import (
    routes_admin,
    routes_attendance,
    routes_dashboard,
    routes_events,
    routes_feedback,
    routes_profile,
    routes_public,
    routes_venues,
)
from app.utils.responses import error_response

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

STATIC_DIR = os.path.join(os.path.dirname(__file__), "static")

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    # One connection pool to the upstream API for the whole process
    app.state.http_client = httpx.AsyncClient(
        base_url=settings.API_BASE_URL,
        timeout=settings.API_TIMEOUT_SECONDS
    )
    logger.info(f"Upstream API at {settings.API_BASE_URL}")
    yield
    await app.state.http_client.aclose()
    logger.info("Application shutdown")

# Create FastAPI application
app = FastAPI(
    title="Event Management Dashboard",
    description="Administrative dashboard for events, venues, attendance and feedback",
    version="1.0.0",
    lifespan=lifespan
)

# The gate must see every navigation before any view runs
app.add_middleware(RoutingGateMiddleware)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount static files
os.makedirs(STATIC_DIR, exist_ok=True)
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

# Include routers
app.include_router(routes_public.router, tags=["public"])
app.include_router(routes_dashboard.router, tags=["dashboard"])
app.include_router(routes_events.router, prefix="/events", tags=["events"])
app.include_router(routes_venues.router, prefix="/venues", tags=["venues"])
app.include_router(routes_attendance.router, prefix="/attendance", tags=["attendance"])
app.include_router(routes_feedback.router, prefix="/feedback", tags=["feedback"])
app.include_router(routes_profile.router, prefix="/profile", tags=["profile"])
app.include_router(routes_admin.router, prefix="/admin", tags=["admin"])

@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    """Upstream failures become an error state, never a crash"""
    status_code = exc.status_code if exc.status_code and 400 <= exc.status_code < 500 else 502
    return error_response(message=exc.message, error_code="upstream_error", status_code=status_code)

@app.exception_handler(DuplicateSubmission)
async def duplicate_submission_handler(request: Request, exc: DuplicateSubmission):
    return error_response(message=exc.message, error_code="duplicate_submission", status_code=409)

@app.exception_handler(ValidationFailure)
async def validation_failure_handler(request: Request, exc: ValidationFailure):
    return error_response(message=exc.message, error_code="validation_failed", status_code=422)

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return error_response(
        message="Please check the form and try again",
        error_code="validation_failed",
        details=jsonable_encoder(exc.errors(), custom_encoder={Exception: str}),
        status_code=422
    )

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(
        message=str(exc.detail),
        status_code=exc.status_code
    )

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        reload=True
    )
