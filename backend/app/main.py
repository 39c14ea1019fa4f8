"""
FastAPI main application for the Code Suggest backend.

Exposes the suggestion engine: static-rule and AI-generated suggestions, and
their apply / reject / undo lifecycle.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import traceback
import logging
import os

from .api import suggestions, system
from ._version import __version__

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Code Suggest API",
    description="API for detecting code-quality issues and applying suggested fixes",
    version=__version__
)


# Add request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"🌐 HTTP {request.method} {request.url.path}")
    response = await call_next(request)
    logger.info(f"🌐 Response: {response.status_code}")
    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log unexpected errors with their stack trace and return a structured 500."""
    full_traceback = traceback.format_exc()

    logger.error(f"🚨 Unhandled error in {request.method} {request.url}")
    logger.error(f"🚨 Exception: {exc}")
    logger.error(f"🚨 FULL STACK TRACE:\n{full_traceback}")

    return JSONResponse(
        status_code=500,
        content={
            "detail": f"{type(exc).__name__}: {str(exc)}",
            "error_type": type(exc).__name__,
            "error_message": str(exc),
            "request_url": str(request.url),
            "request_method": request.method
        }
    )


# Allow all origins if CORS_ORIGINS is "*"; otherwise a comma-separated list
cors_origins_env = os.getenv("CORS_ORIGINS", "*")
allowed_origins = ["*"] if cors_origins_env == "*" else cors_origins_env.split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(suggestions.router, prefix="/api/suggestions", tags=["suggestions"])
app.include_router(system.router, prefix="/api/system", tags=["system"])


@app.get("/")
async def root():
    """Health check endpoint with version info."""
    return {"message": "Code Suggest API", "status": "running", "version": __version__}


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "version": __version__}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000, reload=True)
