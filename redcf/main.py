"""
Main FastAPI application entry point.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from redcf.config import get_settings
from redcf.api import router as api_router
from redcf.calculations.errors import DCFError

settings = get_settings()

logging.basicConfig(level=settings.log_level.upper(), format=settings.log_format)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Discounted cash flow analysis for real estate investments",
    version="0.1.0",
    debug=settings.debug,
)

# Include API routes
app.include_router(api_router, prefix=settings.api_prefix)


@app.exception_handler(DCFError)
async def dcf_error_handler(request: Request, exc: DCFError):
    """Render engine errors as 422 with the error's debug payload."""
    return JSONResponse(status_code=422, content={"error": exc.to_dict()})


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "version": "0.1.0"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("redcf.main:app", host=settings.host, port=settings.port)
