# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
FastAPI application - n8n workflow inspection API
Serves variable search, schedule views and catalog tools for n8n instances
"""
# Load environment variables from .env file (local development)
from dotenv import load_dotenv
from pathlib import Path as _PathForEnv
_env_path = _PathForEnv(__file__).parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from flowscope import __version__
from flowscope.core.config import get_config
from flowscope.core.errors import FlowscopeError, sanitize_error_for_user
from flowscope.core.logging import get_api_logger
from flowscope.services.schedule_cache import ScheduleCache

from flowscope.api import search, schedules, workflows


config = get_config()
logger = get_api_logger()

app = FastAPI(
    title="flowscope",
    description="Variable search and schedule views for n8n workflows",
    version=__version__,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Shared across requests; entries expire after the configured TTL.
app.state.schedule_cache = ScheduleCache(ttl_seconds=config.events_cache_ttl)

app.include_router(search.router)
app.include_router(schedules.router)
app.include_router(workflows.router)


# Exception handlers
@app.exception_handler(FlowscopeError)
async def flowscope_error_handler(request: Request, exc: FlowscopeError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request body"
    return JSONResponse(status_code=400, content={"success": False, "error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": sanitize_error_for_user(exc)},
    )


@app.get("/health")
async def health():
    """Health check"""
    return {"status": "healthy", "service": "flowscope"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.service_host, port=config.service_port)
