"""
FastAPI HTTP API server for skillpack.

Started by `skills serve`, provides:
- Skill catalog (list, categories, search, detail, docs)
- Install / remove

Every /api response carries the security headers; any OPTIONS request is
answered with 204 and the CORS headers.

Default port: 3579
"""

from __future__ import annotations

import logging
import socket

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..errors import SkillError
from ..service import SkillService
from .routes import skills

logger = logging.getLogger(__name__)

API_HOST = "127.0.0.1"
API_PORT = 3579

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
}

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def is_port_free(host: str, port: int) -> bool:
    """Quick single bind check."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            s.bind((host, port))
            return True
        except OSError:
            return False


def create_app(service: SkillService) -> FastAPI:
    """Create the FastAPI application with all routes mounted."""
    from skillpack import __version__

    app = FastAPI(
        title="skillpack API",
        description="Browse, install and remove skill bundles",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # Added after CORSMiddleware, so it runs first
    @app.middleware("http")
    async def api_headers(request: Request, call_next):
        if request.method == "OPTIONS":
            response = Response(status_code=204, headers=CORS_HEADERS)
        else:
            response = await call_next(request)
        if request.url.path.startswith("/api"):
            response.headers.update(SECURITY_HEADERS)
        return response

    @app.exception_handler(SkillError)
    async def skill_error_handler(request: Request, exc: SkillError):
        logger.info(f"{request.method} {request.url.path}: {exc.message}")
        return JSONResponse(exc.to_dict(), status_code=exc.http_status)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = "Not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse({"error": message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            {"error": "Invalid request", "details": {"errors": jsonable_encoder(exc.errors())}},
            status_code=400,
        )

    app.state.service = service

    app.include_router(skills.router)

    @app.get("/")
    def root():
        return {
            "service": "skillpack",
            "version": __version__,
            "skills": len(service.registry),
        }

    return app


def run_api_server(service: SkillService, host: str = API_HOST, port: int = API_PORT) -> None:
    """
    Serve the API in the foreground until interrupted.

    Raises:
        RuntimeError: the port is already taken
    """
    import uvicorn

    if not is_port_free(host, port):
        raise RuntimeError(f"Port {port} is already in use")

    app = create_app(service)
    config = uvicorn.Config(
        app=app,
        host=host,
        port=port,
        log_level="warning",
        access_log=False,
        log_config=None,  # keep our root logger configuration
    )
    server = uvicorn.Server(config)
    logger.info(f"HTTP API listening on http://{host}:{port}")
    server.run()
