"""
skillpack HTTP API (FastAPI)
"""

from .server import API_HOST, API_PORT, create_app, run_api_server

__all__ = ["API_HOST", "API_PORT", "create_app", "run_api_server"]
