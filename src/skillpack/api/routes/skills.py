"""
Skills routes: /api/skills, /api/categories

Catalog browsing plus install / remove. Handlers are plain functions so
FastAPI runs them in its thread pool; SkillError is turned into a JSON
error by the app-level exception handler.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from ...errors import http_status
from ...service import SkillService, first_failure, results_payload
from ..schemas import InstallRequest, RemoveRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _service(request: Request) -> SkillService:
    return request.app.state.service


def _results_response(results) -> JSONResponse:
    failure = first_failure(results)
    status = http_status(failure.error_type) if failure and failure.error_type else 200
    return JSONResponse(results_payload(results), status_code=status)


@router.get("/skills")
def list_skills(request: Request, category: Optional[str] = None):
    """All skills with install status, optionally filtered by category."""
    return _service(request).list_skills(category=category)


@router.get("/categories")
def list_categories(request: Request):
    return _service(request).categories()


@router.get("/skills/search")
def search_skills(request: Request, q: str = Query("", description="Search text")):
    return _service(request).search(q)


@router.get("/skills/{name}")
def get_skill(request: Request, name: str):
    """Skill detail: metadata, install status and requirements."""
    return _service(request).skill_info(name)


@router.get("/skills/{name}/docs")
def get_skill_docs(request: Request, name: str, file: Optional[str] = None):
    return _service(request).skill_docs(name, file=file)


@router.post("/skills/{name}/install")
def install_skill(request: Request, name: str, body: Optional[InstallRequest] = None):
    """Install a skill; with ``for`` a SKILL.md is written for that agent (or all)."""
    body = body or InstallRequest()
    results = _service(request).install(
        name, agent=body.agent, scope=body.scope, overwrite=body.overwrite
    )
    return _results_response(results)


@router.post("/skills/{name}/remove")
def remove_skill(request: Request, name: str, body: Optional[RemoveRequest] = None):
    body = body or RemoveRequest()
    results = _service(request).remove(name, agent=body.agent, scope=body.scope)
    return _results_response(results)
