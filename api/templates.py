"""
api.templates
=============

Read-only access to the built-in legal templates, plus rendering.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from leasekeeper.errors import TemplateValidationError
from leasekeeper.template_library import (
    LEGAL_TEMPLATES,
    get_template_by_id,
    get_templates_by_category,
    get_templates_by_role,
)
from leasekeeper.templates import generate, missing_variables, render

router = APIRouter(tags=["templates"])


class RenderRequest(BaseModel):
    values: Dict[str, Any] = {}
    strict: bool = True


def _summary(t) -> Dict[str, Any]:
    return {
        "id": t.id,
        "title": t.title,
        "description": t.description,
        "category": t.category,
        "framework": t.framework,
        "applicable_roles": list(t.applicable_roles),
        "version": t.version,
    }


@router.get("/templates")
async def list_templates(
    category: Optional[str] = Query(None, description="Filter by template category"),
    role: Optional[str] = Query(None, description="Filter by applicable role"),
):
    templates = LEGAL_TEMPLATES
    if category:
        templates = [t for t in templates if t in get_templates_by_category(category)]
    if role:
        templates = [t for t in templates if t in get_templates_by_role(role)]
    return [_summary(t) for t in templates]


@router.get("/templates/{template_id}")
async def get_template(template_id: str):
    template = get_template_by_id(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail="Template not found")
    return template


@router.post("/templates/{template_id}/render")
async def render_template(template_id: str, data: RenderRequest):
    """
    Fill in a template.

    With ``strict`` (the default) any missing required variable is a 422
    listing all of them; otherwise the document is rendered anyway and the
    missing names are returned alongside it.
    """
    template = get_template_by_id(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail="Template not found")

    if not data.strict:
        return {
            "template_id": template.id,
            "content": render(template, data.values),
            "missing": missing_variables(template, data.values),
        }
    try:
        content = generate(template, data.values)
    except TemplateValidationError as exc:
        raise HTTPException(status_code=422, detail={"message": str(exc), "missing": exc.missing})
    return {"template_id": template.id, "content": content, "missing": []}
