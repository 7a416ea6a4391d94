"""
leasekeeper.templates
=====================

``{{name}}`` substitution for legal document templates.

Rendering and validation are separate steps: :pyfunc:`render` never
fails, it falls back to a variable's default and then to the empty
string; :pyfunc:`validate` is the pre-check that reports every missing
required variable at once.  :pyfunc:`generate` runs both.

>>> from leasekeeper.models import LegalTemplate, TemplateVariable
>>> t = LegalTemplate("greet", "Greeting", "Dear {{name}},", (TemplateVariable("name"),))
>>> render(t, {"name": "Ms Patel"})
'Dear Ms Patel,'
>>> missing_variables(t, {})
['name']
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from .errors import TemplateValidationError
from .models import PLACEHOLDER_RE, LegalTemplate, TemplateVariable


def placeholders(content: str) -> List[str]:
    """Placeholder names in order of first appearance."""
    seen: List[str] = []
    for name in PLACEHOLDER_RE.findall(content):
        if name not in seen:
            seen.append(name)
    return seen


def _supplied(values: Mapping[str, Any], name: str) -> bool:
    value = values.get(name)
    return value is not None and value != ""


def _value_for(var: TemplateVariable, values: Mapping[str, Any]) -> str:
    if _supplied(values, var.name):
        return str(values[var.name])
    if var.default_value is not None:
        return var.default_value
    return ""


def render(template: LegalTemplate, values: Optional[Mapping[str, Any]] = None) -> str:
    """
    Replace every declared placeholder in *template*.

    Substitution is a single pass over the body, so a supplied value that
    itself contains ``{{...}}`` is inserted literally.
    """
    values = values or {}
    resolved = {var.name: _value_for(var, values) for var in template.variables}

    def _sub(match) -> str:
        name = match.group(1)
        return resolved.get(name, match.group(0))

    return PLACEHOLDER_RE.sub(_sub, template.content)


def missing_variables(template: LegalTemplate, values: Optional[Mapping[str, Any]] = None) -> List[str]:
    """Required variables with no supplied value and no default, in declaration order."""
    values = values or {}
    return [
        var.name
        for var in template.variables
        if var.required and not _supplied(values, var.name) and var.default_value is None
    ]


def validate(template: LegalTemplate, values: Optional[Mapping[str, Any]] = None) -> None:
    """Raise :class:`TemplateValidationError` listing every missing required variable."""
    missing = missing_variables(template, values)
    if missing:
        raise TemplateValidationError(template.id, missing)


def generate(template: LegalTemplate, values: Optional[Mapping[str, Any]] = None) -> str:
    """Validate, then render."""
    validate(template, values)
    return render(template, values)
