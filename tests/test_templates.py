"""
tests/test_templates.py
=======================

Unit tests for leasekeeper.templates and the built-in template library.
"""

import pytest

from leasekeeper.errors import TemplateValidationError
from leasekeeper.models import LegalTemplate, TemplateCategory, TemplateVariable
from leasekeeper.template_library import (
    AGM_NOTICE,
    LEGAL_TEMPLATES,
    RTM_CLAIM_NOTICE,
    get_template_by_id,
    get_templates_by_category,
    get_templates_by_role,
)
from leasekeeper.templates import generate, missing_variables, placeholders, render, validate

GREETING = LegalTemplate(
    "greeting",
    "Greeting",
    "Dear {{name}}, re {{building}}. {{name}} please reply by {{deadline}}.",
    (
        TemplateVariable("name"),
        TemplateVariable("building", required=False),
        TemplateVariable("deadline", default_value="28 days"),
    ),
)


def test_render_replaces_every_occurrence():
    out = render(GREETING, {"name": "Ms Patel", "building": "Harbour House"})
    assert out == "Dear Ms Patel, re Harbour House. Ms Patel please reply by 28 days."


def test_render_falls_back_to_default_then_empty():
    assert render(GREETING, {}) == "Dear , re .  please reply by 28 days."


def test_empty_and_none_count_as_missing():
    assert missing_variables(GREETING, {"name": ""}) == ["name"]
    assert missing_variables(GREETING, {"name": None}) == ["name"]
    assert render(GREETING, {"name": "X", "deadline": ""}).endswith("by 28 days.")


def test_values_are_not_reexpanded():
    out = render(GREETING, {"name": "{{building}}", "building": "Harbour House"})
    assert out.startswith("Dear {{building}}, re Harbour House.")


def test_non_string_values_are_stringified():
    t = LegalTemplate("n", "N", "{{count}} flats", (TemplateVariable("count"),))
    assert render(t, {"count": 12}) == "12 flats"


def test_validate_reports_all_missing_in_order():
    t = LegalTemplate("t", "T", "{{a}}{{b}}{{c}}", tuple(TemplateVariable(n) for n in "abc"))
    with pytest.raises(TemplateValidationError) as info:
        validate(t, {"b": "x"})
    assert info.value.missing == ["a", "c"]
    assert info.value.template_id == "t"


def test_generate():
    assert generate(GREETING, {"name": "Ms Patel"}).startswith("Dear Ms Patel")
    with pytest.raises(TemplateValidationError):
        generate(GREETING, {})


def test_placeholders():
    assert placeholders(GREETING.content) == ["name", "building", "deadline"]


def test_claim_notice_fully_rendered():
    values = {v.name: f"<{v.name}>" for v in RTM_CLAIM_NOTICE.variables if v.required}
    out = generate(RTM_CLAIM_NOTICE, values)
    assert "{{" not in out
    assert "section 72" in out  # default grounds


def test_library_templates_declare_all_placeholders():
    for t in LEGAL_TEMPLATES:
        declared = {v.name for v in t.variables}
        assert set(placeholders(t.content)) <= declared, t.id


def test_library_lookups():
    assert get_template_by_id("rtm-claim-notice") is RTM_CLAIM_NOTICE
    assert get_template_by_id("missing") is None
    assert get_templates_by_category(TemplateCategory.AGM_NOTICE) == [AGM_NOTICE]
    assert get_templates_by_category("rtm_notice") == [RTM_CLAIM_NOTICE]
    assert {t.id for t in get_templates_by_role("management-company")} == {"section-20-notice-intention"}
    assert len(get_templates_by_role("rtm-director")) == 3
