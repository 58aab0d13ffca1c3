"""Tests for fence stripping, branch normalization and analysis parsing."""

import json

import pytest

from conftest import analysis_payload
from tmplgen.errors import ResponseFormatError, ValidationError
from tmplgen.models import ANALYSIS_FIELDS, TemplateAnalysis
from tmplgen.response_parsing import (
    normalize_branch_name,
    parse_template_analysis,
    strip_code_fences,
)

HTML = "<!DOCTYPE html>\n<html><body>{{user_name}}</body></html>"


# ---------------------------------------------------------------------------
# strip_code_fences
# ---------------------------------------------------------------------------


class TestStripCodeFences:
    @pytest.mark.parametrize(
        "wrapper",
        [
            "```json\n{body}\n```",
            "```\n{body}\n```",
            "```{body}```",
            "`{body}`",
            "  ```json\n{body}```  \n",
            "\n```JSON\n{body}\n```\n",
        ],
    )
    def test_fenced_json_cleans_like_plain_json(self, wrapper):
        body = json.dumps(analysis_payload())
        assert strip_code_fences(wrapper.format(body=body)) == strip_code_fences(body)

    @pytest.mark.parametrize(
        "wrapper",
        ["```html\n{body}\n```", "```\n{body}```", "`{body}`", "{body}"],
    )
    def test_fenced_html_cleans_like_plain_html(self, wrapper):
        assert strip_code_fences(wrapper.format(body=HTML)) == HTML

    def test_fences_in_the_middle_are_removed(self):
        text = "Here you go:\n```html\n<p>x</p>\n```\nDone"
        assert strip_code_fences(text) == "Here you go:\n<p>x</p>\nDone"

    def test_empty_input(self):
        assert strip_code_fences("") == ""
        assert strip_code_fences(None) == ""

    def test_single_backtick_trim_is_a_known_rough_edge(self):
        # Content that legitimately begins and ends with a backtick loses them.
        assert strip_code_fences("`a` and `b`") == "a` and `b"


# ---------------------------------------------------------------------------
# normalize_branch_name
# ---------------------------------------------------------------------------


class TestNormalizeBranchName:
    @pytest.mark.parametrize(
        "ticket, branch, expected",
        [
            ("PROJ-123", "add-welcome-email", "proj-123-add-welcome-email"),
            ("PROJ-123", "Add-Welcome-Email", "proj-123-add-welcome-email"),
            ("proj-9", "Feature/Signup", "proj-9-feature/signup"),
        ],
    )
    def test_prefixes_when_ticket_missing(self, ticket, branch, expected):
        assert normalize_branch_name(branch, ticket) == expected

    @pytest.mark.parametrize(
        "ticket, branch",
        [
            ("PROJ-123", "PROJ-123-add-welcome-email"),
            ("PROJ-123", "proj-123-add-welcome-email"),
            ("proj-123", "Proj-123-Mixed-Case"),
        ],
    )
    def test_noop_when_branch_starts_with_ticket(self, ticket, branch):
        assert normalize_branch_name(branch, ticket) == branch


# ---------------------------------------------------------------------------
# parse_template_analysis
# ---------------------------------------------------------------------------


class TestParseTemplateAnalysis:
    def test_parses_fenced_response(self):
        raw = "```json\n" + json.dumps(analysis_payload()) + "\n```"
        analysis = parse_template_analysis(raw, "PROJ-123")

        assert isinstance(analysis, TemplateAnalysis)
        assert analysis.template_name == "welcome_email"
        assert analysis.variables == ["user_name", "signup_date"]
        assert analysis.branch_name == "proj-123-add-welcome-email"
        assert analysis.commit_message == "Add welcome email template"

    def test_keeps_branch_that_already_has_ticket(self):
        raw = json.dumps(analysis_payload(branchName="PROJ-123-welcome"))
        assert parse_template_analysis(raw, "PROJ-123").branch_name == "PROJ-123-welcome"

    @pytest.mark.parametrize("field", list(ANALYSIS_FIELDS))
    def test_missing_field_is_a_validation_error(self, field):
        payload = analysis_payload()
        del payload[field]
        with pytest.raises(ValidationError, match=field):
            parse_template_analysis(json.dumps(payload), "PROJ-123")

    @pytest.mark.parametrize("field, value", [
        ("templateName", ""),
        ("variables", []),
        ("branchName", None),
        ("commitMessage", ""),
    ])
    def test_falsy_field_is_a_validation_error(self, field, value):
        raw = json.dumps(analysis_payload(**{field: value}))
        with pytest.raises(ValidationError):
            parse_template_analysis(raw, "PROJ-123")

    @pytest.mark.parametrize("name", ["../escape", "emails/welcome", "a\\b"])
    def test_template_name_must_be_a_plain_file_name(self, name):
        raw = json.dumps(analysis_payload(templateName=name))
        with pytest.raises(ValidationError, match="template name"):
            parse_template_analysis(raw, "PROJ-123")

    def test_variables_must_be_strings(self):
        raw = json.dumps(analysis_payload(variables=["ok", 3]))
        with pytest.raises(ValidationError, match="variables"):
            parse_template_analysis(raw, "PROJ-123")

    def test_malformed_json_is_a_format_error_with_texts(self):
        raw = "```json\n{not json}\n```"
        with pytest.raises(ResponseFormatError) as exc:
            parse_template_analysis(raw, "PROJ-123")

        assert not isinstance(exc.value, ValidationError)
        assert exc.value.raw == raw
        assert exc.value.cleaned == "{not json}"

    def test_non_object_json_is_a_format_error(self):
        with pytest.raises(ResponseFormatError):
            parse_template_analysis('["a", "b"]', "PROJ-123")

    def test_prose_around_json_is_rejected(self):
        raw = "Sure! Here it is:\n```json\n" + json.dumps(analysis_payload()) + "\n```"
        with pytest.raises(ResponseFormatError):
            parse_template_analysis(raw, "PROJ-123")
