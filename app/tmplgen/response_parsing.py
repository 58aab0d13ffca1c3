from __future__ import annotations

import json
import re
from typing import Any, Dict

from .artifact_writer import check_template_name
from .errors import ResponseFormatError, ValidationError
from .models import ANALYSIS_FIELDS, TemplateAnalysis

# An opening or closing fence, with an optional language tag and the newline after it.
FENCE_REGEX = re.compile(r"```[\w+-]*\n?")


def strip_code_fences(text: str) -> str:
    """Remove markdown fencing a model wrapped around its answer.

    A single stray backtick left at either end is dropped too, which means a
    payload that genuinely starts or ends with a backtick loses it.
    """
    cleaned = FENCE_REGEX.sub("", text or "").strip()
    if cleaned.startswith("`"):
        cleaned = cleaned[1:]
    if cleaned.endswith("`"):
        cleaned = cleaned[:-1]
    return cleaned.strip()


def normalize_branch_name(branch_name: str, ticket_key: str) -> str:
    if branch_name.lower().startswith(ticket_key.lower()):
        return branch_name
    return f"{ticket_key.lower()}-{branch_name.lower()}"


def validate_analysis(data: Dict[str, Any]) -> None:
    missing = [name for name in ANALYSIS_FIELDS if not data.get(name)]
    if missing:
        raise ValidationError(
            f"Invalid template analysis response: missing required fields: {', '.join(missing)}"
        )
    variables = data["variables"]
    if not isinstance(variables, list) or not all(isinstance(v, str) for v in variables):
        raise ValidationError("Invalid template analysis response: variables must be a list of strings")
    for name in ANALYSIS_FIELDS:
        if name != "variables" and not isinstance(data[name], str):
            raise ValidationError(f"Invalid template analysis response: {name} must be a string")
    check_template_name(data["templateName"])


def parse_template_analysis(raw: str, ticket_key: str) -> TemplateAnalysis:
    cleaned = strip_code_fences(raw)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ResponseFormatError(
            f"Failed to parse template analysis response as JSON: {e}", raw=raw, cleaned=cleaned
        ) from e
    if not isinstance(data, dict):
        raise ResponseFormatError(
            "Template analysis response is not a JSON object", raw=raw, cleaned=cleaned
        )

    validate_analysis(data)
    values = {attr: data[name] for name, attr in ANALYSIS_FIELDS.items()}
    values["branch_name"] = normalize_branch_name(values["branch_name"], ticket_key)
    return TemplateAnalysis(**values)
