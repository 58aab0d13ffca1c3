from __future__ import annotations

from .errors import ResponseFormatError, ValidationError
from .models import TemplateAnalysis
from .prompt_builder import build_analysis_prompt
from .response_parsing import parse_template_analysis, strip_code_fences


class TemplateAnalyzer:
    """Derive template and merge-request metadata from a ticket description."""

    def __init__(self, backend):
        self.backend = backend

    def analyze(self, description: str, ticket_key: str) -> TemplateAnalysis:
        if not description or not description.strip():
            raise ValidationError(f"Ticket {ticket_key} has no description to analyze")
        prompt = build_analysis_prompt(ticket_key, description)
        raw = self.backend.generate(prompt)
        print(f"🧾 Cleaned response:\n{strip_code_fences(raw)}")
        try:
            return parse_template_analysis(raw, ticket_key)
        except ResponseFormatError as e:
            print(f"❌ Failed to parse AI response: {e}")
            print(f"Raw response: {(e.raw or '')[:300]}...")
            raise
        except ValidationError as e:
            print(f"❌ {e}")
            raise
