from __future__ import annotations

from typing import Sequence

from .errors import ResponseFormatError
from .models import GeneratedArtifact
from .prompt_builder import CODE_GENERATION_SYSTEM, build_code_generation_prompt
from .response_parsing import strip_code_fences


class CodeGenerator:
    """Ask the code-generation backend for an HTML email template."""

    def __init__(self, backend):
        self.backend = backend

    def generate_email_template(self, template_name: str, description: str, variables: Sequence[str]) -> GeneratedArtifact:
        prompt = build_code_generation_prompt(template_name, description, variables)
        raw = self.backend.generate(prompt, system=CODE_GENERATION_SYSTEM)
        html = strip_code_fences(raw)
        if not html:
            raise ResponseFormatError("Code generation returned an empty template", raw=raw, cleaned=html)
        print(f"   ✅ Generated {len(html)} characters of HTML")
        return GeneratedArtifact(template_name=template_name, html=html)
