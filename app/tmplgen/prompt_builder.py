from __future__ import annotations

from string import Template
from typing import Iterable, Mapping

from .errors import PromptFormatError

# Placeholders use ``$name``; the ``{{variable_name}}`` notation below is text
# shown to the model, not something substituted here.

ANALYSIS_PROMPT = Template("""Analyze the following JIRA ticket description and extract template information.
Please provide the response in the following JSON format:
{
    "templateName": "snake_case_name",
    "variables": ["variable1", "variable2", ...],
    "description": "Short description of what this template is for",
    "mergeRequestTitle": "Title for the merge request",
    "mergeRequestDescription": "Detailed description for the merge request",
    "branchName": "TICKET-ID-short-branch-name",
    "commitMessage": "Commit message for the changes"
}

Rules:
1. templateName should be in snake_case and descriptive of the template's purpose
2. variables should be a list of all variables that need to be filled in the template
3. description should be a concise explanation of what this template is used for
4. mergeRequestTitle should be clear and descriptive of the changes
5. mergeRequestDescription should include details about what was changed and why
6. branchName should start with the ticket ID followed by a short description, all in lowercase with hyphens (e.g., "PROJ-123-add-user-authentication")
7. commitMessage should be a concise summary of the changes
8. Response must be valid JSON
9. Only include the JSON response, no additional text
10. Do not include any markdown formatting or backticks in the response

Ticket Key: $ticket_key

Ticket Description to Analyze:
$description""")

CODE_GENERATION_PROMPT = Template("""You are an expert HTML email template developer. Your task is to create a professional, responsive HTML email template based on the provided information.

Template Name: $template_name
Description: $description

Variables to include in the template:
$variables

Requirements:
1. Create a complete, standalone HTML email template
2. Use responsive design principles for compatibility across email clients
3. Include all the specified variables using the format {{variable_name}}
4. Use inline CSS for maximum email client compatibility
5. Include a fallback font stack
6. Ensure the template is mobile-friendly
7. Use tables for layout structure (email best practice)
8. Include proper DOCTYPE and meta tags
9. Add comments to explain the structure of the template
10. Make the design clean, professional, and modern

Please provide ONLY the complete HTML code without any explanations or markdown formatting.""")

CODE_GENERATION_SYSTEM = (
    "You are an expert HTML email template developer. "
    "Provide only the HTML code without any explanations or markdown formatting."
)


def format_prompt(template: Template, values: Mapping[str, str]) -> str:
    """Substitute ``values`` into ``template``, refusing to leave a placeholder unresolved."""
    try:
        return template.substitute(values)
    except KeyError as e:
        raise PromptFormatError(f"No value supplied for prompt placeholder {e.args[0]!r}") from e
    except ValueError as e:
        raise PromptFormatError(f"Malformed prompt template: {e}") from e


def bullet_list(items: Iterable[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def build_analysis_prompt(ticket_key: str, description: str) -> str:
    return format_prompt(ANALYSIS_PROMPT, {"ticket_key": ticket_key, "description": description})


def build_code_generation_prompt(template_name: str, description: str, variables: Iterable[str]) -> str:
    return format_prompt(
        CODE_GENERATION_PROMPT,
        {
            "template_name": template_name,
            "description": description,
            "variables": bullet_list(variables),
        },
    )
