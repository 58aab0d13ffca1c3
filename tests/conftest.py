"""Shared doubles for the pipeline tests. Nothing here touches the network."""

import json

import pytest


class FakeBackend:
    """Text backend that replays canned completions and records prompts."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def generate(self, prompt, system=None):
        self.calls.append({"prompt": prompt, "system": system})
        return self.responses.pop(0)


def analysis_payload(**overrides):
    payload = {
        "templateName": "welcome_email",
        "variables": ["user_name", "signup_date"],
        "description": "Welcome email sent after signup",
        "mergeRequestTitle": "Add welcome email template",
        "mergeRequestDescription": "Adds the welcome email template with user_name and signup_date.",
        "branchName": "add-welcome-email",
        "commitMessage": "Add welcome email template",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def analysis_json():
    return json.dumps(analysis_payload(), indent=2)


@pytest.fixture
def html_doc():
    return (
        "<!DOCTYPE html>\n<html>\n<head><meta charset=\"utf-8\"></head>\n"
        "<body><p>Hello {{user_name}}, you joined on {{signup_date}}.</p></body>\n</html>"
    )
