"""Environment-sourced settings, loaded once per process.

Values come from the process environment after an optional ``.env`` file in the
working directory has been merged in. Nothing here talks to the network; the
``require_*`` helpers only check that the credentials a stage needs are present
so the command can stop before the first outbound call.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigurationError
from .models import RepositoryConfig

DEFAULT_GITLAB_URL = "https://gitlab.com"
DEFAULT_GEMINI_MODEL = "gemini-1.5-pro"
DEFAULT_ANTHROPIC_MODEL = "claude-3-5-sonnet-20240620"


def mask_secret(value: str | None) -> str:
    if not value:
        return "(not set)"
    if len(value) <= 8:
        return "***"
    return f"{value[:4]}...{value[-4:]} (masked)"


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _float(env: Mapping[str, str], name: str, default: float, minimum: Optional[float] = None) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
    if minimum is not None and not value >= minimum:
        raise ConfigurationError(f"{name} must be at least {minimum}, got {raw!r}")
    return value


def _missing(**values: Optional[str]) -> None:
    absent = [name for name, value in values.items() if not value]
    if absent:
        raise ConfigurationError(
            f"Missing required environment variable(s): {', '.join(absent)}"
        )


@dataclass(frozen=True)
class Settings:
    jira_base_url: Optional[str] = None
    jira_username: Optional[str] = None
    jira_token: Optional[str] = field(default=None, repr=False)

    gitlab_token: Optional[str] = field(default=None, repr=False)
    gitlab_base_url: str = DEFAULT_GITLAB_URL
    repo_name: Optional[str] = None

    gemini_api_key: Optional[str] = field(default=None, repr=False)
    gemini_model: str = DEFAULT_GEMINI_MODEL

    anthropic_api_key: Optional[str] = field(default=None, repr=False)
    anthropic_model: str = DEFAULT_ANTHROPIC_MODEL
    anthropic_max_tokens: int = 4000
    anthropic_temperature: float = 0.2

    retries: int = 3
    backoff_seconds: float = 2.0

    templates_dir: str = "templates"
    scratch_workspace: str = "temp_git"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if env is None else env
        jira_url = env.get("JIRA_BASE_URL") or None
        if jira_url and "://" not in jira_url:
            jira_url = f"https://{jira_url}"
        return cls(
            jira_base_url=jira_url,
            jira_username=env.get("JIRA_USERNAME") or None,
            jira_token=env.get("JIRA_TOKEN") or None,
            gitlab_token=env.get("GITLAB_TOKEN") or None,
            gitlab_base_url=env.get("GITLAB_BASE_URL") or DEFAULT_GITLAB_URL,
            repo_name=(env.get("REPO_NAME") or "").strip("/") or None,
            gemini_api_key=env.get("GEMINI_API_KEY") or None,
            gemini_model=env.get("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
            anthropic_api_key=env.get("ANTHROPIC_API_KEY") or None,
            anthropic_model=env.get("ANTHROPIC_MODEL") or DEFAULT_ANTHROPIC_MODEL,
            anthropic_max_tokens=_int(env, "ANTHROPIC_MAX_TOKENS", 4000),
            anthropic_temperature=_float(env, "ANTHROPIC_TEMPERATURE", 0.2),
            retries=max(_int(env, "EXTERNAL_CALL_RETRIES", 3), 1),
            backoff_seconds=_float(env, "EXTERNAL_CALL_BACKOFF_SECONDS", 2.0, minimum=0),
            templates_dir=env.get("TEMPLATES_DIR") or "templates",
            scratch_workspace=env.get("SCRATCH_WORKSPACE") or "temp_git",
        )

    def require_jira(self) -> None:
        _missing(
            JIRA_BASE_URL=self.jira_base_url,
            JIRA_USERNAME=self.jira_username,
            JIRA_TOKEN=self.jira_token,
        )

    def require_gemini(self) -> None:
        _missing(GEMINI_API_KEY=self.gemini_api_key)

    def require_anthropic(self) -> None:
        _missing(ANTHROPIC_API_KEY=self.anthropic_api_key)

    def require_gitlab(self) -> RepositoryConfig:
        _missing(GITLAB_TOKEN=self.gitlab_token, REPO_NAME=self.repo_name)
        return RepositoryConfig(
            base_url=self.gitlab_base_url,
            repo_name=self.repo_name,
            token=self.gitlab_token,
        )


def load_settings(dotenv_path: str | None = None) -> Settings:
    load_dotenv(dotenv_path or find_dotenv(usecwd=True))
    return Settings.from_env()
