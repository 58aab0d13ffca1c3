from __future__ import annotations


class TemplateGenError(Exception):
    """Base class for every failure surfaced to the command line."""

    exit_code = 1


class ConfigurationError(TemplateGenError):
    exit_code = 7


class ExternalCallError(TemplateGenError):
    """Network, auth or rate-limit failure from Jira, an AI backend or GitLab."""

    exit_code = 3

    def __init__(self, message: str, retryable: bool = True):
        super().__init__(message)
        self.retryable = retryable


class GitCommandError(ExternalCallError):
    def __init__(self, cmd: list[str], returncode: int, stderr: str = ""):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr and stderr.strip() else ""
        super().__init__(f"Command '{' '.join(cmd)}' failed with exit code {returncode}{detail}", retryable=False)


class ResponseFormatError(TemplateGenError):
    """An AI completion could not be turned into the expected shape.

    ``raw`` holds the completion as received and ``cleaned`` the text after
    fence stripping, so both can be shown when diagnosing a bad response.
    """

    exit_code = 4

    def __init__(self, message: str, raw: str | None = None, cleaned: str | None = None):
        super().__init__(message)
        self.raw = raw
        self.cleaned = cleaned


class PromptFormatError(ResponseFormatError):
    pass


class ValidationError(TemplateGenError):
    exit_code = 5


class FilesystemError(TemplateGenError):
    exit_code = 6
