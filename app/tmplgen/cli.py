from __future__ import annotations

import argparse
import re
import sys
from functools import partial
from typing import List, Optional

from .ai_integration import AnthropicBackend, GeminiBackend
from .analyzer import TemplateAnalyzer
from .code_generator import CodeGenerator
from .config import Settings, load_settings
from .errors import TemplateGenError
from .jira_client import fetch_ticket, get_jira_client
from .pipeline import run_pipeline
from .publisher import RepositoryPublisher

TASK_ID_REGEX = re.compile(r"^[A-Za-z][A-Za-z0-9_]*-\d+$")


def task_id(value: str) -> str:
    if not TASK_ID_REGEX.match(value):
        raise argparse.ArgumentTypeError(f"'{value}' is not a ticket id of the form PROJECT-NUMBER")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tmplgen",
        description="Generate an HTML email template from a Jira ticket and optionally open a GitLab merge request",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    gen = sub.add_parser("generate", help="Generate a template for one Jira ticket")
    gen.add_argument("-t", "--task", required=True, type=task_id, help="Jira task id, e.g. PROJ-123")
    gen.add_argument("-c", "--create-mr", action="store_true", help="Automatically create a merge request in GitLab")
    gen.add_argument("--output-dir", default=None, help="Directory for the generated template (default: templates)")
    gen.add_argument("--workspace", default=None, help="Scratch directory for the repository clone (default: temp_git)")
    return parser


def generate(args: argparse.Namespace, settings: Settings) -> None:
    # Check every credential the run needs before the first network call.
    settings.require_jira()
    settings.require_gemini()
    settings.require_anthropic()
    if args.create_mr:
        settings.require_gitlab()

    output_dir = args.output_dir or settings.templates_dir
    jira = get_jira_client(settings)
    analyzer = TemplateAnalyzer(GeminiBackend.from_settings(settings))
    generator = CodeGenerator(AnthropicBackend.from_settings(settings))
    run_pipeline(
        args.task,
        args.create_mr,
        fetch_ticket=partial(fetch_ticket, jira, retries=settings.retries, backoff=settings.backoff_seconds),
        analyzer=analyzer,
        generator=generator,
        publisher_factory=lambda: RepositoryPublisher.from_settings(settings, args.workspace, output_dir),
        output_dir=output_dir,
    )


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    print("🎆 Template Generator Starting...")
    print("=" * 50)
    print(f"🎫 Processing ticket: {args.task}\n")
    generate(args, load_settings())


def run(argv: Optional[List[str]] = None) -> int:
    """Console entry point: run ``main`` and map failures to exit codes."""
    try:
        main(argv)
    except KeyboardInterrupt:
        print("\n⚠️  Process interrupted by user")
        return 130
    except TemplateGenError as e:
        print(f"\n💥 Error occurred: {e}")
        print("🔍 Check the logs above for more details")
        return e.exit_code
    except Exception as e:
        print(f"\n💥 Unexpected error: {e}")
        raise
    return 0


if __name__ == "__main__":
    sys.exit(run())
