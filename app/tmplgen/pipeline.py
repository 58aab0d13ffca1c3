from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .analyzer import TemplateAnalyzer
from .artifact_writer import DEFAULT_TEMPLATES_DIR, write_template
from .code_generator import CodeGenerator
from .models import MergeRequestResult, TemplateAnalysis, TicketRef
from .publisher import RepositoryPublisher


@dataclass
class PipelineResult:
    ticket: TicketRef
    analysis: Optional[TemplateAnalysis] = None
    artifact_path: Optional[Path] = None
    merge_request: Optional[MergeRequestResult] = None


def print_ticket(ticket: TicketRef) -> None:
    print("\n=== JIRA TICKET DETAILS ===")
    print(f"Key: {ticket.key}")
    print(f"Summary: {ticket.summary}")
    print(f"Status: {ticket.status}")
    print("\nDescription:")
    print(ticket.description or "No description available")


def print_analysis(analysis: TemplateAnalysis) -> None:
    print("\n--- Template Information ---")
    print(f"Template Name: {analysis.template_name}")
    print("Variables:")
    for variable in analysis.variables:
        print(f"  - {variable}")
    print(f"Description: {analysis.description}")

    print("\n--- Git Information ---")
    print(f"Branch Name: {analysis.branch_name}")
    print(f"Commit Message: {analysis.commit_message}")

    print("\n--- Merge Request Information ---")
    print(f"Title: {analysis.merge_request_title}")
    print("Description:")
    print(analysis.merge_request_description)


def print_next_steps(analysis: TemplateAnalysis) -> None:
    print("\n=== NEXT STEPS ===")
    print("1. Create a new branch:")
    print(f"   git checkout -b {analysis.branch_name}")
    print("2. Review the generated template")
    print("3. Commit your changes:")
    print(f'   git commit -m "{analysis.commit_message}"')
    print("4. Push your branch:")
    print(f"   git push origin {analysis.branch_name}")
    print("5. Create a merge request with the title and description provided above")
    print("\nOr run with --create-mr flag to automatically create the merge request")


def run_pipeline(
    issue_key: str,
    create_mr: bool,
    fetch_ticket: Callable[[str], TicketRef],
    analyzer: TemplateAnalyzer,
    generator: CodeGenerator,
    publisher_factory: Callable[[], RepositoryPublisher],
    output_dir: str | Path = DEFAULT_TEMPLATES_DIR,
) -> PipelineResult:
    print("📄 STEP 1: Fetching Jira ticket")
    print("-" * 30)
    ticket = fetch_ticket(issue_key)
    print_ticket(ticket)
    result = PipelineResult(ticket=ticket)

    if not ticket.description.strip():
        print("\n⚠️  Ticket has no description; nothing to generate.")
        return result

    print("\n📄 STEP 2: Analyzing template requirements")
    print("-" * 30)
    analysis = analyzer.analyze(ticket.description, ticket.key)
    result.analysis = analysis
    print_analysis(analysis)

    print("\n📄 STEP 3: Generating email template")
    print("-" * 30)
    artifact = generator.generate_email_template(analysis.template_name, analysis.description, analysis.variables)

    print("\n📄 STEP 4: Saving template")
    print("-" * 30)
    result.artifact_path = write_template(artifact.template_name, artifact.html, output_dir)
    print(f"✅ Template saved locally to: {result.artifact_path}")

    if not create_mr:
        print_next_steps(analysis)
        return result

    print("\n📄 STEP 5: Creating merge request")
    print("-" * 30)
    publisher = publisher_factory()
    result.merge_request = publisher.publish(artifact, analysis.to_merge_request())

    print("\n🎉 SUCCESS!")
    print("=" * 50)
    print(f"✅ Merge request created: !{result.merge_request.iid}")
    print(f"🔗 URL: {result.merge_request.web_url}")
    print(f"🌿 Branch: {analysis.branch_name}")
    print(f"🎫 Ticket: {ticket.key}")
    return result
