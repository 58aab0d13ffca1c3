"""Data passed between the pipeline stages.

Every record lives for a single command invocation. None of them is persisted
except through the HTML file the artifact writer produces.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class TicketRef:
    key: str
    summary: str = ""
    status: str = ""
    description: str = ""


# Wire name -> attribute name, in the order the analysis prompt asks for them.
ANALYSIS_FIELDS = {
    "templateName": "template_name",
    "variables": "variables",
    "description": "description",
    "mergeRequestTitle": "merge_request_title",
    "mergeRequestDescription": "merge_request_description",
    "branchName": "branch_name",
    "commitMessage": "commit_message",
}


@dataclass(frozen=True)
class MergeRequestInfo:
    title: str
    description: str
    branch_name: str
    commit_message: str


@dataclass(frozen=True)
class TemplateAnalysis:
    """Metadata the extractor derives from a ticket description."""

    template_name: str
    variables: List[str]
    description: str
    merge_request_title: str
    merge_request_description: str
    branch_name: str
    commit_message: str

    def to_merge_request(self) -> MergeRequestInfo:
        return MergeRequestInfo(
            title=self.merge_request_title,
            description=self.merge_request_description,
            branch_name=self.branch_name,
            commit_message=self.commit_message,
        )


@dataclass(frozen=True)
class GeneratedArtifact:
    template_name: str
    html: str

    @property
    def file_name(self) -> str:
        return f"{self.template_name}.html"


@dataclass(frozen=True)
class RepositoryConfig:
    base_url: str
    repo_name: str  # namespace/path
    token: str = field(repr=False)

    @property
    def host(self) -> str:
        return self.base_url.split("://", 1)[-1].rstrip("/")

    @property
    def clone_url(self) -> str:
        return f"https://oauth2:{self.token}@{self.host}/{self.repo_name}.git"

    @property
    def public_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.repo_name}"


@dataclass(frozen=True)
class MergeRequestResult:
    project_id: int
    iid: Optional[int]
    web_url: str
    source_branch: str
    target_branch: str
