"""Publish a generated template to GitLab as a merge request.

The publisher works in a disposable clone (the scratch workspace). Every git
command receives the workspace as an explicit ``cwd``; the process working
directory is never changed. An existing workspace is reused only when it is
empty or an earlier clone of the same repository. Whatever happens after the
clone starts, the workspace is removed exactly once before control returns to
the caller.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from . import git_utils, gitlab_utils
from .artifact_writer import DEFAULT_TEMPLATES_DIR, write_template
from .config import Settings
from .errors import FilesystemError
from .models import GeneratedArtifact, MergeRequestInfo, MergeRequestResult, RepositoryConfig

DEFAULT_WORKSPACE = "temp_git"


class RepositoryPublisher:
    def __init__(
        self,
        config: RepositoryConfig,
        workspace: str | Path = DEFAULT_WORKSPACE,
        gitlab_client=None,
        runner: git_utils.Runner = git_utils.run,
        retries: int = 3,
        backoff: float = 2.0,
        output_dir: str | Path | None = None,
    ):
        self.config = config
        self.workspace = Path(workspace).resolve()
        self.protected = [Path(output_dir)] if output_dir else []
        self.runner = runner
        self.retries = retries
        self.backoff = backoff
        self.gitlab = gitlab_client or gitlab_utils.get_gitlab_client(config)
        self.default_branch: Optional[str] = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        workspace: str | Path | None = None,
        output_dir: str | Path | None = None,
    ) -> "RepositoryPublisher":
        # Fails before any network call when GITLAB_TOKEN or REPO_NAME is absent.
        config = settings.require_gitlab()
        return cls(
            config,
            workspace=workspace or settings.scratch_workspace,
            retries=settings.retries,
            backoff=settings.backoff_seconds,
            output_dir=output_dir or settings.templates_dir,
        )

    @property
    def _secrets(self):
        return (self.config.token,)

    def publish(self, artifact: GeneratedArtifact, mr_info: MergeRequestInfo) -> MergeRequestResult:
        print("\n=== GITLAB OPERATIONS ===")
        # Outside the try: a refused workspace belongs to the user and is never cleaned up.
        git_utils.check_workspace(
            self.workspace,
            self.config.clone_url,
            protected=self.protected,
            secrets=self._secrets,
            runner=self.runner,
        )
        try:
            self._clone()
            self.default_branch = self._detect_default_branch()
            self._create_branch(mr_info.branch_name)
            self._write_artifact(artifact)
            self._commit_and_push(mr_info)
            result = self._create_merge_request(mr_info)
        except BaseException as e:
            print(f"❌ Error in GitLab operations: {e}")
            self._cleanup(raise_errors=False)
            raise
        self._cleanup(raise_errors=True)

        print("\n=== GITLAB OPERATIONS COMPLETED ===")
        print(f"🌿 Branch created: {mr_info.branch_name}")
        print(f"🏷️ Merge request title: {mr_info.title}")
        return result

    def _clone(self) -> None:
        print("🔄 Cloning repository...")
        print(f"   🔗 Repository: {self.config.public_url}")
        git_utils.clone(self.config.clone_url, self.workspace, secrets=self._secrets, runner=self.runner)
        print("   ✅ Repository cloned successfully")

    def _detect_default_branch(self) -> str:
        return git_utils.detect_default_branch(self.workspace, runner=self.runner)

    def _create_branch(self, branch_name: str) -> None:
        print(f"🌿 Creating branch: {branch_name}")
        git_utils.create_branch(self.workspace, branch_name, runner=self.runner)

    def _write_artifact(self, artifact: GeneratedArtifact) -> Path:
        print(f"💾 Saving template: {artifact.template_name}")
        path = write_template(artifact.template_name, artifact.html, self.workspace / DEFAULT_TEMPLATES_DIR)
        print(f"   ✅ Template saved to: {path}")
        return path

    def _commit_and_push(self, mr_info: MergeRequestInfo) -> None:
        git_utils.commit_push(
            self.workspace,
            mr_info.branch_name,
            mr_info.commit_message,
            secrets=self._secrets,
            runner=self.runner,
        )

    def _create_merge_request(self, mr_info: MergeRequestInfo) -> MergeRequestResult:
        return gitlab_utils.create_merge_request(
            self.gitlab,
            self.config.repo_name,
            mr_info,
            target_branch=self.default_branch or "main",
            retries=self.retries,
            backoff=self.backoff,
        )

    def _cleanup(self, raise_errors: bool) -> None:
        print("🧹 Cleaning up...")
        try:
            git_utils.remove_tree(self.workspace)
        except FilesystemError as e:
            print(f"   ⚠️  Error during cleanup: {e}")
            if raise_errors:
                raise
            return
        print("   ✅ Cleanup completed")
