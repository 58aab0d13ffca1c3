from __future__ import annotations

import gitlab
from gitlab.exceptions import GitlabError
from requests.exceptions import RequestException

from .errors import ExternalCallError
from .models import MergeRequestInfo, MergeRequestResult, RepositoryConfig
from .retry import with_retry


def get_gitlab_client(config: RepositoryConfig) -> gitlab.Gitlab:
    print(f"🔗 Initializing GitLab client with base URL: {config.base_url}")
    print(f"   📁 Target repository: {config.repo_name}")
    return gitlab.Gitlab(config.base_url, private_token=config.token)


def _search_projects(gl: gitlab.Gitlab, repo_name: str):
    last = repo_name.rstrip("/").split("/")[-1]
    try:
        projects = gl.projects.list(search=last, membership=True, per_page=100, get_all=False)
    except GitlabError as e:
        raise ExternalCallError(f"GitLab project search for '{last}' failed: {e}") from e
    except RequestException as e:
        raise ExternalCallError(f"GitLab project search for '{last}' failed: {e}") from e

    for project in projects:
        if project.path_with_namespace == repo_name:
            return project
    for project in projects:
        if project.path == last or project.name == last:
            return project
    return None


def find_project(gl: gitlab.Gitlab, repo_name: str, retries: int = 3, backoff: float = 2.0):
    """Resolve ``namespace/path`` to a project, falling back to a membership search."""
    print(f"🔎 Looking up project directly: {repo_name}")
    try:
        project = gl.projects.get(repo_name)
        print(f"   ✅ Project found directly: {project.name} (ID: {project.id})")
        return project
    except (GitlabError, RequestException) as e:
        print(f"   ⚠️  Direct lookup failed: {e}")

    print(f"🔎 Searching for projects with name: {repo_name}")
    project = with_retry(_search_projects, gl, repo_name, max_retries=retries, base_delay=backoff)
    if project is None:
        raise ExternalCallError(
            f"Project {repo_name} not found. Please check your GITLAB_TOKEN and REPO_NAME environment variables.",
            retryable=False,
        )
    print(f"   ✅ Project found via search: {project.name} (ID: {project.id})")
    return project


def _create(project, payload: dict):
    try:
        return project.mergerequests.create(payload)
    except GitlabError as e:
        status = getattr(e, "response_code", None) or 0
        raise ExternalCallError(
            f"GitLab merge request creation failed: {e}",
            retryable=status == 429 or status >= 500,
        ) from e
    except RequestException as e:
        raise ExternalCallError(f"GitLab merge request creation failed: {e}") from e


def create_merge_request(
    gl: gitlab.Gitlab,
    repo_name: str,
    mr_info: MergeRequestInfo,
    target_branch: str,
    retries: int = 3,
    backoff: float = 2.0,
) -> MergeRequestResult:
    print("🔄 Creating merge request...")
    project = find_project(gl, repo_name, retries=retries, backoff=backoff)
    api_default = getattr(project, "default_branch", None)
    if api_default and api_default != target_branch:
        print(f"   ℹ️  GitLab reports default branch '{api_default}'; targeting cloned default '{target_branch}'")
    print(f"   📁 Project ID: {project.id}")
    print(f"   🌿 Source branch: {mr_info.branch_name}")
    print(f"   🌿 Target branch: {target_branch}")
    print(f"   🏷️ Title: {mr_info.title}")
    payload = {
        "source_branch": mr_info.branch_name,
        "target_branch": target_branch,
        "title": mr_info.title,
        "description": mr_info.description,
        "remove_source_branch": True,
    }
    mr = with_retry(_create, project, payload, max_retries=retries, base_delay=backoff)
    print("   ✅ Merge request created successfully!")
    print(f"   🔗 URL: {mr.web_url}")
    return MergeRequestResult(
        project_id=project.id,
        iid=getattr(mr, "iid", None),
        web_url=mr.web_url,
        source_branch=mr_info.branch_name,
        target_branch=target_branch,
    )
