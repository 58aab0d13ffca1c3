from __future__ import annotations

import os
import re
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from .errors import ConfigurationError, FilesystemError, GitCommandError

Runner = Callable[..., str]


def redact(text: str, secrets: Iterable[str]) -> str:
    for secret in secrets:
        if secret:
            text = text.replace(secret, "***")
    return text


def run(cmd: List[str], cwd: str | Path | None = None, secrets: Iterable[str] = (), quiet: bool = False) -> str:
    """Run a command and return its stdout; raise GitCommandError on a non-zero exit."""
    secrets = tuple(secrets)
    shown = [redact(part, secrets) for part in cmd]
    print(f"💻 Running: {' '.join(shown)}")
    if cwd:
        print(f"   📁 Working directory: {cwd}")
    env = os.environ.copy()
    env.setdefault("GIT_TERMINAL_PROMPT", "0")
    # Output is parsed ("HEAD branch:"), so git must not translate it.
    env["LC_ALL"] = "C"
    try:
        proc = subprocess.run(cmd, cwd=cwd, env=env, text=True, capture_output=True)
    except OSError as e:
        raise GitCommandError(shown, -1, str(e)) from e
    stdout = proc.stdout or ""
    stderr = redact(proc.stderr or "", secrets)
    if stdout and not quiet:
        print(redact(stdout.strip(), secrets))
    if proc.returncode == 0:
        print("   ✅ Command completed successfully")
        return stdout
    if stderr:
        print("   🔻 stderr:")
        print(stderr.strip())
    print(f"   ❌ Command failed with exit code {proc.returncode}")
    raise GitCommandError(shown, proc.returncode, stderr)


def remove_tree(path: Path) -> None:
    if not path.exists():
        return
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise FilesystemError(f"Could not remove {path}: {e}") from e


def check_workspace(
    dest: Path,
    repo_url: str,
    protected: Iterable[Path] = (),
    secrets: Iterable[str] = (),
    runner: Runner = run,
) -> None:
    """Refuse a scratch directory whose removal would destroy anything but an old clone.

    An existing ``dest`` is accepted only when it is empty or is a checkout whose
    ``origin`` is ``repo_url``. It must never contain the working directory or
    any of the ``protected`` paths.
    """
    dest = Path(dest).resolve()
    cwd = Path.cwd().resolve()
    if dest == cwd or dest in cwd.parents:
        raise ConfigurationError(f"Workspace {dest} is the working directory or one of its parents")
    for path in protected:
        path = Path(path).resolve()
        if path == dest or dest in path.parents:
            raise ConfigurationError(f"Workspace {dest} would delete {path} on cleanup")
    if not dest.exists():
        return
    if not dest.is_dir():
        raise ConfigurationError(f"Workspace {dest} exists and is not a directory")
    if not any(dest.iterdir()):
        return
    if (dest / ".git").is_dir():
        try:
            origin = runner(["git", "remote", "get-url", "origin"], cwd=dest, secrets=secrets, quiet=True).strip()
        except GitCommandError:
            origin = ""
        if origin == repo_url:
            return
    raise ConfigurationError(
        f"Workspace {dest} already exists and is not an earlier clone of this repository; "
        "remove it or pass a different --workspace"
    )


def clone(repo_url: str, dest: Path, secrets: Iterable[str] = (), runner: Runner = run) -> Path:
    if dest.exists():
        print(f"   🧹 Removing existing workspace: {dest}")
        remove_tree(dest)
    runner(["git", "clone", repo_url, str(dest)], secrets=secrets)
    return dest


HEAD_BRANCH_REGEX = re.compile(r"HEAD branch:\s*(\S+)")


def head_branch_from_remote(output: str) -> Optional[str]:
    m = HEAD_BRANCH_REGEX.search(output)
    if not m:
        return None
    branch = m.group(1).strip()
    # Reported when the remote HEAD is ambiguous.
    if branch == "(unknown)":
        return None
    return branch


def detect_default_branch(repo_path: Path, runner: Runner = run, fallback: str = "main") -> str:
    """Pick the branch a merge request should target.

    The remote's advertised HEAD wins; otherwise ``main`` and then ``master`` are
    looked for among the remote branches; otherwise ``fallback`` is used.
    """
    print("🔍 Detecting default branch...")
    try:
        head = head_branch_from_remote(runner(["git", "remote", "show", "origin"], cwd=repo_path, quiet=True))
        if head:
            print(f"   ✅ Default branch detected: {head}")
            return head
        branches = runner(["git", "branch", "-a"], cwd=repo_path, quiet=True).split()
        for candidate in ("main", "master"):
            if f"remotes/origin/{candidate}" in branches:
                print(f"   ✅ Default branch set to: {candidate}")
                return candidate
        print(f"   ⚠️  Could not determine default branch, using '{fallback}' as fallback")
    except GitCommandError as e:
        print(f"   ⚠️  Error detecting default branch: {e}")
        print(f"   ⚠️  Using default branch: {fallback}")
    return fallback


def create_branch(repo_path: Path, branch_name: str, runner: Runner = run) -> None:
    runner(["git", "checkout", "-b", branch_name], cwd=repo_path)
    print(f"   🌿 Branch {branch_name} created and checked out")


def commit_push(repo_path: Path, branch_name: str, message: str, secrets: Iterable[str] = (), runner: Runner = run) -> None:
    print("💾 Committing and pushing changes...")
    print(f"   📝 Commit message: {message}")
    print(f"   🌿 Target branch: {branch_name}")
    runner(["git", "add", "."], cwd=repo_path)
    runner(["git", "commit", "-m", message], cwd=repo_path)
    runner(["git", "push", "-u", "origin", branch_name], cwd=repo_path, secrets=secrets)
    print("   ✅ Changes committed and pushed successfully")
