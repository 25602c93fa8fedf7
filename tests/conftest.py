"""Shared fixtures: throwaway git repositories and pull request payloads."""

import shutil
import subprocess
from pathlib import Path
from typing import Any, Dict

import pytest

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")


def git(cwd: Path, *args: str) -> str:
    """Run git with a fixed identity; return stdout."""
    cmd = ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com", "-c", "commit.gpgsign=false", *args]
    return subprocess.run(cmd, cwd=cwd, check=True, capture_output=True, text=True).stdout


def init_repo(path: Path, files: Dict[str, str] | None = None) -> Path:
    """Create a repository on branch master with one commit."""
    path.mkdir(parents=True, exist_ok=True)
    git(path, "init", "-q")
    git(path, "symbolic-ref", "HEAD", "refs/heads/master")
    commit_files(path, files or {"README.md": "advisory database\n"}, "initial commit")
    return path


def commit_files(path: Path, files: Dict[str, str], message: str) -> str:
    """Write files, commit them, return the new commit id."""
    for name, content in files.items():
        target = path / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
    git(path, "add", "-A")
    git(path, "commit", "-q", "-m", message)
    return git(path, "rev-parse", "HEAD").strip()


def pull_request_payload(
    number: int = 1234,
    login: str = "contributor1",
    git_ref: str = "add-advisory",
    clone_url: str = "https://example.com/contributor1/advisory-db.git",
) -> Dict[str, Any]:
    """Minimal pulls API response body."""
    return {
        "id": 987654321,
        "number": number,
        "url": f"https://api.github.com/repos/rustsec/advisory-db/pulls/{number}",
        "title": "Add advisory for vulnerable-crate",
        "state": "open",
        "user": {"login": login, "id": 42},
        "head": {
            "ref": git_ref,
            "sha": "a" * 40,
            "repo": {"clone_url": clone_url, "full_name": f"{login}/advisory-db"},
        },
        "base": {"ref": "master", "sha": "b" * 40},
    }


@pytest.fixture
def local_repo(tmp_path: Path) -> Path:
    """Local clone of the advisory database (plain repo with one commit)."""
    return init_repo(tmp_path / "advisory-db")


@pytest.fixture
def fork_repo(tmp_path: Path) -> Path:
    """Contributor's fork with an advisory committed on master."""
    repo = init_repo(tmp_path / "fork")
    commit_files(repo, {"crates/foo/RUSTSEC-2024-0001.md": "advisory\n"}, "Add advisory")
    return repo
