"""Local repository primitives: open, remotes, references."""

import logging
from pathlib import Path

from advisory_admin.errors import GitRunnerError
from advisory_admin.services.git._run import _run_git


def open_repository(path: Path | str, log: logging.Logger | None = None) -> Path:
    """Return the top-level directory of the git work tree at ``path``.

    Raises GitRunnerError if ``path`` is missing or not inside a git work tree.
    """
    cwd = Path(path)
    if not cwd.is_dir():
        raise GitRunnerError(f"error opening git repo: {cwd} is not a directory")
    try:
        top = _run_git(["rev-parse", "--show-toplevel"], cwd=cwd, log=log).strip()
    except GitRunnerError as e:
        raise GitRunnerError(f"error opening git repo at {cwd}", args=e.git_args, stderr=e.stderr, cause=e) from e
    return Path(top)


def get_remote_url(name: str, repo_dir: Path | None = None, log: logging.Logger | None = None) -> str | None:
    """Return the configured URL of remote ``name``, or None if there is no such remote."""
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    remotes = _run_git(["remote"], cwd=cwd, log=log).split()
    if name not in remotes:
        return None
    # raw configured value; "remote get-url" would apply insteadOf rewrites
    return _run_git(["config", "--get", f"remote.{name}.url"], cwd=cwd, log=log).strip()


def add_remote(name: str, url: str, repo_dir: Path | None = None, log: logging.Logger | None = None) -> None:
    """Add remote ``name`` pointing at ``url``."""
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    _run_git(["remote", "add", "--", name, url], cwd=cwd, log=log)
    if log:
        log.info("Added remote %s -> %s", name, url)


def resolve_reference(ref: str, repo_dir: Path | None = None, log: logging.Logger | None = None) -> str | None:
    """Return the commit id ``ref`` points at, or None if the ref does not exist."""
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    try:
        out = _run_git(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], cwd=cwd, log=log)
    except GitRunnerError as e:
        # --quiet: missing ref exits 1 with no output
        if not e.stderr:
            return None
        raise
    return out.strip() or None
