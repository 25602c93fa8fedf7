"""Ensure a named remote exists for a pull request's source repository."""

import logging
from pathlib import Path

from advisory_admin.errors import AdminError, ErrorKind
from advisory_admin.models import PullRequest
from advisory_admin.progress import ProgressCallback, emit
from advisory_admin.services.git.repository import add_remote, get_remote_url

REMOTE_PATH_PREFIX = "remotes"


def remote_path_prefix(remote_name: str) -> str:
    """Ref namespace for a remote, e.g. "remotes/alice"."""
    return f"{REMOTE_PATH_PREFIX}/{remote_name}"


def reconcile_remote(
    repo_dir: Path,
    pull_request: PullRequest,
    on_progress: ProgressCallback | None = None,
    log: logging.Logger | None = None,
) -> str:
    """Configure the git remote for the pull request's source repo.

    The remote is named after the author's login. An existing remote with the
    same URL is reused; one with a different URL is never overwritten and
    raises AdminError(CONFIG) instead. Returns the remote's ref prefix.
    """
    remote_name = pull_request.author.login
    clone_url = pull_request.clone_url()

    existing_url = get_remote_url(remote_name, repo_dir=repo_dir, log=log)
    if existing_url is not None:
        if existing_url != clone_url:
            raise AdminError(
                ErrorKind.CONFIG,
                f"git remote '{remote_name}' exists but has different URL "
                f"(expected {clone_url!r}, got {existing_url!r})",
            )
        if log:
            log.debug("Reusing git remote %s -> %s", remote_name, clone_url)
    else:
        try:
            add_remote(remote_name, clone_url, repo_dir=repo_dir, log=log)
        except AdminError as e:
            raise ErrorKind.GIT.context(e, f"error adding remote for '{remote_name}'") from e
        emit(on_progress, "Added", f"git remote '{remote_name}': {clone_url}")

    return remote_path_prefix(remote_name)
