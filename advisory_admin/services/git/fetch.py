"""Fetch a pull request's source repository into a namespaced ref."""

import logging
from pathlib import Path

from advisory_admin.errors import AdminError, ErrorKind
from advisory_admin.models import PullRequest
from advisory_admin.progress import ProgressCallback, emit
from advisory_admin.services.git._run import _run_git
from advisory_admin.services.git.auth import (
    Credential,
    CredentialProvider,
    default_credential_chain,
    with_authentication,
)
from advisory_admin.services.git.repository import resolve_reference

# git ref for the master branch of the advisory database
LOCAL_MASTER_REF = "refs/heads/master"


def destination_ref_path(remote_path_prefix: str, git_ref: str) -> str:
    """Where the pull request's state is recorded, e.g. "remotes/alice/fix-branch"."""
    return "/".join([remote_path_prefix.rstrip("/"), git_ref])


def build_refspec(destination: str) -> str:
    """Map master into the pull request's namespaced slot.

    Note the source side is master, not the pull request branch by name;
    reviewers compare this slot against the local branches. The slot is
    force-updated so a rebased or force-pushed fork can be fetched again.
    """
    return f"+{LOCAL_MASTER_REF}:refs/{destination}"


def pull_remote_branch(
    repo_dir: Path,
    pull_request: PullRequest,
    remote_path_prefix: str,
    provider: CredentialProvider | None = None,
    on_progress: ProgressCallback | None = None,
    log: logging.Logger | None = None,
) -> str:
    """Fetch from the pull request's clone URL and return the recorded commit id.

    The fetch goes to the URL directly (anonymous remote), not through the
    named remote. Nothing is merged and the working tree is not touched.
    """
    clone_url = pull_request.clone_url()
    destination = destination_ref_path(remote_path_prefix, pull_request.head.git_ref)
    refspec = build_refspec(destination)
    provider = provider or default_credential_chain()

    emit(on_progress, "Fetching", f"{clone_url} ({refspec})")

    def fetch(credential: Credential) -> None:
        _run_git(
            ["fetch", "--", clone_url, refspec],
            cwd=repo_dir,
            log=log,
            env=credential.transport_env(),
        )

    with_authentication(clone_url, provider, fetch, log=log)

    target = resolve_reference(f"refs/{destination}", repo_dir=repo_dir, log=log)
    if target is None:
        raise AdminError(
            ErrorKind.GIT,
            f"fetch from {clone_url} succeeded but ref {destination} was not written",
        )
    return target
