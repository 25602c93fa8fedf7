"""Publish workflow: bring a pull request's source state into the local advisory DB repo.

Stages run strictly in order, each completing before the next starts:
fetching pull request metadata, reconciling the git remote, fetching the
branch. The first failure moves the workflow to FAILED and is re-raised;
nothing is retried and nothing already written is rolled back.
"""

import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel

from advisory_admin.adapters.github import GitHubAdapter
from advisory_admin.config import AppConfig
from advisory_admin.errors import AdminError, ErrorKind
from advisory_admin.models import PullRequest
from advisory_admin.progress import ProgressCallback, emit
from advisory_admin.services.database import fetch_database
from advisory_admin.services.git import (
    CredentialProvider,
    default_credential_chain,
    destination_ref_path,
    open_repository,
    pull_remote_branch,
    reconcile_remote,
)

logger = logging.getLogger(__name__)


class PublishStage(Enum):
    IDLE = "idle"
    FETCHING_PR_METADATA = "fetching_pr_metadata"
    RECONCILING_REMOTE = "reconciling_remote"
    FETCHING_BRANCH = "fetching_branch"
    DONE = "done"
    FAILED = "failed"


class PublishResult(BaseModel):
    """What a successful run leaves for the reviewer."""

    pull_request: PullRequest
    remote_name: str
    destination_ref: str
    commit: str


class PublishWorkflow:
    """Single-use pipeline over one pull request id."""

    def __init__(
        self,
        repo_dir: Path,
        adapter: GitHubAdapter,
        provider: CredentialProvider | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.repo_dir = Path(repo_dir)
        self.adapter = adapter
        self.provider = provider or default_credential_chain()
        self.on_progress = on_progress
        self.stage = PublishStage.IDLE
        self.failed_kind: ErrorKind | None = None

    def _enter(self, stage: PublishStage) -> None:
        logger.debug("Publish stage %s -> %s", self.stage.value, stage.value)
        self.stage = stage

    def run(self, pull_request_id: int) -> PublishResult:
        if self.stage is not PublishStage.IDLE:
            raise AdminError(ErrorKind.CONFIG, f"publish workflow already ran (stage {self.stage.value})")
        try:
            self._enter(PublishStage.FETCHING_PR_METADATA)
            pull_request = self.adapter.get_pull_request(pull_request_id, on_progress=self.on_progress)
            emit(
                self.on_progress,
                "Retrieved",
                f'pull request #{pull_request.id} "{pull_request.title}" (by {pull_request.author.login})',
            )

            self._enter(PublishStage.RECONCILING_REMOTE)
            prefix = reconcile_remote(self.repo_dir, pull_request, on_progress=self.on_progress, log=logger)

            self._enter(PublishStage.FETCHING_BRANCH)
            commit = pull_remote_branch(
                self.repo_dir,
                pull_request,
                prefix,
                provider=self.provider,
                on_progress=self.on_progress,
                log=logger,
            )
        except AdminError as e:
            logger.debug("Publish failed during %s: %s", self.stage.value, e)
            self.failed_kind = e.kind
            self.stage = PublishStage.FAILED
            raise

        destination = destination_ref_path(prefix, pull_request.head.git_ref)
        emit(self.on_progress, "Fetched", f"{destination} at {commit}")
        self._enter(PublishStage.DONE)
        return PublishResult(
            pull_request=pull_request,
            remote_name=pull_request.author.login,
            destination_ref=destination,
            commit=commit,
        )


def publish(
    db_path: Path | None,
    pull_request_id: int,
    config: AppConfig,
    on_progress: ProgressCallback | None = None,
) -> PublishResult:
    """Fetch the advisory DB, then publish pull request ``pull_request_id`` into it."""
    repo_path = Path(db_path) if db_path is not None else config.database.path

    database = fetch_database(
        config.database.url,
        repo_path,
        branch=config.database.branch,
        on_progress=on_progress,
        log=logger,
    )
    emit(on_progress, "Loaded", f"{len(database)} security advisories (from {repo_path})")

    repo_dir = open_repository(repo_path, log=logger)
    adapter = GitHubAdapter(api_url=config.github.api_url, repository=config.github.repository)
    provider = default_credential_chain(
        token=config.github_token_resolved,
        ssh_key_paths=config.git.ssh_key_paths or None,
    )
    workflow = PublishWorkflow(repo_dir, adapter, provider=provider, on_progress=on_progress)
    return workflow.run(pull_request_id)
