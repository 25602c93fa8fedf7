"""Data models for pull requests and advisories (Pydantic)."""

from advisory_admin.models.advisory import Advisory
from advisory_admin.models.pull_request import (
    PullRequest,
    PullRequestBase,
    PullRequestHead,
    PullRequestRepo,
    PullRequestUser,
)

__all__ = [
    "Advisory",
    "PullRequest",
    "PullRequestBase",
    "PullRequestHead",
    "PullRequestRepo",
    "PullRequestUser",
]
