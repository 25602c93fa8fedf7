"""Code hosting API adapters."""

from advisory_admin.adapters.github import GitHubAdapter

__all__ = ["GitHubAdapter"]
