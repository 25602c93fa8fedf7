"""Pull request model: the parts of the API response needed to fetch a contributor's branch."""

from pydantic import BaseModel, ConfigDict, Field


class PullRequestUser(BaseModel):
    """User who opened a pull request."""

    model_config = ConfigDict(frozen=True)

    login: str = Field(min_length=1)


class PullRequestRepo(BaseModel):
    """Git repository a pull request comes from."""

    model_config = ConfigDict(frozen=True)

    clone_url: str = Field(min_length=1)


class PullRequestHead(BaseModel):
    """HEAD of the pull request: branch name and source fork."""

    model_config = ConfigDict(frozen=True)

    # API field is "ref"
    git_ref: str = Field(alias="ref", min_length=1)
    source_repo: PullRequestRepo = Field(alias="repo")


class PullRequestBase(BaseModel):
    """Commit the pull request is based on."""

    model_config = ConfigDict(frozen=True)

    sha: str


class PullRequest(BaseModel):
    """Pull request against the advisory database repository.

    Built from the hosting API JSON; ``id`` is the pull request number the
    operator asked for (API field ``number``), ``author`` is the API ``user``.
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(alias="number", gt=0)
    url: str
    title: str
    author: PullRequestUser = Field(alias="user")
    head: PullRequestHead
    base: PullRequestBase

    def clone_url(self) -> str:
        """URL to clone the pull request's source repository from."""
        return self.head.source_repo.clone_url
