"""GitHub API adapter: pull request metadata for the advisory database repository."""

import logging
from typing import Any, Dict

import requests
from pydantic import ValidationError

from advisory_admin.errors import AdminError, ErrorKind
from advisory_admin.models import PullRequest
from advisory_admin.progress import ProgressCallback, emit

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_REPOSITORY = "rustsec/advisory-db"

logger = logging.getLogger(__name__)


def _pull_request_from_api(data: Dict[str, Any], pull_request_id: int) -> PullRequest:
    try:
        pull_request = PullRequest.model_validate(data)
    except ValidationError as e:
        raise ErrorKind.REMOTE_DATA_SOURCE.context(
            e, f"error parsing pull request #{pull_request_id} from API response"
        ) from e
    if pull_request.id != pull_request_id:
        raise ErrorKind.REMOTE_DATA_SOURCE.context(
            None,
            f"API returned pull request #{pull_request.id} when #{pull_request_id} was requested",
        )
    return pull_request


class GitHubAdapter:
    """Read-only GitHub API client for one repository.

    Pull request metadata of a public repository is readable without a
    token, so no Authorization header is sent.
    """

    def __init__(self, api_url: str = DEFAULT_API_URL, repository: str = DEFAULT_REPOSITORY) -> None:
        self._api_url = api_url.rstrip("/")
        self._repository = repository.strip("/")
        self._session = requests.Session()
        self._session.headers["Accept"] = "application/vnd.github.v3+json"

    @property
    def repository(self) -> str:
        return self._repository

    def pull_request_url(self, pull_request_id: int) -> str:
        return f"{self._api_url}/repos/{self._repository}/pulls/{pull_request_id}"

    def get_pull_request(
        self,
        pull_request_id: int,
        on_progress: ProgressCallback | None = None,
    ) -> PullRequest:
        """Fetch a pull request by number.

        Issues a single GET with no retry. Any failure (transport, non-2xx
        status, undecodable or incomplete body) raises
        AdminError(REMOTE_DATA_SOURCE).
        """
        if isinstance(pull_request_id, bool) or not isinstance(pull_request_id, int) or pull_request_id <= 0:
            raise AdminError(ErrorKind.CONFIG, f"invalid pull request ID number: {pull_request_id!r}")

        url = self.pull_request_url(pull_request_id)
        emit(on_progress, "Fetching", url)

        try:
            resp = self._session.request("GET", url)
        except requests.RequestException as e:
            raise ErrorKind.REMOTE_DATA_SOURCE.context(
                e, f"couldn't get info about pull request #{pull_request_id}"
            ) from e

        if not 200 <= resp.status_code < 300:
            msg = resp.reason or ""
            try:
                msg = resp.json().get("message", msg)
            except (ValueError, AttributeError):
                pass
            logger.warning("GET %s returned %s", url, resp.status_code)
            raise AdminError(
                ErrorKind.REMOTE_DATA_SOURCE,
                f"{self._api_url} returned error for pull request #{pull_request_id}: "
                f"HTTP {resp.status_code}" + (f" {msg}" if msg else ""),
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise ErrorKind.REMOTE_DATA_SOURCE.context(e, f"error parsing response from {self._api_url}") from e
        if not isinstance(data, dict):
            raise AdminError(
                ErrorKind.REMOTE_DATA_SOURCE,
                f"error parsing response from {self._api_url}: expected a JSON object",
            )
        return _pull_request_from_api(data, pull_request_id)
