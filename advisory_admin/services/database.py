"""Advisory database access: fetch the git clone and load its advisories.

Advisories live at ``<collection>/<package>/RUSTSEC-YYYY-NNNN.md`` with a
fenced TOML front matter block followed by a Markdown title and description.
Older clones keep each advisory as a plain ``.toml`` file instead.
"""

import logging
import re
import time
import tomllib
from pathlib import Path
from typing import Dict, Iterator, List

from pydantic import ValidationError

from advisory_admin.errors import AdminError, ErrorKind
from advisory_admin.models import Advisory
from advisory_admin.progress import ProgressCallback, emit
from advisory_admin.services.git._run import _run_git
from advisory_admin.services.git.repository import open_repository

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "master"

# Commits older than this mean the clone (or upstream) stopped updating
DAYS_UNTIL_STALE = 90

_FRONT_MATTER_RE = re.compile(r"\A\s*```toml\s*\n(?P<toml>.*?)\n```\s*\n?(?P<body>.*)\Z", re.DOTALL)


class AdvisoryRepository:
    """Local git clone of the advisory database."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    @classmethod
    def fetch(
        cls,
        url: str,
        path: Path,
        ensure_fresh: bool = True,
        branch: str = DEFAULT_BRANCH,
        log: logging.Logger | None = None,
    ) -> "AdvisoryRepository":
        """Clone ``url`` into ``path``, or bring an existing clone up to date.

        An existing clone has ``branch`` fetched from ``url`` and force
        checked out, discarding local changes to that branch.
        """
        path = Path(path)
        if not path.exists() or (path.is_dir() and not any(path.iterdir())):
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ErrorKind.IO.context(e, f"couldn't create {path.parent}") from e
            # absolute target: a relative path would be resolved against cwd=path.parent
            _run_git(["clone", "--branch", branch, "--", url, str(path.resolve())], cwd=path.parent, log=log)
        else:
            top = open_repository(path, log=log)
            tracking_ref = f"refs/remotes/origin/{branch}"
            _run_git(["fetch", "--", url, f"+refs/heads/{branch}:{tracking_ref}"], cwd=top, log=log)
            _run_git(["checkout", "--force", "-B", branch, tracking_ref], cwd=top, log=log)
            path = top

        repo = cls(path)
        if ensure_fresh:
            repo.ensure_fresh(log=log)
        return repo

    def latest_commit_time(self, log: logging.Logger | None = None) -> float:
        """Committer timestamp (seconds since epoch) of HEAD."""
        out = _run_git(["log", "-1", "--format=%ct"], cwd=self.path, log=log).strip()
        try:
            return float(out)
        except ValueError as e:
            raise ErrorKind.GIT.context(e, f"unexpected commit timestamp {out!r}") from e

    def ensure_fresh(self, now: float | None = None, log: logging.Logger | None = None) -> None:
        """Raise AdminError(REMOTE_DATA_SOURCE) if HEAD is older than DAYS_UNTIL_STALE."""
        now = time.time() if now is None else now
        age_days = (now - self.latest_commit_time(log=log)) / 86400
        if age_days > DAYS_UNTIL_STALE:
            raise AdminError(
                ErrorKind.REMOTE_DATA_SOURCE,
                f"advisory database at {self.path} is stale: last commit {int(age_days)} days ago",
            )

    def advisory_paths(self) -> List[Path]:
        """Advisory files, sorted; hidden directories are skipped."""
        found = []
        for p in self.path.glob("*/*/RUSTSEC-*"):
            if p.suffix not in (".md", ".toml") or not p.is_file():
                continue
            if any(part.startswith(".") for part in p.relative_to(self.path).parts):
                continue
            found.append(p)
        return sorted(found)


def parse_advisory(text: str, source: str = "<advisory>") -> Advisory:
    """Parse one advisory file (Markdown with TOML front matter, or plain TOML)."""
    m = _FRONT_MATTER_RE.match(text)
    body = ""
    toml_text = text
    if m:
        toml_text = m.group("toml")
        body = m.group("body").strip()
    try:
        data = tomllib.loads(toml_text)
    except tomllib.TOMLDecodeError as e:
        raise ErrorKind.REMOTE_DATA_SOURCE.context(e, f"malformed advisory {source}") from e

    fields = dict(data.get("advisory") or {})
    if body:
        lines = body.splitlines()
        if lines and lines[0].startswith("# "):
            fields.setdefault("title", lines[0][2:].strip())
            lines = lines[1:]
        fields.setdefault("description", "\n".join(lines).strip())
    try:
        return Advisory.model_validate(fields)
    except ValidationError as e:
        raise ErrorKind.REMOTE_DATA_SOURCE.context(e, f"invalid advisory {source}") from e


class Database:
    """Parsed advisory database."""

    def __init__(self, advisories: List[Advisory]) -> None:
        self._advisories: Dict[str, Advisory] = {a.id: a for a in advisories}

    @classmethod
    def load(cls, repository: AdvisoryRepository) -> "Database":
        advisories = []
        for path in repository.advisory_paths():
            try:
                text = path.read_text(encoding="utf-8")
            except OSError as e:
                raise ErrorKind.IO.context(e, f"couldn't read {path}") from e
            advisories.append(parse_advisory(text, source=str(path)))
        return cls(advisories)

    def get(self, advisory_id: str) -> Advisory | None:
        return self._advisories.get(advisory_id)

    def __len__(self) -> int:
        return len(self._advisories)

    def __iter__(self) -> Iterator[Advisory]:
        return iter(self._advisories.values())


def fetch_database(
    url: str,
    local_path: Path,
    branch: str = DEFAULT_BRANCH,
    on_progress: ProgressCallback | None = None,
    log: logging.Logger | None = None,
) -> Database:
    """Fetch and load the local advisory database clone.

    Any failure is raised as AdminError(REMOTE_DATA_SOURCE) naming the path.
    """
    emit(on_progress, "Pulling", f"advisory database from `{url}`")
    try:
        repo = AdvisoryRepository.fetch(url, local_path, ensure_fresh=True, branch=branch, log=log)
    except AdminError as e:
        raise ErrorKind.REMOTE_DATA_SOURCE.context(
            e, f"couldn't fetch advisory database into {local_path}"
        ) from e
    try:
        return Database.load(repo)
    except AdminError as e:
        raise ErrorKind.REMOTE_DATA_SOURCE.context(
            e, f"error loading advisory database from {local_path}"
        ) from e
