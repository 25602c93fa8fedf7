"""Credential negotiation for git transports.

A fetch is attempted once per credential the provider hands out, in a fixed
priority order: git's own default chain (credential helpers, ssh-agent),
then a configured token, then SSH key files. Only authentication failures
move on to the next credential; every other failure is final.
"""

import base64
import logging
import re
import shlex
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, Tuple, TypeVar
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field

from advisory_admin.errors import AdminError, ErrorKind, GitRunnerError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_SSH_KEY_NAMES = ("id_ed25519", "id_ecdsa", "id_rsa")
TOKEN_USERNAME = "x-access-token"

# scp-like syntax: [user@]host:path (no scheme)
_SCP_LIKE_RE = re.compile(r"^(?:(?P<user>[^@/]+)@)?(?P<host>[^:/]+):(?!//)")

# git stderr fragments that mean "credentials rejected or missing"
AUTH_FAILURE_MARKERS = (
    "authentication failed",
    "could not read username",
    "could not read password",
    "terminal prompts disabled",
    "permission denied (publickey",
    "invalid username or password",
    "http basic: access denied",
    "the requested url returned error: 401",
    "the requested url returned error: 403",
)


class CredentialType(Enum):
    """Kinds of credential a transport may accept."""

    SSH_KEY = "ssh-key"
    USER_PASS_PLAINTEXT = "userpass-plaintext"
    DEFAULT = "default"


class Credential(BaseModel):
    """Authentication material plus the environment that hands it to git."""

    model_config = ConfigDict(frozen=True)

    type: CredentialType
    source: str
    env: Dict[str, str] = Field(default_factory=dict)

    def transport_env(self) -> Dict[str, str]:
        """Environment overrides for the git process (prompts always disabled)."""
        return {"GIT_TERMINAL_PROMPT": "0", **self.env}


class CredentialsExhausted(AdminError):
    """Raised by a provider when it has no further credential to offer."""

    def __init__(self, url: str) -> None:
        super().__init__(ErrorKind.GIT, f"no usable credential found for {url}")


def _is_scp_like(url: str) -> bool:
    return "://" not in url and _SCP_LIKE_RE.match(url) is not None


def allowed_credential_types(url: str) -> FrozenSet[CredentialType]:
    """Credential types the transport for ``url`` can use."""
    allowed = {CredentialType.DEFAULT}
    if _is_scp_like(url):
        allowed.add(CredentialType.SSH_KEY)
        return frozenset(allowed)
    scheme = urlsplit(url).scheme.lower()
    if scheme in ("ssh", "git+ssh", "ssh+git"):
        allowed.add(CredentialType.SSH_KEY)
    elif scheme in ("http", "https"):
        allowed.add(CredentialType.USER_PASS_PLAINTEXT)
    return frozenset(allowed)


def username_from_url(url: str) -> str | None:
    """User part of the URL (e.g. "git" for git@github.com:org/repo.git)."""
    if _is_scp_like(url):
        m = _SCP_LIKE_RE.match(url)
        return m.group("user") if m else None
    return urlsplit(url).username or None


class CredentialSource(ABC):
    """One place credentials can come from."""

    @abstractmethod
    def credentials(
        self,
        url: str,
        username_hint: str | None,
        allowed_types: FrozenSet[CredentialType],
    ) -> Iterator[Credential]:
        """Yield the credentials this source can offer for ``url``."""
        ...


class DefaultCredentialSource(CredentialSource):
    """Defer to git itself: configured credential helpers and ssh-agent."""

    def credentials(self, url, username_hint, allowed_types):
        if CredentialType.DEFAULT in allowed_types:
            yield Credential(type=CredentialType.DEFAULT, source="git default credentials")


class TokenCredentialSource(CredentialSource):
    """Token sent as HTTP basic auth, scoped to the URL's host."""

    def __init__(self, token: str | None, username: str = TOKEN_USERNAME) -> None:
        self._token = token
        self._username = username

    def credentials(self, url, username_hint, allowed_types):
        if not self._token or CredentialType.USER_PASS_PLAINTEXT not in allowed_types:
            return
        parts = urlsplit(url)
        user = username_hint or self._username
        basic = base64.b64encode(f"{user}:{self._token}".encode()).decode()
        # GIT_CONFIG_* keeps the token out of the process argument list
        yield Credential(
            type=CredentialType.USER_PASS_PLAINTEXT,
            source=f"token for {parts.hostname}",
            env={
                "GIT_CONFIG_COUNT": "1",
                "GIT_CONFIG_KEY_0": f"http.{parts.scheme}://{parts.hostname}/.extraHeader",
                "GIT_CONFIG_VALUE_0": f"Authorization: Basic {basic}",
            },
        )


class SshKeySource(CredentialSource):
    """Private key files offered one at a time via GIT_SSH_COMMAND."""

    def __init__(self, key_paths: Iterable[Path] | None = None) -> None:
        if key_paths is None:
            ssh_dir = Path.home() / ".ssh"
            key_paths = [ssh_dir / name for name in DEFAULT_SSH_KEY_NAMES]
        self._key_paths = [Path(p).expanduser() for p in key_paths]

    def credentials(self, url, username_hint, allowed_types):
        if CredentialType.SSH_KEY not in allowed_types:
            return
        for path in self._key_paths:
            if not path.is_file():
                continue
            command = f"ssh -i {shlex.quote(str(path))} -o IdentitiesOnly=yes -o BatchMode=yes"
            yield Credential(
                type=CredentialType.SSH_KEY,
                source=f"ssh key {path}",
                env={"GIT_SSH_COMMAND": command},
            )


class CredentialProvider(ABC):
    """Hands out credentials on demand, one per call."""

    @abstractmethod
    def resolve(
        self,
        url: str,
        username_hint: str | None,
        allowed_types: FrozenSet[CredentialType],
    ) -> Credential:
        """Return the next credential to try; raise CredentialsExhausted when out."""
        ...


class CredentialChain(CredentialProvider):
    """Consults its sources in order; each call resumes where the last stopped."""

    def __init__(self, sources: List[CredentialSource]) -> None:
        self._sources = list(sources)
        self._pending: Dict[Tuple[str, str | None, FrozenSet[CredentialType]], Iterator[Credential]] = {}

    def _iter(self, url, username_hint, allowed_types) -> Iterator[Credential]:
        for source in self._sources:
            yield from source.credentials(url, username_hint, allowed_types)

    def resolve(self, url, username_hint, allowed_types):
        key = (url, username_hint, frozenset(allowed_types))
        if key not in self._pending:
            self._pending[key] = self._iter(url, username_hint, key[2])
        try:
            return next(self._pending[key])
        except StopIteration:
            raise CredentialsExhausted(url) from None


def default_credential_chain(
    token: str | None = None,
    ssh_key_paths: Iterable[Path] | None = None,
) -> CredentialChain:
    """Default transport chain, then token, then SSH keys."""
    return CredentialChain(
        [
            DefaultCredentialSource(),
            TokenCredentialSource(token),
            SshKeySource(ssh_key_paths),
        ]
    )


def is_authentication_failure(error: GitRunnerError) -> bool:
    """True if git's error output says the credentials were rejected or missing."""
    text = (error.stderr or error.message).lower()
    return any(marker in text for marker in AUTH_FAILURE_MARKERS)


def with_authentication(
    url: str,
    provider: CredentialProvider,
    operation: Callable[[Credential], T],
    log: logging.Logger | None = None,
) -> T:
    """Run ``operation`` with credentials from ``provider`` until one is accepted.

    Non-authentication failures propagate immediately. When the provider runs
    out, the last transport error is re-raised as is.
    """
    log = log or logger
    username_hint = username_from_url(url)
    allowed_types = allowed_credential_types(url)
    last_error: GitRunnerError | None = None

    while True:
        try:
            credential = provider.resolve(url, username_hint, allowed_types)
        except CredentialsExhausted:
            if last_error is not None:
                raise last_error
            raise
        log.debug("Trying %s for %s", credential.source, url)
        try:
            return operation(credential)
        except GitRunnerError as e:
            if not is_authentication_failure(e):
                raise
            log.warning("Credential rejected (%s) for %s", credential.source, url)
            last_error = e
