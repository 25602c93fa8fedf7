"""Git operations: repository primitives, remote reconciliation, authenticated fetch."""

from advisory_admin.errors import GitRunnerError
from advisory_admin.services.git.auth import (
    Credential,
    CredentialChain,
    CredentialProvider,
    CredentialsExhausted,
    CredentialType,
    default_credential_chain,
    with_authentication,
)
from advisory_admin.services.git.fetch import (
    LOCAL_MASTER_REF,
    build_refspec,
    destination_ref_path,
    pull_remote_branch,
)
from advisory_admin.services.git.remotes import reconcile_remote, remote_path_prefix
from advisory_admin.services.git.repository import (
    add_remote,
    get_remote_url,
    open_repository,
    resolve_reference,
)

__all__ = [
    "Credential",
    "CredentialChain",
    "CredentialProvider",
    "CredentialType",
    "CredentialsExhausted",
    "GitRunnerError",
    "LOCAL_MASTER_REF",
    "add_remote",
    "build_refspec",
    "default_credential_chain",
    "destination_ref_path",
    "get_remote_url",
    "open_repository",
    "pull_remote_branch",
    "reconcile_remote",
    "remote_path_prefix",
    "resolve_reference",
    "with_authentication",
]
