"""Internal helpers: run git commands, raise GitRunnerError on failure."""

import logging
import os
import subprocess
from pathlib import Path
from typing import Mapping

from advisory_admin.errors import AdminError, ErrorKind, GitRunnerError

logger = logging.getLogger("advisory_admin.services.git")


def _run_git(
    args: list[str],
    cwd: Path,
    log: logging.Logger | None = None,
    env: Mapping[str, str] | None = None,
) -> str:
    """Run git command and return its stdout; raise GitRunnerError on non-zero exit.

    A missing ``cwd`` raises AdminError(IO) before git is started.

    ``env`` entries are layered over the current process environment.
    """
    if not Path(cwd).is_dir():
        raise AdminError(ErrorKind.IO, f"not a directory: {cwd} (running git {' '.join(args)})")
    cmd = ["git"] + args
    log = log or logger
    log.debug("Running %s in %s", " ".join(cmd), cwd)
    run_env = None
    if env:
        run_env = dict(os.environ)
        run_env.update(env)
    try:
        result = subprocess.run(cmd, cwd=cwd, check=True, capture_output=True, text=True, env=run_env)
    except subprocess.CalledProcessError as e:
        err = (e.stderr or e.stdout or "").strip()
        log.warning("Git %s failed: %s", args, err)
        raise GitRunnerError(f"git {' '.join(args)}: {err}", args=args, stderr=err) from e
    except FileNotFoundError as e:
        raise GitRunnerError("git not found", args=args, cause=e) from e
    return result.stdout
