"""Error kinds and the error type raised by every fallible operation."""

from enum import Enum


class ErrorKind(Enum):
    """Closed set of failure kinds."""

    CONFIG = "config error"
    GIT = "git error"
    IO = "I/O error"
    REMOTE_DATA_SOURCE = "remote data source error"

    @property
    def description(self) -> str:
        return self.value

    def context(self, cause: BaseException | None, message: str) -> "AdminError":
        """Build an error of this kind wrapping ``cause``."""
        return AdminError(self, message, cause=cause)


class AdminError(Exception):
    """Raised when an operation fails; tagged with exactly one ErrorKind."""

    def __init__(self, kind: ErrorKind, message: str, cause: BaseException | None = None) -> None:
        self.kind = kind
        self.message = message
        self.cause = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        text = f"{self.kind.description}: {self.message}"
        if self.cause is not None:
            cause = self.cause
            cause_text = (cause.message if isinstance(cause, AdminError) else str(cause)).strip()
            if cause_text and cause_text not in self.message:
                text = f"{text}: {cause_text}"
        return text


class GitRunnerError(AdminError):
    """Raised when a git command fails."""

    def __init__(
        self,
        message: str,
        args: list[str] | None = None,
        stderr: str = "",
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(ErrorKind.GIT, message, cause=cause)
        self.git_args = list(args or [])
        self.stderr = stderr
