"""Progress events: stage name plus message, reported on a side channel.

Core operations accept an optional ``on_progress`` callback. Every event is
also logged through the ``advisory_admin.progress`` logger so that runs
without a callback still leave a trace.
"""

import logging
import sys
from typing import Callable, TextIO

from pydantic import BaseModel

logger = logging.getLogger("advisory_admin.progress")


class ProgressEvent(BaseModel):
    """A single status notification (e.g. stage="Fetching", message=url)."""

    stage: str
    message: str


ProgressCallback = Callable[[ProgressEvent], None]


def emit(on_progress: ProgressCallback | None, stage: str, message: str) -> ProgressEvent:
    """Log the event and forward it to the callback, if any."""
    event = ProgressEvent(stage=stage, message=message)
    logger.info("%s %s", stage, message)
    if on_progress is not None:
        on_progress(event)
    return event


class StatusPrinter:
    """Renders progress events as right-aligned status lines."""

    def __init__(self, stream: TextIO | None = None, width: int = 12) -> None:
        self._stream = stream
        self._width = width

    def __call__(self, event: ProgressEvent) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        stream.write(f"{event.stage:>{self._width}} {event.message}\n")
        stream.flush()
