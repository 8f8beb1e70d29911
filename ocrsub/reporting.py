"""Progress and message reporting for extraction runs.

Every observable thing a run produces goes through ``reporter.report(event)``.
Two renderers exist: ``LogReporter`` for humans (logging + a tqdm bar) and
``JsonReporter`` for callers that parse stdout, one JSON object per line.
"""

import json
import logging
import sys
from dataclasses import dataclass
from typing import IO, Optional, Sequence, Union

from tqdm import tqdm

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InfoEvent:
    message: str


@dataclass(frozen=True)
class DebugEvent:
    message: str


@dataclass(frozen=True)
class ErrorEvent:
    message: str


@dataclass(frozen=True)
class ProgressEvent:
    fraction: float


@dataclass(frozen=True)
class CueEvent:
    time: str
    text: str


@dataclass(frozen=True)
class LanguagesEvent:
    languages: Sequence[str]


Event = Union[InfoEvent, DebugEvent, ErrorEvent, ProgressEvent, CueEvent, LanguagesEvent]


class LogReporter:
    """Renders events through the logging module and a tqdm progress bar."""

    def __init__(self, show_progress: bool = True):
        self.show_progress = show_progress
        self._bar: Optional[tqdm] = None

    def report(self, event: Event) -> None:
        if isinstance(event, ProgressEvent):
            self._progress(event.fraction)
        elif isinstance(event, CueEvent):
            logger.info(f"Frame at {event.time}: {event.text}")
        elif isinstance(event, InfoEvent):
            logger.info(event.message)
        elif isinstance(event, DebugEvent):
            logger.debug(event.message)
        elif isinstance(event, ErrorEvent):
            logger.error(event.message)
        elif isinstance(event, LanguagesEvent):
            for language in event.languages:
                print(language)
        else:
            raise TypeError(f"Unsupported event: {event!r}")

    def _progress(self, fraction: float) -> None:
        if not self.show_progress:
            return
        if self._bar is None:
            self._bar = tqdm(total=100, unit="%", desc="Extracting", bar_format="{l_bar}{bar}| {n:.0f}/{total:.0f}%")
        self._bar.n = round(fraction * 100, 1)
        self._bar.refresh()
        if fraction >= 1.0:
            self.close()

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None


class JsonReporter:
    """Writes each event as a single JSON line."""

    def __init__(self, stream: Optional[IO[str]] = None):
        self.stream = stream

    def report(self, event: Event) -> None:
        if isinstance(event, ProgressEvent):
            payload = {"type": "progress", "progress": event.fraction}
        elif isinstance(event, CueEvent):
            payload = {"type": "cue", "time": event.time, "text": event.text}
        elif isinstance(event, InfoEvent):
            payload = {"type": "info", "message": event.message}
        elif isinstance(event, DebugEvent):
            payload = {"type": "debug", "message": event.message}
        elif isinstance(event, ErrorEvent):
            payload = {"type": "error", "message": event.message}
        elif isinstance(event, LanguagesEvent):
            payload = {"type": "languages", "languages": list(event.languages)}
        else:
            raise TypeError(f"Unsupported event: {event!r}")
        stream = self.stream or sys.stdout
        stream.write(json.dumps(payload, ensure_ascii=False) + "\n")
        stream.flush()

    def close(self) -> None:
        pass


class NullReporter:
    """Discards every event."""

    def report(self, event: Event) -> None:
        pass

    def close(self) -> None:
        pass
