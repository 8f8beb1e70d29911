"""Shared fakes and fixtures.

The fakes stand in for the video and OCR collaborators so the pipeline
can be exercised without ffmpeg or an OCR engine installed.
"""

from pathlib import Path
import sys
from typing import List, Optional, Sequence

import numpy as np
import pytest

test_dir = Path(__file__).resolve().parent
project_root = test_dir.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from ocrsub.exceptions import VideoLoadError  # noqa: E402
from ocrsub.frame_grabber import FrameGrabber  # noqa: E402
from ocrsub.models import Region, Subtitle, Time  # noqa: E402
from ocrsub.recognizer import TextRecognizer  # noqa: E402
from ocrsub.sampling import SampleSource  # noqa: E402


def seconds(value: float) -> Time:
    return Time.from_seconds(value, 1000)


def make_subtitle(index: int, start: float, end: float, text: str) -> Subtitle:
    return Subtitle(index=index, start_time=seconds(start), end_time=seconds(end), text=text)


class ScriptedSource(SampleSource):
    """Returns the scripted texts in order, then empty strings."""

    def __init__(self, texts: Sequence[str], duration: Optional[Time] = None):
        self.texts = list(texts)
        self.duration = duration
        self.calls: List[tuple] = []

    def get_duration(self) -> Time:
        if self.duration is None:
            raise VideoLoadError("no duration")
        return self.duration

    def sample_at(self, time: Time, roi: Optional[Region] = None, language: Optional[str] = None) -> str:
        self.calls.append((time, roi, language))
        index = len(self.calls) - 1
        return self.texts[index] if index < len(self.texts) else ""


class FakeGrabber(FrameGrabber):
    """Fixed duration; raises the scripted error for the listed sample numbers."""

    def __init__(self, duration: Time, failures: Optional[dict] = None):
        self.duration = duration
        self.failures = failures or {}
        self.requested: List[Time] = []

    def get_duration(self, video_path: str) -> Time:
        return self.duration

    def grab_frame(self, video_path: str, time: Time) -> np.ndarray:
        self.requested.append(time)
        error = self.failures.get(len(self.requested))
        if error is not None:
            raise error
        return np.zeros((4, 6, 3), dtype=np.uint8)


class FakeRecognizer(TextRecognizer):
    """Returns the scripted texts in order, then empty strings."""

    def __init__(self, texts: Sequence[str] = (), languages: Sequence[str] = ("en", "korean")):
        self.texts = list(texts)
        self.languages = list(languages)
        self.calls: List[tuple] = []

    def recognize(self, image, roi=None, language=None) -> str:
        self.calls.append((image.shape, roi, language))
        index = len(self.calls) - 1
        return self.texts[index] if index < len(self.texts) else ""

    def supported_languages(self) -> List[str]:
        return list(self.languages)


class RecordingReporter:
    def __init__(self):
        self.events = []

    def report(self, event) -> None:
        self.events.append(event)

    def of_type(self, event_type):
        return [e for e in self.events if isinstance(e, event_type)]

    def close(self) -> None:
        pass


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def video_file(tmp_path):
    """An existing (empty) file standing in for a video."""
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"")
    return path
