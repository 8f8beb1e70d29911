"""Walks the video timeline and turns OCR samples into subtitle candidates."""

import logging
from abc import ABC, abstractmethod
from typing import Iterator, List, Optional, Union

from .exceptions import FrameExtractionError, RecognitionError
from .frame_grabber import FrameGrabber
from .models import Time, Sample, Subtitle, Region, DEFAULT_TIMESCALE, parse_interval
from .recognizer import TextRecognizer
from .reporting import CueEvent, DebugEvent, ProgressEvent, NullReporter
from .utils import format_time_display

logger = logging.getLogger(__name__)

# First sample is taken 0.1s in.
DEFAULT_START_OFFSET = Time(60, DEFAULT_TIMESCALE)


class SampleSource(ABC):
    """Abstract source of (time, recognised text) observations."""

    @abstractmethod
    def get_duration(self) -> Time:
        """
        Returns the duration of the underlying video.

        Raises:
            VideoLoadError: If the duration cannot be determined.
        """
        pass

    @abstractmethod
    def sample_at(self, time: Time, roi: Optional[Region] = None, language: Optional[str] = None) -> str:
        """
        Returns the text visible at `time`, or "" when nothing was recognised.

        Implementations must not raise for a single unreadable frame.
        """
        pass


class VideoSampleSource(SampleSource):
    """Samples a video file by grabbing a frame and running OCR on it."""

    def __init__(self, video_path: str, frame_grabber: FrameGrabber, recognizer: TextRecognizer):
        self.video_path = video_path
        self.frame_grabber = frame_grabber
        self.recognizer = recognizer
        self.samples_taken = 0
        self.failed_samples = 0

    def get_duration(self) -> Time:
        return self.frame_grabber.get_duration(self.video_path)

    def sample_at(self, time: Time, roi: Optional[Region] = None, language: Optional[str] = None) -> str:
        self.samples_taken += 1
        try:
            frame = self.frame_grabber.grab_frame(self.video_path, time)
            return self.recognizer.recognize(frame, roi=roi, language=language)
        except (FrameExtractionError, RecognitionError) as e:
            self.failed_samples += 1
            logger.debug(f"Sample at {format_time_display(time)}s failed, treating as empty: {e}")
            return ""


def sample_times(video_duration: Time, interval: Union[float, Time],
                 start: Time = DEFAULT_START_OFFSET) -> Iterator[Time]:
    """Yields start, start + interval, ... while strictly before `video_duration`."""
    step = parse_interval(interval)
    current = start
    while current < video_duration:
        yield current
        current = current + step


def collect_candidates(
    source: SampleSource,
    video_duration: Time,
    interval: Union[float, Time],
    roi: Optional[Region] = None,
    language: Optional[str] = None,
    reporter=None,
    start_offset: Time = DEFAULT_START_OFFSET,
) -> List[Subtitle]:
    """
    Samples the video once per interval and returns one candidate per non-empty sample.

    Args:
        source: Where samples come from.
        video_duration: Total length of the video; candidates never end past it.
        interval: Spacing between samples, in seconds or as a Time.
        roi: Optional region of interest forwarded to the source.
        language: Optional recognition language hint forwarded to the source.
        reporter: Receives one ProgressEvent per step and a CueEvent per candidate.
        start_offset: Time of the first sample.

    Returns:
        Candidates in time order, indexed 1..N.

    Raises:
        ConfigurationError: If the interval is not a positive number.
    """
    step = parse_interval(interval)
    reporter = reporter or NullReporter()
    total = video_duration.as_fraction()
    candidates: List[Subtitle] = []
    steps = 0

    for current in sample_times(video_duration, step, start_offset):
        steps += 1
        sample = Sample(current, source.sample_at(current, roi, language))

        next_time = current + step
        fraction = min(next_time.as_fraction() / total, 1) if total > 0 else 1
        reporter.report(ProgressEvent(float(fraction)))

        if not sample.text:
            reporter.report(DebugEvent(f"No text at {format_time_display(sample.time)}s"))
            continue

        candidates.append(Subtitle(
            index=len(candidates) + 1,
            start_time=sample.time,
            end_time=Time.min(next_time, video_duration),
            text=sample.text,
        ))
        reporter.report(CueEvent(format_time_display(sample.time), sample.text))

    if steps == 0:
        reporter.report(ProgressEvent(1.0))

    logger.info(f"Sampled {steps} frames, {len(candidates)} contained text.")
    return candidates
