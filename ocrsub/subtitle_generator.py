"""Orchestrates the subtitle extraction pipeline."""

import logging
import os
import time
from typing import Optional

from .frame_grabber import FrameGrabber
from .recognizer import TextRecognizer
from .sampling import VideoSampleSource, collect_candidates
from .merger import merge_candidates, adjust_tail
from .subtitle_formatter import SubtitleFormatter, SRTFormatter
from .models import ExtractionResult, Region, Time, parse_interval
from .exceptions import FormattingError, VideoLoadError
from .reporting import ErrorEvent, InfoEvent, NullReporter
from .utils import default_output_path

logger = logging.getLogger(__name__)

class SubtitleExtractor:
    """
    Manages the end-to-end process of extracting burned-in subtitles from a video file.
    """

    def __init__(
        self,
        frame_grabber: FrameGrabber,
        recognizer: TextRecognizer,
        interval_seconds: float = 1.0,
        roi: Optional[Region] = None,
        language: Optional[str] = None,
        reporter=None,
        subtitle_formatter: Optional[SubtitleFormatter] = None,
    ):
        """
        Initializes the SubtitleExtractor.

        Args:
            frame_grabber: Decodes frames from the video.
            recognizer: Runs OCR on decoded frames.
            interval_seconds: Seconds between two samples.
            roi: Optional region of interest passed to the recognizer.
            language: Optional recognition language hint.
            reporter: Receives progress, cue and status events.
            subtitle_formatter: Output format, SRT by default.

        Raises:
            ConfigurationError: If the interval is not a finite, positive number of seconds.
        """
        self.interval = parse_interval(interval_seconds)
        self.frame_grabber = frame_grabber
        self.recognizer = recognizer
        self.interval_seconds = interval_seconds
        self.roi = roi
        self.language = language
        self.reporter = reporter or NullReporter()
        self.subtitle_formatter = subtitle_formatter or SRTFormatter()

    def _describe_run(self, video_path: str, duration: Time, output_path: str) -> None:
        self.reporter.report(InfoEvent(f"Starting subtitle extraction from {os.path.basename(video_path)}"))
        self.reporter.report(InfoEvent(f"Video duration: {duration.to_seconds()} seconds"))
        self.reporter.report(InfoEvent(f"Extracting frames every {self.interval_seconds} seconds"))
        self.reporter.report(InfoEvent(f"Output: {output_path}"))
        if self.roi is not None:
            self.reporter.report(InfoEvent(
                f"Region of interest: {self.roi.describe()} "
                "(0,0 is the BOTTOM-LEFT corner, 1,1 the TOP-RIGHT corner)"
            ))
        else:
            self.reporter.report(InfoEvent("Region of interest: Full frame"))

    def extract(self, video_path: str, output_path: Optional[str] = None) -> ExtractionResult:
        """
        Executes the full extraction pipeline for a single video.

        Args:
            video_path: Path to the input video file.
            output_path: Where to write the subtitles; `<video basename>.srt`
                         in the current directory when None.

        Returns:
            The extraction result. `written` is False when no subtitles were
            found or the file could not be written.

        Raises:
            VideoLoadError: If the video cannot be opened or has no duration.
            ConfigurationError: If the OCR engine cannot be set up.
        """
        start = time.time()
        if not os.path.isfile(video_path):
            raise VideoLoadError(f"Input video file not found or is not a file: {video_path}")
        output_path = output_path or default_output_path(video_path, extension=self.subtitle_formatter.extension)

        source = VideoSampleSource(video_path, self.frame_grabber, self.recognizer)
        duration = source.get_duration()
        self._describe_run(video_path, duration, output_path)

        candidates = collect_candidates(
            source,
            duration,
            self.interval,
            roi=self.roi,
            language=self.language,
            reporter=self.reporter,
        )
        cues = adjust_tail(merge_candidates(candidates, duration), duration)

        result = ExtractionResult(
            video_duration=duration,
            cues=cues,
            samples_taken=source.samples_taken,
            failed_samples=source.failed_samples,
        )
        if source.failed_samples:
            logger.warning(
                f"{source.failed_samples} of {source.samples_taken} samples could not be read and were treated as empty."
            )

        if not cues:
            self.reporter.report(InfoEvent("No subtitles were detected in the video"))
            return result

        try:
            self.subtitle_formatter.format_subtitles(cues, output_path)
        except FormattingError as e:
            self.reporter.report(ErrorEvent(f"Error writing subtitle file: {e}"))
            return result

        result.output_path = output_path
        result.written = True
        self.reporter.report(InfoEvent(f"Successfully wrote {len(cues)} subtitles to {output_path}"))
        logger.info(f"Extraction completed in {time.time() - start:.2f} seconds")
        return result
