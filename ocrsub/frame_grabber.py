"""Handles video probing and single-frame extraction using ffmpeg."""

import ffmpeg
import numpy as np
import os
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from fractions import Fraction
from typing import Dict, Optional

from .exceptions import FrameExtractionError, VideoLoadError
from .models import Time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VideoInfo:
    """What the grabber needs to know about a video before decoding frames."""
    duration: Time
    width: int
    height: int


class FrameGrabber(ABC):
    """Abstract base class for frame sources."""

    @abstractmethod
    def get_duration(self, video_path: str) -> Time:
        """
        Returns the duration of the video.

        Raises:
            VideoLoadError: If the video cannot be opened or has no duration.
        """
        pass

    @abstractmethod
    def grab_frame(self, video_path: str, time: Time) -> np.ndarray:
        """
        Decodes the frame shown at `time` as an HxWx3 BGR array.

        Raises:
            FrameExtractionError: If that frame cannot be decoded.
        """
        pass


def _parse_duration(value) -> Optional[Time]:
    try:
        exact = Fraction(str(value))
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    if exact <= 0:
        return None
    return Time(exact.numerator, exact.denominator)


def _rotation(stream: dict) -> int:
    rotate = stream.get('tags', {}).get('rotate')
    if rotate is None:
        for side_data in stream.get('side_data_list', []):
            if 'rotation' in side_data:
                rotate = side_data['rotation']
                break
    try:
        return int(float(rotate or 0))
    except (TypeError, ValueError):
        return 0


class FFmpegFrameGrabber(FrameGrabber):
    """Extracts frames from video files through the ffmpeg command line tools."""

    def __init__(self, ffmpeg_path: Optional[str] = None, ffprobe_path: Optional[str] = None):
        """
        Initializes the FFmpegFrameGrabber.

        Args:
            ffmpeg_path: Optional path to the ffmpeg executable.
                         If None, assumes ffmpeg is in the system PATH.
            ffprobe_path: Optional path to the ffprobe executable.
        """
        self.ffmpeg_cmd = ffmpeg_path or 'ffmpeg'
        self.ffprobe_cmd = ffprobe_path or 'ffprobe'
        self._info: Dict[str, VideoInfo] = {}
        logger.info(f"Using ffmpeg command: {self.ffmpeg_cmd}, ffprobe command: {self.ffprobe_cmd}")

    def probe(self, video_path: str) -> VideoInfo:
        """
        Reads duration and display geometry of the first video stream.

        Results are cached per path.

        Raises:
            VideoLoadError: If the file is missing, unreadable, has no video
                            stream or no usable duration.
        """
        if video_path in self._info:
            return self._info[video_path]

        if not os.path.exists(video_path):
            raise VideoLoadError(f"Input video file not found: {video_path}")

        try:
            probe = ffmpeg.probe(video_path, cmd=self.ffprobe_cmd)
        except ffmpeg.Error as e:
            stderr_output = e.stderr.decode('utf-8', errors='replace') if e.stderr else "No stderr output"
            logger.error(f"ffprobe failed for {video_path}: {stderr_output}")
            raise VideoLoadError(f"Could not open video {video_path}: {stderr_output}") from e
        except OSError as e:
            raise VideoLoadError(f"Could not run {self.ffprobe_cmd}: {e}") from e

        video_streams = [s for s in probe.get('streams', []) if s.get('codec_type') == 'video']
        if not video_streams:
            raise VideoLoadError(f"No video stream found in {video_path}")
        stream = video_streams[0]

        duration = _parse_duration(probe.get('format', {}).get('duration'))
        if duration is None:
            duration = _parse_duration(stream.get('duration'))
        if duration is None:
            raise VideoLoadError(f"Could not determine duration of {video_path}")

        try:
            width, height = int(stream['width']), int(stream['height'])
        except (KeyError, TypeError, ValueError) as e:
            raise VideoLoadError(f"Could not determine frame size of {video_path}") from e
        # ffmpeg applies the display rotation when decoding
        if abs(_rotation(stream)) % 180 == 90:
            width, height = height, width

        info = VideoInfo(duration=duration, width=width, height=height)
        logger.debug(f"Probed {video_path}: {info}")
        self._info[video_path] = info
        return info

    def get_duration(self, video_path: str) -> Time:
        return self.probe(video_path).duration

    def grab_frame(self, video_path: str, time: Time) -> np.ndarray:
        info = self.probe(video_path)
        frame_size = info.width * info.height * 3
        try:
            out, _ = (
                ffmpeg
                .input(video_path, ss=f"{time.to_seconds():.6f}")
                .output('pipe:', vframes=1, format='rawvideo', pix_fmt='bgr24')
                .run(cmd=self.ffmpeg_cmd, capture_stdout=True, capture_stderr=True)
            )
        except ffmpeg.Error as e:
            stderr_output = e.stderr.decode('utf-8', errors='replace') if e.stderr else "No stderr output"
            raise FrameExtractionError(f"ffmpeg failed at {time.to_seconds():.3f}s: {stderr_output}") from e

        if len(out) < frame_size:
            raise FrameExtractionError(
                f"No frame decoded at {time.to_seconds():.3f}s ({len(out)} of {frame_size} bytes)"
            )
        return np.frombuffer(out[:frame_size], np.uint8).reshape(info.height, info.width, 3)
