"""Data models for OCRSub."""

import math
from dataclasses import dataclass, field
from fractions import Fraction
from functools import total_ordering
from typing import List, Optional, Sequence, Tuple, Union

from .exceptions import ConfigurationError

DEFAULT_TIMESCALE = 600 # Ticks per second used for interval arithmetic


@total_ordering
@dataclass(frozen=True, eq=False)
class Time:
    """
    A point or span on the video timeline stored as value/scale seconds.

    Arithmetic stays exact, so stepping through a long video one interval
    at a time never accumulates floating-point error.
    """
    value: int
    scale: int = DEFAULT_TIMESCALE

    def __post_init__(self):
        if self.scale <= 0:
            raise ValueError(f"Time scale must be positive, got {self.scale}")

    @classmethod
    def from_seconds(cls, seconds: float, scale: int = DEFAULT_TIMESCALE) -> "Time":
        """Builds a Time by rounding `seconds` to the nearest tick of `scale`."""
        return cls(int(round(seconds * scale)), scale)

    @classmethod
    def zero(cls, scale: int = DEFAULT_TIMESCALE) -> "Time":
        return cls(0, scale)

    @staticmethod
    def min(a: "Time", b: "Time") -> "Time":
        return a if a <= b else b

    def as_fraction(self) -> Fraction:
        return Fraction(self.value, self.scale)

    def to_seconds(self) -> float:
        return self.value / self.scale

    def to_hmsms(self) -> Tuple[int, int, int, int]:
        """
        Splits the time into (hours, minutes, seconds, milliseconds).

        Milliseconds are rounded half up; a rounded value of 1000 is carried
        into the seconds field.
        """
        exact = self.as_fraction()
        total_seconds = math.floor(exact)
        milliseconds = math.floor((exact - total_seconds) * 1000 + Fraction(1, 2))
        if milliseconds == 1000:
            total_seconds += 1
            milliseconds = 0
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return hours, minutes, seconds, milliseconds

    def _common(self, other: "Time") -> Tuple[int, int, int]:
        if self.scale == other.scale:
            return self.value, other.value, self.scale
        scale = self.scale * other.scale // math.gcd(self.scale, other.scale)
        return (self.value * (scale // self.scale),
                other.value * (scale // other.scale),
                scale)

    def __add__(self, other: "Time") -> "Time":
        if not isinstance(other, Time):
            return NotImplemented
        a, b, scale = self._common(other)
        return Time(a + b, scale)

    def __sub__(self, other: "Time") -> "Time":
        if not isinstance(other, Time):
            return NotImplemented
        a, b, scale = self._common(other)
        return Time(a - b, scale)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Time):
            return NotImplemented
        return self.as_fraction() == other.as_fraction()

    def __lt__(self, other: "Time") -> bool:
        if not isinstance(other, Time):
            return NotImplemented
        return self.as_fraction() < other.as_fraction()

    def __hash__(self) -> int:
        return hash(self.as_fraction())

    def __repr__(self) -> str:
        return f"Time({self.value}/{self.scale}s)"


def parse_interval(interval: Union[float, str, Time]) -> Time:
    """
    Converts a sampling interval to a positive Time at the default scale.

    Raises:
        ConfigurationError: If the interval is not a finite number of seconds
                            or rounds to zero ticks.
    """
    if isinstance(interval, Time):
        step = interval
    else:
        try:
            step = Time.from_seconds(float(interval), DEFAULT_TIMESCALE)
        except (TypeError, ValueError, OverflowError) as e:
            raise ConfigurationError(
                f"Interval must be a finite number of seconds, got {interval!r}"
            ) from e
    if step <= Time.zero():
        raise ConfigurationError(
            f"Interval must be at least 1/{DEFAULT_TIMESCALE} of a second, got {interval!r}"
        )
    return step


@dataclass(frozen=True)
class Sample:
    """One OCR observation of the frame shown at `time`."""
    time: Time
    text: str


@dataclass
class Subtitle:
    """A timed chunk of recognised text, either a raw candidate or a merged cue."""
    index: int
    start_time: Time
    end_time: Time
    text: str

    @property
    def duration(self) -> Time:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class Region:
    """
    Normalised region of interest, (0,0) being the BOTTOM-LEFT corner of the frame.

    The values are passed through to the recognizer as given.
    """
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_values(cls, values: Sequence[Union[float, str]]) -> "Region":
        """Builds a Region from exactly four numbers: x y width height."""
        if len(values) != 4:
            raise ConfigurationError(
                f"ROI must be four numbers: x y width height (got {len(values)})"
            )
        try:
            x, y, width, height = (float(v) for v in values)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"ROI values must be numbers: {values}") from e
        return cls(x, y, width, height)

    def describe(self) -> str:
        return f"x={self.x}, y={self.y}, width={self.width}, height={self.height}"


@dataclass
class ExtractionResult:
    """Outcome of one extraction run."""
    video_duration: Time
    cues: List[Subtitle] = field(default_factory=list)
    output_path: Optional[str] = None
    written: bool = False
    samples_taken: int = 0
    failed_samples: int = 0
