"""Handles formatting merged cues into subtitle files (SRT)."""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from typing import List

from .models import Subtitle
from .exceptions import FormattingError
from .utils import format_time_srt

logger = logging.getLogger(__name__)

class SubtitleFormatter(ABC):
    """Abstract base class for subtitle formatters."""

    extension = ""  # file extension without the dot

    @abstractmethod
    def render(self, cues: List[Subtitle]) -> str:
        """Returns the full file contents for `cues`."""
        pass

    def format_subtitles(self, cues: List[Subtitle], output_path: str) -> None:
        """
        Formats the cues into a subtitle file.

        The file is written all at once: contents go to a temporary file next
        to `output_path` which then replaces it, so readers never observe a
        half-written file.

        Args:
            cues: The final, ordered cues.
            output_path: The path to save the formatted subtitle file.

        Raises:
            FormattingError: If there is nothing to write or writing fails.
        """
        if not cues:
            raise FormattingError("No subtitles to write.")

        content = self.render(cues)
        output_dir = os.path.dirname(os.path.abspath(output_path))
        temp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                'w', encoding='utf-8', dir=output_dir, prefix='.ocrsub-', suffix='.tmp', delete=False
            ) as f:
                temp_path = f.name
                f.write(content)
            os.replace(temp_path, output_path)
            temp_path = None
            logger.debug(f"Wrote {len(cues)} subtitle blocks to {output_path}")
        except OSError as e:
            logger.error(f"Failed to write subtitle file to {output_path}: {e}", exc_info=True)
            raise FormattingError(f"Could not write subtitle file {output_path}: {e}") from e
        finally:
            if temp_path and os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    logger.warning(f"Could not clean up temporary file: {temp_path}")


class SRTFormatter(SubtitleFormatter):
    """Formats subtitles into the SRT (SubRip Text) format."""

    extension = "srt"

    def render(self, cues: List[Subtitle]) -> str:
        """
        Renders cues as SRT blocks, numbered 1..N by position.

        The index carried on each cue is ignored; only list order counts.
        """
        blocks = []
        for number, cue in enumerate(cues, start=1):
            start_time_str = format_time_srt(cue.start_time)
            end_time_str = format_time_srt(cue.end_time)
            blocks.append(f"{number}\n{start_time_str} --> {end_time_str}\n{cue.text}\n\n")
        return "".join(blocks)
