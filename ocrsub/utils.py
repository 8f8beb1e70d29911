"""Utility functions for OCRSub."""

import os
import logging
from typing import Optional

from .exceptions import FileSystemError
from .models import Time

logger = logging.getLogger(__name__)

def ensure_dir_exists(dir_path: str) -> None:
    """
    Ensures that a directory exists. Creates it if it doesn't.

    Args:
        dir_path: The path to the directory.

    Raises:
        FileSystemError: If the directory cannot be created due to permissions
                         or if the path exists but is not a directory.
    """
    if not dir_path:
        raise ValueError("Directory path cannot be empty.")
    try:
        if not os.path.exists(dir_path):
            os.makedirs(dir_path)
            logger.info(f"Created directory: {dir_path}")
        elif not os.path.isdir(dir_path):
            raise FileSystemError(f"Path exists but is not a directory: {dir_path}")
    except OSError as e:
        logger.error(f"Error creating or accessing directory {dir_path}: {e}", exc_info=True)
        raise FileSystemError(f"Could not create or access directory {dir_path}: {e}") from e

def format_time_srt(time: Time) -> str:
    """
    Formats a Time into SRT time format HH:MM:SS,mmm.

    Args:
        time: Position on the video timeline.

    Returns:
        Formatted time string.
    """
    hrs, mins, secs, milliseconds = time.to_hmsms()
    return f"{hrs:02d}:{mins:02d}:{secs:02d},{milliseconds:03d}"

def format_time_display(time: Time) -> str:
    """Seconds with two decimals, as shown in per-frame log lines."""
    return f"{time.to_seconds():.2f}"

def default_output_path(video_path: str, output_dir: Optional[str] = None, extension: str = "srt") -> str:
    """`<video basename>.<extension>`, in `output_dir` or the current directory."""
    base_name = os.path.splitext(os.path.basename(video_path))[0]
    filename = f"{base_name}.{extension}"
    return os.path.join(output_dir, filename) if output_dir else filename
