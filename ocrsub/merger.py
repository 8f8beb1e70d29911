"""Collapses per-sample candidates into subtitle cues."""

import logging
from dataclasses import replace
from typing import List, Optional

from .models import Subtitle, Time

logger = logging.getLogger(__name__)

TAIL_TRIM = Time(10, 1000)


def continues(current: Subtitle, candidate: Subtitle) -> bool:
    """
    True when `candidate` shows the same subtitle as `current`.

    Text that grows at the end (OCR picking up more of a line as it settles)
    counts as the same subtitle. Unrelated lines sharing a prefix are
    indistinguishable from growth and get merged too.
    """
    return current.text == candidate.text or candidate.text.startswith(current.text)


def merge_candidates(candidates: List[Subtitle], video_duration: Time) -> List[Subtitle]:
    """
    Merges consecutive candidates showing the same subtitle.

    The merged cue keeps the first candidate's index and start time, ends
    where the last merged candidate ends (never past `video_duration`) and
    carries the longest text seen.

    Args:
        candidates: Time-ordered candidates.
        video_duration: Total length of the video.

    Returns:
        A new list of cues indexed 1..N. The input is not modified.
    """
    merged: List[Subtitle] = []
    current: Optional[Subtitle] = None

    for candidate in candidates:
        if current is None:
            current = replace(candidate, index=1)
        elif continues(current, candidate):
            text = candidate.text if len(candidate.text) > len(current.text) else current.text
            current = replace(
                current,
                end_time=Time.min(candidate.end_time, video_duration),
                text=text,
            )
        else:
            merged.append(current)
            current = replace(candidate, index=current.index + 1)

    if current is not None:
        merged.append(current)

    logger.debug(f"Merged {len(candidates)} candidates into {len(merged)} cues.")
    return merged


def adjust_tail(cues: List[Subtitle], video_duration: Time) -> List[Subtitle]:
    """
    Pulls the last cue's end back from the end of the video.

    A last cue ending at or after `video_duration` ends 10ms before it
    instead, or at its own start time if the trim would invert it.
    Earlier cues are returned unchanged.
    """
    if not cues:
        return []

    adjusted = list(cues)
    last = adjusted[-1]
    if last.end_time >= video_duration:
        end_time = video_duration - TAIL_TRIM
        if end_time <= last.start_time:
            end_time = last.start_time
        adjusted[-1] = replace(last, end_time=end_time)
    return adjusted
