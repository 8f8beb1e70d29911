from unittest.mock import patch

import ffmpeg
import numpy as np
import pytest

from ocrsub.exceptions import FrameExtractionError, VideoLoadError
from ocrsub.frame_grabber import FFmpegFrameGrabber
from ocrsub.models import Time


def probe_result(duration="5.005000", width=4, height=2, **stream_extra):
    stream = {"codec_type": "video", "width": width, "height": height}
    stream.update(stream_extra)
    fmt = {} if duration is None else {"duration": duration}
    return {"format": fmt, "streams": [{"codec_type": "audio"}, stream]}


def test_duration_is_parsed_exactly(video_file):
    with patch("ocrsub.frame_grabber.ffmpeg.probe", return_value=probe_result()) as mock_probe:
        grabber = FFmpegFrameGrabber(ffprobe_path="/opt/ffprobe")
        duration = grabber.get_duration(str(video_file))

    assert duration == Time(5005, 1000)
    mock_probe.assert_called_once_with(str(video_file), cmd="/opt/ffprobe")


def test_stream_duration_is_used_when_format_has_none(video_file):
    result = probe_result(duration=None)
    result["streams"][1]["duration"] = "12.5"
    with patch("ocrsub.frame_grabber.ffmpeg.probe", return_value=result):
        duration = FFmpegFrameGrabber().get_duration(str(video_file))

    assert duration == Time(25, 2)


@pytest.mark.parametrize("duration", [None, "N/A", "0", "-1"])
def test_unusable_duration_is_a_load_error(video_file, duration):
    with patch("ocrsub.frame_grabber.ffmpeg.probe", return_value=probe_result(duration=duration)):
        with pytest.raises(VideoLoadError):
            FFmpegFrameGrabber().get_duration(str(video_file))


def test_probe_failure_is_a_load_error(video_file):
    error = ffmpeg.Error("ffprobe", b"", b"Invalid data found when processing input")
    with patch("ocrsub.frame_grabber.ffmpeg.probe", side_effect=error):
        with pytest.raises(VideoLoadError, match="Invalid data"):
            FFmpegFrameGrabber().get_duration(str(video_file))


def test_missing_file_is_a_load_error(tmp_path):
    with patch("ocrsub.frame_grabber.ffmpeg.probe") as mock_probe:
        with pytest.raises(VideoLoadError):
            FFmpegFrameGrabber().get_duration(str(tmp_path / "missing.mp4"))
    mock_probe.assert_not_called()


def test_audio_only_file_is_a_load_error(video_file):
    with patch("ocrsub.frame_grabber.ffmpeg.probe", return_value={"format": {"duration": "3.0"}, "streams": [{"codec_type": "audio"}]}):
        with pytest.raises(VideoLoadError):
            FFmpegFrameGrabber().get_duration(str(video_file))


def test_probe_is_cached_per_video(video_file):
    with patch("ocrsub.frame_grabber.ffmpeg.probe", return_value=probe_result()) as mock_probe:
        grabber = FFmpegFrameGrabber()
        grabber.get_duration(str(video_file))
        grabber.probe(str(video_file))
    assert mock_probe.call_count == 1


def test_rotated_video_swaps_frame_size(video_file):
    with patch("ocrsub.frame_grabber.ffmpeg.probe", return_value=probe_result(tags={"rotate": "90"})):
        info = FFmpegFrameGrabber().probe(str(video_file))
    assert (info.width, info.height) == (2, 4)


def test_rotation_from_side_data(video_file):
    result = probe_result(side_data_list=[{"side_data_type": "Display Matrix", "rotation": -90}])
    with patch("ocrsub.frame_grabber.ffmpeg.probe", return_value=result):
        info = FFmpegFrameGrabber().probe(str(video_file))
    assert (info.width, info.height) == (2, 4)


def test_grab_frame_decodes_raw_bgr(video_file):
    raw = bytes(range(4 * 2 * 3))
    with (
        patch("ocrsub.frame_grabber.ffmpeg.probe", return_value=probe_result()),
        patch("ocrsub.frame_grabber.ffmpeg.input") as mock_input,
    ):
        mock_input.return_value.output.return_value.run.return_value = (raw, b"")
        frame = FFmpegFrameGrabber(ffmpeg_path="/opt/ffmpeg").grab_frame(str(video_file), Time(660, 600))

    assert frame.shape == (2, 4, 3)
    assert frame.dtype == np.uint8
    assert frame[0, 1].tolist() == [3, 4, 5]
    mock_input.assert_called_once_with(str(video_file), ss="1.100000")
    mock_input.return_value.output.assert_called_once_with(
        "pipe:", vframes=1, format="rawvideo", pix_fmt="bgr24"
    )
    mock_input.return_value.output.return_value.run.assert_called_once_with(
        cmd="/opt/ffmpeg", capture_stdout=True, capture_stderr=True
    )


def test_grab_frame_without_output_fails(video_file):
    with (
        patch("ocrsub.frame_grabber.ffmpeg.probe", return_value=probe_result()),
        patch("ocrsub.frame_grabber.ffmpeg.input") as mock_input,
    ):
        mock_input.return_value.output.return_value.run.return_value = (b"", b"")
        with pytest.raises(FrameExtractionError):
            FFmpegFrameGrabber().grab_frame(str(video_file), Time(1, 1))


def test_grab_frame_ffmpeg_error_fails(video_file):
    error = ffmpeg.Error("ffmpeg", b"", b"seek failed")
    with (
        patch("ocrsub.frame_grabber.ffmpeg.probe", return_value=probe_result()),
        patch("ocrsub.frame_grabber.ffmpeg.input") as mock_input,
    ):
        mock_input.return_value.output.return_value.run.side_effect = error
        with pytest.raises(FrameExtractionError, match="seek failed"):
            FFmpegFrameGrabber().grab_frame(str(video_file), Time(1, 1))
