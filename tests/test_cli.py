import json
from unittest.mock import patch

import pytest

from ocrsub.cli import CLIHandler
from ocrsub.exceptions import ConfigurationError
from ocrsub.models import ExtractionResult, Region, Time

from conftest import FakeGrabber, FakeRecognizer, seconds


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep the CLI from reconfiguring the root logger or writing log files."""
    with patch("ocrsub.cli.setup_logging") as mock_setup:
        yield mock_setup


@pytest.fixture
def fakes():
    """Replaces ffmpeg and OCR with in-memory fakes; returns the recognizer."""
    recognizer = FakeRecognizer(["Hello", "Hello world", ""])
    with (
        patch("ocrsub.cli.get_recognizer", return_value=recognizer) as mock_get,
        patch("ocrsub.cli.FFmpegFrameGrabber", return_value=FakeGrabber(seconds(3.0))),
    ):
        recognizer.factory = mock_get
        yield recognizer


def run(argv):
    with pytest.raises(SystemExit) as excinfo:
        CLIHandler().run(argv)
    return excinfo.value.code


def test_extracts_subtitles_to_output(tmp_path, video_file, fakes):
    output = tmp_path / "subs.srt"

    code = run([str(video_file), "--output", str(output)])

    assert code == 0
    assert output.read_text(encoding="utf-8") == "1\n00:00:00,100 --> 00:00:02,100\nHello world\n\n"


def test_interval_and_language_are_applied(tmp_path, video_file, fakes):
    output = tmp_path / "subs.srt"

    code = run([str(video_file), "-o", str(output), "--interval", "0.5", "--language", "korean"])

    assert code == 0
    assert len(fakes.calls) == 6
    assert all(call[2] == "korean" for call in fakes.calls)
    fakes.factory.assert_called_once_with("auto", default_language="korean")


def test_roi_with_wrong_arity_is_a_usage_error(video_file, fakes):
    assert run([str(video_file), "--roi", "0", "0", "1"]) == 2
    assert fakes.calls == []


def test_roi_values_are_passed_through_unchecked(video_file):
    with (
        patch("ocrsub.cli.get_recognizer", return_value=FakeRecognizer()),
        patch("ocrsub.cli.FFmpegFrameGrabber"),
        patch("ocrsub.cli.SubtitleExtractor") as MockExtractor,
    ):
        MockExtractor.return_value.extract.return_value = ExtractionResult(video_duration=Time(5, 1))

        code = run([str(video_file), "--roi", "0", "0", "1", "2"])

    assert code == 0
    assert MockExtractor.call_args.kwargs["roi"] == Region(0.0, 0.0, 1.0, 2.0)


def test_video_is_required_without_list_languages():
    assert run([]) == 2


def test_list_languages_skips_extraction(capsys):
    with (
        patch("ocrsub.cli.get_recognizer", return_value=FakeRecognizer(languages=["en", "japan"])),
        patch("ocrsub.cli.SubtitleExtractor") as MockExtractor,
    ):
        code = run(["--list-languages"])

    assert code == 0
    assert capsys.readouterr().out == "en\njapan\n"
    MockExtractor.assert_not_called()


def test_list_languages_as_json(capsys):
    with patch("ocrsub.cli.get_recognizer", return_value=FakeRecognizer(languages=["en"])):
        code = run(["--list-languages", "--json"])

    assert code == 0
    assert json.loads(capsys.readouterr().out) == {"type": "languages", "languages": ["en"]}


def test_json_mode_emits_only_json_on_stdout(tmp_path, video_file, fakes, capsys):
    code = run([str(video_file), "-o", str(tmp_path / "subs.srt"), "--json"])

    assert code == 0
    events = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    types = {event["type"] for event in events}
    assert {"progress", "cue", "info"} <= types
    progress = [event["progress"] for event in events if event["type"] == "progress"]
    assert progress[-1] == 1.0


def test_non_positive_interval_exits_with_error(video_file, fakes):
    assert run([str(video_file), "--interval", "0"]) == 1
    assert fakes.calls == []


@pytest.mark.parametrize("interval", ["inf", "nan", "0.0001"])
def test_unusable_interval_exits_with_error(video_file, fakes, interval):
    assert run([str(video_file), "--interval", interval]) == 1
    assert fakes.calls == []


def test_missing_video_exits_with_error(tmp_path, fakes):
    assert run([str(tmp_path / "missing.mp4")]) == 1


def test_no_subtitles_is_success_without_file(tmp_path, video_file):
    output = tmp_path / "subs.srt"
    with (
        patch("ocrsub.cli.get_recognizer", return_value=FakeRecognizer([])),
        patch("ocrsub.cli.FFmpegFrameGrabber", return_value=FakeGrabber(seconds(3.0))),
    ):
        code = run([str(video_file), "-o", str(output)])

    assert code == 0
    assert not output.exists()


def test_unwritable_output_exits_with_error(tmp_path, video_file, fakes):
    assert run([str(video_file), "-o", str(tmp_path / "no-dir" / "subs.srt")]) == 1


def test_missing_ocr_engine_exits_with_error(video_file):
    with patch("ocrsub.cli.get_recognizer", side_effect=ConfigurationError("PaddleOCR not found")):
        assert run([str(video_file)]) == 1


def test_unexpected_errors_exit_with_code_two(video_file):
    with patch("ocrsub.cli.get_recognizer", side_effect=RuntimeError("boom")):
        assert run([str(video_file)]) == 2


def test_config_file_values_are_used(tmp_path, video_file, fakes):
    config = tmp_path / "config.yaml"
    config.write_text("interval_seconds: 0.5\nlog_dir: null\n", encoding="utf-8")

    code = run([str(video_file), "-o", str(tmp_path / "subs.srt"), "--config", str(config)])

    assert code == 0
    assert len(fakes.calls) == 6


def test_missing_config_file_exits_with_error(tmp_path, video_file, fakes):
    assert run([str(video_file), "--config", str(tmp_path / "missing.yaml")]) == 1
