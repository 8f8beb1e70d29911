"""Command-Line Interface handler for OCRSub."""

import argparse
import logging
import sys
from typing import List, Optional

from tqdm.contrib.logging import logging_redirect_tqdm

from .config_loader import ConfigLoader, validate_config
from .log_setup import setup_logging
from .frame_grabber import FFmpegFrameGrabber
from .recognizer import ENGINES, get_recognizer
from .subtitle_generator import SubtitleExtractor
from .models import Region
from .reporting import JsonReporter, LanguagesEvent, LogReporter
from .exceptions import OCRSubError, ConfigurationError

logger = logging.getLogger(__name__) # Get logger for this module

class CLIHandler:
    """Parses arguments and orchestrates the OCRSub process."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Creates the argument parser for the CLI."""
        parser = argparse.ArgumentParser(
            description="OCRSub: Extract burned-in subtitles from a video into an SRT file.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter # Show defaults in help
        )
        parser.add_argument(
            "video",
            nargs="?",
            help="Path to the input video file."
        )
        parser.add_argument(
            "-i", "--interval",
            type=float,
            default=None, # Default taken from config
            help="Frame sampling interval in seconds (config default: 1.0)."
        )
        parser.add_argument(
            "-o", "--output",
            default=None,
            help="Output SRT file path. Defaults to <video>.srt in the current directory."
        )
        parser.add_argument(
            "--roi",
            nargs=4,
            type=float,
            metavar=("X", "Y", "WIDTH", "HEIGHT"),
            default=None,
            help="Region of interest, normalized 0.0-1.0, (0,0) being the BOTTOM-LEFT corner."
        )
        parser.add_argument(
            "-l", "--language",
            default=None,
            help="Recognition language hint passed to the OCR engine."
        )
        parser.add_argument(
            "--engine",
            default=None, # Default taken from config
            choices=ENGINES,
            help="OCR engine (config default: auto)."
        )
        parser.add_argument(
            "--list-languages",
            action="store_true",
            help="List the languages supported by the OCR engine and exit."
        )
        parser.add_argument(
            "--json",
            action="store_true",
            help="Emit progress, cues and messages as JSON lines on stdout."
        )
        parser.add_argument(
            "-c", "--config",
            default=None,
            help="Path to an optional configuration YAML file."
        )
        parser.add_argument(
            "--log-level",
            default="INFO",
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            help="Set the logging level for console and file output."
        )
        return parser

    def _apply_overrides(self, config: dict, args: argparse.Namespace) -> dict:
        if args.interval is not None:
            logger.info(f"Overriding interval_seconds from config with CLI argument: {args.interval}")
            config['interval_seconds'] = args.interval
        if args.language:
            config['language'] = args.language
        if args.engine:
            config['ocr_engine'] = args.engine
        return config

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Parses arguments, sets up logging, loads config, and runs the extractor."""
        args = self.parser.parse_args(argv)
        if not args.video and not args.list_languages:
            self.parser.error("the video path is required unless --list-languages is given")

        # --- Setup Logging ---
        log_level = getattr(logging, args.log_level.upper(), logging.INFO)
        # JSON mode keeps stdout for events only
        log_stream = sys.stderr if args.json else sys.stdout
        setup_logging(log_level=log_level, log_dir=None, stream=log_stream)

        # --- Load Configuration ---
        try:
            config = ConfigLoader().load_config(args.config)
            config = self._apply_overrides(config, args)
            validate_config(config)
        except (ConfigurationError, FileNotFoundError) as e:
            logger.critical(f"Invalid configuration: {e}")
            sys.exit(1)

        # --- Re-configure Logging with settings from Config ---
        setup_logging(
            log_level=log_level,
            log_dir=config.get('log_dir'),
            log_file=config.get('log_file', 'ocrsub.log'),
            stream=log_stream,
        )

        reporter = JsonReporter() if args.json else LogReporter()

        try:
            recognizer = get_recognizer(config['ocr_engine'], default_language=config.get('language'))

            if args.list_languages:
                reporter.report(LanguagesEvent(recognizer.supported_languages()))
                sys.exit(0)

            roi = Region.from_values(args.roi) if args.roi is not None else None
            extractor = SubtitleExtractor(
                frame_grabber=FFmpegFrameGrabber(
                    ffmpeg_path=config.get('ffmpeg_path'),
                    ffprobe_path=config.get('ffprobe_path'),
                ),
                recognizer=recognizer,
                interval_seconds=float(config['interval_seconds']),
                roi=roi,
                language=config.get('language'),
                reporter=reporter,
            )

            with logging_redirect_tqdm():
                result = extractor.extract(args.video, args.output)

            if result.cues and not result.written:
                sys.exit(1)
            logger.info("Subtitle extraction completed successfully")
            sys.exit(0)

        except OCRSubError as e:
             logger.error(f"An OCRSub error occurred: {e}")
             sys.exit(1)
        except KeyboardInterrupt:
             logger.warning("Process interrupted by user (Ctrl+C). No subtitle file was written.")
             sys.exit(1)
        except Exception as e:
             logger.critical(f"An unexpected critical error occurred at the top level: {e}", exc_info=True)
             sys.exit(2) # Use a different exit code for unexpected crashes
        finally:
            reporter.close()


def main() -> None:
    """Console script entry point."""
    CLIHandler().run()
