import argparse
import os
import sys
from typing import Callable, Dict, List, Optional

import yaml

from logger import setup_logger
from classifier import classify, DEFAULT_COVER_ART_CODECS
from planner import Planner, plan_with_confirmation, MAX_OUTPUT_STREAMS
from converter import Converter
from utils.ffprobe_wrapper import FFprobeWrapper
from debug_log import LastRun, read_last_run
from errors import ConfirmationDeclined, FFmuxError, ERROR_REFERENCE
from models.media_info import ConfirmationRequired, FileStreamSet

logger = setup_logger()

DEFAULT_CONFIG_PATH = "config.yaml"
DEFAULT_CONFIG = {
    "ffmpeg_path": None,
    "ffprobe_path": None,
    "debug_dir": "~",
    "max_output_streams": MAX_OUTPUT_STREAMS,
    "cover_art_codecs": list(DEFAULT_COVER_ART_CODECS),
    "log_file": None,
    "log_level": "INFO",
}

EXAMPLES = """\
examples:
  ffmux Failsafe.mp4 failsafe_commentary.m4a Failsafe_with_commentary.mp4
      Combine the streams of "Failsafe.mp4" with the audio stream of
      "failsafe_commentary.m4a" into "Failsafe_with_commentary.mp4".
  ffmux --info failsafe_commentary.m4a
      Display stream information for "failsafe_commentary.m4a".
"""


def load_config(path: Optional[str] = None) -> Dict:
    config = dict(DEFAULT_CONFIG)
    if path is None:
        if not os.path.exists(DEFAULT_CONFIG_PATH):
            return config
        path = DEFAULT_CONFIG_PATH
    elif not os.path.exists(path):
        logger.critical(f"Config file not found: {path}")
        sys.exit(1)
    with open(path, "r", encoding="utf-8") as f:
        config.update(yaml.safe_load(f) or {})
    return config


def ask_confirmation(request: ConfirmationRequired, read: Callable[[str], str] = input) -> bool:
    """Anything but n/N continues; end of input declines."""
    print(f"WARNING: {request.message}")
    print(request.default_action)
    try:
        answer = read("Continue? (y/n): ")
    except EOFError:
        return False
    return answer.strip()[:1] not in ("n", "N")


def accept_confirmation(request: ConfirmationRequired) -> bool:
    """--yes: surface the warning, then continue."""
    logger.warning(f"{request.message} {request.default_action}")
    return True


class FFmuxApp:
    def __init__(self, config: Optional[Dict] = None, prober: Optional[FFprobeWrapper] = None,
                 converter: Optional[Converter] = None,
                 confirm: Callable[[ConfirmationRequired], bool] = ask_confirmation):
        self.config = {**DEFAULT_CONFIG, **(config or {})}
        self.planner = Planner(self.config["max_output_streams"])
        self.confirm = confirm
        self._prober = prober
        self._converter = converter

    # ffmpeg/ffprobe are only looked up by the modes that need them
    @property
    def prober(self) -> FFprobeWrapper:
        if self._prober is None:
            self._prober = FFprobeWrapper(self.config["ffprobe_path"])
        return self._prober

    @property
    def converter(self) -> Converter:
        if self._converter is None:
            self._converter = Converter(self.config["ffmpeg_path"])
        return self._converter

    def probe(self, path: str, file_ordinal: int = 0) -> FileStreamSet:
        streams = self.prober.get_streams(path, file_ordinal)
        return classify(streams, path, self.config["cover_art_codecs"])

    def info(self, path: str) -> int:
        if not os.path.isfile(path):
            logger.error(f"ERROR: media file ({path}) not found, aborting ...")
            return 1
        try:
            info = self.probe(path)
        except FFmuxError as e:
            logger.error(f"ERROR: {e}")
            return 1
        if info.video_count + info.cover_art_count + info.audio_count == 0:
            logger.error(f"ERROR: File ({path}) does not contain video/audio, aborting ...")
            return 1

        print("Stream information ...")
        for stream in info.streams:
            print(f"  {stream.describe()}")
        print(f"  video={info.video_count} audio={info.audio_count} subtitle={info.subtitle_count} "
              f"data={info.auxiliary_count} cover_art={info.cover_art_count}")
        return 0

    def show_debug(self) -> int:
        print(read_last_run(self.config["debug_dir"]))
        return 0

    @staticmethod
    def show_errors() -> int:
        print("Error reference ...")
        for error, cause in ERROR_REFERENCE:
            print(f"  {error.__name__}")
            print(f"      cause:  {cause}")
            print(f"      remedy: {error.remediation}")
        return 0

    def mux(self, primary_path: str, secondary_path: str, target_path: str,
            overwrite: bool = False) -> int:
        for label, path in (("source video", primary_path), ("source audio", secondary_path)):
            if not os.path.isfile(path):
                logger.error(f"ERROR: {label} file ({path}) not found, aborting ...")
                return 1
        if os.path.exists(target_path) and not overwrite:
            logger.error(f"ERROR: target file ({target_path}) already exists, use --overwrite to replace it")
            return 1

        primary_ext = os.path.splitext(primary_path)[1].lower()
        target_ext = os.path.splitext(target_path)[1].lower()
        if primary_ext != target_ext:
            logger.warning(f"Target type ({target_ext or 'none'}) differs from source video type "
                           f"({primary_ext or 'none'}); the container may reject some streams")

        last_run = LastRun(primary_path, secondary_path, target_path)
        try:
            return self._mux(primary_path, secondary_path, target_path, overwrite, last_run)
        except ConfirmationDeclined as e:
            print("\nProgram aborted.")
            last_run.finish("declined", str(e))
            return 0
        except FFmuxError as e:
            logger.error(f"ERROR: {e}")
            last_run.finish("error", str(e))
            return 1
        finally:
            last_run.save(self.config["debug_dir"])

    def _mux(self, primary_path: str, secondary_path: str, target_path: str,
             overwrite: bool, last_run: LastRun) -> int:
        primary = self.probe(primary_path, 0)
        last_run.streams("primary", list(primary.streams))
        secondary = self.probe(secondary_path, 1)
        last_run.streams("secondary", list(secondary.streams))

        plan = plan_with_confirmation(self.planner, primary, secondary, self.confirm)
        if plan.acknowledged:
            logger.info("Continuing Muxing ...")

        rendered = self.converter.render(
            self.converter.build_command(plan, primary_path, secondary_path, target_path))
        logger.info(f"--------> {rendered}")
        last_run.command(rendered)

        logger.info("Preparing to mux media files ...")
        if not self.converter.mux(plan, primary_path, secondary_path, target_path, overwrite):
            logger.error("Problems encountered, check/debug (ffmux --debug) & retry.")
            last_run.finish("failed")
            return 1

        last_run.streams("target", self.prober.get_streams(target_path))
        last_run.finish("success")
        new_audio = plan.total_output_streams - 1
        logger.info(f"Muxing complete: {plan.total_output_streams} streams, "
                    f"stream #{new_audio} is the default audio track. "
                    f"Double check integrity with Handbrake (or similar)!")
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ffmux",
        description="Add (mux) the audio stream of one file to all video, audio and subtitle "
                    "streams of another file, without re-encoding.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("files", nargs="*", metavar="FILE",
                        help="<source video file> <source audio file> <target media file>")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--info", "-info", metavar="MEDIA_FILE",
                      help="display the media streams contained in MEDIA_FILE")
    mode.add_argument("--debug", "-debug", action="store_true",
                      help="display the last ffmpeg execution")
    mode.add_argument("--errors", action="store_true", help="display the error reference")
    parser.add_argument("--yes", "-y", action="store_true", help="continue past every warning without asking")
    parser.add_argument("--overwrite", action="store_true", help="replace an existing target file")
    parser.add_argument("--config", help=f"configuration file (default: {DEFAULT_CONFIG_PATH})")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logger(log_file=config.get("log_file"), level=config.get("log_level"))

    confirm = accept_confirmation if args.yes else ask_confirmation
    app = FFmuxApp(config, confirm=confirm)

    try:
        if args.errors:
            return app.show_errors()
        if args.debug:
            return app.show_debug()
        if args.info:
            return app.info(args.info)
        if len(args.files) != 3:
            parser.print_usage()
            print("ffmux: usage: <source video file> <source audio file> <target media file> "
                  "(help available: ffmux --help)")
            return 1
        return app.mux(*args.files, overwrite=args.overwrite)
    except FileNotFoundError as e:
        logger.error(f"ERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
