import os
from datetime import datetime
from typing import Any, Dict, List, Optional

import yaml

from models.media_info import StreamDescriptor
from logger import setup_logger

logger = setup_logger()

DEBUG_FILE = "ffmux.debug"
AWAITING = "Last ffmpeg execution:\nAwaiting first ffmpeg execution ...\n"


def debug_path(debug_dir: Optional[str] = None) -> str:
    return os.path.join(os.path.expanduser(debug_dir or "~"), DEBUG_FILE)


def _stream_lines(streams: Optional[List[StreamDescriptor]]) -> List[str]:
    return [s.describe() for s in streams or []]


class LastRun:
    """
    The record of the most recent mux invocation, written once at the end of
    the run and overwriting the previous one.
    """

    def __init__(self, primary: str, secondary: str, target: str):
        self.record: Dict[str, Any] = {
            "executed": datetime.now().isoformat(timespec="seconds"),
            "primary": primary,
            "secondary": secondary,
            "target": target,
            "primary_streams": [],
            "secondary_streams": [],
            "command": None,
            "outcome": None,
        }

    def streams(self, key: str, streams: Optional[List[StreamDescriptor]]) -> None:
        self.record[f"{key}_streams"] = _stream_lines(streams)

    def command(self, rendered: str) -> None:
        self.record["command"] = rendered

    def finish(self, outcome: str, error: Optional[str] = None) -> None:
        self.record["outcome"] = outcome
        if error:
            self.record["error"] = error

    def save(self, debug_dir: Optional[str] = None) -> Optional[str]:
        path = debug_path(debug_dir)
        try:
            with open(path, "w", encoding="utf-8") as f:
                yaml.safe_dump(self.record, f, sort_keys=False, allow_unicode=True)
        except OSError as e:
            logger.warning(f"Could not write last-run record {path}: {e}")
            return None
        return path


def read_last_run(debug_dir: Optional[str] = None) -> str:
    path = debug_path(debug_dir)
    if not os.path.exists(path):
        return AWAITING
    with open(path, "r", encoding="utf-8") as f:
        return f.read()
