import subprocess
import json
import os
import shutil
from typing import Optional, Dict, Any, List
from models.media_info import StreamDescriptor, StreamKind
from logger import setup_logger

logger = setup_logger()

CODEC_TYPES = {
    "video": StreamKind.VIDEO,
    "audio": StreamKind.AUDIO,
    "subtitle": StreamKind.SUBTITLE,
}


class FFprobeWrapper:
    def __init__(self, ffprobe_path: Optional[str] = None):
        self.ffprobe_path = ffprobe_path or shutil.which("ffprobe")
        if not self.ffprobe_path:
            logger.error("FFprobe not found in system PATH")
            raise FileNotFoundError("FFprobe not found. Please install FFmpeg.")

    def get_streams(self, file_path: str, file_ordinal: int = 0) -> List[StreamDescriptor]:
        """
        Runs ffprobe on the file and returns its streams in report order.
        Returns an empty list when the file cannot be probed.
        """
        if not os.path.exists(file_path):
            logger.error(f"File not found: {file_path}")
            return []

        cmd = [
            self.ffprobe_path,
            "-v", "quiet",
            "-print_format", "json",
            "-show_streams",
            file_path
        ]

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, encoding='utf-8', errors='replace')
            if result.returncode != 0:
                logger.error(f"FFprobe failed for {file_path}: {result.stderr}")
                return []

            data = json.loads(result.stdout or "{}")
        except (OSError, ValueError) as e:
            logger.error(f"Error probing {file_path}: {e}")
            return []

        return self._parse_json(data, file_ordinal)

    def _parse_json(self, data: Dict[str, Any], file_ordinal: int) -> List[StreamDescriptor]:
        streams = []
        # ffprobe's own "index" is usually contiguous; re-number in report order anyway
        for position, s in enumerate(data.get("streams", [])):
            disposition = s.get("disposition", {}) or {}
            tags = s.get("tags", {}) or {}

            kind = CODEC_TYPES.get(s.get("codec_type"), StreamKind.AUXILIARY_DATA)
            if kind == StreamKind.VIDEO and int(disposition.get("attached_pic", 0)) == 1:
                kind = StreamKind.COVER_ART

            streams.append(StreamDescriptor(
                file_ordinal=file_ordinal,
                stream_index=position,
                kind=kind,
                codec=(s.get("codec_name") or s.get("codec_tag_string") or "unknown").lower(),
                is_default=int(disposition.get("default", 0)) == 1,
                language=tags.get("language", "und"),
                title=tags.get("title", ""),
            ))
        return streams
