import subprocess
import shlex
import shutil
from typing import List, Optional
from models.media_info import MappingPlan
from file_ops import discard, safe_promote, temp_path_for
from logger import setup_logger

logger = setup_logger()


class Converter:
    def __init__(self, ffmpeg_path: Optional[str] = None):
        self.ffmpeg_path = ffmpeg_path or shutil.which("ffmpeg")
        if not self.ffmpeg_path:
            raise FileNotFoundError("FFmpeg not found")

    def build_command(self, plan: MappingPlan, primary_path: str, secondary_path: str,
                      output_path: str) -> List[str]:
        """
        Renders the plan as a stream-copy ffmpeg invocation: one -map per
        selector in output order, then the default/clear disposition per
        output stream.
        """
        cmd = [
            self.ffmpeg_path, "-y",
            "-i", primary_path,
            "-i", secondary_path,
        ]
        for selector in plan.selectors:
            cmd.extend(["-map", str(selector)])

        cmd.extend(["-c", "copy"])

        if plan.default_video_output_index is not None:
            cmd.extend([f"-disposition:{plan.default_video_output_index}", "default"])
        cmd.extend([f"-disposition:{plan.default_audio_output_index}", "default"])
        for position in plan.cleared_output_indices():
            cmd.extend([f"-disposition:{position}", "0"])

        cmd.append(output_path)
        return cmd

    @staticmethod
    def render(cmd: List[str]) -> str:
        return shlex.join(cmd)

    def mux(self, plan: MappingPlan, primary_path: str, secondary_path: str,
            output_path: str, overwrite: bool = False) -> bool:
        """
        Runs the remux into a temporary file and moves it to output_path on
        success. Nothing is left at output_path when the remux fails.
        """
        output_temp = temp_path_for(output_path)
        cmd = self.build_command(plan, primary_path, secondary_path, output_temp)
        logger.info(f"Starting REMUX: {primary_path} + {secondary_path} -> {output_path}")

        if not self._run_ffmpeg(cmd):
            discard(output_temp)
            return False
        return safe_promote(output_temp, output_path, overwrite)

    def _run_ffmpeg(self, cmd: list) -> bool:
        try:
            # errors='replace' guards against non-UTF-8 bytes in ffmpeg diagnostics
            result = subprocess.run(cmd, capture_output=True, text=True, encoding='utf-8', errors='replace')
            if result.returncode != 0:
                logger.error(f"FFmpeg failed: {result.stderr}")
                return False
            return True
        except OSError as e:
            logger.error(f"FFmpeg execution error: {e}")
            return False
