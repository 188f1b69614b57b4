import os
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from classifier import classify
from converter import Converter
from file_ops import temp_path_for
from planner import PRIMARY_VIDEO_COUNT, Planner
from conftest import make_streams


def make_plan(primary_layout="vas", secondary_layout="a", acknowledged=()):
    return Planner().plan(
        classify(make_streams(primary_layout, 0), "movie.mp4"),
        classify(make_streams(secondary_layout, 1), "commentary.m4a"),
        acknowledged,
    )


@pytest.fixture
def converter():
    return Converter("ffmpeg")


def test_missing_ffmpeg():
    with patch("converter.shutil.which", return_value=None):
        with pytest.raises(FileNotFoundError):
            Converter()


def test_command_maps_every_stream_in_order(converter):
    cmd = converter.build_command(make_plan("vaas", "ca"), "movie.mp4", "commentary.m4a", "out.mp4")

    maps = [cmd[i + 1] for i, arg in enumerate(cmd) if arg == "-map"]
    assert maps == ["0:0", "0:1", "0:2", "0:3", "1:1"]
    assert cmd[:6] == ["ffmpeg", "-y", "-i", "movie.mp4", "-i", "commentary.m4a"]
    assert cmd[cmd.index("-c") + 1] == "copy"
    assert cmd[-1] == "out.mp4"


def test_nine_stream_plan_maps_last_index(converter):
    cmd = converter.build_command(make_plan("vaaaaaaa"), "movie.mp4", "commentary.m4a", "out.mp4")

    maps = [cmd[i + 1] for i, arg in enumerate(cmd) if arg == "-map"]
    assert maps == [f"0:{i}" for i in range(8)] + ["1:0"]


def test_dispositions(converter):
    cmd = converter.build_command(make_plan("vasac"), "movie.mp4", "commentary.m4a", "out.mp4")
    dispositions = {cmd[i]: cmd[i + 1] for i, arg in enumerate(cmd) if arg.startswith("-disposition")}

    assert dispositions == {
        "-disposition:0": "default",
        "-disposition:5": "default",
        "-disposition:1": "0",
        "-disposition:3": "0",
    }


def test_no_video_default_without_real_video(converter):
    plan = make_plan("ca", acknowledged=[PRIMARY_VIDEO_COUNT])
    cmd = converter.build_command(plan, "movie.mp4", "commentary.m4a", "out.mp4")
    dispositions = {cmd[i]: cmd[i + 1] for i, arg in enumerate(cmd) if arg.startswith("-disposition")}

    assert dispositions == {"-disposition:2": "default", "-disposition:1": "0"}


def test_render_quotes_paths(converter):
    cmd = converter.build_command(make_plan("va"), "Fail Safe.mp4", "commentary.m4a", "out.mp4")

    assert "'Fail Safe.mp4'" in converter.render(cmd)


def test_mux_success_moves_temp_to_target(converter, tmp_path):
    target = tmp_path / "out.mp4"

    def fake_ffmpeg(cmd):
        with open(cmd[-1], "wb") as f:
            f.write(b"muxed")
        return True

    converter._run_ffmpeg = MagicMock(side_effect=fake_ffmpeg)

    assert converter.mux(make_plan("va"), "movie.mp4", "commentary.m4a", str(target))
    args, _ = converter._run_ffmpeg.call_args
    assert args[0][-1] == temp_path_for(str(target))
    assert target.read_bytes() == b"muxed"
    assert not os.path.exists(temp_path_for(str(target)))


def test_mux_failure_leaves_nothing(converter, tmp_path):
    target = tmp_path / "out.mp4"

    def failing_ffmpeg(cmd):
        with open(cmd[-1], "wb") as f:
            f.write(b"partial")
        return False

    converter._run_ffmpeg = MagicMock(side_effect=failing_ffmpeg)

    assert not converter.mux(make_plan("va"), "movie.mp4", "commentary.m4a", str(target))
    assert not target.exists()
    assert not os.path.exists(temp_path_for(str(target)))


def test_run_ffmpeg_reports_nonzero_exit(converter):
    failed = subprocess.CompletedProcess(["ffmpeg"], 1, stdout="", stderr="Invalid data")
    with patch("converter.subprocess.run", return_value=failed):
        assert converter._run_ffmpeg(["ffmpeg"]) is False


def test_run_ffmpeg_reports_missing_binary(converter):
    with patch("converter.subprocess.run", side_effect=OSError("no such file")):
        assert converter._run_ffmpeg(["ffmpeg"]) is False
