import pytest

from classifier import classify
from errors import EmptyInputError
from models.media_info import FileStreamSet, StreamDescriptor, StreamKind
from conftest import make_streams


def test_counts_per_kind():
    info = classify(make_streams("vaasd"), "movie.mkv")

    assert info.video_count == 1
    assert info.audio_count == 2
    assert info.subtitle_count == 1
    assert info.auxiliary_count == 1
    assert info.cover_art_count == 0
    assert info.stream_count == 5


def test_mjpeg_video_is_cover_art():
    info = classify(make_streams("vac"), "movie.mp4")

    assert info.video_count == 1
    assert info.cover_art_count == 1
    assert info.streams[2].kind == StreamKind.COVER_ART
    assert info.streams[2].codec == "mjpeg"


def test_cover_art_codecs_are_configurable():
    info = classify(make_streams("vc"), "movie.mp4", cover_art_codecs=["png"])

    assert info.video_count == 2
    assert info.cover_art_count == 0


def test_order_and_indices_preserved():
    streams = make_streams("csav")
    info = classify(streams, "movie.mkv")

    assert [s.stream_index for s in info.streams] == [0, 1, 2, 3]
    assert [s.kind for s in info.streams] == [
        StreamKind.COVER_ART, StreamKind.SUBTITLE, StreamKind.AUDIO, StreamKind.VIDEO,
    ]


def test_empty_input_names_file():
    with pytest.raises(EmptyInputError) as excinfo:
        classify([], "commentary.m4a")

    assert excinfo.value.path == "commentary.m4a"
    assert "commentary.m4a" in str(excinfo.value)


def test_non_contiguous_indices_rejected():
    streams = [
        StreamDescriptor(stream_index=0, kind=StreamKind.VIDEO, codec="h264"),
        StreamDescriptor(stream_index=2, kind=StreamKind.AUDIO, codec="aac"),
    ]
    with pytest.raises(ValueError):
        classify(streams, "movie.mkv")


def test_stream_set_is_immutable():
    info = classify(make_streams("va"), "movie.mkv")

    with pytest.raises(Exception):
        info.path = "other.mkv"
    assert isinstance(info, FileStreamSet)


def test_counts_follow_streams_when_built_directly():
    info = FileStreamSet(path="movie.mkv", streams=tuple(make_streams("vaas")))

    assert info.video_count == 1
    assert info.audio_count == 2
    assert info.subtitle_count == 1
    assert info.auxiliary_count == 0
    assert info.cover_art_count == 0


def test_counts_ignore_passed_values():
    info = FileStreamSet(path="movie.mkv", streams=tuple(make_streams("va")), audio_count=5)

    assert info.audio_count == 1


def test_counts_in_dump():
    dumped = classify(make_streams("vac"), "movie.mp4").model_dump()

    assert dumped["video_count"] == 1
    assert dumped["cover_art_count"] == 1


def test_streams_from_two_files_rejected():
    streams = [
        StreamDescriptor(file_ordinal=0, stream_index=0, kind=StreamKind.VIDEO, codec="h264"),
        StreamDescriptor(file_ordinal=1, stream_index=1, kind=StreamKind.AUDIO, codec="aac"),
    ]
    with pytest.raises(ValueError, match="more than one input file"):
        FileStreamSet(path="movie.mkv", streams=tuple(streams))
