from models.media_info import StreamDescriptor, StreamKind

KINDS = {
    "v": (StreamKind.VIDEO, "h264"),
    "a": (StreamKind.AUDIO, "aac"),
    "s": (StreamKind.SUBTITLE, "mov_text"),
    "d": (StreamKind.AUXILIARY_DATA, "bin_data"),
    "c": (StreamKind.VIDEO, "mjpeg"),  # attached picture as ffmpeg reports it
}


def make_streams(layout: str, file_ordinal: int = 0):
    """'vaas' -> video, audio, audio, subtitle descriptors in probe order."""
    streams = []
    for index, key in enumerate(layout):
        kind, codec = KINDS[key]
        streams.append(StreamDescriptor(file_ordinal=file_ordinal, stream_index=index, kind=kind, codec=codec))
    return streams
