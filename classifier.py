from typing import Iterable, Optional, Sequence

from errors import EmptyInputError
from models.media_info import FileStreamSet, StreamDescriptor, StreamKind

# Still-image codecs ffmpeg reports as video (attached pictures)
DEFAULT_COVER_ART_CODECS = ("mjpeg", "png", "bmp")


def classify(streams: Sequence[StreamDescriptor], path: str,
             cover_art_codecs: Optional[Iterable[str]] = None) -> FileStreamSet:
    """
    Counts the streams of one file per kind. Video streams coded with a
    still-image codec are reclassified as cover art so they never count as
    a real video track.
    """
    if not streams:
        raise EmptyInputError(path, "File reports no media streams")

    still_codecs = {c.lower() for c in (cover_art_codecs or DEFAULT_COVER_ART_CODECS)}

    classified = []
    for stream in streams:
        if stream.kind == StreamKind.VIDEO and stream.codec.lower() in still_codecs:
            stream = stream.model_copy(update={"kind": StreamKind.COVER_ART})
        classified.append(stream)

    return FileStreamSet(path=path, streams=tuple(classified))
