from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, computed_field, model_validator


class StreamKind(str, Enum):
    VIDEO = "Video"
    AUDIO = "Audio"
    SUBTITLE = "Subtitle"
    AUXILIARY_DATA = "AuxiliaryData"
    COVER_ART = "CoverArt"


class StreamDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    file_ordinal: int = 0  # 0 = primary, 1 = secondary
    stream_index: int
    kind: StreamKind
    codec: str = "unknown"
    is_default: bool = False  # as reported by the source container, informational only
    language: str = "und"
    title: str = ""

    def describe(self) -> str:
        default = " (default)" if self.is_default else ""
        title = f" \"{self.title}\"" if self.title else ""
        return f"#{self.file_ordinal}:{self.stream_index} {self.kind.value}: {self.codec} [{self.language}]{title}{default}"


class FileStreamSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    streams: Tuple[StreamDescriptor, ...]

    @model_validator(mode="after")
    def check_indices(self):
        for position, stream in enumerate(self.streams):
            if stream.stream_index != position:
                raise ValueError(
                    f"{self.path}: stream indices must be contiguous from 0, "
                    f"got {stream.stream_index} at position {position}"
                )
        ordinals = {s.file_ordinal for s in self.streams}
        if len(ordinals) > 1:
            raise ValueError(f"{self.path}: streams from more than one input file: {sorted(ordinals)}")
        return self

    def count(self, kind: StreamKind) -> int:
        return sum(1 for s in self.streams if s.kind == kind)

    @computed_field
    @property
    def video_count(self) -> int:
        """Real video only, cover art excluded."""
        return self.count(StreamKind.VIDEO)

    @computed_field
    @property
    def audio_count(self) -> int:
        return self.count(StreamKind.AUDIO)

    @computed_field
    @property
    def subtitle_count(self) -> int:
        return self.count(StreamKind.SUBTITLE)

    @computed_field
    @property
    def auxiliary_count(self) -> int:
        return self.count(StreamKind.AUXILIARY_DATA)

    @computed_field
    @property
    def cover_art_count(self) -> int:
        return self.count(StreamKind.COVER_ART)

    @property
    def stream_count(self) -> int:
        return len(self.streams)

    @property
    def file_ordinal(self) -> int:
        return self.streams[0].file_ordinal if self.streams else 0

    def first_of(self, kind: StreamKind) -> Optional[StreamDescriptor]:
        return next((s for s in self.streams if s.kind == kind), None)


class StreamSelector(BaseModel):
    model_config = ConfigDict(frozen=True)

    file_ordinal: int
    stream_index: int

    def __str__(self) -> str:
        return f"{self.file_ordinal}:{self.stream_index}"


class MappingPlan(BaseModel):
    """
    Ordered remux plan: every primary stream in probe order, then the
    chosen secondary audio stream as the last output stream.
    """
    model_config = ConfigDict(frozen=True)

    primary_selectors: List[StreamSelector]
    secondary_selector: StreamSelector
    total_output_streams: int
    default_audio_output_index: int
    default_video_output_index: Optional[int] = None
    output_kinds: List[StreamKind] = []
    acknowledged: List[str] = []

    @property
    def selectors(self) -> List[StreamSelector]:
        return [*self.primary_selectors, self.secondary_selector]

    def cleared_output_indices(self) -> List[int]:
        """Audio and real video positions whose default flag must be removed."""
        defaults = {self.default_audio_output_index, self.default_video_output_index}
        return [
            position
            for position, kind in enumerate(self.output_kinds)
            if kind in (StreamKind.AUDIO, StreamKind.VIDEO) and position not in defaults
        ]


class ConfirmationRequired(BaseModel):
    model_config = ConfigDict(frozen=True)

    reason: str
    path: str
    message: str
    default_action: str
