from typing import Callable, Collection, List, Optional, Union

from errors import ConfirmationDeclined, NoAudioStreamError, TooManyStreamsError
from logger import setup_logger
from models.media_info import (
    ConfirmationRequired,
    FileStreamSet,
    MappingPlan,
    StreamKind,
    StreamSelector,
)

logger = setup_logger()

MAX_OUTPUT_STREAMS = 9

MULTIPLE_SECONDARY_AUDIO = "multiple_secondary_audio"
PRIMARY_VIDEO_COUNT = "primary_video_count"


class Planner:
    def __init__(self, max_output_streams: int = MAX_OUTPUT_STREAMS):
        self.max_output_streams = max_output_streams

    def plan(self, primary: FileStreamSet, secondary: FileStreamSet,
             acknowledged: Collection[str] = ()) -> Union[MappingPlan, ConfirmationRequired]:
        """
        Builds the remux plan for primary + secondary.

        Returns a ConfirmationRequired for the first anomaly not yet listed in
        `acknowledged`; call again with its reason added to resume. Fatal
        conditions raise before any confirmation is offered.
        """
        total = primary.stream_count + 1
        if total > self.max_output_streams:
            raise TooManyStreamsError(
                primary.path,
                f"Source video file has {primary.stream_count} streams; with the added audio "
                f"stream that is {total}, more than the maximum of {self.max_output_streams}",
            )

        audio = secondary.first_of(StreamKind.AUDIO)
        if audio is None:
            raise NoAudioStreamError(secondary.path, "Audio file contains no audio stream")

        # A single-stream file is selected as-is; the stream is known to be audio here.
        secondary_index = 0 if secondary.stream_count == 1 else audio.stream_index

        if secondary.audio_count > 1 and MULTIPLE_SECONDARY_AUDIO not in acknowledged:
            return ConfirmationRequired(
                reason=MULTIPLE_SECONDARY_AUDIO,
                path=secondary.path,
                message=f"File \"{secondary.path}\" has more than one audio stream ({secondary.audio_count})!",
                default_action=f"The first audio stream (stream {secondary.file_ordinal}:{secondary_index}) will be selected.",
            )

        if primary.video_count != 1 and PRIMARY_VIDEO_COUNT not in acknowledged:
            found = "No" if primary.video_count == 0 else "More than one"
            return ConfirmationRequired(
                reason=PRIMARY_VIDEO_COUNT,
                path=primary.path,
                message=f"{found} primary video stream found in \"{primary.path}\" "
                        f"({primary.video_count}). Problems may occur!",
                default_action=f"All {primary.stream_count} streams of the file will still be copied.",
            )

        primary_selectors = [StreamSelector(file_ordinal=0, stream_index=s.stream_index) for s in primary.streams]
        output_kinds = [s.kind for s in primary.streams] + [StreamKind.AUDIO]

        first_video = primary.first_of(StreamKind.VIDEO)
        default_video: Optional[int] = first_video.stream_index if first_video else None

        plan = MappingPlan(
            primary_selectors=primary_selectors,
            secondary_selector=StreamSelector(file_ordinal=1, stream_index=secondary_index),
            total_output_streams=total,
            default_audio_output_index=total - 1,
            default_video_output_index=default_video,
            output_kinds=output_kinds,
            acknowledged=sorted(acknowledged),
        )
        logger.debug(f"  [Planner] maps={' '.join(str(s) for s in plan.selectors)} "
                     f"default_video={default_video} default_audio={total - 1}")
        return plan


def plan_with_confirmation(planner: Planner, primary: FileStreamSet, secondary: FileStreamSet,
                           confirm: Callable[[ConfirmationRequired], bool]) -> MappingPlan:
    """
    Resolves every confirmation gate through `confirm`. A declined gate
    raises ConfirmationDeclined and no plan is produced.
    """
    acknowledged: List[str] = []
    result = planner.plan(primary, secondary, acknowledged)
    while isinstance(result, ConfirmationRequired):
        logger.info(f"  [Planner] Confirmation required: {result.reason} ({result.path})")
        if not confirm(result):
            raise ConfirmationDeclined(result.path, result.reason)
        acknowledged.append(result.reason)
        result = planner.plan(primary, secondary, acknowledged)
    return result
