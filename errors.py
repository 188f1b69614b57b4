class FFmuxError(Exception):
    """Base class for planning failures. Every instance names the file it concerns."""

    remediation = ""

    def __init__(self, path: str, message: str):
        super().__init__(f"{message} ({path})")
        self.path = path
        self.message = message


class EmptyInputError(FFmuxError):
    remediation = "Supply a readable media file that contains at least one stream."


class NoAudioStreamError(FFmuxError):
    remediation = "Supply an audio file (m4a, mp3, ac3 ...) that contains an audio stream."


class TooManyStreamsError(FFmuxError):
    remediation = (
        "Reduce the number of streams in the source video file, or build the ffmpeg "
        "command by hand (see --debug for the last generated command)."
    )


class ConfirmationDeclined(FFmuxError):
    remediation = "Nothing to fix; the mux was cancelled at a warning prompt."

    def __init__(self, path: str, reason: str):
        super().__init__(path, f"Program aborted at confirmation '{reason}'")
        self.reason = reason


ERROR_REFERENCE = [
    (EmptyInputError, "A file reports no media streams or could not be probed."),
    (NoAudioStreamError, "The source audio file contains no audio stream."),
    (TooManyStreamsError, "The source video file has too many streams for the output ceiling."),
    (ConfirmationDeclined, "A warning was declined at the prompt."),
]
