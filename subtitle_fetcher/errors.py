"""Typed failures raised by the extraction orchestrator.

Every variant carries a stable ``kind`` tag for log entries, the HTTP status
the inbound handler maps it to, and a ``user_message`` that is safe to show
to an end user (it never includes the tool's stderr).
"""


class ExtractionError(Exception):
    """Base class for every failure ``SubtitleExtractor.extract`` can raise."""

    kind: str = "extraction_error"
    http_status: int = 500
    user_message: str = "Could not extract subtitles."


class InvalidInput(ExtractionError):
    """The request was malformed; nothing was spawned."""

    kind = "invalid_input"
    http_status = 400

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason

    @property
    def user_message(self) -> str:  # type: ignore[override]
        return f"Invalid request: {self.reason}"


class ProcessSpawnFailed(ExtractionError):
    """The extraction tool could not be started (missing or not executable)."""

    kind = "process_spawn_failed"
    user_message = "Subtitle extraction is temporarily unavailable."

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ProcessTimedOut(ExtractionError):
    """The tool did not finish within the request's timeout and was killed."""

    kind = "process_timed_out"
    user_message = "Subtitle extraction timed out, please try again later."

    def __init__(self, timeout_ms: int) -> None:
        super().__init__(f"process did not exit within {timeout_ms} ms")
        self.timeout_ms = timeout_ms


class ProcessExitedNonZero(ExtractionError):
    """The tool exited with a failure status (unsupported URL, no captions...)."""

    kind = "process_exited_non_zero"
    user_message = "Could not extract subtitles from this video."

    def __init__(self, exit_code: int, stderr_excerpt: str) -> None:
        super().__init__(f"process exited with status {exit_code}")
        self.exit_code = exit_code
        self.stderr_excerpt = stderr_excerpt


class NoSubtitleFound(ExtractionError):
    """The tool succeeded but produced no subtitle text."""

    kind = "no_subtitle_found"
    user_message = "No subtitles are available for this video in the requested languages."

    def __init__(self) -> None:
        super().__init__("process produced no subtitle output")


class ExtractionCancelled(ExtractionError):
    """The caller aborted the call; the process was terminated."""

    kind = "extraction_cancelled"
    user_message = "Subtitle extraction was cancelled."

    def __init__(self) -> None:
        super().__init__("extraction cancelled by caller")
