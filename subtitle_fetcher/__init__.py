"""Subtitle Fetcher: supervised subtitle extraction for video URLs."""

from .errors import (
    ExtractionCancelled,
    ExtractionError,
    InvalidInput,
    NoSubtitleFound,
    ProcessExitedNonZero,
    ProcessSpawnFailed,
    ProcessTimedOut,
)
from .extractor import SubtitleExtractor
from .launcher import ExecutableLauncher, ProcessLauncher, PythonModuleLauncher
from .models import ExtractionRequest, ExtractionResult

__version__ = "1.0.0"
__all__ = [
    "SubtitleExtractor",
    "ExtractionRequest",
    "ExtractionResult",
    "ProcessLauncher",
    "ExecutableLauncher",
    "PythonModuleLauncher",
    "ExtractionError",
    "InvalidInput",
    "ProcessSpawnFailed",
    "ProcessTimedOut",
    "ProcessExitedNonZero",
    "NoSubtitleFound",
    "ExtractionCancelled",
]
