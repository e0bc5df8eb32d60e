"""Request and result value objects."""

from dataclasses import dataclass, field
from typing import Tuple

# Language preference used when the caller does not supply one; the tool picks
# the first one available.
DEFAULT_LANGUAGES: Tuple[str, ...] = ("zh-Hans", "en")

DEFAULT_TIMEOUT_MS: int = 60_000


@dataclass(frozen=True)
class ExtractionRequest:
    """One extraction call: the video URL, ordered languages and a timeout."""

    url: str
    languages: Tuple[str, ...] = field(default=DEFAULT_LANGUAGES)
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    def __post_init__(self) -> None:
        # Accept any sequence from callers but keep the stored value immutable.
        if not isinstance(self.languages, tuple) and not isinstance(self.languages, str):
            object.__setattr__(self, "languages", tuple(self.languages))


@dataclass(frozen=True)
class ExtractionResult:
    raw_text: str
