"""Maps an HTTP-style query onto an extraction and back to a response.

Framework-agnostic: the web layer passes the parsed query mapping in and
serialises the returned ``(status, body)`` pair however it likes.
"""

import threading
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from .errors import ExtractionError, InvalidInput
from .extractor import SubtitleExtractor
from .models import DEFAULT_LANGUAGES, DEFAULT_TIMEOUT_MS, ExtractionRequest

Response = Tuple[int, Dict[str, Any]]


def _first(value: Any) -> Optional[str]:
    """Return the first value of a query parameter (frameworks may give lists)."""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    return value


def parse_languages(raw: Optional[str], default: Sequence[str]) -> Tuple[str, ...]:
    """Split a comma-separated ``lang`` override; blank means *default*."""
    if raw is None or not raw.strip():
        return tuple(default)
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def get_subtitle(
    query: Mapping[str, Any],
    extractor: SubtitleExtractor,
    languages: Optional[Sequence[str]] = None,
    timeout_ms: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Response:
    """Handle ``GET ?url=...[&lang=a,b]`` and return ``(status, body)``.

    ``200 {"subtitle": text}`` on success, ``400`` for invalid input and
    ``500`` for every other failure. Error bodies carry a user-safe message
    and the failure kind, never the tool's stderr. Setting *cancel_event*
    (for example when the client disconnects) aborts the extraction.
    """
    default_languages = languages or DEFAULT_LANGUAGES
    try:
        url = _first(query.get("url"))
        lang = _first(query.get("lang"))
        if url is not None and not isinstance(url, str):
            raise InvalidInput("the URL must be a string")
        if lang is not None and not isinstance(lang, str):
            raise InvalidInput("lang must be a comma-separated string")

        request = ExtractionRequest(
            url=url or "",
            languages=parse_languages(lang, default_languages),
            timeout_ms=DEFAULT_TIMEOUT_MS if timeout_ms is None else timeout_ms,
        )
        result = extractor.extract(request, cancel_event=cancel_event)
    except ExtractionError as exc:
        return exc.http_status, {"error": exc.user_message, "kind": exc.kind}

    return 200, {"subtitle": result.raw_text}
