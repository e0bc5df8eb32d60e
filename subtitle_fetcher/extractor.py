"""Core subtitle extraction logic."""

import logging
import re
import subprocess
import tempfile
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple
from urllib.parse import urlsplit

from .errors import (
    ExtractionCancelled,
    ExtractionError,
    InvalidInput,
    NoSubtitleFound,
    ProcessExitedNonZero,
    ProcessSpawnFailed,
    ProcessTimedOut,
)
from .launcher import ExecutableLauncher, ProcessLauncher
from .models import ExtractionRequest, ExtractionResult

logger = logging.getLogger(__name__)


class SubtitleExtractor:
    """Fetches auto-generated subtitles for a video URL via an external tool.

    Each ``extract`` call spawns exactly one child process and owns it until
    the call returns; the process is terminated and reaped on every exit path.
    Instances hold no per-call state and can be shared between threads.
    """

    ALLOWED_SCHEMES = frozenset({"http", "https"})

    # BCP-47-ish: primary subtag plus optional script/region subtags ("zh-Hans").
    LANGUAGE_TAG = re.compile(r"[A-Za-z]{2,8}(?:-[A-Za-z0-9]{1,8})*")

    MAX_LANGUAGES: int = 10

    # Seconds a process gets to exit after SIGTERM before it is killed.
    TERMINATE_GRACE: float = 2.0

    # How often a cancellable call checks its cancel event, in seconds.
    POLL_INTERVAL: float = 0.1

    DEFAULT_STDERR_EXCERPT_LIMIT: int = 500

    # Output template; yt-dlp names caption files "<stem>.<lang>.<ext>" from it.
    OUTPUT_STEM: str = "subtitle"

    def __init__(
        self,
        launcher: Optional[ProcessLauncher] = None,
        stderr_excerpt_limit: int = DEFAULT_STDERR_EXCERPT_LIMIT,
    ) -> None:
        self.launcher = launcher if launcher is not None else ExecutableLauncher()
        self.stderr_excerpt_limit = max(1, stderr_excerpt_limit)

    # ------------------------------------------------------------------
    # Input validation
    # ------------------------------------------------------------------

    def validate_request(self, request: ExtractionRequest) -> None:
        """Raise ``InvalidInput`` if *request* must not reach the tool."""
        self._validate_url(request.url)
        self._validate_languages(request.languages)

        timeout_ms = request.timeout_ms
        if isinstance(timeout_ms, bool) or not isinstance(timeout_ms, int) or timeout_ms <= 0:
            raise InvalidInput("timeout must be a positive number of milliseconds")

    def _validate_url(self, url: object) -> None:
        if not isinstance(url, str) or not url.strip():
            raise InvalidInput("a video URL is required")
        if url != url.strip():
            raise InvalidInput("the URL must not have surrounding whitespace")
        if any(ord(ch) < 32 or ord(ch) == 127 for ch in url):
            raise InvalidInput("the URL contains control characters")
        try:
            parts = urlsplit(url)
            host = parts.hostname
        except ValueError:
            raise InvalidInput("the URL is malformed") from None
        if parts.scheme.lower() not in self.ALLOWED_SCHEMES or not host:
            raise InvalidInput("the URL must be an absolute http(s) URL")

    def _validate_languages(self, languages: Sequence[str]) -> None:
        if isinstance(languages, str) or not languages:
            raise InvalidInput("at least one subtitle language is required")
        if len(languages) > self.MAX_LANGUAGES:
            raise InvalidInput(f"at most {self.MAX_LANGUAGES} subtitle languages are allowed")
        for tag in languages:
            if not isinstance(tag, str) or not self.LANGUAGE_TAG.fullmatch(tag):
                raise InvalidInput(f"invalid language tag {str(tag)[:20]!r}")

    # ------------------------------------------------------------------
    # Argument construction
    # ------------------------------------------------------------------

    @classmethod
    def build_arguments(cls, request: ExtractionRequest, workdir: str) -> List[str]:
        """Return the tool arguments for *request* as discrete tokens.

        Caption files are written under *workdir* with a fixed name template;
        nothing else is downloaded. The URL is always the final token, after
        ``--``, so nothing in it can be read as an option.
        """
        return [
            "--skip-download",
            "--write-auto-subs",
            "--sub-langs", ",".join(request.languages),
            "--paths", f"home:{workdir}",
            "--output", f"{cls.OUTPUT_STEM}.%(ext)s",
            "--no-playlist",
            "--quiet",
            "--no-warnings",
            "--",
            request.url,
        ]

    # ------------------------------------------------------------------
    # Process supervision
    # ------------------------------------------------------------------

    @contextmanager
    def _supervised(self, arguments: Sequence[str], workdir: str) -> Iterator[subprocess.Popen]:
        """Spawn the tool in *workdir* and guarantee it is gone when the block exits."""
        try:
            process = self.launcher.launch(arguments, cwd=workdir)
        except OSError as exc:
            raise ProcessSpawnFailed(f"{self.launcher!r}: {exc}") from exc
        logger.debug(f"Started extraction process {process.pid}")
        try:
            yield process
        finally:
            self._terminate(process)

    def _terminate(self, process: subprocess.Popen) -> None:
        """Stop *process* if still running, reap it and close its pipes."""
        if process.poll() is None:
            process.terminate()
            try:
                process.wait(timeout=self.TERMINATE_GRACE)
            except subprocess.TimeoutExpired:
                logger.warning(f"Process {process.pid} ignored SIGTERM, killing it")
                process.kill()
                process.wait()
        for stream in (process.stdout, process.stderr):
            if stream is not None:
                stream.close()

    def _collect(
        self,
        process: subprocess.Popen,
        timeout_ms: int,
        cancel_event: Optional[threading.Event],
    ) -> Tuple[str, str]:
        """Drain stdout and stderr until exit, deadline or cancellation.

        ``communicate`` reads both pipes together and may be called again
        after ``TimeoutExpired`` without losing output.
        """
        deadline = time.monotonic() + timeout_ms / 1000
        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise ExtractionCancelled()
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise ProcessTimedOut(timeout_ms)
            wait = remaining if cancel_event is None else min(remaining, self.POLL_INTERVAL)
            try:
                return process.communicate(timeout=wait)
            except subprocess.TimeoutExpired:
                continue

    # ------------------------------------------------------------------
    # Outcome classification
    # ------------------------------------------------------------------

    def _excerpt(self, stderr: Optional[str]) -> str:
        text = (stderr or "").strip()
        if len(text) > self.stderr_excerpt_limit:
            text = text[: self.stderr_excerpt_limit].rstrip() + "..."
        return text

    def _read_subtitle(self, workdir: str, languages: Sequence[str]) -> Optional[str]:
        """Return the caption file text for the first available language."""
        files = sorted(
            path for path in Path(workdir).glob(f"{self.OUTPUT_STEM}.*")
            if path.is_file() and path.suffix not in (".part", ".ytdl")
        )
        if not files:
            return None
        for lang in languages:
            for path in files:
                if path.name.startswith(f"{self.OUTPUT_STEM}.{lang}."):
                    return path.read_text(encoding="utf-8", errors="replace")
        return files[0].read_text(encoding="utf-8", errors="replace")

    def _classify(self, returncode: int, text: Optional[str], stderr: Optional[str]) -> ExtractionResult:
        if returncode != 0:
            excerpt = self._excerpt(stderr)
            logger.debug(f"Tool stderr (exit {returncode}): {excerpt}")
            raise ProcessExitedNonZero(returncode, excerpt)
        if not text or not text.strip():
            raise NoSubtitleFound()
        return ExtractionResult(raw_text=text)

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    def extract(
        self,
        request: ExtractionRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> ExtractionResult:
        """Run one extraction for *request*.

        Returns the subtitle text or raises an ``ExtractionError`` subclass.
        Setting *cancel_event* from another thread aborts the call and
        terminates the process. Never retries.

        The tool runs in a private temporary directory that is removed, with
        everything the tool wrote, before the call returns.
        """
        try:
            self.validate_request(request)
            if cancel_event is not None and cancel_event.is_set():
                raise ExtractionCancelled()

            logger.debug(f"Extracting subtitles for {request.url} ({','.join(request.languages)})")
            with tempfile.TemporaryDirectory(prefix="subtitle-fetcher-") as workdir:
                arguments = self.build_arguments(request, workdir)
                with self._supervised(arguments, workdir) as process:
                    _, stderr = self._collect(process, request.timeout_ms, cancel_event)
                    returncode = process.returncode
                text = self._read_subtitle(workdir, request.languages) if returncode == 0 else None
                result = self._classify(returncode, text, stderr)
        except ProcessSpawnFailed as exc:
            logger.error(f"Extraction failed ({exc.kind}): {exc.reason}")
            raise
        except ExtractionError as exc:
            logger.info(f"Extraction failed ({exc.kind})")
            raise

        logger.info(f"Extraction succeeded ({len(result.raw_text)} characters)")
        return result
