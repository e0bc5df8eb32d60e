"""Command-line interface for subtitle-fetcher."""

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from .config import load_config
from .errors import ExtractionError, InvalidInput, NoSubtitleFound
from .extractor import SubtitleExtractor
from .handler import get_subtitle
from .launcher import LAUNCHER_NAMES, make_launcher
from .models import DEFAULT_LANGUAGES, DEFAULT_TIMEOUT_MS, ExtractionRequest
from .utils import positive_int

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_INPUT = 2
EXIT_NO_SUBTITLE = 3


# ------------------------------------------------------------------
# Logging setup (single, authoritative call)
# ------------------------------------------------------------------

def setup_logging(verbosity: int = 0, log_file: Optional[Path] = None) -> None:
    """Configure the root logger.

    Args:
        verbosity: -1 = WARNING only, 0 = INFO (default), 1 = DEBUG.
        log_file:  Optional path; when given, output goes to both file and stderr.
    """
    level = {-1: logging.WARNING, 0: logging.INFO, 1: logging.DEBUG}.get(
        verbosity, logging.INFO
    )

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    fmt = "%(asctime)s - %(levelname)s - %(message)s" if log_file else "%(message)s"
    formatter = logging.Formatter(fmt)

    if log_file:
        fh = logging.FileHandler(log_file)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setFormatter(formatter)
    root.addHandler(ch)


def exit_code_for(exc: ExtractionError) -> int:
    """Return the process exit status for a failed extraction."""
    if isinstance(exc, InvalidInput):
        return EXIT_INVALID_INPUT
    if isinstance(exc, NoSubtitleFound):
        return EXIT_NO_SUBTITLE
    return EXIT_FAILURE


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> None:
    """Parse arguments, run one extraction and print the subtitles."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="subtitle-fetcher",
        description="Fetch auto-generated subtitles for a video URL using yt-dlp",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s https://www.youtube.com/watch?v=...
  %(prog)s https://www.youtube.com/watch?v=... -l en -l de
  %(prog)s https://www.youtube.com/watch?v=... --timeout 30000 --json
  %(prog)s https://www.youtube.com/watch?v=... --launcher module

Exit status: 0 ok, 1 extraction failed, 2 invalid input, 3 no subtitles.
Config file: create ~/.subtitle-fetcher.yaml with default settings.
        """,
    )

    parser.add_argument("url", help="Video URL to fetch subtitles for")

    # ---- extraction ----
    parser.add_argument("-l", "--language", dest="languages", action="append", metavar="LANG",
                        help="Preferred subtitle language; repeat for more, first available wins "
                             f"(default: {' '.join(DEFAULT_LANGUAGES)})")
    parser.add_argument("--timeout", type=positive_int, metavar="MS",
                        help=f"Kill the tool after MS milliseconds (default: {DEFAULT_TIMEOUT_MS})")
    parser.add_argument("--launcher", choices=LAUNCHER_NAMES,
                        help="Run the yt-dlp binary ('executable') or 'python -m yt_dlp' ('module')")
    parser.add_argument("--executable",
                        help="Path or name of the extraction tool (default: yt-dlp)")

    # ---- output ----
    parser.add_argument("--json", action="store_true",
                        help="Print the HTTP-style {status, body} response as JSON")
    parser.add_argument("--log-file", type=Path,
                        help="Save log output to a file (in addition to stderr)")

    # ---- verbosity ----
    verbosity_group = parser.add_mutually_exclusive_group()
    verbosity_group.add_argument("-v", "--verbose", action="store_true",
                                 help="Enable debug-level output")
    verbosity_group.add_argument("-q", "--quiet", action="store_true",
                                 help="Suppress informational messages (warnings and errors only)")

    args = parser.parse_args(argv)

    verbosity = 1 if args.verbose else (-1 if args.quiet else 0)
    setup_logging(verbosity=verbosity, log_file=args.log_file)

    # ------------------------------------------------------------------
    # Load and merge config (flags > config file > defaults)
    # ------------------------------------------------------------------
    config = load_config()

    languages = args.languages or config.get("languages", list(DEFAULT_LANGUAGES))
    timeout_ms = args.timeout or config.get("timeout_ms", DEFAULT_TIMEOUT_MS)
    launcher_name = args.launcher or config.get("launcher", "executable")
    executable = args.executable or config.get("executable", "yt-dlp")
    stderr_excerpt_limit = config.get(
        "stderr_excerpt_limit", SubtitleExtractor.DEFAULT_STDERR_EXCERPT_LIMIT
    )

    extractor = SubtitleExtractor(
        launcher=make_launcher(launcher_name, executable),
        stderr_excerpt_limit=stderr_excerpt_limit,
    )

    # ------------------------------------------------------------------
    # Tool availability check
    # ------------------------------------------------------------------
    if not extractor.launcher.check_available():
        print(
            f"Warning: {' '.join(extractor.launcher.command())} did not respond to --version.\n"
            "Install yt-dlp with: pip install yt-dlp",
            file=sys.stderr,
        )

    if args.json:
        status, body = _run_with_status(
            lambda: get_subtitle(
                {"url": args.url}, extractor,
                languages=languages, timeout_ms=timeout_ms,
            ),
            show=not (args.quiet or args.log_file),
        )
        print(json.dumps({"status": status, "body": body}, ensure_ascii=False, indent=2))
        sys.exit(EXIT_OK if status == 200 else EXIT_FAILURE)

    request = ExtractionRequest(url=args.url, languages=tuple(languages), timeout_ms=timeout_ms)
    try:
        result = _run_with_status(
            lambda: extractor.extract(request),
            show=not (args.quiet or args.log_file),
        )
    except ExtractionError as exc:
        print(f"Error: {exc.user_message}", file=sys.stderr)
        sys.exit(exit_code_for(exc))

    sys.stdout.write(result.raw_text)
    if not result.raw_text.endswith("\n"):
        sys.stdout.write("\n")
    sys.exit(EXIT_OK)


def _run_with_status(call, show: bool):
    """Run *call*, with a spinner on stderr when *show* is set."""
    if not show:
        return call()
    console = Console(stderr=True)
    with console.status("[bold blue]Fetching subtitles..."):
        return call()
