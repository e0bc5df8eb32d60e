"""Shared fixtures.

Most extraction tests never touch yt-dlp. ``ScriptLauncher`` runs a small
Python script as the child process instead, so timeouts, termination and
pipe draining are exercised against real processes. The child runs in the
call's working directory, where scripts drop caption files named the way
yt-dlp names them.
"""

import subprocess
import sys
import textwrap
from typing import Callable, List, Optional, Sequence

import pytest

from subtitle_fetcher.launcher import ProcessLauncher


def caption_script(text: str, lang: str = "en", ext: str = "vtt") -> str:
    """Return a one-line script that writes *text* as yt-dlp's caption file."""
    return (
        f"open('subtitle.{lang}.{ext}', 'w', encoding='utf-8').write({text!r})"
    )


class ScriptLauncher(ProcessLauncher):
    """Runs ``python -c <script>``; the tool arguments land in ``sys.argv[1:]``."""

    def __init__(self, script: str) -> None:
        self.script = textwrap.dedent(script)
        self.calls: List[List[str]] = []
        self.workdirs: List[Optional[str]] = []
        self.processes: List[subprocess.Popen] = []

    def command(self) -> List[str]:
        return [sys.executable, "-c", self.script]

    def launch(self, arguments: Sequence[str], cwd: Optional[str] = None) -> subprocess.Popen:
        self.calls.append(list(arguments))
        self.workdirs.append(cwd)
        process = super().launch(arguments, cwd=cwd)
        self.processes.append(process)
        return process


@pytest.fixture
def script_launcher() -> Callable[[str], ScriptLauncher]:
    """Factory fixture: ``script_launcher("print('hi')")``."""
    return ScriptLauncher
