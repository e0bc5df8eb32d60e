"""Ways of starting the external subtitle-extraction tool.

A launcher only knows how to turn an argument list into a running process.
Supervising that process (timeouts, cancellation, cleanup) is the
orchestrator's job, so launchers can be swapped without touching it.
"""

import subprocess
import sys
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

LAUNCHER_NAMES = ("executable", "module")


class ProcessLauncher(ABC):
    """Starts the extraction tool as a direct argument-vector invocation."""

    @abstractmethod
    def command(self) -> List[str]:
        """Return the program prefix placed before the tool arguments."""

    def launch(self, arguments: Sequence[str], cwd: Optional[str] = None) -> subprocess.Popen:
        """Spawn the tool with *arguments* in *cwd* and return the live process.

        Both output streams are piped and stdin is closed, so the tool can
        never block waiting for input. Raises ``OSError`` when the program
        cannot be started.
        """
        argv = self.command() + list(arguments)
        return subprocess.Popen(
            argv,
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )

    def check_available(self) -> bool:
        """Return True if the tool answers ``--version``."""
        try:
            subprocess.run(
                self.command() + ["--version"],
                capture_output=True, check=True, timeout=15,
            )
            return True
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError):
            return False


class ExecutableLauncher(ProcessLauncher):
    """Runs the ``yt-dlp`` binary (or any compatible one) found on PATH."""

    def __init__(self, executable: str = "yt-dlp") -> None:
        self.executable = executable

    def command(self) -> List[str]:
        return [self.executable]

    def __repr__(self) -> str:
        return f"ExecutableLauncher({self.executable!r})"


class PythonModuleLauncher(ProcessLauncher):
    """Runs the installed ``yt_dlp`` package as ``python -m yt_dlp``."""

    def __init__(self, module: str = "yt_dlp", python: str = sys.executable) -> None:
        self.module = module
        self.python = python

    def command(self) -> List[str]:
        return [self.python, "-m", self.module]

    def __repr__(self) -> str:
        return f"PythonModuleLauncher({self.module!r})"


def make_launcher(name: str = "executable", executable: str = "yt-dlp") -> ProcessLauncher:
    """Return the launcher configured by *name* (one of ``LAUNCHER_NAMES``)."""
    if name == "executable":
        return ExecutableLauncher(executable)
    if name == "module":
        return PythonModuleLauncher()
    raise ValueError(f"unknown launcher {name!r}, expected one of {LAUNCHER_NAMES}")
