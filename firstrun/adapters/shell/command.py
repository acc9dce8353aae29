"""
Shell command adapter — the single place subprocess.run is called.

Every other adapter builds its command line and hands it to
``run_command``. Output capture, logging, timeouts and start-up
failures are all handled here, and a CommandResult always comes back.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
import time
import urllib.request
import webbrowser
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from firstrun.adapters.base import SystemShell

logger = logging.getLogger(__name__)

# Exit code reported when the command could not be started at all
EXIT_NOT_STARTED = 127

# Keep console windows from flashing up for every child process
_CREATE_NO_WINDOW = 0x08000000 if sys.platform == "win32" else 0


@dataclass
class CommandResult:
    """Outcome of one external process."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_command(
    cmd: Sequence[str] | str,
    *,
    shell: bool = False,
    timeout: int | None = None,
) -> CommandResult:
    """Run a command and capture its output. Never raises.

    Args:
        cmd: Argument list, or a command line when ``shell`` is True.
        shell: Run through the system shell.
        timeout: Seconds before the process is abandoned (None = no limit).

    Returns:
        CommandResult; ``returncode`` is EXIT_NOT_STARTED when the
        process could not be launched or timed out.
    """
    printable = cmd if isinstance(cmd, str) else " ".join(cmd)
    logger.debug("RUN: %s", printable)
    start = time.monotonic()

    try:
        proc = subprocess.run(
            cmd,
            shell=shell,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            creationflags=_CREATE_NO_WINDOW,
        )
    except subprocess.TimeoutExpired:
        logger.warning("Command timed out after %ss: %s", timeout, printable)
        return CommandResult(EXIT_NOT_STARTED, stderr=f"Command timed out ({timeout}s)")
    except OSError as e:
        logger.warning("Command could not be started: %s (%s)", printable, e)
        return CommandResult(EXIT_NOT_STARTED, stderr=str(e))

    elapsed_ms = int((time.monotonic() - start) * 1000)
    result = CommandResult(
        returncode=proc.returncode,
        stdout=(proc.stdout or "").strip(),
        stderr=(proc.stderr or "").strip(),
        elapsed_ms=elapsed_ms,
    )
    if result.ok:
        logger.debug("OK (%dms): %s", elapsed_ms, printable)
    else:
        logger.debug(
            "Exit %d (%dms): %s\n%s",
            result.returncode,
            elapsed_ms,
            printable,
            result.stderr[-2000:],
        )
    return result


def powershell_command(script: str) -> list[str]:
    """Argument list that runs ``script`` in a non-interactive PowerShell."""
    return [
        "powershell",
        "-NoProfile",
        "-NonInteractive",
        "-ExecutionPolicy",
        "Bypass",
        "-Command",
        script,
    ]


def run_powershell(script: str, *, timeout: int | None = None) -> CommandResult:
    """Run a PowerShell script block without string-escaping headaches."""
    return run_command(powershell_command(script), timeout=timeout)


class ShellCommandAdapter(SystemShell):
    """System commands, processes, files and downloads on the local machine."""

    def __init__(self, timeout: int | None = None):
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which("cmd") is not None or shutil.which("sh") is not None

    def run(self, command: str) -> int:
        return run_command(command, shell=True, timeout=self._timeout).returncode

    def run_executable(self, path: Path, args: Sequence[str] = ()) -> int:
        return run_command([str(path), *args], timeout=self._timeout).returncode

    def run_powershell(self, script: str) -> int:
        return run_powershell(script, timeout=self._timeout).returncode

    def process_running(self, image_name: str) -> bool:
        result = run_command(
            ["tasklist", "/FI", f"IMAGENAME eq {image_name}", "/NH"],
            timeout=self._timeout,
        )
        return result.ok and image_name.lower() in result.stdout.lower()

    def stop_process(self, image_name: str) -> bool:
        return run_command(["taskkill", "/F", "/IM", image_name], timeout=self._timeout).ok

    def path_exists(self, path: Path) -> bool:
        try:
            return path.is_file()
        except OSError:
            return False

    def open_url(self, url: str) -> bool:
        try:
            return webbrowser.open(url)
        except webbrowser.Error as e:
            logger.warning("Could not open %s: %s", url, e)
            return False

    def download(self, url: str, destination: Path) -> bool:
        req = urllib.request.Request(url, headers={"User-Agent": "firstrun/1.0"})
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            with urllib.request.urlopen(req, timeout=self._timeout or 300) as resp:
                with destination.open("wb") as f:
                    shutil.copyfileobj(resp, f)
        except Exception as e:
            logger.warning("Download failed: %s (%s)", url, e)
            return False
        logger.info("Downloaded %s → %s", url, destination)
        return True
