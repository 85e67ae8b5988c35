"""
Discovery and invocation of external build toolchains.

A toolchain is reached through a bash-compatible shell: the local one on
POSIX hosts, or an installed WSL distribution on Windows.
"""

import os
from pathlib import Path, PureWindowsPath
import re
import shlex
import shutil
import subprocess
import sys

from attrs import define
import structlog

from .exceptions import DelegateCommandError

logger = structlog.get_logger()

_DRIVE_RE = re.compile(r"^[A-Za-z]:$")


def run_subprocess(command: list[str], cwd: Path | str | None = None) -> str:
    logger.info(f"Running command: {' '.join(command)}")
    result = subprocess.run(
        command, capture_output=True, text=True, cwd=cwd, check=False
    )
    if result.returncode != 0:
        error_message = (
            f"Command failed with exit code {result.returncode}.\n"
            f"  Command: {' '.join(command)}\n"
            f"  Stdout:\n{result.stdout.strip()}\n"
            f"  Stderr:\n{result.stderr.strip()}"
        )
        raise DelegateCommandError(error_message)
    if result.stderr:
        logger.debug("Command stderr", output=result.stderr.strip())
    return result.stdout.strip()


def wsl_path(path: str | Path) -> str:
    """Translates `C:\\dir\\file` to `/mnt/c/dir/file`."""
    windows_path = PureWindowsPath(path)
    if not _DRIVE_RE.match(windows_path.drive):
        return windows_path.as_posix()
    return "/".join(["/mnt", windows_path.drive[0].lower(), *windows_path.parts[1:]])


class Shell:
    """Runs commands through `bash -lc`."""

    name = "local"

    def argv(self, script: str) -> list[str]:
        return ["bash", "-lc", script]

    def run(self, script: str) -> str:
        return run_subprocess(self.argv(script))

    def find(self, command: str) -> str | None:
        try:
            location = self.run(f"command -v {shlex.quote(command)}")
        except DelegateCommandError:
            return None
        return location or None

    def to_shell_path(self, path: Path) -> str:
        return Path(path).resolve().as_posix()


class LocalShell(Shell):
    pass


class WslShell(Shell):
    def __init__(self, distro: str) -> None:
        self.distro = distro
        self.name = distro

    def argv(self, script: str) -> list[str]:
        return ["wsl", "-d", self.distro, "--", "bash", "-lc", script]

    def to_shell_path(self, path: Path) -> str:
        return wsl_path(os.path.abspath(path))


@define(frozen=True, slots=True)
class Found:
    shell: Shell


@define(frozen=True, slots=True)
class NotFound:
    command: str


DelegateLookup = Found | NotFound


def list_wsl_distros() -> list[str]:
    if shutil.which("wsl") is None:
        return []
    result = subprocess.run(["wsl", "-l", "-q"], capture_output=True, check=False)
    if result.returncode != 0:
        logger.debug("Could not list WSL distributions", returncode=result.returncode)
        return []
    # wsl.exe writes UTF-16LE regardless of the console code page.
    text = result.stdout.decode("utf-16-le", errors="ignore")
    return [line.strip("\x00 \r") for line in text.splitlines() if line.strip("\x00 \r")]


def candidate_shells() -> list[Shell]:
    if sys.platform == "win32":
        return [WslShell(distro) for distro in list_wsl_distros()]
    return [LocalShell()]


def find_build_delegate(command: str) -> DelegateLookup:
    """Searches the available shells for one exposing `command`."""
    for shell in candidate_shells():
        if shell.find(command) is not None:
            logger.info(f"Found shell with {command} installed: {shell.name}")
            return Found(shell)
    return NotFound(command)
