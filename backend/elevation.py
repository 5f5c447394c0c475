"""
Elevated command execution

VPN clients install services and create network interfaces, so they have
to run with administrator rights. Each Elevator wraps one platform
mechanism for asking the user for those rights and reports the child's
exit code, captured output, and whether the prompt was cancelled.
"""
import logging
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional, Type

from config_manager import PLATFORM

logger = logging.getLogger("uvicorn")


@dataclass
class ProcessResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""
    cancelled: bool = False
    error: Optional[str] = None


class Elevator:
    """Run a command with elevated privileges."""
    name = "base"
    cancel_markers: List[str] = []
    # True when stderr holds launcher errors only, never the child's own output
    stderr_is_error = False

    def build(self, cmd: List[str], wait: bool) -> List[str]:
        raise NotImplementedError

    def is_cancelled(self, returncode: int, stderr: str) -> bool:
        text = stderr.lower()
        return any(marker in text for marker in self.cancel_markers)

    def run(self, cmd: List[str], wait: bool = True) -> ProcessResult:
        """
        Run ``cmd`` elevated.

        Raises OSError when the launcher itself cannot be started.
        """
        argv = self.build(cmd, wait)
        logger.info(f"Elevated ({self.name}): {' '.join(cmd)}")
        result = subprocess.run(argv, capture_output=True, text=True)
        stdout = result.stdout or ""
        stderr = result.stderr or ""
        error = None
        if result.returncode != 0:
            error = stderr.strip() or stdout.strip() or f"{cmd[0]} exited with code {result.returncode}"
        elif self.stderr_is_error and stderr.strip():
            error = stderr.strip()
        return ProcessResult(
            returncode=result.returncode,
            stdout=stdout,
            stderr=stderr,
            cancelled=self.is_cancelled(result.returncode, stderr),
            error=error,
        )


def _ps_quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


class PowerShellElevator(Elevator):
    """
    Windows UAC prompt via ``Start-Process -Verb RunAs``.

    RunAs cannot redirect the child's streams, so only PowerShell's own
    errors (including a declined UAC prompt) end up in stderr. With
    ``wait`` the child's exit code becomes PowerShell's exit code; without
    it the child is left running, which is how long-lived clients start.
    """
    name = "powershell"
    cancel_markers = ["canceled by the user", "cancelled by the user"]
    stderr_is_error = True

    def build(self, cmd: List[str], wait: bool) -> List[str]:
        script = f"$p = Start-Process -FilePath {_ps_quote(cmd[0])}"
        if len(cmd) > 1:
            script += f" -ArgumentList {_ps_quote(subprocess.list2cmdline(cmd[1:]))}"
        script += " -Verb RunAs -WindowStyle Hidden -PassThru"
        if wait:
            script += " -Wait; exit $p.ExitCode"
        return ["powershell", "-NoProfile", "-NonInteractive", "-Command", script]


class PkexecElevator(Elevator):
    """polkit prompt on Linux desktops. Always waits for the child."""
    name = "pkexec"
    cancel_markers = ["dismissed", "not authorized"]

    def build(self, cmd: List[str], wait: bool) -> List[str]:
        return ["pkexec"] + cmd

    def is_cancelled(self, returncode: int, stderr: str) -> bool:
        # pkexec exits 126 when the authentication dialog is dismissed
        return returncode == 126 or super().is_cancelled(returncode, stderr)


class SudoElevator(Elevator):
    """Non-interactive sudo for headless hosts with a NOPASSWD rule."""
    name = "sudo"
    cancel_markers = ["a password is required", "not in the sudoers"]

    def build(self, cmd: List[str], wait: bool) -> List[str]:
        return ["sudo", "-n"] + cmd


ELEVATORS: Dict[str, Type[Elevator]] = {
    PowerShellElevator.name: PowerShellElevator,
    PkexecElevator.name: PkexecElevator,
    SudoElevator.name: SudoElevator,
}


def get_elevator(name: str = "auto") -> Elevator:
    """Return the elevator configured by name, or the platform default for ``auto``."""
    if name == "auto":
        name = "powershell" if PLATFORM == "windows" else "pkexec"
    try:
        return ELEVATORS[name]()
    except KeyError:
        raise ValueError(f"Unknown elevation method '{name}'. Expected one of: {', '.join(ELEVATORS)}")
