"""
System command utilities for the StreamTV VPN backend
"""
import subprocess
from typing import List, Tuple
import logging

logger = logging.getLogger("uvicorn")


def run_command(cmd: List[str]) -> Tuple[bool, str]:
    """
    Execute an unprivileged query command

    Args:
        cmd: Command and arguments as list

    Returns:
        Tuple of (success: bool, output: str). A command that cannot be
        started counts as a failure rather than raising.
    """
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=True)
        return True, result.stdout
    except subprocess.CalledProcessError as e:
        return False, e.stderr or e.stdout or ""
    except OSError as e:
        logger.warning(f"Could not run {cmd[0]}: {e}")
        return False, str(e)
