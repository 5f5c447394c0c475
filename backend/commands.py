"""
Command lines for the platform VPN clients and the OS queries that confirm them

Windows runs WireGuard as a tunnel service (``WireGuardTunnel$<name>``) and
OpenVPN as a plain ``openvpn.exe`` process. POSIX hosts use ``wg-quick``,
which names the interface after the config file, and a daemonised
``openvpn``.
"""
from typing import List

from config_manager import PLATFORM

WINDOWS_OPENVPN_IMAGE = "openvpn.exe"
POSIX_OPENVPN_PROCESS = "openvpn"

# Lowercase substrings of launcher output
ALREADY_ACTIVE_MARKERS = ["already exists", "already installed", "already running"]
NOT_RUNNING_MARKERS = [
    "not running",
    "does not exist",
    "not found",
    "no process found",
    "not installed",
    "is not a wireguard interface",
]


def wireguard_up(binary: str, config_path: str, platform: str = PLATFORM) -> List[str]:
    if platform == "windows":
        return [binary, "/installtunnelservice", config_path]
    return [binary, "up", config_path]


def wireguard_down(binary: str, tunnel_name: str, platform: str = PLATFORM) -> List[str]:
    if platform == "windows":
        return [binary, "/uninstalltunnelservice", tunnel_name]
    return [binary, "down", tunnel_name]


def wireguard_status(tunnel_name: str, platform: str = PLATFORM) -> List[str]:
    if platform == "windows":
        return ["sc", "query", f"WireGuardTunnel${tunnel_name}"]
    return ["ip", "link", "show", tunnel_name]


def wireguard_running(success: bool, output: str, platform: str = PLATFORM) -> bool:
    """Whether a wireguard_status query found the tunnel up"""
    if not success:
        return False
    if platform == "windows":
        return "RUNNING" in output
    return bool(output.strip())


def openvpn_up(binary: str, config_path: str, tunnel_name: str, platform: str = PLATFORM) -> List[str]:
    if platform == "windows":
        return [binary, "--config", config_path]
    return [binary, "--config", config_path, "--daemon", tunnel_name]


def openvpn_kill(platform: str = PLATFORM) -> List[str]:
    if platform == "windows":
        return ["taskkill", "/F", "/IM", WINDOWS_OPENVPN_IMAGE]
    return ["pkill", "-x", POSIX_OPENVPN_PROCESS]


def openvpn_kill_found_nothing(returncode: int, stderr: str, platform: str = PLATFORM) -> bool:
    """Whether openvpn_kill failed only because no OpenVPN process was running"""
    if platform == "windows":
        return returncode == 128
    # pkill exits 1 silently when nothing matches
    return returncode == 1 and not stderr.strip()


def openvpn_status(platform: str = PLATFORM) -> List[str]:
    if platform == "windows":
        return ["tasklist", "/FI", f"IMAGENAME eq {WINDOWS_OPENVPN_IMAGE}", "/NH"]
    return ["pgrep", "-x", POSIX_OPENVPN_PROCESS]


def openvpn_running(success: bool, output: str, platform: str = PLATFORM) -> bool:
    """Whether an openvpn_status query found the process"""
    if not success:
        return False
    if platform == "windows":
        # tasklist exits 0 and prints an INFO line when nothing matches
        return WINDOWS_OPENVPN_IMAGE in output.lower()
    return bool(output.strip())


def has_marker(text: str, markers: List[str]) -> bool:
    text = text.lower()
    return any(marker in text for marker in markers)
