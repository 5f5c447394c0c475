"""
VPN client detection and connection management for WireGuard and OpenVPN.
Nothing is tracked in memory: every status answer comes from the OS service
manager or process table, queried on demand.
"""
import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import HTTPException

from commands import (
    ALREADY_ACTIVE_MARKERS, NOT_RUNNING_MARKERS, has_marker,
    wireguard_up, wireguard_down, wireguard_status, wireguard_running,
    openvpn_up, openvpn_kill, openvpn_kill_found_nothing, openvpn_status, openvpn_running,
)
from config_manager import (
    PLATFORM, client_candidates, load_config, load_config_or_default, save_config,
)
from elevation import ProcessResult, get_elevator
from exceptions import VpnExternalError, VpnNotFoundError, VpnPermissionError
from models import (
    BackendConfig, ClientInfo, ConnectionStatus, DetectedClients,
    SavedConfigInfo, VpnKind, VpnStatus,
)
from utils import run_command
from vpn_parser import parse_vpn_config

logger = logging.getLogger("uvicorn")

INSTALL_HINTS = {
    VpnKind.WIREGUARD: "Install WireGuard from https://www.wireguard.com/install/",
    VpnKind.OPENVPN: "Install OpenVPN from https://openvpn.net/community-downloads/",
}


def detect_client(kind: VpnKind, config: Optional[BackendConfig] = None) -> ClientInfo:
    """Return the first existing install path for a VPN client"""
    for candidate in client_candidates(kind, config):
        if os.path.isfile(candidate):
            return ClientInfo(available=True, path=candidate)
    return ClientInfo()


def detect_vpn_clients() -> DetectedClients:
    """Probe the well-known install locations of every supported client"""
    config = load_config_or_default()
    detected = DetectedClients(
        wireguard=detect_client(VpnKind.WIREGUARD, config),
        openvpn=detect_client(VpnKind.OPENVPN, config),
    )
    logger.info(
        f"Detected VPN clients: WireGuard={detected.wireguard.path}, "
        f"OpenVPN={detected.openvpn.path}"
    )
    return detected


def resolve_client_binary(kind: VpnKind, config: BackendConfig) -> str:
    client = detect_client(kind, config)
    if not client.available:
        candidates = ", ".join(client_candidates(kind, config))
        logger.error(f"{kind.value} client not found (looked in: {candidates})")
        raise VpnNotFoundError(
            f"{kind.value} client not found. Looked in: {candidates}. {INSTALL_HINTS[kind]}"
        )
    return client.path


def default_tunnel_name(kind: VpnKind, config: BackendConfig) -> str:
    if kind == VpnKind.OPENVPN:
        return config.openvpn_tunnel_name
    return config.default_tunnel_name


def derive_tunnel_name(config_path: str, kind: VpnKind, config: BackendConfig) -> str:
    """
    WireGuard names its service/interface after the config file;
    OpenVPN always runs under one fixed logical name.
    """
    if kind == VpnKind.OPENVPN:
        return default_tunnel_name(kind, config)
    # Accept either separator so Windows paths resolve on any host
    stem = Path(config_path.replace("\\", "/")).stem
    return stem or config.default_tunnel_name


def _run_elevated(cmd, config: BackendConfig, wait: bool = True) -> ProcessResult:
    elevator = get_elevator(config.elevation)
    try:
        return elevator.run(cmd, wait=wait)
    except OSError as e:
        logger.error(f"Could not launch elevated command {cmd[0]}: {e}")
        raise VpnExternalError(f"Could not launch {Path(cmd[0]).name} with elevated privileges: {e}")


def is_tunnel_running(kind: VpnKind, tunnel_name: str) -> bool:
    """Ask the OS whether the tunnel is up. Query failures count as 'not running'."""
    if kind == VpnKind.WIREGUARD:
        success, output = run_command(wireguard_status(tunnel_name))
        return wireguard_running(success, output)
    success, output = run_command(openvpn_status())
    return openvpn_running(success, output)


def wait_for_tunnel(kind: VpnKind, tunnel_name: str, timeout: float, interval: float) -> bool:
    """Poll the tunnel state until it reports running or ``timeout`` seconds pass"""
    deadline = time.monotonic() + timeout
    while True:
        if is_tunnel_running(kind, tunnel_name):
            return True
        if time.monotonic() >= deadline:
            return False
        time.sleep(interval)


def connect_vpn(config_path: str, vpn_type: VpnKind) -> ConnectionStatus:
    """
    Install/start a tunnel from a config file.

    Raises VpnNotFoundError, VpnPermissionError or VpnExternalError.
    """
    config = load_config()
    binary = resolve_client_binary(vpn_type, config)

    if not Path(config_path).is_file():
        raise VpnNotFoundError(f"VPN config file not found: {config_path}")

    tunnel_name = derive_tunnel_name(config_path, vpn_type, config)
    logger.info(f"Connecting {vpn_type.value} tunnel '{tunnel_name}' from {config_path}")

    if vpn_type == VpnKind.WIREGUARD:
        result = _run_elevated(wireguard_up(binary, config_path), config)
    else:
        # openvpn.exe stays in the foreground, so Windows must not wait on it
        result = _run_elevated(
            openvpn_up(binary, config_path, tunnel_name),
            config,
            wait=PLATFORM != "windows",
        )

    if result.cancelled:
        logger.warning(f"Elevation cancelled while connecting '{tunnel_name}'")
        raise VpnPermissionError("Administrator permission was not granted. The VPN connection was cancelled.")

    if result.error:
        # RunAs hides the child's output, so an existing tunnel may only show up as an exit code
        if has_marker(result.error, ALREADY_ACTIVE_MARKERS) or is_tunnel_running(vpn_type, tunnel_name):
            logger.info(f"Tunnel '{tunnel_name}' already exists, verifying it is up")
        else:
            logger.error(f"Failed to start {vpn_type.value} tunnel '{tunnel_name}': {result.error}")
            raise VpnExternalError(f"Failed to connect {vpn_type.value}: {result.error}")

    if wait_for_tunnel(vpn_type, tunnel_name, config.connect_timeout, config.poll_interval):
        logger.info(f"Tunnel '{tunnel_name}' is up")
    else:
        # Slow services may come up after the timeout, so launch success is reported as connected
        logger.warning(
            f"Tunnel '{tunnel_name}' not confirmed running after {config.connect_timeout}s; "
            f"reporting connected"
        )

    return ConnectionStatus(
        status=VpnStatus.CONNECTED,
        vpn_type=vpn_type,
        tunnel_name=tunnel_name,
    )


def disconnect_vpn(tunnel_name: Optional[str], vpn_type: VpnKind) -> ConnectionStatus:
    """
    Stop/remove a tunnel (the kind's default tunnel when no name is given).
    Only a missing client, a cancelled elevation prompt or a launcher that
    cannot start fail the call; other errors are logged.
    """
    config = load_config()
    tunnel_name = tunnel_name or default_tunnel_name(vpn_type, config)
    logger.info(f"Disconnecting {vpn_type.value} tunnel '{tunnel_name}'")

    if vpn_type == VpnKind.WIREGUARD:
        binary = resolve_client_binary(vpn_type, config)
        result = _run_elevated(wireguard_down(binary, tunnel_name), config)
    else:
        result = _run_elevated(openvpn_kill(), config)

    if result.cancelled:
        logger.warning(f"Elevation cancelled while disconnecting '{tunnel_name}'")
        raise VpnPermissionError("Administrator permission was not granted. The VPN is still connected.")

    if result.error:
        if has_marker(result.error, NOT_RUNNING_MARKERS) or (
            vpn_type == VpnKind.OPENVPN and openvpn_kill_found_nothing(result.returncode, result.stderr)
        ):
            logger.info(f"Tunnel '{tunnel_name}' was not running")
        else:
            logger.warning(f"Error while stopping tunnel '{tunnel_name}': {result.error}")

    return ConnectionStatus(status=VpnStatus.DISCONNECTED)


def get_vpn_status(tunnel_name: Optional[str] = None, vpn_type: Optional[VpnKind] = None) -> ConnectionStatus:
    """Report Connected for the first running tunnel found, otherwise Disconnected"""
    config = load_config_or_default()
    kinds = [vpn_type] if vpn_type else [VpnKind.WIREGUARD, VpnKind.OPENVPN]

    for kind in kinds:
        if kind == VpnKind.OPENVPN:
            name = config.openvpn_tunnel_name
        else:
            name = tunnel_name or config.default_tunnel_name
        if is_tunnel_running(kind, name):
            return ConnectionStatus(status=VpnStatus.CONNECTED, vpn_type=kind, tunnel_name=name)

    return ConnectionStatus(status=VpnStatus.DISCONNECTED)


def get_vpn_profile() -> Dict[str, Any]:
    """Return the saved VPN profile, if any"""
    config = load_config()
    return {
        "config_path": config.config_path,
        "vpn_type": config.vpn_type,
        "auto_connect": config.auto_connect,
        "config_info": config.config_info,
        "has_config": config.config_path is not None and config.config_info is not None,
    }


def save_vpn_profile(config_path: str) -> Dict[str, Any]:
    """Parse a config file and remember it as the profile to connect with"""
    path = Path(config_path)
    if not path.is_file():
        raise HTTPException(status_code=404, detail=f"VPN config file not found: {config_path}")

    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="VPN config file is not valid UTF-8 text")
    except OSError as e:
        raise HTTPException(status_code=400, detail=f"Failed to read VPN config file: {e}")

    parsed = parse_vpn_config(content)
    if not parsed.is_valid:
        raise HTTPException(status_code=400, detail=parsed.error)

    config = load_config()
    config.config_path = str(path)
    config.vpn_type = parsed.vpn_type
    config.config_info = SavedConfigInfo(
        endpoint=parsed.endpoint,
        dns=parsed.dns,
        address=parsed.address,
        vpn_type=parsed.vpn_type,
    )
    save_config(config)
    logger.info(f"Saved {parsed.vpn_type.value} profile {path}")

    return {
        "status": "success",
        "message": f"{parsed.vpn_type.value} profile saved",
        "config_path": config.config_path,
        "config": parsed,
    }


def clear_vpn_profile() -> Dict[str, Any]:
    """Forget the saved profile and turn auto-connect off"""
    config = load_config()
    config.config_path = None
    config.vpn_type = None
    config.config_info = None
    config.auto_connect = False
    save_config(config)
    logger.info("Cleared saved VPN profile")
    return {"status": "success", "message": "VPN profile cleared"}


def set_auto_connect(enabled: bool) -> Dict[str, Any]:
    """Connect the saved profile automatically before streaming"""
    config = load_config()
    if enabled and config.config_path is None:
        raise HTTPException(status_code=400, detail="No VPN configuration loaded")
    config.auto_connect = enabled
    save_config(config)
    return {"status": "success", "auto_connect": enabled}


def toggle_vpn() -> ConnectionStatus:
    """Disconnect the saved profile's tunnel if it is up, otherwise connect it"""
    config = load_config()
    if config.config_path is None or config.vpn_type is None:
        raise HTTPException(status_code=400, detail="No VPN configuration loaded")

    tunnel_name = derive_tunnel_name(config.config_path, config.vpn_type, config)
    current = get_vpn_status(tunnel_name, config.vpn_type)
    if current.status == VpnStatus.CONNECTED:
        return disconnect_vpn(tunnel_name, config.vpn_type)
    return connect_vpn(config.config_path, config.vpn_type)


def initialize() -> Dict[str, Any]:
    """Detect clients and, when a profile is saved, report its tunnel state"""
    config = load_config()
    clients = detect_vpn_clients()

    status = None
    if config.config_path and config.vpn_type:
        tunnel_name = derive_tunnel_name(config.config_path, config.vpn_type, config)
        status = get_vpn_status(tunnel_name, config.vpn_type)

    return {
        "clients": clients,
        "profile": get_vpn_profile(),
        "status": status,
    }
