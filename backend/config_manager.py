"""
Configuration management for the StreamTV VPN backend
"""
import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

from models import BackendConfig, VpnKind

logger = logging.getLogger("uvicorn")

# Configuration file (override with STREAMTV_VPN_CONFIG)
CONFIG_FILE = Path(
    os.environ.get(
        "STREAMTV_VPN_CONFIG",
        str(Path.home() / ".config" / "streamtv" / "vpn_backend.json"),
    )
)

# Platform family used to pick install paths and command syntax
PLATFORM = "windows" if sys.platform == "win32" else "posix"

# Well-known install locations, checked in order
DEFAULT_CLIENT_PATHS: Dict[str, Dict[VpnKind, List[str]]] = {
    "windows": {
        VpnKind.WIREGUARD: [
            r"C:\Program Files\WireGuard\wireguard.exe",
            r"C:\Program Files (x86)\WireGuard\wireguard.exe",
        ],
        VpnKind.OPENVPN: [
            r"C:\Program Files\OpenVPN\bin\openvpn.exe",
            r"C:\Program Files (x86)\OpenVPN\bin\openvpn.exe",
        ],
    },
    "posix": {
        VpnKind.WIREGUARD: [
            "/usr/bin/wg-quick",
            "/usr/local/bin/wg-quick",
        ],
        VpnKind.OPENVPN: [
            "/usr/sbin/openvpn",
            "/usr/local/sbin/openvpn",
        ],
    },
}


def load_config() -> BackendConfig:
    """Load backend configuration from JSON file"""
    if CONFIG_FILE.exists():
        with open(CONFIG_FILE, 'r', encoding='utf-8') as f:
            data = json.load(f)
            return BackendConfig(**data)
    return BackendConfig()


def load_config_or_default() -> BackendConfig:
    """Load configuration, falling back to defaults when the file is unreadable or invalid"""
    try:
        return load_config()
    except (ValueError, TypeError, OSError) as e:
        logger.warning(f"Ignoring unreadable config file {CONFIG_FILE}: {e}")
        return BackendConfig()


def save_config(config: BackendConfig):
    """Save backend configuration to JSON file"""
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(CONFIG_FILE, 'w', encoding='utf-8') as f:
        json.dump(config.model_dump(mode="json"), f, indent=2)


def client_candidates(kind: VpnKind, config: Optional[BackendConfig] = None) -> List[str]:
    """
    Ordered candidate install paths for a VPN client.

    Paths listed in the configuration's ``client_paths`` replace the
    platform defaults for that kind.
    """
    config = config or load_config()
    override = config.client_paths.get(kind)
    if override:
        return list(override)
    return list(DEFAULT_CLIENT_PATHS[PLATFORM][kind])
