"""
Data models for the StreamTV VPN backend
"""
from enum import Enum
from pydantic import BaseModel
from typing import Dict, List, Literal, Optional


class VpnKind(str, Enum):
    WIREGUARD = "WireGuard"
    OPENVPN = "OpenVPN"


class VpnStatus(str, Enum):
    DISCONNECTED = "Disconnected"
    CONNECTING = "Connecting"
    CONNECTED = "Connected"
    DISCONNECTING = "Disconnecting"
    ERROR = "Error"


class ParsedVpnConfig(BaseModel):
    vpn_type: VpnKind = VpnKind.WIREGUARD
    endpoint: Optional[str] = None
    dns: Optional[str] = None
    address: Optional[str] = None
    is_valid: bool = False
    error: Optional[str] = None


class ConnectionStatus(BaseModel):
    status: VpnStatus = VpnStatus.DISCONNECTED
    vpn_type: Optional[VpnKind] = None
    tunnel_name: Optional[str] = None
    error: Optional[str] = None


class ClientInfo(BaseModel):
    available: bool = False
    path: Optional[str] = None


class DetectedClients(BaseModel):
    wireguard: ClientInfo = ClientInfo()
    openvpn: ClientInfo = ClientInfo()


class SavedConfigInfo(BaseModel):
    """Display summary of a saved profile. Never holds key material."""
    endpoint: Optional[str] = None
    dns: Optional[str] = None
    address: Optional[str] = None
    vpn_type: VpnKind


class BackendConfig(BaseModel):
    # Saved profile
    config_path: Optional[str] = None
    vpn_type: Optional[VpnKind] = None
    auto_connect: bool = False
    config_info: Optional[SavedConfigInfo] = None

    # Client detection and launching
    client_paths: Dict[VpnKind, List[str]] = {}
    elevation: Literal["auto", "powershell", "pkexec", "sudo"] = "auto"
    connect_timeout: float = 5.0
    poll_interval: float = 0.5
    default_tunnel_name: str = "streamtv_vpn"
    openvpn_tunnel_name: str = "OpenVPN"

    # Server
    log_level: str = "info"
    host: str = "127.0.0.1"
    port: int = 51508
    # Origins of the desktop webview and the dev server
    allowed_origins: List[str] = [
        "tauri://localhost",
        "http://tauri.localhost",
        "https://tauri.localhost",
        "http://localhost:5173",
    ]
