"""
VPN-related API routes
"""
from typing import Optional

from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

import vpn_manager
from models import ConnectionStatus, DetectedClients, ParsedVpnConfig, VpnKind
from vpn_parser import parse_vpn_config

router = APIRouter()


class ParseRequest(BaseModel):
    content: str


class ConnectRequest(BaseModel):
    config_path: str
    vpn_type: VpnKind


class DisconnectRequest(BaseModel):
    tunnel_name: Optional[str] = None
    vpn_type: VpnKind = VpnKind.WIREGUARD


class SaveProfileRequest(BaseModel):
    config_path: str


@router.get("/clients", response_model=DetectedClients)
async def detect_vpn_clients():
    """Detect installed VPN clients"""
    return vpn_manager.detect_vpn_clients()


@router.post("/parse", response_model=ParsedVpnConfig)
async def parse_config(request: ParseRequest):
    """Classify a config file's content and extract its endpoint, DNS and address"""
    return parse_vpn_config(request.content)


@router.post("/connect", response_model=ConnectionStatus)
async def connect_vpn(request: ConnectRequest):
    """
    Connect a tunnel from a config file.
    Prompts for elevation and waits for the tunnel to come up.
    """
    return await run_in_threadpool(vpn_manager.connect_vpn, request.config_path, request.vpn_type)


@router.post("/disconnect", response_model=ConnectionStatus)
async def disconnect_vpn(request: DisconnectRequest):
    """Disconnect a tunnel (defaults to the default WireGuard tunnel)"""
    return await run_in_threadpool(vpn_manager.disconnect_vpn, request.tunnel_name, request.vpn_type)


@router.get("/status", response_model=ConnectionStatus)
async def vpn_status(tunnel_name: Optional[str] = None, vpn_type: Optional[VpnKind] = None):
    """Get current VPN connection status"""
    return await run_in_threadpool(vpn_manager.get_vpn_status, tunnel_name, vpn_type)


@router.get("/profile")
async def get_vpn_profile():
    """Get the saved VPN profile"""
    return vpn_manager.get_vpn_profile()


@router.put("/profile")
async def save_vpn_profile(request: SaveProfileRequest):
    """Parse and save a config file as the VPN profile"""
    return vpn_manager.save_vpn_profile(request.config_path)


@router.delete("/profile")
async def clear_vpn_profile():
    """Forget the saved VPN profile"""
    return vpn_manager.clear_vpn_profile()


@router.post("/auto-connect")
async def set_auto_connect(enabled: bool = False):
    """Toggle auto-connect before streaming"""
    return vpn_manager.set_auto_connect(enabled)


@router.post("/toggle", response_model=ConnectionStatus)
async def toggle_vpn():
    """Connect or disconnect the saved profile"""
    return await run_in_threadpool(vpn_manager.toggle_vpn)


@router.get("/initialize")
async def initialize():
    """Detect clients and check the saved profile's status"""
    return await run_in_threadpool(vpn_manager.initialize)
