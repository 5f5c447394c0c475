"""
System information API routes
"""
from fastapi import APIRouter

from config_manager import PLATFORM, client_candidates, load_config
from models import VpnKind

router = APIRouter()


@router.get("/info")
async def system_info():
    """Get platform, elevation method and VPN client search paths"""
    config = load_config()
    return {
        "platform": PLATFORM,
        "elevation": config.elevation,
        "client_paths": {kind.value: client_candidates(kind, config) for kind in VpnKind},
    }
