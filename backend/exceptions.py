"""
VPN error kinds surfaced to the frontend
"""
from fastapi import HTTPException


class VpnError(HTTPException):
    """Base class for connect/disconnect failures. ``detail`` is shown to the user."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(status_code=self.status_code, detail=message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class VpnNotFoundError(VpnError):
    """A VPN client binary or config file is missing."""
    status_code = 404


class VpnPermissionError(VpnError):
    """The user cancelled or was refused the elevation prompt."""
    status_code = 403


class VpnExternalError(VpnError):
    """The external process reported an error or could not be launched."""
    status_code = 502
